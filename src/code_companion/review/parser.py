# src/code_companion/review/parser.py
from unidiff import PatchSet

from code_companion.models.findings import FileUnderReview


def line_number(text: str, offset: int) -> int:
    """1-based line of the character at `offset` in patch text."""
    position = 0
    for index, line in enumerate(text.split("\n")):
        position += len(line) + 1  # +1 for the newline
        if position > offset:
            return index + 1
    return 1


def column_number(text: str, offset: int) -> int:
    """0-based offset of `offset` within its own line."""
    return offset - (text.rfind("\n", 0, offset) + 1)


def _file_status(patched_file) -> str:
    if patched_file.is_added_file:
        return "added"
    if patched_file.is_removed_file:
        return "removed"
    if patched_file.is_rename:
        return "renamed"
    return "modified"


def parse_diff(diff_text: str) -> list[FileUnderReview]:
    """Parse a unified diff into per-file records with their hunk text as patch."""
    patch = PatchSet(diff_text)
    files = []

    for patched_file in patch:
        status = _file_status(patched_file)
        hunks = "".join(str(hunk) for hunk in patched_file)

        if patched_file.is_binary_file or status == "removed" or not hunks:
            patch_text = None
        else:
            patch_text = hunks.rstrip("\n")

        files.append(FileUnderReview(
            filename=patched_file.path,
            status=status,
            additions=patched_file.added,
            deletions=patched_file.removed,
            patch=patch_text,
        ))

    return files
