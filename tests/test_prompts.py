import pytest
from code_companion.models.findings import FileUnderReview
from code_companion.models.severity import ReviewLevel
from code_companion.review.prompts import SYSTEM_PROMPT, build_analysis_prompt


def _file(**kwargs) -> FileUnderReview:
    values = {"filename": "src/main.py", "status": "added", "additions": 2, "deletions": 0, "patch": "+print('world')"}
    values.update(kwargs)
    return FileUnderReview(**values)


def test_build_prompt_includes_file_metadata_and_patch():
    prompt = build_analysis_prompt(_file(), ReviewLevel.STANDARD)

    assert "File: src/main.py" in prompt
    assert "Status: added" in prompt
    assert "Additions: 2" in prompt
    assert "+print('world')" in prompt


@pytest.mark.parametrize(
    "level, instruction",
    [
        (ReviewLevel.LIGHT, "Focus only on critical bugs and security issues"),
        (ReviewLevel.STANDARD, "Review for bugs, security, performance"),
        (ReviewLevel.STRICT, "Comprehensive review including style, naming, documentation"),
    ],
)
def test_build_prompt_includes_level_instruction(level, instruction):
    prompt = build_analysis_prompt(_file(), level)

    assert f"Review Level: {level.value}" in prompt
    assert instruction in prompt


def test_build_prompt_without_patch():
    prompt = build_analysis_prompt(_file(patch=None), ReviewLevel.LIGHT)

    assert "```diff\n\n```" in prompt


def test_system_prompt_requests_json():
    assert "Return ONLY valid JSON" in SYSTEM_PROMPT
    assert '"comments"' in SYSTEM_PROMPT
    assert '"issues"' in SYSTEM_PROMPT
