import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .severity import LintSeverity


class _BaseRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    message: str
    severity: LintSeverity = LintSeverity.WARNING
    file_types: list[str] | None = None  # extensions such as ".js"; None means every file

    def applies_to(self, extension: str) -> bool:
        return self.file_types is None or extension in self.file_types


class PatternRule(_BaseRule):
    kind: Literal["pattern"] = "pattern"
    pattern: str
    ignore_case: bool = False
    exceptions: list[int] | None = None

    @field_validator("pattern")
    @classmethod
    def check_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid regular expression {value!r}: {e}") from e
        return value

    def regex(self) -> re.Pattern[str]:
        return re.compile(self.pattern, re.IGNORECASE if self.ignore_case else 0)

    def is_exception(self, matched: str) -> bool:
        """Matched text that is not an integer never hits the exception list."""
        if not self.exceptions:
            return False
        if not (matched.isascii() and matched.isdigit()):
            return False
        return int(matched) in self.exceptions


class LineLengthRule(_BaseRule):
    kind: Literal["line_length"] = "line_length"
    max_length: int = 120


class ComplexityRule(_BaseRule):
    kind: Literal["complexity"] = "complexity"
    max_complexity: int = 10


class ImportDuplicateRule(_BaseRule):
    kind: Literal["import_duplicate"] = "import_duplicate"


LintRule = Annotated[
    Union[PatternRule, LineLengthRule, ComplexityRule, ImportDuplicateRule],
    Field(discriminator="kind"),
]
