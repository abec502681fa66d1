from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .severity import AICategory, AISeverity, LintSeverity, SecuritySeverity


class FileUnderReview(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    status: str = "modified"  # added|modified|removed|renamed
    additions: int = 0
    deletions: int = 0
    patch: str | None = None


class AIFinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Literal["ai"] = "ai"
    file: str
    line: int | None = None
    severity: AISeverity = AISeverity.INFO
    category: AICategory = AICategory.STYLE
    message: str

    @property
    def rule_or_category(self) -> str:
        return self.category.value


class SecurityFinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Literal["security"] = "security"
    file: str
    line: int | None = None
    severity: SecuritySeverity
    rule: str
    kind: Literal["secret", "vulnerability", "configuration"]
    message: str
    suggestion: str
    description: str | None = None
    match: str | None = None  # redacted before construction

    @property
    def rule_or_category(self) -> str:
        return self.rule


class LintFinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: Literal["lint"] = "lint"
    file: str
    line: int | None = None
    column: int | None = None
    severity: LintSeverity
    rule: str
    message: str

    @property
    def rule_or_category(self) -> str:
        return self.rule


Finding = Annotated[
    Union[AIFinding, SecurityFinding, LintFinding],
    Field(discriminator="source"),
]


class Comment(BaseModel):
    """Inline pull request annotation."""
    model_config = ConfigDict(frozen=True)

    path: str
    line: int | None = None
    body: str
