from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .findings import AIFinding, Comment, Finding, LintFinding, SecurityFinding
from .severity import AICategory, AISeverity, Decision, LintSeverity, ReviewLevel, SecuritySeverity


class AIComment(BaseModel):
    """One inline comment as returned by the model. Loose input, strict output."""
    line: int | None = None
    body: str = Field(min_length=1)
    severity: AISeverity = AISeverity.INFO
    category: AICategory = AICategory.STYLE

    @field_validator("line", mode="before")
    @classmethod
    def coerce_line(cls, value):
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value if value > 0 else None
        if isinstance(value, float) and value.is_integer():
            return int(value) if value > 0 else None
        if isinstance(value, str) and value.strip().isdigit():
            return int(value) or None
        return None

    @field_validator("severity", mode="before")
    @classmethod
    def coerce_severity(cls, value):
        try:
            return AISeverity(str(value).lower())
        except ValueError:
            return AISeverity.INFO

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value):
        try:
            return AICategory(str(value).lower())
        except ValueError:
            return AICategory.STYLE


class AIIssue(BaseModel):
    type: str = ""
    description: str = Field(min_length=1)
    suggestion: str = ""

    @field_validator("type", "suggestion", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return "" if value is None else str(value)


class AIFileAnalysis(BaseModel):
    comments: list[AIComment] = Field(default_factory=list)
    issues: list[AIIssue] = Field(default_factory=list)


class AIIssueBucket(str, Enum):
    BUGS = "bugs"
    CODE_SMELLS = "code_smells"
    PERFORMANCE = "performance"
    SECURITY = "security"
    BEST_PRACTICES = "best_practices"


class AIReviewResult(BaseModel):
    comments: list[AIFinding] = Field(default_factory=list)
    issues: dict[AIIssueBucket, list[AIIssue]] = Field(
        default_factory=lambda: {bucket: [] for bucket in AIIssueBucket}
    )
    summary: str = ""


class SecurityScanResult(BaseModel):
    issues: dict[SecuritySeverity, list[SecurityFinding]]
    summary: str
    total: int
    critical: int
    high: int


class LintResult(BaseModel):
    issues: dict[LintSeverity, list[LintFinding]]
    summary: str
    total: int


class ReviewMetrics(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_issues: int = Field(serialization_alias="totalIssues")
    ai_issues: int = Field(serialization_alias="aiIssues")
    security_issues: int = Field(serialization_alias="securityIssues")
    linting_issues: int = Field(serialization_alias="lintingIssues")
    critical_issues: int = Field(serialization_alias="criticalIssues")
    high_priority_issues: int = Field(serialization_alias="highPriorityIssues")


class ReviewReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    findings: list[Finding]
    counts_by_severity: dict[str, dict[str, int]]
    counts_by_source: dict[str, int]
    decision: Decision
    narrative_markdown: str
    inline_comments: list[Comment]
    review_level: ReviewLevel
    generated_at: datetime
    metrics: ReviewMetrics
