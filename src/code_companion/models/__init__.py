from .config import RepoConfig
from .findings import AIFinding, Comment, FileUnderReview, Finding, LintFinding, SecurityFinding
from .review import (
    AIReviewResult,
    LintResult,
    ReviewMetrics,
    ReviewReport,
    SecurityScanResult,
)
from .rules import ComplexityRule, ImportDuplicateRule, LineLengthRule, LintRule, PatternRule
from .severity import (
    AICategory,
    AISeverity,
    Decision,
    FindingSource,
    LintSeverity,
    ReviewLevel,
    SecuritySeverity,
    parse_review_level,
)
from .webhook import IssueCommentEvent, PullRequestEvent

__all__ = [
    "RepoConfig",
    "AIFinding",
    "Comment",
    "FileUnderReview",
    "Finding",
    "LintFinding",
    "SecurityFinding",
    "AIReviewResult",
    "LintResult",
    "ReviewMetrics",
    "ReviewReport",
    "SecurityScanResult",
    "ComplexityRule",
    "ImportDuplicateRule",
    "LineLengthRule",
    "LintRule",
    "PatternRule",
    "AICategory",
    "AISeverity",
    "Decision",
    "FindingSource",
    "LintSeverity",
    "ReviewLevel",
    "SecuritySeverity",
    "parse_review_level",
    "IssueCommentEvent",
    "PullRequestEvent",
]
