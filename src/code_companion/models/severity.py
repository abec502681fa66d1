from enum import Enum

from code_companion.errors import ConfigurationError


class FindingSource(str, Enum):
    AI = "ai"
    SECURITY = "security"
    LINT = "lint"


class SecuritySeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LintSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class AISeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class AICategory(str, Enum):
    BUG = "bug"
    SECURITY = "security"
    PERFORMANCE = "performance"
    STYLE = "style"
    BEST_PRACTICE = "bestpractice"


class ReviewLevel(str, Enum):
    LIGHT = "light"
    STANDARD = "standard"
    STRICT = "strict"


class Decision(str, Enum):
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"
    REVIEW_SUGGESTED = "review_suggested"


SECURITY_SEVERITY_ORDER = {
    SecuritySeverity.LOW: 0,
    SecuritySeverity.MEDIUM: 1,
    SecuritySeverity.HIGH: 2,
    SecuritySeverity.CRITICAL: 3,
}

LINT_SEVERITY_ORDER = {
    LintSeverity.INFO: 0,
    LintSeverity.WARNING: 1,
    LintSeverity.ERROR: 2,
}

AI_SEVERITY_ORDER = {
    AISeverity.INFO: 0,
    AISeverity.WARNING: 1,
    AISeverity.ERROR: 2,
}


def parse_review_level(value: str | ReviewLevel) -> ReviewLevel:
    """Resolve a review level, rejecting anything outside light/standard/strict."""
    try:
        return ReviewLevel(value)
    except ValueError:
        raise ConfigurationError(
            f"Unknown review level: {value!r} (expected one of: light, standard, strict)"
        ) from None
