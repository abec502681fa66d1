from .parser import parse_diff, line_number, column_number
from .security import SecurityScanner, redact_secret
from .linter import CustomLinter, DEFAULT_RULES
from .ai import AIReviewer, parse_analysis
from .report import build_report, decide, is_critical_equivalent
from .engine import ReviewEngine, EngineReviewResult

__all__ = [
    "parse_diff",
    "line_number",
    "column_number",
    "SecurityScanner",
    "redact_secret",
    "CustomLinter",
    "DEFAULT_RULES",
    "AIReviewer",
    "parse_analysis",
    "build_report",
    "decide",
    "is_critical_equivalent",
    "ReviewEngine",
    "EngineReviewResult",
]
