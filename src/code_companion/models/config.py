from pydantic import BaseModel, Field

from .rules import LintRule
from .severity import ReviewLevel


class RepoConfig(BaseModel):
    """Contents of .ai-companion.yaml in the reviewed repository."""
    review_level: ReviewLevel | None = None
    exclude: list[str] = Field(
        default_factory=lambda: [
            "*.lock",
            "*.min.js",
            "*.min.css",
            "*.generated.*",
            "package-lock.json",
            "yarn.lock",
            "pnpm-lock.yaml",
        ]
    )
    custom_rules: list[LintRule] = Field(default_factory=list)
