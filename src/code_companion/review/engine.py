# src/code_companion/review/engine.py
import yaml
import asyncio
import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path
from pydantic import ValidationError
from code_companion.errors import ConfigurationError
from code_companion.platforms.base import GitPlatform
from code_companion.providers.base import LLMProvider
from code_companion.models.config import RepoConfig
from code_companion.models.findings import Comment, FileUnderReview
from code_companion.models.review import (
    AIReviewResult,
    LintResult,
    ReviewMetrics,
    ReviewReport,
    SecurityScanResult,
)
from code_companion.models.rules import LintRule
from code_companion.models.severity import Decision, ReviewLevel
from .ai import AIReviewer
from .linter import CustomLinter
from .report import build_report
from .security import SecurityScanner


logger = logging.getLogger(__name__)


@dataclass
class EngineReviewResult:
    """Result of running review on a pull request."""
    comments_count: int
    decision: Decision
    metrics: ReviewMetrics
    summary: str


REVIEW_EVENTS = {
    Decision.CHANGES_REQUESTED: "REQUEST_CHANGES",
    Decision.REVIEW_SUGGESTED: "COMMENT",
    Decision.APPROVED: "COMMENT",
}


class ReviewEngine:
    def __init__(
        self,
        github: GitPlatform,
        provider: LLMProvider,
        reviewer_name: str = "AI Code Companion",
        default_review_level: ReviewLevel = ReviewLevel.STANDARD,
        report_dir: str | None = None,
        max_concurrency: int = 4,
    ):
        self.github = github
        self.reviewer_name = reviewer_name
        self.default_review_level = default_review_level
        self.ai = AIReviewer(provider, max_concurrency=max_concurrency)
        self.scanner = SecurityScanner()
        self.linter = CustomLinter()
        self.report_dir = Path(report_dir) if report_dir else None
        if self.report_dir:
            self.report_dir.mkdir(parents=True, exist_ok=True)

    async def run_sources(
        self,
        files: list[FileUnderReview],
        review_level: ReviewLevel,
        custom_rules: list[LintRule] | None = None,
    ) -> tuple[AIReviewResult, SecurityScanResult, LintResult]:
        """Run the three analysis sources concurrently."""
        ai_result, security_result, lint_result = await asyncio.gather(
            self.ai.analyze_files(files, review_level),
            asyncio.to_thread(self.scanner.scan, files),
            asyncio.to_thread(self.linter.lint_files, files, custom_rules),
        )
        return ai_result, security_result, lint_result

    async def analyze(
        self,
        files: list[FileUnderReview],
        review_level: ReviewLevel,
        custom_rules: list[LintRule] | None = None,
    ) -> ReviewReport:
        sources = await self.run_sources(files, review_level, custom_rules)
        return build_report(*sources, review_level)

    async def review_pr(self, owner: str, repo: str, pr_number: int) -> EngineReviewResult:
        """Review a pull request and publish the outcome on GitHub."""
        pr = await self.github.get_pr(owner, repo, pr_number)
        head_sha = pr["head"]["sha"]

        config = await self._load_config(owner, repo, head_sha)
        review_level = config.review_level or self.default_review_level

        raw_files = await self.github.get_pr_files(owner, repo, pr_number)
        files = [
            FileUnderReview.model_validate(raw)
            for raw in raw_files
            if not self._is_excluded(raw["filename"], config.exclude)
        ]
        logger.info(f"Reviewing {owner}/{repo}#{pr_number}: {len(files)} file(s), level={review_level.value}")

        report = await self.analyze(files, review_level, config.custom_rules)
        self._save_report(owner, repo, pr_number, report)

        posted = 0
        for comment in report.inline_comments:
            if comment.line is None:
                logger.info(f"Skipping file-level comment on {comment.path}: no line to anchor")
                continue
            try:
                await self.github.post_review_comment(
                    owner=owner,
                    repo=repo,
                    pr_number=pr_number,
                    commit_id=head_sha,
                    file_path=comment.path,
                    position=self._diff_position(comment.line),
                    comment=self._format_comment(comment),
                )
                posted += 1
            except Exception as e:
                logger.error(f"Failed to post comment: {e}")

        await self.github.post_review(
            owner, repo, pr_number, report.narrative_markdown, REVIEW_EVENTS[report.decision]
        )

        return EngineReviewResult(
            comments_count=posted,
            decision=report.decision,
            metrics=report.metrics,
            summary=report.narrative_markdown,
        )

    async def _load_config(self, owner: str, repo: str, ref: str) -> RepoConfig:
        """Load .ai-companion.yaml from repo or use defaults."""
        yaml_content = await self.github.get_repo_config(owner, repo, ref)
        if yaml_content is None:
            return RepoConfig()

        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            logger.warning(f"Invalid .ai-companion.yaml: {e}")
            return RepoConfig()

        if data is None:
            return RepoConfig()
        if not isinstance(data, dict):
            raise ConfigurationError(".ai-companion.yaml must contain a mapping")
        try:
            return RepoConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid .ai-companion.yaml: {e}") from e

    def _is_excluded(self, file_path: str, patterns: list[str]) -> bool:
        """Check if file matches any exclude pattern."""
        return any(fnmatch.fnmatch(file_path, pattern) for pattern in patterns)

    @staticmethod
    def _diff_position(patch_line: int) -> int:
        # Patch line 1 is the first hunk header; GitHub counts positions from the line below it.
        return max(patch_line - 1, 1)

    def _format_comment(self, comment: Comment) -> str:
        return f"**{self.reviewer_name}**\n\n{comment.body}"

    def _save_report(self, owner: str, repo: str, pr_number: int, report: ReviewReport) -> None:
        """Write a serialized copy of the report into report_dir."""
        if not self.report_dir:
            return
        try:
            timestamp = report.generated_at.strftime("%Y%m%d_%H%M%S")
            report_path = self.report_dir / f"{timestamp}_{owner}_{repo}_pr{pr_number}.json"
            report_path.write_text(report.model_dump_json(indent=2, by_alias=True), encoding="utf-8")
            logger.info(f"Review report saved: {report_path}")
        except Exception as e:
            logger.warning(f"Failed to save review report: {e}")
