# src/code_companion/review/ai.py
import re
import json
import asyncio
import logging
from pydantic import ValidationError
from code_companion.models.findings import AIFinding, FileUnderReview
from code_companion.models.review import (
    AIComment,
    AIFileAnalysis,
    AIIssue,
    AIIssueBucket,
    AIReviewResult,
)
from code_companion.models.severity import ReviewLevel
from code_companion.providers.base import LLMProvider
from .prompts import SYSTEM_PROMPT, build_analysis_prompt
from .security import is_skipped_path


logger = logging.getLogger(__name__)


ISSUE_BUCKETS = {
    "bug": AIIssueBucket.BUGS,
    "security": AIIssueBucket.SECURITY,
    "performance": AIIssueBucket.PERFORMANCE,
    "style": AIIssueBucket.CODE_SMELLS,
    "bestpractice": AIIssueBucket.BEST_PRACTICES,
}

SUMMARY_SECTIONS = [
    (AIIssueBucket.SECURITY, "🔒 Security Issues"),
    (AIIssueBucket.BUGS, "🐛 Potential Bugs"),
    (AIIssueBucket.PERFORMANCE, "🚀 Performance Improvements"),
    (AIIssueBucket.CODE_SMELLS, "🧹 Code Smells"),
    (AIIssueBucket.BEST_PRACTICES, "📚 Best Practice Suggestions"),
]
SUMMARY_ITEMS_PER_SECTION = 3


def _validate_items(model, raw_items) -> list:
    if not isinstance(raw_items, list):
        return []
    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        try:
            items.append(model.model_validate(raw))
        except ValidationError as e:
            logger.debug(f"Dropping malformed {model.__name__}: {e}")
    return items


def parse_analysis(text: str) -> AIFileAnalysis:
    """Parse a model response into comments and issues.

    Raises ValueError when the response is not a JSON object. Individual
    comments or issues that do not validate are dropped.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # Extract JSON from response (may be wrapped in ```json or just ```)
        json_match = re.search(r"```(?:json)?\s*(\{.*\})\s*```", text, re.DOTALL)
        if not json_match:
            raise
        data = json.loads(json_match.group(1))

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

    return AIFileAnalysis(
        comments=_validate_items(AIComment, data.get("comments")),
        issues=_validate_items(AIIssue, data.get("issues")),
    )


def categorize_issues(issues: list[AIIssue]) -> dict[AIIssueBucket, list[AIIssue]]:
    buckets: dict[AIIssueBucket, list[AIIssue]] = {bucket: [] for bucket in AIIssueBucket}
    for issue in issues:
        bucket = ISSUE_BUCKETS.get(issue.type.lower(), AIIssueBucket.CODE_SMELLS)
        buckets[bucket].append(issue)
    return buckets


def summarize(
    issues: dict[AIIssueBucket, list[AIIssue]],
    files: list[FileUnderReview],
    level: ReviewLevel,
) -> str:
    """Deterministic prose summary of the collected AI issues."""
    total = sum(len(bucket) for bucket in issues.values())
    lines = [
        "## 🤖 AI Code Review Summary",
        "",
        f"**Review Level:** {level.value}",
        f"**Files Analyzed:** {len(files)}",
        f"**Total Issues Found:** {total}",
    ]

    for bucket, title in SUMMARY_SECTIONS:
        items = issues.get(bucket, [])
        if not items:
            continue
        lines.append("")
        lines.append(f"### {title} ({len(items)})")
        for issue in items[:SUMMARY_ITEMS_PER_SECTION]:
            lines.append(f"- {issue.description}")

    return "\n".join(lines)


class AIReviewer:
    def __init__(self, provider: LLMProvider, max_concurrency: int = 4):
        self.provider = provider
        self.max_concurrency = max(1, max_concurrency)

    async def analyze_file(self, file: FileUnderReview, level: ReviewLevel) -> AIFileAnalysis:
        """Analyze one file. Any failure degrades to an empty analysis."""
        prompt = build_analysis_prompt(file, level)
        try:
            text = await self.provider.review(SYSTEM_PROMPT, prompt)
            return parse_analysis(text)
        except Exception as e:
            logger.error(f"AI analysis failed for {file.filename}: {e}")
            return AIFileAnalysis()

    async def analyze_files(self, files: list[FileUnderReview], level: ReviewLevel) -> AIReviewResult:
        eligible = [file for file in files if file.patch and not is_skipped_path(file.filename)]
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run(file: FileUnderReview) -> AIFileAnalysis:
            async with semaphore:
                return await self.analyze_file(file, level)

        # gather keeps input order regardless of completion order
        analyses = await asyncio.gather(*(run(file) for file in eligible))

        comments: list[AIFinding] = []
        all_issues: list[AIIssue] = []
        for file, analysis in zip(eligible, analyses):
            comments.extend(
                AIFinding(
                    file=file.filename,
                    line=comment.line,
                    severity=comment.severity,
                    category=comment.category,
                    message=comment.body,
                )
                for comment in analysis.comments
            )
            all_issues.extend(analysis.issues)

        issues = categorize_issues(all_issues)
        return AIReviewResult(
            comments=comments,
            issues=issues,
            summary=summarize(issues, files, level),
        )
