# src/code_companion/main.py
import re
import hmac
import hashlib
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from fastapi import FastAPI, Header, HTTPException, BackgroundTasks, Request
from pydantic import BaseModel, Field, model_validator

from code_companion import __version__
from code_companion.config import Settings
from code_companion.models.findings import Comment, FileUnderReview, Finding
from code_companion.models.review import AIReviewResult, LintResult, SecurityScanResult
from code_companion.models.rules import LintRule
from code_companion.models.severity import parse_review_level
from code_companion.models.webhook import IssueCommentEvent, PullRequestEvent
from code_companion.platforms.github import GitHubClient
from code_companion.providers.base import LLMProvider
from code_companion.providers.huggingface import HuggingFaceProvider
from code_companion.providers.openai import OpenAIProvider
from code_companion.review.engine import ReviewEngine
from code_companion.review.parser import parse_diff
from code_companion.review.report import build_report


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REVIEWED_PR_ACTIONS = ("opened", "synchronize", "reopened")


@lru_cache
def get_settings() -> Settings:
    return Settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.getLogger().setLevel(get_settings().log_level.upper())
    logger.info("AI Code Companion starting...")
    yield
    logger.info("AI Code Companion shutting down...")


app = FastAPI(title="AI Code Companion", lifespan=lifespan)


class WebhookResponse(BaseModel):
    status: str
    message: str | None = None


class ReviewRequest(BaseModel):
    url: str | None = None
    owner: str | None = None
    repo: str | None = None
    pr_number: int | None = None

    @model_validator(mode="after")
    def check_params(self):
        if not self.url and not (self.owner and self.repo and self.pr_number):
            raise ValueError("Either url or owner+repo+pr_number required")
        return self


class ReviewResponse(BaseModel):
    status: str
    repository: str | None = None
    pr_number: int | None = None
    comments_posted: int | None = None
    decision: str | None = None
    metrics: dict[str, int] | None = None
    summary: str | None = None
    error: str | None = None


class AnalyzeRequest(BaseModel):
    files: list[FileUnderReview] | None = None
    diff: str | None = None
    review_level: str | None = None
    custom_rules: list[LintRule] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_params(self):
        if self.files is None and not self.diff:
            raise ValueError("Either files or diff required")
        return self


class AnalyzeResponse(BaseModel):
    status: str
    decision: str | None = None
    comments: list[Comment] = Field(default_factory=list)
    findings: list[Finding] = Field(default_factory=list)
    summary: str | None = None
    metrics: dict[str, int] | None = None
    counts_by_source: dict[str, int] | None = None
    counts_by_severity: dict[str, dict[str, int]] | None = None
    ai_review: AIReviewResult | None = None
    security_issues: SecurityScanResult | None = None
    linting_issues: LintResult | None = None
    error: str | None = None


def parse_github_pr_url(url: str) -> tuple[str, str, int]:
    """Parse GitHub PR URL -> (owner, repo, pr_number)."""
    match = re.match(r"https?://[^/]+/([^/]+)/([^/]+)/pull/(\d+)", url)
    if not match:
        raise ValueError(f"Invalid GitHub pull request URL: {url}")
    return match.group(1), match.group(2), int(match.group(3))


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    """Check the X-Hub-Signature-256 header against the raw request body."""
    if not signature:
        return False
    expected = "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


def get_provider(settings: Settings) -> LLMProvider | None:
    """Get LLM provider based on settings."""
    if settings.default_provider == "openai" and settings.openai_api_key:
        return OpenAIProvider(api_key=settings.openai_api_key, model=settings.openai_model)
    elif settings.default_provider == "huggingface" and settings.hf_token:
        return HuggingFaceProvider(api_key=settings.hf_token, model=settings.hf_model)
    return None


def build_engine(settings: Settings, github: GitHubClient, provider: LLMProvider) -> ReviewEngine:
    return ReviewEngine(
        github=github,
        provider=provider,
        reviewer_name=settings.reviewer_name,
        default_review_level=settings.default_review_level,
        report_dir=settings.report_dir,
        max_concurrency=settings.max_concurrency,
    )


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


@app.post("/webhook/github", response_model=WebhookResponse)
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_github_event: str = Header(...),
    x_hub_signature_256: str | None = Header(None),
):
    settings = get_settings()
    body = await request.body()

    if not verify_signature(settings.github_webhook_secret, body, x_hub_signature_256):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    payload = await request.json()

    if x_github_event == "pull_request":
        event = PullRequestEvent(**payload)
        if event.action in REVIEWED_PR_ACTIONS:
            background_tasks.add_task(
                run_review,
                owner=event.repository.owner.login,
                repo=event.repository.name,
                pr_number=event.pull_request.number,
            )
            return WebhookResponse(status="accepted", message="Review scheduled")

    elif x_github_event == "issue_comment":
        event = IssueCommentEvent(**payload)
        if (
            event.action == "created"
            and event.issue.pull_request is not None
            and "/review" in event.comment.body
        ):
            background_tasks.add_task(
                run_review,
                owner=event.repository.owner.login,
                repo=event.repository.name,
                pr_number=event.issue.number,
            )
            return WebhookResponse(status="accepted", message="Review scheduled")

    return WebhookResponse(status="ignored", message="Event not relevant")


@app.post("/api/review", response_model=ReviewResponse)
async def trigger_review(request: ReviewRequest):
    """Manually trigger a review for a pull request."""
    settings = get_settings()
    github = GitHubClient(token=settings.github_token, base_url=settings.github_api_url)

    try:
        if request.url:
            owner, repo, pr_number = parse_github_pr_url(request.url)
        else:
            owner, repo, pr_number = request.owner, request.repo, request.pr_number

        provider = get_provider(settings)
        if not provider:
            return ReviewResponse(status="error", error="No LLM provider configured")

        engine = build_engine(settings, github, provider)
        result = await engine.review_pr(owner=owner, repo=repo, pr_number=pr_number)

        return ReviewResponse(
            status="completed",
            repository=f"{owner}/{repo}",
            pr_number=pr_number,
            comments_posted=result.comments_count,
            decision=result.decision.value,
            metrics=result.metrics.model_dump(by_alias=True),
            summary=result.summary,
        )

    except ValueError as e:
        return ReviewResponse(status="error", error=str(e))
    except Exception as e:
        logger.exception(f"Review failed: {e}")
        return ReviewResponse(status="error", error=str(e))


@app.post("/api/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest):
    """Analyze submitted files or a raw diff without touching GitHub."""
    settings = get_settings()

    try:
        review_level = parse_review_level(request.review_level or settings.default_review_level)
        files = request.files if request.files is not None else parse_diff(request.diff)

        provider = get_provider(settings)
        if not provider:
            return AnalyzeResponse(status="error", error="No LLM provider configured")

        github = GitHubClient(token=settings.github_token, base_url=settings.github_api_url)
        engine = build_engine(settings, github, provider)
        ai_result, security_result, lint_result = await engine.run_sources(
            files, review_level, request.custom_rules
        )
        report = build_report(ai_result, security_result, lint_result, review_level)

        return AnalyzeResponse(
            status="completed",
            decision=report.decision.value,
            comments=report.inline_comments,
            findings=report.findings,
            summary=report.narrative_markdown,
            metrics=report.metrics.model_dump(by_alias=True),
            counts_by_source=report.counts_by_source,
            counts_by_severity=report.counts_by_severity,
            ai_review=ai_result,
            security_issues=security_result,
            linting_issues=lint_result,
        )

    except ValueError as e:
        return AnalyzeResponse(status="error", error=str(e))
    except Exception as e:
        logger.exception(f"Analysis failed: {e}")
        return AnalyzeResponse(status="error", error=str(e))


async def run_review(owner: str, repo: str, pr_number: int):
    """Background task to run the review."""
    settings = get_settings()
    github = GitHubClient(token=settings.github_token, base_url=settings.github_api_url)

    provider = get_provider(settings)
    if not provider:
        logger.error("No LLM provider configured")
        return

    engine = build_engine(settings, github, provider)

    try:
        result = await engine.review_pr(owner=owner, repo=repo, pr_number=pr_number)
        logger.info(f"Review completed for {owner}/{repo}#{pr_number}: {result.decision.value}")
    except Exception as e:
        logger.exception(f"Review failed for {owner}/{repo}#{pr_number}: {e}")
