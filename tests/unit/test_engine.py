# tests/unit/test_engine.py
import json
import pytest
from unittest.mock import AsyncMock
from code_companion.errors import ConfigurationError
from code_companion.models.findings import FileUnderReview
from code_companion.models.severity import Decision, ReviewLevel
from code_companion.review.engine import ReviewEngine


EMPTY_CATCH_PATCH = "@@ -1 +1,3 @@\n const a = 1;\n+try { run(); } catch (e) {}\n+call(a);"


@pytest.fixture
def mock_github():
    client = AsyncMock()
    client.get_pr.return_value = {"number": 7, "head": {"sha": "abc123", "ref": "feature"}}
    client.get_pr_files.return_value = [
        {
            "filename": "src/app.js",
            "status": "modified",
            "additions": 2,
            "deletions": 0,
            "patch": EMPTY_CATCH_PATCH,
            "sha": "deadbeef",
        },
        {
            "filename": "yarn.lock",
            "status": "modified",
            "additions": 10,
            "deletions": 3,
            "patch": "+lodash@4.17.21",
        },
    ]
    client.get_repo_config.return_value = None
    return client


@pytest.fixture
def mock_provider():
    provider = AsyncMock()
    provider.review.return_value = json.dumps({
        "comments": [{"line": 3, "body": "Swallowed error", "severity": "warning", "category": "bug"}],
        "issues": [{"type": "bug", "description": "Errors are ignored", "suggestion": "Log them"}],
    })
    return provider


@pytest.mark.asyncio
async def test_engine_runs_review(mock_github, mock_provider):
    engine = ReviewEngine(github=mock_github, provider=mock_provider)

    result = await engine.review_pr(owner="octo", repo="app", pr_number=7)

    mock_github.get_pr_files.assert_called_once_with("octo", "app", 7)
    mock_provider.review.assert_called_once()
    assert result.decision == Decision.CHANGES_REQUESTED
    # one AI comment + one empty-catch lint error
    assert mock_github.post_review_comment.call_count == 2
    assert result.comments_count == 2

    review_call = mock_github.post_review.call_args
    assert review_call.args[-1] == "REQUEST_CHANGES"
    assert "CHANGES REQUESTED" in review_call.args[-2]


@pytest.mark.asyncio
async def test_engine_posts_comments_at_diff_positions(mock_github, mock_provider):
    engine = ReviewEngine(github=mock_github, provider=mock_provider, reviewer_name="Bot")

    await engine.review_pr(owner="octo", repo="app", pr_number=7)

    calls = [c.kwargs for c in mock_github.post_review_comment.call_args_list]
    assert {c["position"] for c in calls} == {2}
    assert all(c["commit_id"] == "abc123" for c in calls)
    assert all(c["comment"].startswith("**Bot**") for c in calls)


@pytest.mark.asyncio
async def test_engine_excludes_configured_files(mock_github, mock_provider):
    engine = ReviewEngine(github=mock_github, provider=mock_provider)

    result = await engine.review_pr(owner="octo", repo="app", pr_number=7)

    # yarn.lock is excluded by default, so only src/app.js contributes
    assert result.metrics.ai_issues == 1


@pytest.mark.asyncio
async def test_engine_uses_repo_review_level(mock_github, mock_provider):
    mock_github.get_repo_config.return_value = "review_level: strict"
    engine = ReviewEngine(github=mock_github, provider=mock_provider)

    await engine.review_pr(owner="octo", repo="app", pr_number=7)

    _, prompt = mock_provider.review.call_args.args
    assert "Review Level: strict" in prompt


@pytest.mark.asyncio
async def test_engine_applies_custom_rules_from_config(mock_github, mock_provider):
    mock_github.get_repo_config.return_value = """
custom_rules:
  - kind: pattern
    name: no-run
    pattern: "run\\\\("
    message: Do not call run directly
    severity: warning
"""
    engine = ReviewEngine(github=mock_github, provider=mock_provider)

    result = await engine.review_pr(owner="octo", repo="app", pr_number=7)

    assert "no-run" in result.summary


@pytest.mark.asyncio
async def test_engine_rejects_invalid_review_level(mock_github, mock_provider):
    mock_github.get_repo_config.return_value = "review_level: paranoid"
    engine = ReviewEngine(github=mock_github, provider=mock_provider)

    with pytest.raises(ConfigurationError):
        await engine.review_pr(owner="octo", repo="app", pr_number=7)

    mock_github.post_review.assert_not_called()


@pytest.mark.asyncio
async def test_engine_ignores_unparseable_yaml(mock_github, mock_provider):
    mock_github.get_repo_config.return_value = "review_level: [unclosed"
    engine = ReviewEngine(github=mock_github, provider=mock_provider)

    result = await engine.review_pr(owner="octo", repo="app", pr_number=7)

    assert result.decision == Decision.CHANGES_REQUESTED


@pytest.mark.asyncio
async def test_engine_survives_provider_failure(mock_github, mock_provider):
    mock_provider.review.side_effect = RuntimeError("rate limited")
    engine = ReviewEngine(github=mock_github, provider=mock_provider)

    result = await engine.review_pr(owner="octo", repo="app", pr_number=7)

    assert result.metrics.ai_issues == 0
    assert result.decision == Decision.CHANGES_REQUESTED
    assert mock_github.post_review_comment.call_count == 1


@pytest.mark.asyncio
async def test_engine_approves_clean_change(mock_github, mock_provider):
    mock_provider.review.return_value = '{"comments": [], "issues": []}'
    mock_github.get_pr_files.return_value = [
        {"filename": "docs/guide.md", "status": "modified", "additions": 1, "deletions": 0, "patch": "+Hi"},
    ]
    engine = ReviewEngine(github=mock_github, provider=mock_provider)

    result = await engine.review_pr(owner="octo", repo="app", pr_number=7)

    assert result.decision == Decision.APPROVED
    assert mock_github.post_review.call_args.args[-1] == "COMMENT"
    mock_github.post_review_comment.assert_not_called()


@pytest.mark.asyncio
async def test_engine_saves_report(mock_github, mock_provider, tmp_path):
    engine = ReviewEngine(github=mock_github, provider=mock_provider, report_dir=str(tmp_path))

    await engine.review_pr(owner="octo", repo="app", pr_number=7)

    saved = list(tmp_path.glob("*_octo_app_pr7.json"))
    assert len(saved) == 1
    data = json.loads(saved[0].read_text(encoding="utf-8"))
    assert data["decision"] == "changes_requested"
    assert data["metrics"]["totalIssues"] == data["counts_by_source"]["ai"] + data["counts_by_source"]["security"] + data["counts_by_source"]["lint"]


@pytest.mark.asyncio
async def test_analyze_without_github(mock_provider):
    engine = ReviewEngine(github=AsyncMock(), provider=mock_provider)
    files = [FileUnderReview(filename="src/app.js", patch=EMPTY_CATCH_PATCH)]

    report = await engine.analyze(files, ReviewLevel.LIGHT)

    assert report.review_level == ReviewLevel.LIGHT
    assert report.counts_by_source["ai"] == 1
    assert report.counts_by_severity["lint"]["error"] == 1
