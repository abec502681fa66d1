from pydantic import BaseModel


class GitHubUser(BaseModel):
    login: str


class GitHubRepository(BaseModel):
    name: str
    full_name: str
    owner: GitHubUser


class GitHubRef(BaseModel):
    ref: str
    sha: str


class GitHubPullRequest(BaseModel):
    number: int
    title: str
    state: str
    head: GitHubRef
    base: GitHubRef


class PullRequestEvent(BaseModel):
    action: str  # "opened", "synchronize", ...
    number: int
    pull_request: GitHubPullRequest
    repository: GitHubRepository


class GitHubIssue(BaseModel):
    number: int
    pull_request: dict | None = None  # present only when the issue is a PR


class GitHubIssueComment(BaseModel):
    body: str
    user: GitHubUser


class IssueCommentEvent(BaseModel):
    action: str
    issue: GitHubIssue
    comment: GitHubIssueComment
    repository: GitHubRepository
