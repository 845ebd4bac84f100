"""
Typed GitHub webhook payloads.

Each event kind GitHub delivers maps to one model; kinds we do not route
decode into GenericEvent so new event kinds never break ingestion.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, Field

from ghrelay.core.models import EventType, StatusState
from ghrelay.core.utils.patterns import shorten
from ghrelay.integrations.github.models import (
    CommitAuthor,
    Issue,
    Label,
    PullRequest,
    Repository,
    User,
)


def _short_sha(sha: str | None) -> str:
    return sha[:8] if sha else "none"


class GitHubEventModel(BaseModel):
    """Fields every routed webhook payload carries."""

    event_type: ClassVar[EventType] = EventType.OTHER

    repository: Repository
    sender: User | None = None

    @property
    def repo_url(self) -> str:
        return self.repository.url

    @property
    def sender_login(self) -> str | None:
        return self.sender.login if self.sender else None

    def summary(self) -> dict[str, Any]:
        """Key fields worth logging when the event is received."""
        return {"sender": self.sender_login or "none"}


class PushCommit(BaseModel):
    """A commit as listed in a push payload."""

    id: str
    distinct: bool = True
    message: str = ""
    timestamp: str | None = None
    url: str = ""
    author: CommitAuthor = Field(default_factory=CommitAuthor)
    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)

    @property
    def modified_files(self) -> list[str]:
        return [*self.added, *self.removed, *self.modified]


class PushEvent(GitHubEventModel):
    event_type: ClassVar[EventType] = EventType.PUSH

    ref: str
    before: str | None = None
    after: str | None = None
    created: bool = False
    deleted: bool = False
    forced: bool = False
    compare: str | None = None
    commits: list[PushCommit] = Field(default_factory=list)
    head_commit: PushCommit | None = None
    sender: User

    @property
    def branch(self) -> str:
        """Branch name of the pushed ref; refs that are not branch heads are returned as-is."""
        prefix = "refs/heads/"
        return self.ref[len(prefix) :] if self.ref.startswith(prefix) else self.ref

    def summary(self) -> dict[str, Any]:
        head = self.head_commit.id if self.head_commit else None
        return {"sender": self.sender.login, "head": _short_sha(head), "ref": self.ref}


class PullRequestEvent(GitHubEventModel):
    event_type: ClassVar[EventType] = EventType.PULL_REQUEST

    action: str
    number: int
    pull_request: PullRequest
    label: Label | None = None
    sender: User

    def summary(self) -> dict[str, Any]:
        return {"number": self.pull_request.number, "state": self.pull_request.state, "action": self.action}


class Review(BaseModel):
    body: str | None = None
    state: str
    html_url: str = ""
    user: User


class PullRequestReviewEvent(GitHubEventModel):
    event_type: ClassVar[EventType] = EventType.PULL_REQUEST_REVIEW

    action: str
    review: Review
    pull_request: PullRequest
    sender: User

    def summary(self) -> dict[str, Any]:
        return {
            "number": self.pull_request.number,
            "sender": self.sender.login,
            "action": self.action,
            "body": shorten(self.review.body),
        }


class Comment(BaseModel):
    id: int | None = None
    body: str = ""
    html_url: str = ""
    user: User
    path: str | None = None
    line: int | None = None
    commit_id: str | None = None


class PullRequestReviewCommentEvent(GitHubEventModel):
    event_type: ClassVar[EventType] = EventType.PULL_REQUEST_REVIEW_COMMENT

    action: str
    comment: Comment
    pull_request: PullRequest
    sender: User

    def summary(self) -> dict[str, Any]:
        return {
            "number": self.pull_request.number,
            "sender": self.sender.login,
            "action": self.action,
            "body": shorten(self.comment.body),
        }


class IssueEvent(GitHubEventModel):
    event_type: ClassVar[EventType] = EventType.ISSUES

    action: str
    issue: Issue
    label: Label | None = None
    sender: User

    def summary(self) -> dict[str, Any]:
        return {"number": self.issue.number, "state": self.issue.state, "action": self.action}


class IssueCommentEvent(GitHubEventModel):
    event_type: ClassVar[EventType] = EventType.ISSUE_COMMENT

    action: str
    issue: Issue
    comment: Comment
    sender: User

    def summary(self) -> dict[str, Any]:
        return {
            "number": self.issue.number,
            "sender": self.sender.login,
            "action": self.action,
            "body": shorten(self.comment.body),
        }


class CommitCommentEvent(GitHubEventModel):
    event_type: ClassVar[EventType] = EventType.COMMIT_COMMENT

    action: str = "created"
    comment: Comment
    sender: User

    def summary(self) -> dict[str, Any]:
        return {
            "commit": _short_sha(self.comment.commit_id),
            "sender": self.sender.login,
            "action": self.action,
            "body": shorten(self.comment.body),
        }


class StatusGitCommit(BaseModel):
    message: str = ""
    author: CommitAuthor = Field(default_factory=CommitAuthor)


class StatusCommit(BaseModel):
    sha: str
    html_url: str = ""
    commit: StatusGitCommit = Field(default_factory=StatusGitCommit)
    author: User | None = None


class Branch(BaseModel):
    name: str


class StatusEvent(GitHubEventModel):
    event_type: ClassVar[EventType] = EventType.STATUS

    sha: str
    context: str
    state: StatusState
    description: str | None = None
    target_url: str | None = None
    commit: StatusCommit
    branches: list[Branch] = Field(default_factory=list)
    sender: User

    def summary(self) -> dict[str, Any]:
        return {
            "commit": _short_sha(self.commit.sha),
            "state": self.state.value,
            "context": self.context,
            "target_url": self.target_url or "none",
        }


class GenericEvent(GitHubEventModel):
    """Any event kind without a dedicated model; logged, never routed."""

    action: str | None = None
    event_name: str = ""

    def summary(self) -> dict[str, Any]:
        return {"sender": self.sender_login or "none", "action": self.action or "none"}


GitHubEvent = (
    PushEvent
    | PullRequestEvent
    | PullRequestReviewEvent
    | PullRequestReviewCommentEvent
    | IssueEvent
    | IssueCommentEvent
    | CommitCommentEvent
    | StatusEvent
    | GenericEvent
)
