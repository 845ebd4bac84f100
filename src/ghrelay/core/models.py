from enum import Enum


class EventType(Enum):
    """GitHub event kinds, keyed by the X-GitHub-Event header value."""

    PUSH = "push"
    PULL_REQUEST = "pull_request"
    PULL_REQUEST_REVIEW = "pull_request_review"
    PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"
    ISSUES = "issues"
    ISSUE_COMMENT = "issue_comment"
    COMMIT_COMMENT = "commit_comment"
    STATUS = "status"
    # Anything else GitHub sends; decoded into a generic payload and only logged
    OTHER = "other"


class StatusState(str, Enum):
    """Commit status states reported by status events."""

    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"
    ERROR = "error"
