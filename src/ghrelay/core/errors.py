"""
Core error classes for the ghrelay application.

Everything raised while processing a single inbound request derives from
ActionError so the dispatcher can catch it at the top of the pipeline.
"""


class ActionError(Exception):
    """Base class for failures that abort processing of one request."""

    pass


class SignatureError(ActionError):
    """Raised when a webhook body does not match its signature header."""

    pass


class UnsupportedRepositoryError(ActionError):
    """Raised when an event arrives for a repository missing from the secrets file."""

    def __init__(self, repo_url: str) -> None:
        self.repo_url = repo_url
        super().__init__(f"unsupported repository {repo_url}")


class PayloadDecodeError(ActionError):
    """Raised when a request body cannot be decoded into a known payload shape."""

    pass


class UpstreamAPIError(ActionError):
    """Raised when a call to GitHub or Slack fails."""

    pass


class GitHubAPIError(UpstreamAPIError):
    """Raised when the GitHub REST API returns an error."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class SlackAPIError(UpstreamAPIError):
    """Raised when the Slack Web API returns an error or `ok: false`."""

    pass


class ConfigFetchError(UpstreamAPIError):
    """Raised when a repository rule file cannot be fetched or parsed."""

    pass


class PersistenceError(ActionError):
    """Raised when the state snapshot cannot be written or read."""

    pass
