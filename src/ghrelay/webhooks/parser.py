"""
Turns a raw GitHub webhook request into one typed event.
"""

import json
from collections.abc import Mapping

import structlog
from pydantic import ValidationError

from ghrelay.core.config import config
from ghrelay.core.errors import PayloadDecodeError
from ghrelay.webhooks.models import (
    CommitCommentEvent,
    GenericEvent,
    GitHubEvent,
    GitHubEventModel,
    IssueCommentEvent,
    IssueEvent,
    PullRequestEvent,
    PullRequestReviewCommentEvent,
    PullRequestReviewEvent,
    PushEvent,
    StatusEvent,
)

logger = structlog.get_logger(__name__)

_DECODERS: dict[str, type[GitHubEventModel]] = {
    "push": PushEvent,
    "pull_request": PullRequestEvent,
    "pull_request_review": PullRequestReviewEvent,
    "pull_request_review_comment": PullRequestReviewCommentEvent,
    "issues": IssueEvent,
    "issue_comment": IssueCommentEvent,
    "commit_comment": CommitCommentEvent,
    "status": StatusEvent,
}


def normalize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Lower-case header names so lookups do not depend on the transport."""
    return {k.lower(): v for k, v in headers.items()}


def parse_github_event(headers: Mapping[str, str], body: bytes | str) -> GitHubEvent:
    """
    Decode a webhook body into the event model selected by the event header.

    Raises:
        PayloadDecodeError: If the event header is missing, the body is not
            JSON, or the JSON does not have the shape of the selected event.
    """
    headers = normalize_headers(headers)
    event_name = headers.get(config.github.event_header)
    if not event_name:
        raise PayloadDecodeError(f"header {config.github.event_header} not found")

    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PayloadDecodeError(f"failed to parse {event_name} body as valid JSON ({e})") from e
    if not isinstance(data, dict):
        raise PayloadDecodeError(f"{event_name} body is not a JSON object")

    model = _DECODERS.get(event_name)
    try:
        if model is None:
            event: GitHubEvent = GenericEvent.model_validate({**data, "event_name": event_name})
        else:
            event = model.model_validate(data)
    except ValidationError as e:
        raise PayloadDecodeError(f"unexpected {event_name} payload shape: {e}") from e

    logger.info("github_event_received", repo=event.repository.full_name, github_event=event_name, **event.summary())
    return event
