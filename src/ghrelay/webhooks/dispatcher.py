"""
Per-request orchestration of GitHub and Slack webhooks.

GitHub events run validate, refresh config, generate, then send alongside
side-channel tasks, then persist. Any ActionError stops the pipeline and is
logged; only signature and unsupported-repository failures reach the caller.
"""

import asyncio
import json
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from ghrelay.core.context import Context
from ghrelay.core.errors import ActionError, PayloadDecodeError, SignatureError, UnsupportedRepositoryError
from ghrelay.core.utils.logging import log_operation
from ghrelay.event_processors.factory import EventProcessorFactory
from ghrelay.integrations.slack.models import EventCallback, PostMessage, UrlVerification
from ghrelay.rules.refresh import refresh_repo_config
from ghrelay.webhooks.auth import validate_github_signature, validate_slack_signature
from ghrelay.webhooks.handlers.base import EventHandler
from ghrelay.webhooks.models import GitHubEvent
from ghrelay.webhooks.parser import parse_github_event

logger = structlog.get_logger(__name__)


class WebhookDispatcher:
    """
    Runs GitHub events through their processor and dispatches Slack events to
    registered EventHandler instances.
    """

    def __init__(self, ctx: Context):
        self.ctx = ctx
        self._slack_handlers: dict[str, EventHandler] = {}

    def register_handler(self, event_type: str, handler: EventHandler):
        """
        Registers a handler instance for a Slack event type.

        Args:
            event_type: The inner event type (e.g., "link_shared").
            handler: An instance of a class that implements the EventHandler interface.
        """
        if event_type in self._slack_handlers:
            logger.warning("handler_overridden", event_type=event_type)
        self._slack_handlers[event_type] = handler
        logger.info("handler_registered", event_type=event_type, handler=handler.__class__.__name__)

    async def process_github_notification(self, headers: Mapping[str, str], body: bytes) -> None:
        """
        Process one GitHub webhook request.

        Raises:
            SignatureError: If the body does not match its signature.
            UnsupportedRepositoryError: If the repository is not in the secrets file.
        """
        try:
            event = parse_github_event(headers, body)
            repo_url = event.repo_url
            validate_github_signature(self.ctx.secrets.gh_hook_secret(repo_url), headers, body)
            if not self.ctx.secrets.is_supported(repo_url):
                raise UnsupportedRepositoryError(repo_url)

            async with log_operation(
                "github_notification", subject_ids={"repo": repo_url}, github_event=event.event_type.value
            ):
                await self._process(event)
        except (SignatureError, UnsupportedRepositoryError) as e:
            logger.error("github_notification_rejected", error=str(e))
            raise
        except ActionError as e:
            logger.error("github_notification_failed", error=str(e), error_type=type(e).__name__)
        except Exception as e:
            # Still acknowledged with 200
            logger.exception("github_notification_crashed", error=str(e), error_type=type(e).__name__)

    async def _process(self, event: GitHubEvent) -> None:
        await refresh_repo_config(self.ctx, event)
        cfg = self.ctx.get_repo_config(event.repo_url)

        processor = EventProcessorFactory.get_processor(event.event_type, self.ctx)
        if processor is None:
            logger.info("github_event_not_routed", repo=event.repo_url, github_event=getattr(event, "event_name", None))
            return

        sender = event.sender_login
        if sender is not None and sender in cfg.ignored_users:
            logger.info("sender_ignored", repo=event.repo_url, sender=sender)
            return

        notifications = await processor.generate_notifications(cfg, event)
        results = await asyncio.gather(
            self.send_notifications(notifications),
            processor.run_tasks(cfg, event),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        await self.ctx.save_state()

    async def send_notifications(self, notifications: list[PostMessage]) -> None:
        for message in notifications:
            await self.ctx.slack.send_notification(message)

    async def process_slack_event(self, headers: Mapping[str, str], body: bytes) -> str:
        """
        Process one Slack Events API request and return the response body.

        Raises:
            SignatureError: If an event callback does not match its signature.
            PayloadDecodeError: If the envelope cannot be decoded.
        """
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PayloadDecodeError(f"failed to parse slack event as valid JSON ({e})") from e
        if not isinstance(data, dict):
            raise PayloadDecodeError("slack event is not a JSON object")

        try:
            if data.get("type") == "url_verification":
                return UrlVerification.model_validate(data).challenge
            envelope = EventCallback.model_validate(data)
        except ValidationError as e:
            raise PayloadDecodeError(f"unexpected slack event shape: {e}") from e

        validate_slack_signature(self.ctx.secrets.slack_signing_secret, headers, body)

        event_type = envelope.event.get("type")
        handler = self._slack_handlers.get(event_type)
        if handler is None:
            logger.warning("slack_event_unhandled", event_type=event_type)
            return f"ignored: unsupported event {event_type}"
        return await handler.handle(envelope.event)

    def print_config(self, repo_url: str) -> dict[str, Any] | None:
        """Cached rule configuration of a repository, for debugging."""
        logger.info("config_requested", repo=repo_url)
        cfg = self.ctx.find_repo_config(repo_url)
        return cfg.model_dump(mode="json") if cfg else None
