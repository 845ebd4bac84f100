from abc import ABC, abstractmethod

from ghrelay.core.context import Context
from ghrelay.integrations.slack.models import PostMessage
from ghrelay.rules.models import RuleSet
from ghrelay.webhooks.models import GitHubEvent


class BaseEventProcessor(ABC):
    """Base class for all event processors."""

    def __init__(self, ctx: Context):
        self.ctx = ctx
        self.github_client = ctx.github
        self.slack_client = ctx.slack

    @abstractmethod
    async def generate_notifications(self, cfg: RuleSet, event: GitHubEvent) -> list[PostMessage]:
        """
        Route the event and render one message per target channel or DM.

        Must not send anything; the dispatcher sends once generation is complete.
        """
        raise NotImplementedError("Subclasses must implement generate_notifications")

    async def run_tasks(self, cfg: RuleSet, event: GitHubEvent) -> None:
        """Side-channel GitHub work run alongside the sends. Nothing by default."""
        return None
