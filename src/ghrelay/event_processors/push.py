import structlog

from ghrelay.event_processors.base import BaseEventProcessor
from ghrelay.integrations.slack.models import PostMessage
from ghrelay.presentation.slack_formatter import generate_push_notification
from ghrelay.rules.models import RuleSet
from ghrelay.rules.prefix import partition_push
from ghrelay.webhooks.models import PushEvent

logger = structlog.get_logger(__name__)


class PushProcessor(BaseEventProcessor):
    """Routes pushed commits by the paths they touch."""

    async def generate_notifications(self, cfg: RuleSet, event: PushEvent) -> list[PostMessage]:
        partitions = partition_push(cfg, event)
        logger.debug("push_partitioned", repo=event.repo_url, channels=[channel for channel, _ in partitions])
        return [generate_push_notification(push, channel) for channel, push in partitions]
