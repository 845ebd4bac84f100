"""
Status (CI pipeline) events.

The policy of the first matching status rule decides whether a status is
announced. Under allow_once only branches whose stored status changed are
announced; every reported branch has its stored status updated either way.
"""

import structlog

from ghrelay.core.errors import SlackAPIError
from ghrelay.event_processors.base import BaseEventProcessor
from ghrelay.integrations.slack.models import PostMessage
from ghrelay.presentation.slack_formatter import generate_status_notification
from ghrelay.rules.models import RuleSet, StatusPolicy, StatusRule
from ghrelay.rules.prefix import partition_commit
from ghrelay.rules.status import branches_to_notify, match_status_rule
from ghrelay.webhooks.models import Branch, StatusEvent

logger = structlog.get_logger(__name__)


class StatusProcessor(BaseEventProcessor):
    async def generate_notifications(self, cfg: RuleSet, event: StatusEvent) -> list[PostMessage]:
        targets = await self.resolve_targets(cfg, event)
        return [generate_status_notification(cfg, event, target) for target in targets]

    async def resolve_targets(self, cfg: RuleSet, event: StatusEvent) -> list[str]:
        """Slack user ids (for DMs) followed by channel names to notify."""
        repo_url = event.repo_url
        pipeline = event.context
        if not self.ctx.is_pipeline_allowed(repo_url, pipeline):
            logger.debug("pipeline_not_allowed", repo=repo_url, pipeline=pipeline)
            return []

        rule = match_status_rule(cfg.status_rules.rules, pipeline, event.state)
        if rule is None or rule.policy == StatusPolicy.IGNORE:
            return []

        # Compare and write without suspending in between
        stored = self.ctx.state.get_pipeline_statuses(repo_url, pipeline)
        previous = dict(stored) if stored is not None else None
        branches = branches_to_notify(rule.policy, event.branches, previous, event.state)
        self.ctx.state.set_pipeline_status(repo_url, pipeline, [b.name for b in event.branches], event.state)

        if not branches:
            logger.info("status_unchanged", repo=repo_url, pipeline=pipeline, state=event.state.value)
            return []

        direct_messages = await self._direct_message_targets(rule, event)
        channels = await self._channel_targets(cfg, rule, event, branches)
        return direct_messages + channels

    async def _direct_message_targets(self, rule: StatusRule, event: StatusEvent) -> list[str]:
        if not rule.notify_dm:
            return []
        email = event.commit.commit.author.email
        try:
            user = await self.slack_client.lookup_user(email)
        except SlackAPIError as e:
            logger.warning("slack_user_lookup_failed", email=email, error=str(e))
            return []
        # A user id as channel sends a direct message
        return [user.id]

    async def _channel_targets(
        self, cfg: RuleSet, rule: StatusRule, event: StatusEvent, branches: list[Branch]
    ) -> list[str]:
        if not rule.notify_channels:
            return []
        default = [cfg.prefix_rules.default_channel] if cfg.prefix_rules.default_channel else []
        main_branch = cfg.main_branch_name
        if main_branch is None or not any(b.name == main_branch for b in branches):
            # Builds off the main branch stay out of topic channels
            return default
        api_commit = await self.github_client.get_api_commit(event.repository, event.commit.sha)
        return partition_commit(cfg, api_commit.files)
