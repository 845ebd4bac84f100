import structlog

from ghrelay.event_processors.base import BaseEventProcessor
from ghrelay.integrations.slack.models import PostMessage
from ghrelay.presentation.slack_formatter import generate_pull_request_notification
from ghrelay.rules.label import partition_labels
from ghrelay.rules.models import RuleSet
from ghrelay.rules.project_owners import get_project_owners
from ghrelay.webhooks.models import PullRequestEvent

logger = structlog.get_logger(__name__)

NOTIFIED_ACTIONS = {"opened", "closed", "reopened", "labeled", "ready_for_review"}
REVIEWER_ACTIONS = {"labeled", "ready_for_review"}


class PullRequestProcessor(BaseEventProcessor):
    """Routes pull request activity by label and assigns project owners as reviewers."""

    async def generate_notifications(self, cfg: RuleSet, event: PullRequestEvent) -> list[PostMessage]:
        pr = event.pull_request
        if event.action not in NOTIFIED_ACTIONS or pr.draft:
            logger.debug("pr_action_ignored", repo=event.repo_url, number=pr.number, action=event.action)
            return []
        channels = partition_labels(cfg.label_rules, pr.labels)
        return [generate_pull_request_notification(event, channel) for channel in channels]

    async def run_tasks(self, cfg: RuleSet, event: PullRequestEvent) -> None:
        pr = event.pull_request
        if pr.draft or pr.state != "open" or event.action not in REVIEWER_ACTIONS:
            return
        request = get_project_owners(pr, cfg.project_owners)
        if request is None:
            return
        await self.github_client.request_reviewers(event.repository, event.number, request)
