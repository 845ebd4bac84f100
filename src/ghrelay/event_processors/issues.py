from ghrelay.event_processors.base import BaseEventProcessor
from ghrelay.integrations.slack.models import PostMessage
from ghrelay.presentation.slack_formatter import generate_issue_notification
from ghrelay.rules.label import partition_labels
from ghrelay.rules.models import RuleSet
from ghrelay.webhooks.models import IssueEvent

NOTIFIED_ACTIONS = {"opened", "closed", "reopened", "labeled"}


class IssuesProcessor(BaseEventProcessor):
    async def generate_notifications(self, cfg: RuleSet, event: IssueEvent) -> list[PostMessage]:
        if event.action not in NOTIFIED_ACTIONS:
            return []
        channels = partition_labels(cfg.label_rules, event.issue.labels)
        return [generate_issue_notification(event, channel) for channel in channels]
