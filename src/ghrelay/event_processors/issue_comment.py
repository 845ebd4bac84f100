from ghrelay.event_processors.base import BaseEventProcessor
from ghrelay.integrations.slack.models import PostMessage
from ghrelay.presentation.slack_formatter import generate_issue_comment_notification
from ghrelay.rules.label import partition_labels
from ghrelay.rules.models import RuleSet
from ghrelay.webhooks.models import IssueCommentEvent


class IssueCommentProcessor(BaseEventProcessor):
    async def generate_notifications(self, cfg: RuleSet, event: IssueCommentEvent) -> list[PostMessage]:
        if event.action != "created":
            return []
        channels = partition_labels(cfg.label_rules, event.issue.labels)
        return [generate_issue_comment_notification(event, channel) for channel in channels]
