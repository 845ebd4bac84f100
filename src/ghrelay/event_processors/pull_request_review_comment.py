from ghrelay.event_processors.base import BaseEventProcessor
from ghrelay.integrations.slack.models import PostMessage
from ghrelay.presentation.slack_formatter import generate_pr_review_comment_notification
from ghrelay.rules.label import partition_labels
from ghrelay.rules.models import RuleSet
from ghrelay.webhooks.models import PullRequestReviewCommentEvent


class PullRequestReviewCommentProcessor(BaseEventProcessor):
    async def generate_notifications(self, cfg: RuleSet, event: PullRequestReviewCommentEvent) -> list[PostMessage]:
        if event.action != "created":
            return []
        channels = partition_labels(cfg.label_rules, event.pull_request.labels)
        return [generate_pr_review_comment_notification(event, channel) for channel in channels]
