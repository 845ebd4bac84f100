from ghrelay.event_processors.base import BaseEventProcessor
from ghrelay.integrations.slack.models import PostMessage
from ghrelay.presentation.slack_formatter import generate_pr_review_notification
from ghrelay.rules.label import partition_labels
from ghrelay.rules.models import RuleSet
from ghrelay.webhooks.models import PullRequestReviewEvent


class PullRequestReviewProcessor(BaseEventProcessor):
    async def generate_notifications(self, cfg: RuleSet, event: PullRequestReviewEvent) -> list[PostMessage]:
        if event.action != "submitted":
            return []
        # A bare "commented" review only wraps review comments, which arrive as their own events
        if event.review.state == "commented" and not event.review.body:
            return []
        channels = partition_labels(cfg.label_rules, event.pull_request.labels)
        return [generate_pr_review_notification(event, channel) for channel in channels]
