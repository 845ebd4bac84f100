from ghrelay.core.context import Context
from ghrelay.core.models import EventType
from ghrelay.event_processors.base import BaseEventProcessor
from ghrelay.event_processors.commit_comment import CommitCommentProcessor
from ghrelay.event_processors.issue_comment import IssueCommentProcessor
from ghrelay.event_processors.issues import IssuesProcessor
from ghrelay.event_processors.pull_request import PullRequestProcessor
from ghrelay.event_processors.pull_request_review import PullRequestReviewProcessor
from ghrelay.event_processors.pull_request_review_comment import PullRequestReviewCommentProcessor
from ghrelay.event_processors.push import PushProcessor
from ghrelay.event_processors.status import StatusProcessor


class EventProcessorFactory:
    """Factory for creating event processors."""

    _processors: dict[EventType, type[BaseEventProcessor]] = {
        EventType.PUSH: PushProcessor,
        EventType.PULL_REQUEST: PullRequestProcessor,
        EventType.PULL_REQUEST_REVIEW: PullRequestReviewProcessor,
        EventType.PULL_REQUEST_REVIEW_COMMENT: PullRequestReviewCommentProcessor,
        EventType.ISSUES: IssuesProcessor,
        EventType.ISSUE_COMMENT: IssueCommentProcessor,
        EventType.COMMIT_COMMENT: CommitCommentProcessor,
        EventType.STATUS: StatusProcessor,
    }

    @classmethod
    def get_processor(cls, event_type: EventType, ctx: Context) -> BaseEventProcessor | None:
        """Processor for the event type, or None for event kinds that are only logged."""
        processor_class = cls._processors.get(event_type)
        if not processor_class:
            return None
        return processor_class(ctx)
