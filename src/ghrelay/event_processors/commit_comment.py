from ghrelay.core.errors import ActionError
from ghrelay.event_processors.base import BaseEventProcessor
from ghrelay.integrations.slack.models import PostMessage
from ghrelay.presentation.slack_formatter import generate_commit_comment_notification
from ghrelay.rules.channels import resolve_channels
from ghrelay.rules.models import RuleSet
from ghrelay.rules.prefix import match_prefix_rules, partition_commit
from ghrelay.webhooks.models import CommitCommentEvent


class CommitCommentProcessor(BaseEventProcessor):
    """
    Routes a commit comment by the file it was left on, or by every file the
    commit touches when it is a general comment.
    """

    async def generate_notifications(self, cfg: RuleSet, event: CommitCommentEvent) -> list[PostMessage]:
        sha = event.comment.commit_id
        if sha is None:
            raise ActionError("unable to find commit id for this commit comment event")
        api_commit = await self.github_client.get_api_commit(event.repository, sha)

        if event.comment.path is None:
            channels = partition_commit(cfg, api_commit.files)
        else:
            matched = match_prefix_rules(event.comment.path, cfg.prefix_rules.rules)
            channels = resolve_channels([matched], cfg.prefix_rules.default_channel)
        return [generate_commit_comment_notification(api_commit, event, channel) for channel in channels]
