"""
Previews for GitHub links pasted into Slack.
"""

import asyncio
from typing import Any

import structlog
from pydantic import ValidationError

from ghrelay.core.context import Context
from ghrelay.core.errors import PayloadDecodeError, PersistenceError, SlackAPIError, UpstreamAPIError
from ghrelay.integrations.github.links import (
    CommitLink,
    CompareLink,
    GitHubLink,
    IssueLink,
    PullRequestLink,
    parse_github_link,
)
from ghrelay.integrations.slack.models import Attachment, LinkSharedEvent
from ghrelay.presentation.slack_formatter import (
    populate_commit,
    populate_compare,
    populate_issue,
    populate_pull_request,
)
from ghrelay.webhooks.handlers.base import EventHandler

logger = structlog.get_logger(__name__)

MAX_LINKS = 2
# Slack reports this user for messages posted by a bot with a custom username
BOT_WITH_CUSTOM_USERNAME = "U00"


class LinkSharedEventHandler(EventHandler):
    def __init__(self, ctx: Context):
        self.ctx = ctx

    async def handle(self, event: dict[str, Any]) -> str:
        try:
            shared = LinkSharedEvent.model_validate(event)
        except ValidationError as e:
            raise PayloadDecodeError(f"unexpected link_shared payload shape: {e}") from e

        links = [link.url for link in shared.links]
        log = logger.bind(channel=shared.channel, user=shared.user, message_ts=shared.message_ts)
        log.info("slack_link_shared", links=links)

        if len(links) > MAX_LINKS:
            return "ignored: more than two links present"
        if await self._is_self_bot_user(shared.user):
            return "ignored: is bot user"

        results = await asyncio.gather(*(self._unfurl(link) for link in links))
        unfurls = {link: attachment for link, attachment in results if attachment is not None}
        if not unfurls:
            return "ignored: no links to unfurl"

        try:
            await self.ctx.slack.send_chat_unfurl(shared.channel, shared.message_ts, unfurls)
        except SlackAPIError as e:
            log.error("slack_unfurl_failed", error=str(e))
            return "ignored: failed to unfurl links"
        log.info("slack_links_unfurled", links=list(unfurls))
        return "ok"

    async def _is_self_bot_user(self, user: str) -> bool:
        if user == BOT_WITH_CUSTOM_USERNAME:
            return True
        bot_user_id = self.ctx.state.get_bot_user_id()
        if bot_user_id is None:
            bot_user_id = await self._fetch_bot_user_id()
        return bot_user_id is not None and user == bot_user_id

    async def _fetch_bot_user_id(self) -> str | None:
        try:
            auth = await self.ctx.slack.send_auth_test()
        except SlackAPIError as e:
            logger.warning("slack_auth_test_failed", error=str(e))
            return None
        self.ctx.state.set_bot_user_id(auth.user_id)
        if self.ctx.state_path is not None:
            try:
                await self.ctx.state.save(self.ctx.state_path)
            except PersistenceError as e:
                logger.warning("state_save_failed", path=str(self.ctx.state_path), error=str(e))
        return auth.user_id

    async def _unfurl(self, link: str) -> tuple[str, Attachment | None]:
        gh_link = parse_github_link(link)
        if gh_link is None:
            return link, None
        try:
            return link, await self._populate(gh_link)
        except UpstreamAPIError as e:
            # Not every pasted link is expected to resolve
            logger.debug("github_link_unresolved", link=link, error=str(e))
            return link, None

    async def _populate(self, gh_link: GitHubLink) -> Attachment:
        github = self.ctx.github
        repo = gh_link.repo
        if isinstance(gh_link, PullRequestLink):
            return populate_pull_request(repo, await github.get_pull_request(repo, gh_link.number))
        if isinstance(gh_link, IssueLink):
            return populate_issue(repo, await github.get_issue(repo, gh_link.number))
        if isinstance(gh_link, CommitLink):
            return populate_commit(repo, await github.get_api_commit(repo, gh_link.sha))
        if isinstance(gh_link, CompareLink):
            return populate_compare(repo, await github.get_compare(repo, gh_link.base, gh_link.head))
        raise TypeError(f"unknown link kind {type(gh_link).__name__}")
