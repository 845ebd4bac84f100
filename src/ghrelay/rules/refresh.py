"""
Keep the cached rule configuration of a repository current.

The configuration is fetched on first use and cached for the process lifetime.
It is refetched only when a push touches the rule file.
"""

import structlog

from ghrelay.core.context import Context
from ghrelay.webhooks.models import GitHubEvent, PushEvent

logger = structlog.get_logger(__name__)


def push_modifies_file(event: PushEvent, path: str) -> bool:
    return any(path in commit.modified_files for commit in event.commits)


async def refresh_repo_config(ctx: Context, event: GitHubEvent) -> bool:
    """
    Fetch the configuration of the event's repository when it is not cached
    or when the event is a push modifying the rule file. The cached value is
    replaced as a whole.

    Returns:
        True if a fetch happened.

    Raises:
        ConfigFetchError: If the fetch fails. There is no fallback to a
            previously cached configuration.
    """
    repo_url = event.repo_url
    if ctx.find_repo_config(repo_url) is not None:
        if not isinstance(event, PushEvent) or not push_modifies_file(event, ctx.config_filename):
            return False
        logger.info("config_file_modified", repo=repo_url, ref=event.ref)

    cfg = await ctx.rule_loader.get_rules(event.repository)
    ctx.set_repo_config(repo_url, cfg)
    return True
