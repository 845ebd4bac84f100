"""
Path-prefix routing for pushes, commits and commit comments.
"""

import re
from collections.abc import Iterable

import structlog

from ghrelay.core.utils.patterns import first_line
from ghrelay.integrations.github.models import CommitFile
from ghrelay.rules.channels import resolve_channels
from ghrelay.rules.models import PrefixRule, RuleSet
from ghrelay.webhooks.models import PushCommit, PushEvent

logger = structlog.get_logger(__name__)

MERGE_COMMIT_RE = re.compile(r"^Merge(?: remote-tracking)? branch '(?:origin/)?(.+)'(?: of [^ ]+)?( into .+)?$")


def _has_prefix(path: str, prefixes: list[str] | None) -> bool:
    return any(path.startswith(prefix) for prefix in prefixes or [])


def match_prefix_rules(path: str, rules: Iterable[PrefixRule]) -> str | None:
    """Channel of the first rule, in configured order, that matches `path`."""
    for rule in rules:
        allowed = not rule.allow or _has_prefix(path, rule.allow)
        if allowed and not _has_prefix(path, rule.ignore):
            return rule.channel
    return None


def rule_applies_to_branch(rule: PrefixRule, branch: str, main_branch: str | None) -> bool:
    """
    Rules with branch filters only apply on those branches. Otherwise, when
    main-branch filtering is on (`main_branch` set), unscoped rules only apply
    on the main branch.

    Whether a commit is distinct plays no part here; it only decides the
    default-channel fallback.
    """
    if rule.branch_filters:
        return branch in rule.branch_filters
    if main_branch is not None:
        return branch == main_branch
    return True


def is_merge_commit_to_ignore(cfg: RuleSet, branch: str, commit: PushCommit) -> bool:
    """
    Recognise merge commits pushed to the main branch whose content was
    already announced on another branch. Messages look like:

        Merge branch 'develop' into feature_branch
        Merge branch 'develop' of github.com:org/repo into feature_branch
        Merge remote-tracking branch 'origin/develop' into feature_branch
        Merge remote-tracking branch 'origin/develop'
        Merge branch 'develop' into main
    """
    if cfg.main_branch_name is None or branch != cfg.main_branch_name:
        return False
    match = MERGE_COMMIT_RE.match(first_line(commit.message))
    if match is None:
        return False
    incoming_branch, into = match.groups()
    return incoming_branch == branch or into is not None


def partition_push(cfg: RuleSet, event: PushEvent) -> list[tuple[str, PushEvent]]:
    """
    Split a push into one push per channel holding the commits routed there.
    A commit may be routed to several channels.
    """
    prefix_rules = cfg.prefix_rules
    branch = event.branch
    main_branch = cfg.main_branch_name if prefix_rules.filter_main_branch else None
    rules = [rule for rule in prefix_rules.rules if rule_applies_to_branch(rule, branch, main_branch)]

    by_channel: dict[str, list[PushCommit]] = {}
    for commit in event.commits:
        if is_merge_commit_to_ignore(cfg, branch, commit):
            logger.info("main_branch_merge_ignored", commit=commit.id, message=first_line(commit.message))
            continue
        matched = (match_prefix_rules(path, rules) for path in commit.modified_files)
        # Commits already seen on another branch only go where a rule sends them
        default = prefix_rules.default_channel if commit.distinct else None
        for channel in resolve_channels(matched, default):
            by_channel.setdefault(channel, []).append(commit)

    return [(channel, event.model_copy(update={"commits": commits})) for channel, commits in sorted(by_channel.items())]


def partition_commit(cfg: RuleSet, files: Iterable[CommitFile]) -> list[str]:
    """Channels for a single commit given its changed files."""
    rules = cfg.prefix_rules.rules
    matched = (match_prefix_rules(f.filename, rules) for f in files)
    return resolve_channels(matched, cfg.prefix_rules.default_channel)
