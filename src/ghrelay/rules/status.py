"""
Status rule selection and the allow-once deduplication decision.
"""

from collections.abc import Iterable, Mapping

from ghrelay.core.models import StatusState
from ghrelay.core.utils.patterns import matches_glob
from ghrelay.rules.models import StatusPolicy, StatusRule
from ghrelay.webhooks.models import Branch


def match_status_rule(rules: Iterable[StatusRule], pipeline: str, state: StatusState) -> StatusRule | None:
    """First rule whose pipeline glob matches and whose `on` list (if any) includes `state`."""
    for rule in rules:
        if not matches_glob(pipeline, rule.pipeline):
            continue
        if rule.on is not None and state not in rule.on:
            continue
        return rule
    return None


def branches_to_notify(
    policy: StatusPolicy,
    branches: list[Branch],
    previous: Mapping[str, StatusState] | None,
    current: StatusState,
) -> list[Branch]:
    """
    Branches whose status should be announced.

    ALLOW announces every branch. ALLOW_ONCE announces a branch only when its
    last stored status differs from `current`; a branch never seen before counts
    as changed.
    """
    if policy == StatusPolicy.IGNORE:
        return []
    if policy == StatusPolicy.ALLOW or previous is None:
        return list(branches)
    return [branch for branch in branches if previous.get(branch.name) != current]
