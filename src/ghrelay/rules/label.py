"""
Label routing for pull requests, reviews, issues and comments.
"""

from collections.abc import Iterable

from ghrelay.integrations.github.models import Label
from ghrelay.rules.channels import resolve_channels
from ghrelay.rules.models import LabelRule, LabelRules


def _contains(names: list[str] | None, label: str) -> bool:
    return any(name.lower() == label for name in names or [])


def match_label_rules(label: str, rules: Iterable[LabelRule]) -> str | None:
    """Channel of the first rule, in configured order, that matches `label` (case-insensitive)."""
    label = label.lower()
    for rule in rules:
        allowed = not rule.allow or _contains(rule.allow, label)
        if allowed and not _contains(rule.ignore, label):
            return rule.channel
    return None


def partition_labels(label_rules: LabelRules, labels: Iterable[Label]) -> list[str]:
    matched = (match_label_rules(label.name, label_rules.rules) for label in labels)
    return resolve_channels(matched, label_rules.default_channel)
