"""
Rule configuration and the matchers that reduce events to Slack channels.
"""

from ghrelay.rules.models import (
    LabelRule,
    LabelRules,
    PrefixRule,
    PrefixRules,
    ProjectOwnerRule,
    ProjectOwners,
    RuleSet,
    StatusPolicy,
    StatusRule,
    StatusRules,
)

__all__ = [
    "LabelRule",
    "LabelRules",
    "PrefixRule",
    "PrefixRules",
    "ProjectOwnerRule",
    "ProjectOwners",
    "RuleSet",
    "StatusPolicy",
    "StatusRule",
    "StatusRules",
]
