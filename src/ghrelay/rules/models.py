from enum import Enum

from pydantic import BaseModel, Field

from ghrelay.core.models import StatusState


class PrefixRule(BaseModel):
    """Routes file paths starting with one of `allow` (and none of `ignore`) to a channel."""

    allow: list[str] | None = Field(None, description="Path prefixes; absent or empty matches every path")
    ignore: list[str] | None = Field(None, description="Path prefixes excluded even when allowed")
    channel: str
    branch_filters: list[str] | None = Field(None, description="Branches the rule applies to")


class PrefixRules(BaseModel):
    default_channel: str | None = None
    filter_main_branch: bool = False
    rules: list[PrefixRule] = Field(default_factory=list)


class LabelRule(BaseModel):
    """Routes issues and pull requests carrying one of `allow` (and none of `ignore`) to a channel."""

    allow: list[str] | None = Field(None, description="Label names; absent or empty matches every label")
    ignore: list[str] | None = None
    channel: str


class LabelRules(BaseModel):
    default_channel: str | None = None
    rules: list[LabelRule] = Field(default_factory=list)


class StatusPolicy(str, Enum):
    """What to do with a status event matching a rule."""

    IGNORE = "ignore"
    ALLOW = "allow"
    # Notify only when the status of a branch differs from the last one seen
    ALLOW_ONCE = "allow_once"


class StatusRule(BaseModel):
    pipeline: str = Field("*", description="Glob matched against the status context")
    on: list[StatusState] | None = Field(None, description="Status states the rule applies to; absent means all")
    policy: StatusPolicy
    notify_channels: bool = True
    notify_dm: bool = False


class StatusRules(BaseModel):
    rules: list[StatusRule] = Field(default_factory=list)


class ProjectOwnerRule(BaseModel):
    """Owners to request as reviewers when a pull request carries all of `label`."""

    label: list[str]
    owners: list[str]


class ProjectOwners(BaseModel):
    rules: list[ProjectOwnerRule] = Field(default_factory=list)


class RuleSet(BaseModel):
    """Routing configuration of one repository, read from its rule file."""

    main_branch_name: str | None = None
    prefix_rules: PrefixRules = Field(default_factory=PrefixRules)
    label_rules: LabelRules = Field(default_factory=LabelRules)
    status_rules: StatusRules = Field(default_factory=StatusRules)
    project_owners: ProjectOwners = Field(default_factory=ProjectOwners)
    ignored_users: list[str] = Field(default_factory=list)


class ReviewerRequest(BaseModel):
    reviewers: list[str] = Field(default_factory=list)
    team_reviewers: list[str] = Field(default_factory=list)
