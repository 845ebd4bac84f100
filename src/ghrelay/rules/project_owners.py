import re

from ghrelay.integrations.github.models import PullRequest
from ghrelay.rules.models import ProjectOwners, ReviewerRequest

GH_ORG_TEAM_RE = re.compile(r"^[a-zA-Z0-9\-]+/([a-zA-Z0-9\-]+)$")


def get_project_owners(pull_request: PullRequest, project_owners: ProjectOwners) -> ReviewerRequest | None:
    """
    Reviewers to request for a pull request, based on its labels.

    Owners written as `org/team` are requested as teams (by slug). The author
    and anyone already requested are left out. Returns None when nobody is left.
    """
    pr_labels = {label.name for label in pull_request.labels}
    owners: list[str] = []
    for rule in project_owners.rules:
        if rule.label and all(label in pr_labels for label in rule.label):
            owners.extend(owner for owner in rule.owners if owner not in owners)

    reviewers: list[str] = []
    team_reviewers: list[str] = []
    for owner in owners:
        team = GH_ORG_TEAM_RE.match(owner)
        if team:
            team_reviewers.append(team.group(1))
        else:
            reviewers.append(owner)

    excluded_users = {pull_request.user.login, *(r.login for r in pull_request.requested_reviewers)}
    excluded_teams = {t.slug for t in pull_request.requested_teams}
    reviewers = [r for r in reviewers if r not in excluded_users]
    team_reviewers = [t for t in team_reviewers if t not in excluded_teams]

    if not reviewers and not team_reviewers:
        return None
    return ReviewerRequest(reviewers=reviewers, team_reviewers=team_reviewers)
