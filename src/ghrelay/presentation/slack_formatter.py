"""
Render routed GitHub events as Slack messages and link previews.

Pure functions: no network or state access. Each call produces one message
for one channel (or one user id, for a direct message).
"""

from ghrelay.core.models import StatusState
from ghrelay.core.utils.patterns import first_line
from ghrelay.integrations.github.models import ApiCommit, Compare, Issue, PullRequest, Repository
from ghrelay.integrations.slack.models import Attachment, AttachmentField, PostMessage
from ghrelay.rules.models import RuleSet
from ghrelay.webhooks.models import (
    CommitCommentEvent,
    IssueCommentEvent,
    IssueEvent,
    PullRequestEvent,
    PullRequestReviewCommentEvent,
    PullRequestReviewEvent,
    PushCommit,
    PushEvent,
    StatusEvent,
)

COLOR_SUCCESS = "#2eb886"
COLOR_FAILURE = "#cc0000"
COLOR_PENDING = "#ccad00"
COLOR_NEUTRAL = "#cccccc"
COLOR_OPEN = "#36a64f"
COLOR_MERGED = "#6f42c1"

STATUS_COLORS = {
    StatusState.SUCCESS: COLOR_SUCCESS,
    StatusState.FAILURE: COLOR_FAILURE,
    StatusState.ERROR: COLOR_FAILURE,
    StatusState.PENDING: COLOR_PENDING,
}

STATUS_VERBS = {
    StatusState.SUCCESS: "has passed",
    StatusState.FAILURE: "has failed",
    StatusState.ERROR: "has errored",
    StatusState.PENDING: "is pending",
}

REVIEW_VERBS = {
    "approved": "approved",
    "changes_requested": "requested changes on",
    "commented": "commented on",
    "dismissed": "dismissed a review on",
}


def escape(text: str | None) -> str:
    """Escape the characters Slack treats as markup control characters."""
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def link(url: str | None, label: str) -> str:
    if not url:
        return label
    return f"<{url}|{escape(label)}>"


def short_sha(sha: str) -> str:
    return sha[:8]


def repo_link(repo: Repository, suffix: str = "") -> str:
    return f"<{repo.url}|[{escape(repo.full_name)}{escape(suffix)}]>"


def _issue_state_color(state: str, merged: bool | None = None, draft: bool = False) -> str:
    if merged:
        return COLOR_MERGED
    if draft or state != "open":
        return COLOR_NEUTRAL
    return COLOR_OPEN


def _pull_request_verb(action: str, pull_request: PullRequest) -> str:
    if action == "closed":
        return "merged" if pull_request.merged else "closed"
    if action == "ready_for_review":
        return "marked as ready for review"
    return action


def _body_attachment(body: str | None, color: str, title: str | None = None, title_link: str | None = None):
    if not body and not title:
        return None
    return Attachment(
        fallback=body or title,
        mrkdwn_in=["text"],
        color=color,
        title=title,
        title_link=title_link,
        text=escape(body) if body else None,
    )


def _message(channel: str, text: str, attachment: Attachment | None = None) -> PostMessage:
    return PostMessage(channel=channel, text=text, attachments=[attachment] if attachment else None)


def _commit_line(commit: PushCommit) -> str:
    sha = link(commit.url, short_sha(commit.id))
    return f"`{sha}` {escape(first_line(commit.message))} - {escape(commit.author.name)}"


def generate_push_notification(event: PushEvent, channel: str) -> PostMessage:
    count = len(event.commits)
    noun = "commit" if count == 1 else "commits"
    verb = "force-pushed" if event.forced else "pushed"
    pushed = link(event.compare, f"{count} {noun}")
    text = f"{repo_link(event.repository, ':' + event.branch)} *{escape(event.sender.login)}* {verb} {pushed}"
    lines = [_commit_line(commit) for commit in event.commits]
    attachment = Attachment(fallback=text, mrkdwn_in=["text"], color=COLOR_NEUTRAL, text="\n".join(lines))
    return _message(channel, text, attachment)


def generate_pull_request_notification(event: PullRequestEvent, channel: str) -> PostMessage:
    pr = event.pull_request
    verb = _pull_request_verb(event.action, pr)
    text = (
        f"{repo_link(event.repository)} Pull request #{pr.number} {link(pr.html_url, pr.title)} "
        f"{verb} by *{escape(event.sender.login)}*"
    )
    body = pr.body if event.action in ("opened", "ready_for_review") else None
    attachment = _body_attachment(body, _issue_state_color(pr.state, pr.merged, pr.draft))
    return _message(channel, text, attachment)


def generate_pr_review_notification(event: PullRequestReviewEvent, channel: str) -> PostMessage:
    pr = event.pull_request
    verb = REVIEW_VERBS.get(event.review.state, "reviewed")
    text = (
        f"{repo_link(event.repository)} *{escape(event.sender.login)}* {verb} "
        f"#{pr.number} {link(event.review.html_url or pr.html_url, pr.title)}"
    )
    attachment = _body_attachment(event.review.body, _issue_state_color(pr.state, pr.merged, pr.draft))
    return _message(channel, text, attachment)


def generate_pr_review_comment_notification(event: PullRequestReviewCommentEvent, channel: str) -> PostMessage:
    pr = event.pull_request
    text = (
        f"{repo_link(event.repository)} *{escape(event.sender.login)}* commented on "
        f"#{pr.number} {link(event.comment.html_url, pr.title)}"
    )
    attachment = _body_attachment(event.comment.body, COLOR_NEUTRAL)
    if attachment is not None and event.comment.path:
        attachment.footer = f"{event.comment.path}"
    return _message(channel, text, attachment)


def generate_issue_notification(event: IssueEvent, channel: str) -> PostMessage:
    issue = event.issue
    text = (
        f"{repo_link(event.repository)} Issue #{issue.number} {link(issue.html_url, issue.title)} "
        f"{event.action} by *{escape(event.sender.login)}*"
    )
    body = issue.body if event.action == "opened" else None
    attachment = _body_attachment(body, _issue_state_color(issue.state))
    return _message(channel, text, attachment)


def generate_issue_comment_notification(event: IssueCommentEvent, channel: str) -> PostMessage:
    issue = event.issue
    kind = "pull request" if issue.pull_request is not None else "issue"
    text = (
        f"{repo_link(event.repository)} *{escape(event.sender.login)}* commented on {kind} "
        f"#{issue.number} {link(event.comment.html_url, issue.title)}"
    )
    attachment = _body_attachment(event.comment.body, COLOR_NEUTRAL)
    return _message(channel, text, attachment)


def generate_commit_comment_notification(
    api_commit: ApiCommit, event: CommitCommentEvent, channel: str
) -> PostMessage:
    comment = event.comment
    location = f" on `{escape(comment.path)}`" if comment.path else ""
    text = (
        f"{repo_link(event.repository)} *{escape(event.sender.login)}* commented on commit "
        f"`{link(comment.html_url, short_sha(api_commit.sha))}`{location}"
    )
    attachment = _body_attachment(
        comment.body,
        COLOR_NEUTRAL,
        title=first_line(api_commit.commit.message),
        title_link=api_commit.html_url,
    )
    return _message(channel, text, attachment)


def generate_status_notification(cfg: RuleSet, event: StatusEvent, channel: str) -> PostMessage:
    """`channel` may be a channel name or a Slack user id for a direct message."""
    commit = event.commit
    verb = STATUS_VERBS[event.state]
    text = (
        f"{repo_link(event.repository)} Build {link(event.target_url, event.context)} "
        f"for `{link(commit.html_url, short_sha(commit.sha))}` {verb}"
    )
    fields = []
    if event.branches:
        branch_names = ", ".join(branch.name for branch in event.branches)
        fields.append(AttachmentField(title="Branches", value=escape(branch_names), short=True))
    if event.description:
        fields.append(AttachmentField(title="Description", value=escape(event.description), short=True))
    if cfg.main_branch_name and any(b.name == cfg.main_branch_name for b in event.branches):
        fields.append(AttachmentField(title="Main branch", value=escape(cfg.main_branch_name), short=True))
    attachment = Attachment(
        fallback=text,
        mrkdwn_in=["text"],
        color=STATUS_COLORS[event.state],
        text=f"{escape(first_line(commit.commit.message))} - {escape(commit.commit.author.name)}",
        fields=fields or None,
    )
    return _message(channel, text, attachment)


# Link previews


def populate_pull_request(repo: Repository, pr: PullRequest) -> Attachment:
    state = "merged" if pr.merged else ("draft" if pr.draft and pr.state == "open" else pr.state)
    fields = [AttachmentField(title="State", value=state, short=True)]
    if pr.comments is not None:
        fields.append(AttachmentField(title="Comments", value=str(pr.comments), short=True))
    if pr.changed_files is not None:
        fields.append(AttachmentField(title="Files", value=str(pr.changed_files), short=True))
    if pr.additions is not None and pr.deletions is not None:
        fields.append(AttachmentField(title="Changes", value=f"+{pr.additions} -{pr.deletions}", short=True))
    return Attachment(
        fallback=f"#{pr.number} {pr.title}",
        mrkdwn_in=["text"],
        color=_issue_state_color(pr.state, pr.merged, pr.draft),
        author_name=pr.user.login,
        author_link=pr.user.html_url,
        title=f"#{pr.number} {pr.title}",
        title_link=pr.html_url,
        text=escape(pr.body) or None,
        fields=fields,
        footer=repo_link(repo),
    )


def populate_issue(repo: Repository, issue: Issue) -> Attachment:
    fields = [AttachmentField(title="State", value=issue.state, short=True)]
    if issue.labels:
        fields.append(
            AttachmentField(title="Labels", value=escape(", ".join(label.name for label in issue.labels)), short=True)
        )
    return Attachment(
        fallback=f"#{issue.number} {issue.title}",
        mrkdwn_in=["text"],
        color=_issue_state_color(issue.state),
        author_name=issue.user.login,
        author_link=issue.user.html_url,
        title=f"#{issue.number} {issue.title}",
        title_link=issue.html_url,
        text=escape(issue.body) or None,
        fields=fields,
        footer=repo_link(repo),
    )


def populate_commit(repo: Repository, commit: ApiCommit) -> Attachment:
    author = commit.commit.author
    title = first_line(commit.commit.message)
    fields = []
    if commit.stats is not None:
        fields.append(
            AttachmentField(title="Changes", value=f"+{commit.stats.additions} -{commit.stats.deletions}", short=True)
        )
    if commit.files:
        fields.append(AttachmentField(title="Files", value=str(len(commit.files)), short=True))
    return Attachment(
        fallback=f"{short_sha(commit.sha)} {title}",
        mrkdwn_in=["text"],
        color=COLOR_NEUTRAL,
        author_name=author.name or (commit.author.login if commit.author else None),
        author_link=commit.author.html_url if commit.author else None,
        title=f"{short_sha(commit.sha)} {title}",
        title_link=commit.html_url,
        text=escape(commit.commit.message) or None,
        fields=fields or None,
        footer=repo_link(repo),
    )


def populate_compare(repo: Repository, compare: Compare) -> Attachment:
    lines = [
        f"`{link(c.html_url, short_sha(c.sha))}` {escape(first_line(c.commit.message))}" for c in compare.commits[:10]
    ]
    if len(compare.commits) > 10:
        lines.append(f"and {len(compare.commits) - 10} more")
    noun = "commit" if compare.total_commits == 1 else "commits"
    return Attachment(
        fallback=f"{compare.total_commits} {noun}",
        mrkdwn_in=["text"],
        color=COLOR_NEUTRAL,
        title=f"Compare: {compare.total_commits} {noun}, {compare.status}",
        title_link=compare.html_url,
        text="\n".join(lines) or None,
        fields=[AttachmentField(title="Files", value=str(len(compare.files)), short=True)],
        footer=repo_link(repo),
    )
