"""
Pytest configuration: puts `src` on sys.path and provides in-memory fakes of
the GitHub and Slack APIs plus webhook payload builders.
"""

import asyncio
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from ghrelay.core.config import RepoSecrets, Secrets  # noqa: E402
from ghrelay.core.context import Context  # noqa: E402
from ghrelay.core.errors import GitHubAPIError, SlackAPIError  # noqa: E402
from ghrelay.integrations.github.api import GitHubApi, GitHubClient  # noqa: E402
from ghrelay.integrations.github.models import ApiCommit, Compare, Issue, PullRequest, Repository  # noqa: E402
from ghrelay.integrations.slack.api import SlackApi  # noqa: E402
from ghrelay.integrations.slack.models import Attachment, AuthTest, PostMessage, SlackUser  # noqa: E402
from ghrelay.rules.loaders import GitHubRuleLoader  # noqa: E402
from ghrelay.rules.models import ReviewerRequest  # noqa: E402

REPO_URL = "https://github.com/acme/widgets"
CONFIG_FILENAME = ".ghrelay.yml"

DEFAULT_RULES = """
main_branch_name: main
prefix_rules:
  default_channel: general
  rules:
    - allow: [backend/]
      channel: backend
    - allow: [frontend/]
      ignore: [frontend/vendor/]
      channel: frontend
label_rules:
  default_channel: general
  rules:
    - allow: [bug]
      channel: bugs
status_rules:
  rules:
    - pipeline: "ci/*"
      policy: allow_once
    - pipeline: nightly
      policy: ignore
ignored_users: [dependabot]
"""


class FakeGitHub(GitHubApi):
    """In-memory GitHub keyed by repository URL and commit sha."""

    def __init__(self):
        self.configs: dict[str, str] = {}
        self.commits: dict[str, ApiCommit] = {}
        self.pull_requests: dict[int, PullRequest] = {}
        self.issues: dict[int, Issue] = {}
        self.compares: dict[tuple[str, str], Compare] = {}
        self.config_fetches: list[str] = []
        self.reviewer_requests: list[tuple[int, ReviewerRequest]] = []

    async def get_config(self, repo: Repository, path: str) -> str:
        self.config_fetches.append(repo.url)
        if repo.url not in self.configs:
            raise GitHubAPIError(f"config file {path} not found in {repo.full_name}", status=404)
        return self.configs[repo.url]

    async def get_api_commit(self, repo: Repository, sha: str) -> ApiCommit:
        if sha not in self.commits:
            raise GitHubAPIError(f"commit {sha} not found", status=404)
        return self.commits[sha]

    async def get_pull_request(self, repo: Repository, number: int) -> PullRequest:
        if number not in self.pull_requests:
            raise GitHubAPIError(f"pull request {number} not found", status=404)
        return self.pull_requests[number]

    async def get_issue(self, repo: Repository, number: int) -> Issue:
        if number not in self.issues:
            raise GitHubAPIError(f"issue {number} not found", status=404)
        return self.issues[number]

    async def get_compare(self, repo: Repository, base: str, head: str) -> Compare:
        if (base, head) not in self.compares:
            raise GitHubAPIError(f"compare {base}...{head} not found", status=404)
        return self.compares[(base, head)]

    async def request_reviewers(self, repo: Repository, number: int, request: ReviewerRequest) -> None:
        self.reviewer_requests.append((number, request))


class FakeSlack(SlackApi):
    """Records everything sent; users are looked up by email from `users`."""

    def __init__(self):
        self.sent: list[PostMessage] = []
        self.users: dict[str, str] = {}
        self.bot_user_id: str | None = "UBOT"
        self.auth_test_calls = 0
        self.unfurls: list[tuple[str, str, dict[str, Attachment]]] = []
        self.fail_sends = False
        self.fail_unfurl = False

    async def send_notification(self, message: PostMessage) -> None:
        if self.fail_sends:
            raise SlackAPIError("chat.postMessage failed: channel_not_found")
        self.sent.append(message)

    async def lookup_user(self, email: str) -> SlackUser:
        if email not in self.users:
            raise SlackAPIError("users.lookupByEmail failed: users_not_found")
        return SlackUser(id=self.users[email])

    async def send_auth_test(self) -> AuthTest:
        self.auth_test_calls += 1
        if self.bot_user_id is None:
            raise SlackAPIError("auth.test failed: invalid_auth")
        return AuthTest(user_id=self.bot_user_id)

    async def send_chat_unfurl(self, channel: str, ts: str, unfurls: dict[str, Attachment]) -> None:
        if self.fail_unfurl:
            raise SlackAPIError("chat.unfurl failed: cannot_unfurl_url")
        self.unfurls.append((channel, ts, unfurls))

    @property
    def channels(self) -> list[str]:
        return [message.channel for message in self.sent]


@pytest.fixture
def fake_github() -> FakeGitHub:
    github = FakeGitHub()
    github.configs[REPO_URL] = DEFAULT_RULES
    return github


@pytest.fixture
def fake_slack() -> FakeSlack:
    return FakeSlack()


@pytest.fixture
def timing_out_github() -> GitHubClient:
    """A real GitHubClient whose session times out on every request."""
    session = MagicMock()
    session.closed = False
    session.get.side_effect = asyncio.TimeoutError()
    session.post.side_effect = asyncio.TimeoutError()
    client = GitHubClient(token_provider=lambda url: None)
    client._session = session
    return client


@pytest.fixture
def secrets() -> Secrets:
    return Secrets(repos=[RepoSecrets(url=REPO_URL)], slack_access_token="xoxb-test")


@pytest.fixture
def ctx(secrets: Secrets, fake_github: FakeGitHub, fake_slack: FakeSlack) -> Context:
    return Context(
        secrets=secrets,
        github=fake_github,
        slack=fake_slack,
        rule_loader=GitHubRuleLoader(fake_github, CONFIG_FILENAME),
        config_filename=CONFIG_FILENAME,
    )


@pytest.fixture
def repository_payload() -> dict[str, object]:
    return {"name": "widgets", "full_name": "acme/widgets", "html_url": REPO_URL}


@pytest.fixture
def make_push_payload(repository_payload):
    """Build a push payload; each commit is a dict with at least `id` and `modified`."""

    def _make(commits: list[dict[str, object]], ref: str = "refs/heads/main") -> dict[str, object]:
        full_commits = [
            {
                "id": commit["id"],
                "distinct": commit.get("distinct", True),
                "message": commit.get("message", f"commit {commit['id']}"),
                "url": f"{REPO_URL}/commit/{commit['id']}",
                "author": {"name": "Octo Cat", "email": "octocat@example.com"},
                "added": commit.get("added", []),
                "removed": commit.get("removed", []),
                "modified": commit.get("modified", []),
            }
            for commit in commits
        ]
        return {
            "ref": ref,
            "before": "0" * 40,
            "after": full_commits[-1]["id"] if full_commits else "0" * 40,
            "compare": f"{REPO_URL}/compare/abc...def",
            "commits": full_commits,
            "head_commit": full_commits[-1] if full_commits else None,
            "repository": repository_payload,
            "sender": {"login": "octocat"},
        }

    return _make


@pytest.fixture
def make_status_payload(repository_payload):
    def _make(
        state: str = "success",
        context: str = "ci/build",
        branches: list[str] | None = None,
        sha: str = "a1b2c3d4e5f6",
    ) -> dict[str, object]:
        return {
            "sha": sha,
            "context": context,
            "state": state,
            "description": "Build finished",
            "target_url": "https://ci.example.com/builds/1",
            "commit": {
                "sha": sha,
                "html_url": f"{REPO_URL}/commit/{sha}",
                "commit": {
                    "message": "Fix the widget\n\nDetails",
                    "author": {"name": "Octo Cat", "email": "octocat@example.com"},
                },
            },
            "branches": [{"name": name} for name in (branches if branches is not None else ["main"])],
            "repository": repository_payload,
            "sender": {"login": "ci-bot"},
        }

    return _make


@pytest.fixture
def make_pull_request_payload(repository_payload):
    def _make(
        action: str = "opened",
        labels: list[str] | None = None,
        draft: bool = False,
        state: str = "open",
        sender: str = "octocat",
    ) -> dict[str, object]:
        return {
            "action": action,
            "number": 42,
            "pull_request": {
                "number": 42,
                "title": "Add widget sprocket",
                "body": "Adds the sprocket.",
                "html_url": f"{REPO_URL}/pull/42",
                "state": state,
                "draft": draft,
                "merged": False,
                "user": {"login": "octocat"},
                "labels": [{"name": name} for name in labels or []],
                "requested_reviewers": [],
                "requested_teams": [],
            },
            "repository": repository_payload,
            "sender": {"login": sender},
        }

    return _make
