"""
GitHub entities shared by webhook payloads and REST API responses.

Only the fields the router reads are modelled; everything else GitHub sends
is ignored by pydantic.
"""

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ghrelay.core.config import config


def api_base_of_html_url(html_url: str, full_name: str) -> str:
    """
    Derive the REST API base of a repository from its HTML URL.

    github.com repositories live under api.github.com; self-hosted (Enterprise)
    instances serve the API from `<base>/api/v3` where base keeps any path
    prefix in front of the owner/name segments.
    """
    parts = urlsplit(html_url)
    host = parts.netloc
    if host.endswith("github.com"):
        return f"{config.github.api_base_url}/repos/{full_name}"
    path = parts.path.rstrip("/")
    suffix = f"/{full_name}"
    prefix = path[: -len(suffix)] if path.endswith(suffix) else ""
    scheme = parts.scheme or "https"
    return f"{scheme}://{host}{prefix}/api/v3/repos/{full_name}"


class User(BaseModel):
    """GitHub Actor (User or Bot)."""

    login: str
    html_url: str | None = None


class Team(BaseModel):
    slug: str
    name: str | None = None


class Label(BaseModel):
    name: str


class Repository(BaseModel):
    """
    Repository metadata. `url` is the HTML URL and serves as the primary key
    for secrets, rule configuration and runtime state.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    full_name: str
    url: str = Field(alias="html_url")
    commits_url: str = ""
    contents_url: str = ""
    pulls_url: str = ""
    issues_url: str = ""
    compare_url: str = ""

    @model_validator(mode="after")
    def _fill_api_urls(self) -> "Repository":
        api_base = api_base_of_html_url(self.url, self.full_name)
        self.commits_url = self.commits_url or f"{api_base}/commits{{/sha}}"
        self.contents_url = self.contents_url or f"{api_base}/contents/{{+path}}"
        self.pulls_url = self.pulls_url or f"{api_base}/pulls{{/number}}"
        self.issues_url = self.issues_url or f"{api_base}/issues{{/number}}"
        self.compare_url = self.compare_url or f"{api_base}/compare/{{base}}...{{head}}"
        return self


class CommitAuthor(BaseModel):
    name: str = ""
    email: str = ""
    username: str | None = None
    date: str | None = None


class GitCommit(BaseModel):
    """The git-level part of an API commit (message and author identity)."""

    message: str = ""
    author: CommitAuthor = Field(default_factory=CommitAuthor)


class CommitFile(BaseModel):
    filename: str
    status: str = "modified"
    additions: int = 0
    deletions: int = 0
    changes: int = 0


class CommitStats(BaseModel):
    total: int = 0
    additions: int = 0
    deletions: int = 0


class ApiCommit(BaseModel):
    """A commit as returned by GET /repos/{owner}/{repo}/commits/{sha}."""

    sha: str
    html_url: str = ""
    commit: GitCommit = Field(default_factory=GitCommit)
    author: User | None = None
    files: list[CommitFile] = Field(default_factory=list)
    stats: CommitStats | None = None


class Compare(BaseModel):
    """Result of GET /repos/{owner}/{repo}/compare/{base}...{head}."""

    html_url: str = ""
    status: str = ""
    ahead_by: int = 0
    behind_by: int = 0
    total_commits: int = 0
    commits: list[ApiCommit] = Field(default_factory=list)
    files: list[CommitFile] = Field(default_factory=list)


class GitRef(BaseModel):
    ref: str
    label: str | None = None
    sha: str | None = None


class PullRequest(BaseModel):
    number: int
    title: str
    body: str | None = None
    html_url: str = ""
    state: str = "open"
    draft: bool = False
    merged: bool | None = None
    user: User
    labels: list[Label] = Field(default_factory=list)
    requested_reviewers: list[User] = Field(default_factory=list)
    requested_teams: list[Team] = Field(default_factory=list)
    head: GitRef | None = None
    base: GitRef | None = None
    comments: int | None = None
    commits: int | None = None
    additions: int | None = None
    deletions: int | None = None
    changed_files: int | None = None


class Issue(BaseModel):
    number: int
    title: str
    body: str | None = None
    html_url: str = ""
    state: str = "open"
    user: User
    labels: list[Label] = Field(default_factory=list)
    comments: int | None = None
    # Present when the issue is actually a pull request
    pull_request: dict | None = None
