"""
Recognise GitHub URLs pasted into Slack.

Supported shapes, on github.com or any self-hosted base (the host plus any
leading path segments):

    /<owner>/<repo>/pull/<n>
    /<owner>/<repo>/issues/<n>
    /<owner>/<repo>/commit/<sha>
    /<owner>/<repo>/pull/<n>/commits/<sha>
    /<owner>/<repo>/compare/<base>...<head>
    /<owner>/<repo>/pull/<n>/files/<base>...<head>
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from ghrelay.integrations.github.models import Repository

# Both patterns are searched, not anchored: "abc1234.patch" still names commit abc1234
COMMIT_SHA_RE = re.compile(r"[a-f0-9]{4,40}")
_COMPARER = r"([a-zA-Z0-9/:\-_.~\^]+)"
COMPARE_BASEHEAD_RE = re.compile(rf"{_COMPARER}\.{{3}}{_COMPARER}")


@dataclass(frozen=True)
class PullRequestLink:
    repo: Repository
    number: int


@dataclass(frozen=True)
class IssueLink:
    repo: Repository
    number: int


@dataclass(frozen=True)
class CommitLink:
    repo: Repository
    sha: str


@dataclass(frozen=True)
class CompareLink:
    repo: Repository
    base: str
    head: str


GitHubLink = PullRequestLink | IssueLink | CommitLink | CompareLink


class _NotALink(Exception):
    """A path had a supported shape but invalid contents."""


def _make_repo(scheme: str, prefix: list[str], owner: str, name: str) -> Repository:
    base = "/".join(prefix)
    if base.endswith("github.com"):
        html_url = f"https://github.com/{owner}/{name}"
    else:
        html_url = f"{scheme or 'https'}://{base}/{owner}/{name}"
    return Repository(name=name, full_name=f"{owner}/{name}", html_url=html_url)


def _parse_number(value: str) -> int:
    if not value.isdigit():
        raise _NotALink(value)
    return int(value)


def _extract(scheme: str, prefix: list[str], path: list[str]) -> GitHubLink | None:
    if len(path) < 3:
        return None
    owner, name, kind, *rest = path

    if kind == "pull" and len(rest) == 1:
        return PullRequestLink(_make_repo(scheme, prefix, owner, name), _parse_number(rest[0]))
    if kind == "issues" and len(rest) == 1:
        return IssueLink(_make_repo(scheme, prefix, owner, name), _parse_number(rest[0]))

    sha = None
    if kind == "commit" and len(rest) == 1:
        sha = rest[0]
    elif kind == "pull" and len(rest) == 3 and rest[1] == "commits":
        sha = rest[2]
    if sha is not None:
        sha_match = COMMIT_SHA_RE.search(sha)
        if sha_match is None:
            raise _NotALink(sha)
        return CommitLink(_make_repo(scheme, prefix, owner, name), sha_match.group(0))

    basehead = None
    if kind == "compare":
        basehead = "/".join(rest)
    elif kind == "pull" and len(rest) >= 2 and rest[1] == "files":
        basehead = "/".join(rest[2:])
    if basehead is not None:
        match = COMPARE_BASEHEAD_RE.search(basehead)
        if match is None:
            raise _NotALink(basehead)
        base, head = match.groups()
        return CompareLink(_make_repo(scheme, prefix, owner, name), base, head)

    return None


def parse_github_link(url: str) -> GitHubLink | None:
    """
    Parse a URL into a supported GitHub link, or None. Leading path segments
    that do not fit a known shape are treated as part of a self-hosted base.
    """
    parts = urlsplit(url)
    if not parts.netloc or not parts.path.startswith("/"):
        return None

    path = parts.path[1:]
    if path.endswith("/"):
        path = path[:-1]
    segments = [unquote(segment) for segment in path.split("/")]

    prefix = [parts.netloc]
    try:
        while segments:
            link = _extract(parts.scheme, prefix, segments)
            if link is not None:
                return link
            prefix.append(segments.pop(0))
    except _NotALink:
        # Users can paste anything; a malformed link is simply not unfurled
        return None
    return None
