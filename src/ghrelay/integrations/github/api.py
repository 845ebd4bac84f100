import asyncio
import json
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote

import aiohttp
import structlog
from pydantic import BaseModel, ValidationError

from ghrelay.core.errors import GitHubAPIError
from ghrelay.integrations.github.models import ApiCommit, Compare, Issue, PullRequest, Repository
from ghrelay.rules.models import ReviewerRequest

logger = structlog.get_logger(__name__)

_TEMPLATE_RE = re.compile(r"\{([/+]?)(\w+)\}")
_ModelT = TypeVar("_ModelT", bound=BaseModel)


def expand_url(template: str, **params: Any) -> str:
    """
    Fill the URI templates GitHub embeds in repository payloads, e.g.
    `.../commits{/sha}` or `.../contents/{+path}`. Missing parameters expand
    to nothing.
    """

    def replace(match: re.Match[str]) -> str:
        operator, name = match.groups()
        value = params.get(name)
        if value is None:
            return ""
        value = str(value)
        if operator == "/":
            return "/" + quote(value, safe="")
        if operator == "+":
            return quote(value, safe="/")
        return quote(value, safe="/:~^")

    return _TEMPLATE_RE.sub(replace, template)


class GitHubApi(ABC):
    """GitHub capabilities the router depends on."""

    @abstractmethod
    async def get_config(self, repo: Repository, path: str) -> str:
        """Raw content of the file at `path` on the default branch."""

    @abstractmethod
    async def get_api_commit(self, repo: Repository, sha: str) -> ApiCommit:
        """Full commit including its changed files."""

    @abstractmethod
    async def get_pull_request(self, repo: Repository, number: int) -> PullRequest:
        pass

    @abstractmethod
    async def get_issue(self, repo: Repository, number: int) -> Issue:
        pass

    @abstractmethod
    async def get_compare(self, repo: Repository, base: str, head: str) -> Compare:
        pass

    @abstractmethod
    async def request_reviewers(self, repo: Repository, number: int, request: ReviewerRequest) -> None:
        pass


class GitHubClient(GitHubApi):
    """
    A client for the GitHub REST API.

    Each repository is accessed with the token configured for it in the
    secrets file; repositories without one are accessed anonymously.
    """

    def __init__(self, token_provider: Callable[[str], str | None]):
        self._token_provider = token_provider
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self):
        """Closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def _headers(self, repo: Repository, accept: str = "application/vnd.github.v3+json") -> dict[str, str]:
        headers = {"Accept": accept}
        token = self._token_provider(repo.url)
        if token:
            headers["Authorization"] = f"token {token}"
        return headers

    async def _get(self, repo: Repository, url: str, accept: str = "application/vnd.github.v3+json") -> Any:
        session = await self._get_session()
        try:
            async with session.get(url, headers=self._headers(repo, accept)) as response:
                if response.status != 200:
                    error_text = await response.text()
                    logger.error("github_request_failed", url=url, status=response.status, response=error_text)
                    raise GitHubAPIError(f"GET {url} failed with status {response.status}", status=response.status)
                if accept == "application/vnd.github.raw":
                    return await response.text()
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
            raise GitHubAPIError(f"GET {url} failed: {e!r}") from e

    async def _post(self, repo: Repository, url: str, data: dict[str, Any]) -> Any:
        session = await self._get_session()
        try:
            async with session.post(url, headers=self._headers(repo), json=data) as response:
                if response.status not in (200, 201):
                    error_text = await response.text()
                    logger.error("github_request_failed", url=url, status=response.status, response=error_text)
                    raise GitHubAPIError(f"POST {url} failed with status {response.status}", status=response.status)
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise GitHubAPIError(f"POST {url} failed: {e!r}") from e

    async def _get_model(self, repo: Repository, url: str, model: type[_ModelT]) -> _ModelT:
        data = await self._get(repo, url)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error("github_response_invalid", url=url, model=model.__name__, error=str(e))
            raise GitHubAPIError(f"GET {url} returned an unexpected {model.__name__} shape") from e

    async def get_config(self, repo: Repository, path: str) -> str:
        url = expand_url(repo.contents_url, path=path)
        try:
            content = await self._get(repo, url, accept="application/vnd.github.raw")
        except GitHubAPIError as e:
            if e.status == 404:
                raise GitHubAPIError(f"config file {path} not found in {repo.full_name}", status=404) from e
            raise
        logger.info("github_config_fetched", repo=repo.full_name, path=path)
        return content

    async def get_api_commit(self, repo: Repository, sha: str) -> ApiCommit:
        return await self._get_model(repo, expand_url(repo.commits_url, sha=sha), ApiCommit)

    async def get_pull_request(self, repo: Repository, number: int) -> PullRequest:
        return await self._get_model(repo, expand_url(repo.pulls_url, number=number), PullRequest)

    async def get_issue(self, repo: Repository, number: int) -> Issue:
        return await self._get_model(repo, expand_url(repo.issues_url, number=number), Issue)

    async def get_compare(self, repo: Repository, base: str, head: str) -> Compare:
        return await self._get_model(repo, expand_url(repo.compare_url, base=base, head=head), Compare)

    async def request_reviewers(self, repo: Repository, number: int, request: ReviewerRequest) -> None:
        url = expand_url(repo.pulls_url, number=number) + "/requested_reviewers"
        await self._post(repo, url, request.model_dump())
        logger.info(
            "github_reviewers_requested",
            repo=repo.full_name,
            number=number,
            reviewers=request.reviewers,
            team_reviewers=request.team_reviewers,
        )
