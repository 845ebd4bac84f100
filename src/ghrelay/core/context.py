"""
Shared collaborators for processing requests.

One Context is built at startup and handed to the dispatcher, processors and
handlers; tests build their own with in-memory fakes.
"""

from pathlib import Path

import structlog

from ghrelay.core.config import Secrets
from ghrelay.core.errors import ActionError, PersistenceError
from ghrelay.core.state import StateStore
from ghrelay.integrations.github.api import GitHubApi
from ghrelay.integrations.slack.api import SlackApi
from ghrelay.rules.interface import RuleLoader
from ghrelay.rules.models import RuleSet

logger = structlog.get_logger(__name__)


class Context:
    def __init__(
        self,
        secrets: Secrets,
        github: GitHubApi,
        slack: SlackApi,
        rule_loader: RuleLoader,
        state: StateStore | None = None,
        config_filename: str = ".ghrelay.yml",
        state_path: str | Path | None = None,
    ):
        self.secrets = secrets
        self.github = github
        self.slack = slack
        self.rule_loader = rule_loader
        self.state = state or StateStore()
        self.config_filename = config_filename
        self.state_path = state_path

    def find_repo_config(self, repo_url: str) -> RuleSet | None:
        repo_state = self.state.find_repo(repo_url)
        return repo_state.config if repo_state else None

    def get_repo_config(self, repo_url: str) -> RuleSet:
        cfg = self.find_repo_config(repo_url)
        if cfg is None:
            raise ActionError(f"no config cached for {repo_url}")
        return cfg

    def set_repo_config(self, repo_url: str, cfg: RuleSet) -> None:
        self.state.find_or_add_repo(repo_url).config = cfg

    def is_pipeline_allowed(self, repo_url: str, pipeline: str) -> bool:
        repo = self.secrets.find_repo(repo_url)
        if repo is None:
            return False
        return repo.allowed_pipelines is None or pipeline in repo.allowed_pipelines

    async def save_state(self) -> None:
        """Persist the state snapshot. Failures are logged and never raised."""
        if self.state_path is None:
            return
        try:
            await self.state.save(self.state_path)
        except PersistenceError as e:
            logger.error("state_save_failed", path=str(self.state_path), error=str(e))
