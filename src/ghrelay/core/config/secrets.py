"""
Secrets file: which repositories are served and the credentials for each.
"""

from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError

logger = structlog.get_logger(__name__)


class RepoSecrets(BaseModel):
    """Credentials and allow-lists for a single supported repository."""

    url: str = Field(..., description="Repository HTML URL, the primary key for config and state")
    gh_token: str | None = Field(None, description="Token used for GitHub API calls on this repository")
    gh_hook_secret: str | None = Field(None, description="Webhook secret; absent disables signature checks")
    allowed_pipelines: list[str] | None = Field(None, description="Status contexts allowed through; absent allows all")


class Secrets(BaseModel):
    """Process-wide secrets."""

    repos: list[RepoSecrets] = Field(default_factory=list)
    slack_access_token: str = ""
    slack_signing_secret: str | None = None

    def find_repo(self, repo_url: str) -> RepoSecrets | None:
        for repo in self.repos:
            if repo.url == repo_url:
                return repo
        return None

    def is_supported(self, repo_url: str) -> bool:
        return self.find_repo(repo_url) is not None

    def gh_hook_secret(self, repo_url: str) -> str | None:
        repo = self.find_repo(repo_url)
        return repo.gh_hook_secret if repo else None

    def gh_token(self, repo_url: str) -> str | None:
        repo = self.find_repo(repo_url)
        return repo.gh_token if repo else None


def load_secrets(path: str | Path) -> Secrets:
    """
    Read the secrets file. YAML is a superset of JSON, so both formats load.

    Raises:
        ValueError: If the file is missing or does not have the expected shape.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"unable to read secrets file {path}: {e}") from e

    try:
        data = yaml.safe_load(content) or {}
        secrets = Secrets.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise ValueError(f"invalid secrets file {path}: {e}") from e

    logger.info("secrets_loaded", path=str(path), repos=len(secrets.repos))
    return secrets
