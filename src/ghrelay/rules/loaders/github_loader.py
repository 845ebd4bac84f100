"""
GitHub-based rule loader.

Loads the routing configuration from a file on the default branch of the
repository, implementing the RuleLoader interface.
"""

import structlog
import yaml
from pydantic import ValidationError

from ghrelay.core.errors import ConfigFetchError, GitHubAPIError
from ghrelay.integrations.github.api import GitHubApi
from ghrelay.integrations.github.models import Repository
from ghrelay.rules.interface import RuleLoader
from ghrelay.rules.models import RuleSet

logger = structlog.get_logger(__name__)


class GitHubRuleLoader(RuleLoader):
    """
    Loads rules from a repository's rule file. The file may be YAML or JSON;
    an empty file yields an empty RuleSet.
    """

    def __init__(self, client: GitHubApi, config_filename: str):
        self.github_client = client
        self.config_filename = config_filename

    async def get_rules(self, repo: Repository) -> RuleSet:
        logger.info("rules_fetch_started", repo=repo.url, path=self.config_filename)
        try:
            content = await self.github_client.get_config(repo, self.config_filename)
        except GitHubAPIError as e:
            raise ConfigFetchError(f"unable to fetch {self.config_filename} for {repo.url}: {e}") from e

        try:
            data = yaml.safe_load(content) or {}
            rules = RuleSet.model_validate(data)
        except (yaml.YAMLError, ValidationError) as e:
            raise ConfigFetchError(f"invalid {self.config_filename} in {repo.url}: {e}") from e

        logger.info(
            "rules_loaded",
            repo=repo.url,
            prefix_rules=len(rules.prefix_rules.rules),
            label_rules=len(rules.label_rules.rules),
            status_rules=len(rules.status_rules.rules),
        )
        return rules
