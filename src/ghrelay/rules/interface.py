from abc import ABC, abstractmethod

from ghrelay.integrations.github.models import Repository
from ghrelay.rules.models import RuleSet


class RuleLoader(ABC):
    """
    Abstract interface for fetching the routing configuration of a repository.

    This interface allows us to swap out different rule sources
    (GitHub files, local files in tests, etc.) without changing the application logic.
    """

    @abstractmethod
    async def get_rules(self, repo: Repository) -> RuleSet:
        """
        Fetch the rule set for a specific repository.

        Args:
            repo: The repository, as described by the webhook payload

        Returns:
            The complete RuleSet of the repository

        Raises:
            ConfigFetchError: If the rules cannot be fetched or parsed.
        """
        pass
