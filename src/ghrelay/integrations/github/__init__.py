from ghrelay.integrations.github.api import GitHubApi, GitHubClient

__all__ = ["GitHubApi", "GitHubClient"]
