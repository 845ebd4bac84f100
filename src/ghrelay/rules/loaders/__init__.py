from ghrelay.rules.loaders.github_loader import GitHubRuleLoader

__all__ = ["GitHubRuleLoader"]
