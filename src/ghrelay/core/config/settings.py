"""
Main configuration class that composes all configs.
"""

import os

from dotenv import load_dotenv

from ghrelay.core.config.github_config import GitHubConfig
from ghrelay.core.config.logging_config import LoggingConfig
from ghrelay.core.config.repo_config import RepoConfig
from ghrelay.core.config.slack_config import SlackConfig

# Load environment variables from a .env file
load_dotenv()


class Config:
    """Main configuration class."""

    def __init__(self) -> None:
        self.github = GitHubConfig(
            api_base_url=os.getenv("GITHUB_API_BASE_URL", "https://api.github.com"),
        )

        self.slack = SlackConfig(
            api_base_url=os.getenv("SLACK_API_BASE_URL", "https://slack.com/api"),
        )

        self.repo_config = RepoConfig(
            config_filename=os.getenv("GHRELAY_CONFIG_FILENAME", ".ghrelay.yml"),
            secrets_path=os.getenv("GHRELAY_SECRETS_PATH", "secrets.yml"),
            state_path=os.getenv("GHRELAY_STATE_PATH") or None,
        )

        self.logging = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            format=os.getenv("LOG_FORMAT", "console"),
        )

        # Development settings
        self.environment = os.getenv("ENVIRONMENT", "development")

    def validate(self) -> bool:
        """Validate configuration."""
        errors = []

        if not self.repo_config.config_filename:
            errors.append("GHRELAY_CONFIG_FILENAME must not be empty")

        if not self.repo_config.secrets_path:
            errors.append("GHRELAY_SECRETS_PATH must not be empty")

        if self.logging.format not in ("console", "json"):
            errors.append("LOG_FORMAT must be 'console' or 'json'")

        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

        return True


# Global config instance
config = Config()
