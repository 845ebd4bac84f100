"""
Repository configuration.
"""

from dataclasses import dataclass


@dataclass
class RepoConfig:
    """Where per-repository rules live and where runtime state is persisted."""

    config_filename: str = ".ghrelay.yml"
    secrets_path: str = "secrets.yml"
    state_path: str | None = None
