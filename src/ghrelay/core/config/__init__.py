"""
Configuration package - unified access point.

This package provides all configuration classes and the global config instance.
"""

from ghrelay.core.config.secrets import RepoSecrets, Secrets, load_secrets
from ghrelay.core.config.settings import Config, config

__all__ = [
    "Config",
    "RepoSecrets",
    "Secrets",
    "config",
    "load_secrets",
]
