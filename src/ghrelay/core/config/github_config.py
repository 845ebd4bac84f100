"""
GitHub configuration.
"""

from dataclasses import dataclass


@dataclass
class GitHubConfig:
    """GitHub configuration."""

    api_base_url: str = "https://api.github.com"
    event_header: str = "x-github-event"
    signature_header: str = "x-hub-signature"
