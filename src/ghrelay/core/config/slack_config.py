"""
Slack configuration.
"""

from dataclasses import dataclass


@dataclass
class SlackConfig:
    """Slack configuration."""

    api_base_url: str = "https://slack.com/api"
    signature_header: str = "x-slack-signature"
    timestamp_header: str = "x-slack-request-timestamp"
