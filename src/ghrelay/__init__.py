"""GitHub to Slack notification routing service."""

__version__ = "0.1.0"
