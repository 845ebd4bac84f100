from ghrelay.integrations.slack.api import SlackApi, SlackClient

__all__ = ["SlackApi", "SlackClient"]
