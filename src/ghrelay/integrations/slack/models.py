"""
Slack Web API payloads and Events API envelopes.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class AttachmentField(BaseModel):
    title: str = ""
    value: str = ""
    short: bool = False


class Attachment(BaseModel):
    """Legacy message attachment, also the shape chat.unfurl expects."""

    fallback: str | None = None
    mrkdwn_in: list[str] | None = None
    color: str | None = None
    pretext: str | None = None
    author_name: str | None = None
    author_link: str | None = None
    author_icon: str | None = None
    title: str | None = None
    title_link: str | None = None
    text: str | None = None
    fields: list[AttachmentField] | None = None
    footer: str | None = None


class PostMessage(BaseModel):
    """chat.postMessage request. `channel` is a channel name or, for a DM, a user id."""

    channel: str
    text: str | None = None
    attachments: list[Attachment] | None = None
    unfurl_links: bool | None = False

    def to_request(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SlackUser(BaseModel):
    id: str
    name: str | None = None


class AuthTest(BaseModel):
    user_id: str
    user: str | None = None
    team_id: str | None = None
    bot_id: str | None = None


class SharedLink(BaseModel):
    url: str
    domain: str | None = None


class LinkSharedEvent(BaseModel):
    type: Literal["link_shared"] = "link_shared"
    channel: str
    user: str
    message_ts: str
    links: list[SharedLink] = Field(default_factory=list)


class UrlVerification(BaseModel):
    type: Literal["url_verification"]
    challenge: str


class EventCallback(BaseModel):
    type: Literal["event_callback"]
    team_id: str | None = None
    event: dict[str, Any]
