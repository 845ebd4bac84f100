from abc import ABC, abstractmethod
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from ghrelay.core.errors import SlackAPIError
from ghrelay.integrations.slack.models import Attachment, AuthTest, PostMessage, SlackUser

logger = structlog.get_logger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _is_transport_error(error: BaseException) -> bool:
    return isinstance(error.__cause__, httpx.TransportError)


def _parse_response(method: str, model: type[_ModelT], data: Any) -> _ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error("slack_response_invalid", method=method, error=str(e))
        raise SlackAPIError(f"{method} returned an unexpected response shape") from e


class SlackApi(ABC):
    """Slack capabilities the router depends on."""

    @abstractmethod
    async def send_notification(self, message: PostMessage) -> None:
        pass

    @abstractmethod
    async def lookup_user(self, email: str) -> SlackUser:
        """Slack user with the given email address."""

    @abstractmethod
    async def send_auth_test(self) -> AuthTest:
        """Identity of the bot token in use."""

    @abstractmethod
    async def send_chat_unfurl(self, channel: str, ts: str, unfurls: dict[str, Attachment]) -> None:
        """Attach previews to the links of a message, keyed by the original link."""


class SlackClient(SlackApi):
    """
    A client for the Slack Web API.

    Lookups retry on transport errors; messages are sent exactly once.
    """

    def __init__(self, token: str, base_url: str = "https://slack.com/api"):
        self.base_url = base_url.rstrip("/")
        self.headers = {"Authorization": f"Bearer {token}"}
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(headers=self.headers, timeout=10.0)
        return self._client

    async def close(self):
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def _call(self, method: str, *, json: dict[str, Any] | None = None, params: dict[str, str] | None = None):
        url = f"{self.base_url}/{method}"
        client = self._get_client()
        try:
            if json is not None:
                response = await client.post(url, json=json)
            else:
                response = await client.get(url, params=params)
        except httpx.TransportError as e:
            logger.error("slack_request_failed", method=method, error=str(e))
            raise SlackAPIError(f"{method} failed: {e}") from e
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("slack_request_failed", method=method, status_code=e.response.status_code)
            raise SlackAPIError(f"{method} failed with status {e.response.status_code}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise SlackAPIError(f"{method} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise SlackAPIError(f"{method} returned a non-object body")
        if not data.get("ok", False):
            error = data.get("error", "unknown_error")
            raise SlackAPIError(f"{method} failed: {error}")
        return data

    async def send_notification(self, message: PostMessage) -> None:
        await self._call("chat.postMessage", json=message.to_request())
        logger.info("slack_notification_sent", channel=message.channel)

    @retry(
        retry=retry_if_exception(_is_transport_error),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True,
    )
    async def lookup_user(self, email: str) -> SlackUser:
        data = await self._call("users.lookupByEmail", params={"email": email})
        return _parse_response("users.lookupByEmail", SlackUser, data.get("user"))

    @retry(
        retry=retry_if_exception(_is_transport_error),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True,
    )
    async def send_auth_test(self) -> AuthTest:
        data = await self._call("auth.test", json={})
        return _parse_response("auth.test", AuthTest, data)

    async def send_chat_unfurl(self, channel: str, ts: str, unfurls: dict[str, Attachment]) -> None:
        body = {
            "channel": channel,
            "ts": ts,
            "unfurls": {link: attachment.model_dump(exclude_none=True) for link, attachment in unfurls.items()},
        }
        await self._call("chat.unfurl", json=body)
        logger.info("slack_links_unfurled", channel=channel, ts=ts, links=len(unfurls))
