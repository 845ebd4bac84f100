from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from ghrelay.core.errors import PayloadDecodeError, SignatureError, UnsupportedRepositoryError
from ghrelay.webhooks.router import config_router, get_dispatcher, router

BODY = b'{"ref": "refs/heads/main"}'


@pytest.fixture
def mock_dispatcher() -> MagicMock:
    dispatcher = MagicMock()
    dispatcher.process_github_notification = AsyncMock(return_value=None)
    dispatcher.process_slack_event = AsyncMock(return_value="ok")
    dispatcher.print_config = MagicMock(return_value=None)
    return dispatcher


@pytest.fixture
def app(mock_dispatcher) -> FastAPI:
    """Create FastAPI test app with the webhook and config routers."""
    test_app = FastAPI()
    test_app.include_router(router, prefix="/webhooks")
    test_app.include_router(config_router)
    test_app.dependency_overrides[get_dispatcher] = lambda: mock_dispatcher
    return test_app


@pytest.fixture
def valid_headers() -> dict[str, str]:
    return {"X-GitHub-Event": "push", "X-Hub-Signature": "sha1=mock_signature", "Content-Type": "application/json"}


class TestGitHubWebhook:
    @pytest.mark.asyncio
    async def test_success(self, app, mock_dispatcher, valid_headers) -> None:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/webhooks/github", content=BODY, headers=valid_headers)

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        headers, body = mock_dispatcher.process_github_notification.call_args.args
        assert headers["x-github-event"] == "push"
        assert body == BODY

    @pytest.mark.asyncio
    async def test_signature_failure_is_401(self, app, mock_dispatcher, valid_headers) -> None:
        mock_dispatcher.process_github_notification.side_effect = SignatureError("signatures don't match")

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/webhooks/github", content=b"{}", headers=valid_headers)

        assert response.status_code == 401
        assert response.json()["detail"] == "signatures don't match"

    @pytest.mark.asyncio
    async def test_unsupported_repository_is_403(self, app, mock_dispatcher, valid_headers) -> None:
        mock_dispatcher.process_github_notification.side_effect = UnsupportedRepositoryError(
            "https://github.com/acme/unknown"
        )

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/webhooks/github", content=b"{}", headers=valid_headers)

        assert response.status_code == 403


class TestSlackEvents:
    @pytest.mark.asyncio
    async def test_outcome_is_plain_text(self, app, mock_dispatcher) -> None:
        mock_dispatcher.process_slack_event.return_value = "challenge-token"

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/webhooks/slack/events", content=b'{"type": "url_verification"}')

        assert response.status_code == 200
        assert response.text == "challenge-token"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_signature_failure_is_401(self, app, mock_dispatcher) -> None:
        mock_dispatcher.process_slack_event.side_effect = SignatureError("signatures don't match")

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/webhooks/slack/events", content=b"{}")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_malformed_body_is_400(self, app, mock_dispatcher) -> None:
        mock_dispatcher.process_slack_event.side_effect = PayloadDecodeError("bad json")

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/webhooks/slack/events", content=b"{")

        assert response.status_code == 400


class TestConfigEndpoint:
    @pytest.mark.asyncio
    async def test_not_cached_is_404(self, app) -> None:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/config", params={"repo_url": "https://github.com/acme/widgets"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_cached_config(self, app, mock_dispatcher) -> None:
        mock_dispatcher.print_config.return_value = {"main_branch_name": "main"}

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/config", params={"repo_url": "https://github.com/acme/widgets"})

        assert response.status_code == 200
        assert response.json() == {"main_branch_name": "main"}
        mock_dispatcher.print_config.assert_called_once_with("https://github.com/acme/widgets")
