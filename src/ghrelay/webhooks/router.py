import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from ghrelay.core.errors import PayloadDecodeError, SignatureError, UnsupportedRepositoryError
from ghrelay.webhooks.dispatcher import WebhookDispatcher

logger = structlog.get_logger(__name__)
router = APIRouter()


# Dependency provider for the dispatcher instance built at startup.
# Tests override it with a dispatcher around in-memory fakes.
def get_dispatcher(request: Request) -> WebhookDispatcher:
    """Returns the shared WebhookDispatcher instance."""
    return request.app.state.dispatcher


@router.post("/github", summary="Endpoint for all GitHub webhooks")
async def github_webhook_endpoint(
    request: Request,
    dispatcher_instance: WebhookDispatcher = Depends(get_dispatcher),
):
    """
    Receives every GitHub webhook delivery.

    Failures other than authentication and unsupported repositories are
    logged and acknowledged, so GitHub never retries a delivery.
    """
    body = await request.body()
    try:
        await dispatcher_instance.process_github_notification(request.headers, body)
    except SignatureError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    except UnsupportedRepositoryError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    return {"status": "ok"}


@router.post("/slack/events", summary="Endpoint for Slack Events API callbacks", response_class=PlainTextResponse)
async def slack_events_endpoint(
    request: Request,
    dispatcher_instance: WebhookDispatcher = Depends(get_dispatcher),
):
    body = await request.body()
    try:
        outcome = await dispatcher_instance.process_slack_event(request.headers, body)
    except SignatureError as e:
        logger.error("slack_event_rejected", error=str(e))
        raise HTTPException(status_code=401, detail=str(e)) from e
    except PayloadDecodeError as e:
        logger.error("slack_event_malformed", error=str(e))
        raise HTTPException(status_code=400, detail=str(e)) from e
    return PlainTextResponse(outcome)


config_router = APIRouter()


@config_router.get("/config", summary="Cached rule configuration of a repository")
async def get_config_endpoint(
    repo_url: str,
    dispatcher_instance: WebhookDispatcher = Depends(get_dispatcher),
):
    cfg = dispatcher_instance.print_config(repo_url)
    if cfg is None:
        raise HTTPException(status_code=404, detail=f"repo_url not found: {repo_url}")
    return cfg
