from pathlib import Path

import structlog
from fastapi import FastAPI

from ghrelay import __version__
from ghrelay.core.config import config, load_secrets
from ghrelay.core.context import Context
from ghrelay.core.state import StateStore
from ghrelay.core.utils.logging import configure_logging
from ghrelay.integrations.github import GitHubClient
from ghrelay.integrations.slack import SlackClient
from ghrelay.rules.loaders import GitHubRuleLoader
from ghrelay.webhooks.dispatcher import WebhookDispatcher
from ghrelay.webhooks.handlers.link_shared import LinkSharedEventHandler
from ghrelay.webhooks.router import config_router
from ghrelay.webhooks.router import router as webhook_router

logger = structlog.get_logger(__name__)

# --- Application Setup ---

app = FastAPI(
    title="ghrelay",
    description="Routes GitHub notifications to Slack channels.",
    version=__version__,
)

# --- Include Routers ---

app.include_router(webhook_router, prefix="/webhooks", tags=["Webhooks"])
app.include_router(config_router, tags=["Debug"])

# --- Root Endpoint ---


@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the service is running."""
    return {"status": "ok", "message": "ghrelay is running."}


def build_context() -> Context:
    """Wire secrets, persisted state and the outbound clients together."""
    repo_config = config.repo_config
    secrets = load_secrets(repo_config.secrets_path)

    state = None
    if repo_config.state_path and Path(repo_config.state_path).exists():
        state = StateStore.load(repo_config.state_path)

    github = GitHubClient(token_provider=secrets.gh_token)
    slack = SlackClient(token=secrets.slack_access_token, base_url=config.slack.api_base_url)
    return Context(
        secrets=secrets,
        github=github,
        slack=slack,
        rule_loader=GitHubRuleLoader(github, repo_config.config_filename),
        state=state,
        config_filename=repo_config.config_filename,
        state_path=repo_config.state_path,
    )


# --- Application Lifecycle ---


@app.on_event("startup")
async def startup_event():
    """Application startup logic."""
    config.validate()
    configure_logging(config.logging.level, config.logging.format)

    ctx = build_context()
    dispatcher = WebhookDispatcher(ctx)
    dispatcher.register_handler("link_shared", LinkSharedEventHandler(ctx))

    app.state.ctx = ctx
    app.state.dispatcher = dispatcher
    logger.info("ghrelay_started", environment=config.environment, state_path=config.repo_config.state_path)


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown logic."""
    ctx: Context | None = getattr(app.state, "ctx", None)
    if ctx is None:
        return
    # Clients built by build_context own their HTTP sessions
    if isinstance(ctx.github, GitHubClient):
        await ctx.github.close()
    if isinstance(ctx.slack, SlackClient):
        await ctx.slack.close()
    logger.info("ghrelay_stopped")
