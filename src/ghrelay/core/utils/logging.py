"""
Structured logging utilities.

Configures structlog on top of the stdlib logging sink and provides a
context manager for timing a unit of work.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """
    Route structlog through stdlib logging with a console or JSON renderer.

    Args:
        level: Minimum log level name (DEBUG, INFO, ...).
        fmt: "console" for human-readable output, "json" for one JSON object per line.
    """
    renderer: Any = structlog.processors.JSONRenderer() if fmt == "json" else structlog.dev.ConsoleRenderer()

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stdout,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def log_operation(
    operation: str,
    subject_ids: dict[str, str] | None = None,
    **context: Any,
) -> Any:  # AsyncGenerator[None, None]
    """
    Context manager for structured operation logging.

    Logs operation start, completion, and errors with timing information.

    Args:
        operation: Name of the operation being performed
        subject_ids: Dictionary of subject identifiers (e.g., {"repo": "https://github.com/owner/repo"})
        **context: Additional context to include in logs

    Example:
        async with log_operation("github_notification", repo=repo_url, github_event="push"):
            await process(...)
    """
    start_time = time.time()
    log_context = {
        "operation": operation,
        **(subject_ids or {}),
        **context,
    }

    logger.debug("operation_started", **log_context)

    try:
        yield
    except Exception as e:
        latency_ms = int((time.time() - start_time) * 1000)
        logger.error("operation_failed", error=str(e), latency_ms=latency_ms, **log_context)
        raise
    else:
        latency_ms = int((time.time() - start_time) * 1000)
        logger.info("operation_completed", latency_ms=latency_ms, **log_context)
