"""Logfire setup and the tracing/log helpers used by taskpulse services.

Modules log through ``logging.getLogger(__name__)``; once ``configure_logfire`` has run,
those records are forwarded to Logfire together with any ``extra`` fields. Service calls
such as classifying a user's tasks or computing completion statistics are wrapped in a
``span`` so each request shows which store reads it made.

Typical service code:
    logger = logging.getLogger(__name__)

    with span("analytics_service.get_completion_stats"):
        ...
        log_with_user_context(logger, "info", "Task completed", user_id=user_id, task_id=task_id)
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import settings


def configure_logfire() -> None:
    """Configure Logfire for the API process and the schema sync script.

    Nothing is sent unless ``LOGFIRE_TOKEN`` is set; standard-library records still reach
    the console through Logfire's handler.
    """
    logfire.configure(
        token=settings.logfire_token,
        service_name="taskpulse",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )
    logging.basicConfig(level=logging.INFO, handlers=[logfire.LogfireLoggingHandler()])
    logging.getLogger(__name__).info("Logfire configured", extra={"environment": settings.environment})


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every API request, including the X-User-Id-scoped task and analytics routes."""
    logfire.instrument_fastapi(app)
    logging.getLogger(__name__).info("FastAPI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Open a Logfire span named after the service function, e.g. ``"context_service.get_smart_contexts"``."""
    return logfire.span(name)


def log_with_user_context(
    logger: logging.Logger,
    level: str,
    message: str,
    user_id: str | None = None,
    **extra: object,
) -> None:
    """Log a task, category or workspace event tagged with the acting user.

    Args:
        logger: Module logger
        level: "debug", "info", "warning", "error" or "critical"
        message: Event description, e.g. "Task created"
        user_id: Owner of the affected records; omitted from the fields when empty
        **extra: Record ids and other fields, e.g. ``task_id`` or ``workspace_id``
    """
    fields = {"user_id": user_id, **extra} if user_id else extra
    getattr(logger, level.lower())(message, extra=fields)
