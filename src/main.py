"""taskpulse - Smart contexts and productivity analytics for personal task lists."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core.config import constants, settings
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.error_handlers import register_error_handlers
from src.interface.insights_router import router as insights_router
from src.interface.tasks_router import router as tasks_router
from src.interface.workspace_router import router as workspace_router


logger = logging.getLogger(__name__)


async def check_pocketbase_connectivity() -> None:
    """Verify the task store is reachable.

    Raises:
        ConnectionError: If unable to connect to PocketBase
    """
    try:
        async with httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS) as client:
            response = await client.get(f"{settings.pocketbase_url}/api/health")
            if response.is_success:
                logger.info("startup_validation", extra={"service": "pocketbase", "status": "ok"})
            else:
                raise ConnectionError(f"PocketBase returned status {response.status_code}")
    except httpx.HTTPError as e:
        logger.error("startup_validation", extra={"service": "pocketbase", "status": "failed", "error": str(e)})
        raise ConnectionError(f"PocketBase connectivity check failed: {e}") from e


async def validate_startup_configuration() -> None:
    """Validate required credentials and store connectivity, exiting on failure."""
    logger.info("startup_validation_begin")

    try:
        settings.require_credential("pocketbase_admin_email", "PocketBase admin email")
        settings.require_credential("pocketbase_admin_password", "PocketBase admin password")
        logger.info("startup_validation", extra={"stage": "credentials", "status": "ok"})

        await check_pocketbase_connectivity()

        logger.info("startup_validation_complete", extra={"status": "ok"})

    except (ValueError, ConnectionError) as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\n❌ Startup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Configure logging first so validation logs are captured
    configure_logfire()
    await validate_startup_configuration()
    yield


app = FastAPI(
    title="taskpulse",
    description="Smart contexts and productivity analytics for personal task lists",
    version="0.1.0",
    lifespan=lifespan,
)

instrument_fastapi(app)
register_error_handlers(app)

app.include_router(tasks_router)
app.include_router(workspace_router)
app.include_router(insights_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
