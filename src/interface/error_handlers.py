"""Translate service exceptions into structured JSON error responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.core.db_client import DatabaseError, RecordNotFoundError
from src.core.errors import ErrorCategory, classify_error, classify_error_with_response


logger = logging.getLogger(__name__)

_STATUS_BY_CATEGORY = {
    ErrorCategory.RECORD_NOT_FOUND: 404,
    ErrorCategory.PERMISSION_DENIED: 403,
    ErrorCategory.VALIDATION_FAILED: 422,
    ErrorCategory.RATE_LIMIT_EXCEEDED: 429,
    ErrorCategory.AUTHENTICATION_FAILED: 502,
    ErrorCategory.NETWORK_ERROR: 503,
    ErrorCategory.STORE_UNAVAILABLE: 503,
    ErrorCategory.INVALID_RECORD: 500,
}


def _collection_from_path(path: str) -> str | None:
    # /api/<collection>/... -> <collection>
    parts = [part for part in path.split("/") if part]
    return parts[1] if len(parts) > 1 and parts[0] == "api" else None


async def handle_service_error(request: Request, exc: Exception) -> JSONResponse:
    """Render any service-layer exception as an ErrorResponse body."""
    category = classify_error(exc)
    response = classify_error_with_response(exc, collection=_collection_from_path(request.url.path))
    status_code = _STATUS_BY_CATEGORY.get(category, 500)

    log_level = logging.WARNING if status_code < 500 else logging.ERROR
    logger.log(
        log_level,
        "request_failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_code": response.code,
            "error": str(exc),
            "status_code": status_code,
        },
    )
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


def register_error_handlers(app: FastAPI) -> None:
    """Attach the service error handler for every exception family services raise."""
    for exc_type in (RecordNotFoundError, PermissionError, ValueError, DatabaseError):
        app.add_exception_handler(exc_type, handle_service_error)
