"""
Domain error to HTTP response mapping.

Sandi Metz Principles:
- Single Responsibility: Error presentation
- Open/Closed: New kinds need only a status entry
"""

from typing import Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from modelgate.exceptions import AppError, ErrorKind, RateLimitExceededError
from modelgate.models.error import ErrorResponse
from modelgate.utils.logger import get_logger, log_error

logger = get_logger(__name__)

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INACTIVE: 409,
    ErrorKind.MODEL_UNAVAILABLE: 422,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.PROVIDER: 502,
    ErrorKind.CONFIGURATION: 500,
    ErrorKind.CACHE: 500,
    ErrorKind.INTERNAL: 500,
}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Render a domain error.

    Args:
        request: Request that failed
        exc: Domain error

    Returns:
        JSON error response with guidance
    """
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code >= 500:
        log_error(exc, "request", path=request.url.path)
    else:
        logger.info("Request rejected", path=request.url.path, kind=exc.kind.value)

    body = ErrorResponse.from_error(exc)
    headers = {}
    if isinstance(exc, RateLimitExceededError):
        headers["Retry-After"] = str(exc.retry_after_seconds)
        if exc.info is not None:
            headers["X-RateLimit-Limit"] = str(exc.info.limit)
            headers["X-RateLimit-Remaining"] = str(exc.info.remaining)

    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render an unexpected error without leaking internals."""
    log_error(exc, "unhandled", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse.internal_error().model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install error handlers on an application."""
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
