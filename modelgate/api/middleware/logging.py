"""
API Request Logging Middleware.

Every request gets a short id, echoed in ``X-Request-ID`` and bound to the
structlog context so gateway and cache logs for the request carry it.

Sandi Metz Principles:
- Single Responsibility: Request/response logging
- Non-intrusive: Only adds the request id header
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from modelgate.utils.logger import get_logger

logger = get_logger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]


@dataclass
class LoggingConfig:
    """Logging configuration."""

    enabled: bool = True
    log_headers: bool = False
    excluded_paths: List[str] = field(
        default_factory=lambda: ["/health", "/live", "/ready"]
    )
    slow_request_threshold_ms: float = 1000.0


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """FastAPI middleware for request/response logging."""

    def __init__(self, app, config: Optional[LoggingConfig] = None):
        super().__init__(app)
        self._config = config or LoggingConfig()

    def _should_log(self, path: str) -> bool:
        return self._config.enabled and path not in self._config.excluded_paths

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        """
        Process request with logging.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response with ``X-Request-ID`` set
        """
        request_id = uuid.uuid4().hex[:8]
        if self._should_log(request.url.path):
            response = await self._logged(request, call_next, request_id)
        else:
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    async def _logged(
        self, request: Request, call_next: CallNext, request_id: str
    ) -> Response:
        structlog.contextvars.bind_contextvars(request_id=request_id)
        started = time.perf_counter()
        try:
            logger.info("Request started", **self._describe(request))
            response = await call_next(request)
        except Exception as e:
            logger.error("Request failed", duration_ms=self._since(started), error=str(e))
            raise
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        self._log_completion(request_id, response.status_code, self._since(started))
        return response

    def _describe(self, request: Request) -> dict:
        data = {
            "method": request.method,
            "path": request.url.path,
            "query": str(request.query_params) if request.query_params else None,
            "client": request.client.host if request.client else "unknown",
        }
        if self._config.log_headers:
            data["headers"] = dict(request.headers)
        return data

    def _log_completion(self, request_id: str, status: int, duration_ms: float) -> None:
        fields = {"request_id": request_id, "status": status, "duration_ms": duration_ms}
        if status == 429:
            logger.info("Request rate limited", **fields)
        elif duration_ms > self._config.slow_request_threshold_ms:
            logger.warning("Slow request detected", **fields)
        else:
            logger.info("Request completed", **fields)

    @staticmethod
    def _since(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 2)


default_logging_config = LoggingConfig()
