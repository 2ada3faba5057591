"""
Structured logging configuration.

structlog renders through the standard library so third-party loggers
(uvicorn, httpx, openai) share one format: JSON in production, colored
key-value lines in development.

Following Sandi Metz principles:
- Single Responsibility: Logging setup and configuration
- Small functions: Each setup step isolated
"""

import logging
import sys
from typing import Any, List

import structlog

_SHARED_PROCESSORS: List[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def setup_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON lines instead of console output
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, log_level.upper()))

    structlog.configure(
        processors=_SHARED_PROCESSORS
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)


def log_cache_hit(key: str, **kwargs: Any) -> None:
    """
    Log cache hit.

    Args:
        key: Cache key (fingerprint)
        **kwargs: Additional context
    """
    logger = get_logger("cache")
    logger.debug("cache_hit", key=key[:16], **kwargs)


def log_cache_miss(key: str, **kwargs: Any) -> None:
    """
    Log cache miss.

    Args:
        key: Cache key (fingerprint)
        **kwargs: Additional context
    """
    logger = get_logger("cache")
    logger.debug("cache_miss", key=key[:16], **kwargs)


def log_provider_call(provider: str, model: str, tokens: int, **kwargs: Any) -> None:
    """
    Log outbound provider call.

    Args:
        provider: Provider id
        model: Model id
        tokens: Total tokens reported by the provider
        **kwargs: Additional context
    """
    logger = get_logger("provider")
    logger.info("provider_call", provider=provider, model=model, tokens=tokens, **kwargs)


def log_error(error: Exception, context: str, **kwargs: Any) -> None:
    """
    Log error with context.

    Args:
        error: Exception that occurred
        context: Error context
        **kwargs: Additional context
    """
    logger = get_logger("error")
    logger.error(
        "error_occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context,
        **kwargs
    )
