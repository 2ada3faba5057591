"""
Backoff retries around chat dispatch.

Sandi Metz Principles:
- Single Responsibility: Decide whether and when to try again
- Dependency Injection: Configuration injected
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, Tuple, Type, TypeVar

from modelgate.exceptions import ProviderError
from modelgate.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Retry configuration."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    retry_on: Tuple[Type[BaseException], ...] = (ProviderError,)

    def delays(self) -> Iterator[float]:
        """Sleep before each retry, capped at max_delay."""
        for retry in range(max(self.max_attempts, 1) - 1):
            yield min(self.initial_delay * self.exponential_base**retry, self.max_delay)


class RetryHandler:
    """
    Exponential backoff retry handler.

    Only errors listed in ``retry_on`` are retried, so rate limit denials
    and catalog errors reach the caller on the first attempt. Every retry
    passes through the gateway again and spends rate budget.
    """

    def __init__(self, config: RetryConfig | None = None):
        self._config = config or RetryConfig()

    async def execute(self, func: Callable[[], Awaitable[T]]) -> T:
        """
        Call func until it succeeds or attempts run out.

        Args:
            func: Async callable making one attempt

        Returns:
            Result of the first successful attempt

        Raises:
            Exception: The last retryable error, or any other error at once
        """
        for attempt, delay in enumerate(self._config.delays(), start=1):
            try:
                return await func()
            except self._config.retry_on as e:
                logger.warning(
                    "Dispatch attempt failed", attempt=attempt, retry_in=delay, error=str(e)
                )
            await asyncio.sleep(delay)

        try:
            return await func()
        except self._config.retry_on as e:
            logger.error(
                "Dispatch failed after retries", attempts=self._config.max_attempts, error=str(e)
            )
            raise
