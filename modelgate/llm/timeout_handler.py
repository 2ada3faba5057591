"""
Deadline for outbound provider calls.

Sandi Metz Principles:
- Single Responsibility: Bound how long an outbound call may take
- Small methods: Each method < 10 lines
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from modelgate.exceptions import ProviderError
from modelgate.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class TimeoutConfig:
    """Default deadline for one kind of call."""

    def __init__(self, timeout_seconds: float = 30.0):
        """
        Args:
            timeout_seconds: Deadline in seconds, must be positive
        """
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.timeout_seconds = timeout_seconds


class TimeoutHandler:
    """Runs provider calls under a deadline; an overrun is a ProviderError."""

    def __init__(self, config: Optional[TimeoutConfig] = None):
        self._config = config or TimeoutConfig()

    @property
    def timeout_seconds(self) -> float:
        return self._config.timeout_seconds

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        timeout_seconds: Optional[float] = None,
        provider_id: Optional[str] = None,
    ) -> T:
        """
        Await an operation, cancelling it at the deadline.

        Args:
            operation: Async callable starting the call
            timeout_seconds: Per-call deadline (configured default if None)
            provider_id: Provider named in the timeout error

        Returns:
            Operation result

        Raises:
            ProviderError: If the deadline passes first
        """
        deadline = self._config.timeout_seconds if timeout_seconds is None else timeout_seconds
        try:
            return await asyncio.wait_for(operation(), timeout=deadline)
        except asyncio.TimeoutError as e:
            target = f"Provider '{provider_id}'" if provider_id else "Request"
            logger.warning("Provider call timed out", provider=provider_id, timeout=deadline)
            raise ProviderError(f"{target} timed out after {deadline} seconds") from e
