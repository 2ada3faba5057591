"""
Rate limiting for LLM providers.

Sandi Metz Principles:
- Single Responsibility: Manage per-provider request windows
- Small methods: Each method < 10 lines
- Dependency Injection: Policies and clock injected
"""

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Mapping, Optional

from modelgate.exceptions import ConfigurationError
from modelgate.models.provider import RateLimitPolicy
from modelgate.models.ratelimit import RateLimitInfo
from modelgate.utils.clock import Clock, system_clock, to_datetime
from modelgate.utils.logger import get_logger

logger = get_logger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


@dataclass
class RateWindow:
    """Request timestamps for one provider, oldest first."""

    policy: RateLimitPolicy
    requests: Deque[float] = field(default_factory=deque)
    daily: Deque[float] = field(default_factory=deque)


class RateLimiter:
    """
    Sliding-window rate limiter keyed by provider id.

    Admission is a binary decision; waiting or retrying is left to the caller.
    """

    def __init__(
        self,
        policies: Optional[Mapping[str, RateLimitPolicy]] = None,
        clock: Clock = system_clock,
    ):
        """
        Initialize rate limiter.

        Args:
            policies: Rate limit policy per provider id
            clock: Epoch-millisecond clock
        """
        self._clock = clock
        self._windows: Dict[str, RateWindow] = {}
        for provider_id, policy in (policies or {}).items():
            self.register(provider_id, policy)

    def register(self, provider_id: str, policy: RateLimitPolicy) -> None:
        """
        Set the policy for a provider, keeping its request history.

        Args:
            provider_id: Provider id
            policy: Rate limit policy
        """
        window = self._windows.get(provider_id)
        if window is None:
            self._windows[provider_id] = RateWindow(policy=policy)
        else:
            window.policy = policy
        logger.debug(
            "Rate limit registered",
            provider=provider_id,
            max_requests=policy.max_requests,
            window_ms=policy.window_ms,
        )

    def update_limits(self, policies: Mapping[str, RateLimitPolicy]) -> None:
        """Apply several policies at once."""
        for provider_id, policy in policies.items():
            self.register(provider_id, policy)

    def admit(self, provider_id: str) -> bool:
        """
        Admit and record a request if the window has room.

        Args:
            provider_id: Provider id

        Returns:
            True if the request was recorded, False if denied

        Raises:
            ConfigurationError: If provider has no policy
        """
        window = self._current_window(provider_id)
        if not self._has_capacity(window):
            logger.info("Rate limit reached", provider=provider_id)
            return False

        now = self._clock()
        window.requests.append(now)
        if window.policy.requests_per_day is not None:
            window.daily.append(now)
        return True

    def check(self, provider_id: str) -> bool:
        """
        Dry-run of admit; never records.

        Args:
            provider_id: Provider id

        Returns:
            True if a request would be admitted now
        """
        return self._has_capacity(self._current_window(provider_id))

    def info(self, provider_id: str) -> RateLimitInfo:
        """
        Describe the provider's current window.

        Args:
            provider_id: Provider id

        Returns:
            Rate limit info
        """
        window = self._current_window(provider_id)
        policy = window.policy
        count = len(window.requests)
        reset_in_ms = self._time_until_reset(window)

        return RateLimitInfo(
            provider_id=provider_id,
            limit=policy.max_requests,
            remaining=max(0, policy.max_requests - count),
            current_count=count,
            window_ms=policy.window_ms,
            reset_in_ms=reset_in_ms,
            reset_time=to_datetime(self._clock() + reset_in_ms),
            requests_per_day=policy.requests_per_day,
            daily_count=len(window.daily),
        )

    def time_until_reset(self, provider_id: str) -> int:
        """
        Milliseconds until another request would be admitted.

        Under the limit the window start advances continuously, so this is 0.
        At the limit it is the time until the oldest counted request leaves
        its window.

        Args:
            provider_id: Provider id

        Returns:
            Duration in milliseconds
        """
        return self._time_until_reset(self._current_window(provider_id))

    def policy(self, provider_id: str) -> RateLimitPolicy:
        return self._get_window(provider_id).policy

    def has_provider(self, provider_id: str) -> bool:
        return provider_id in self._windows

    def list_providers(self) -> List[str]:
        return list(self._windows.keys())

    def reset(self, provider_id: str) -> None:
        """Forget a provider's request history."""
        window = self._get_window(provider_id)
        window.requests.clear()
        window.daily.clear()

    def clear_history(self) -> None:
        """Forget every provider's request history."""
        for window in self._windows.values():
            window.requests.clear()
            window.daily.clear()

    def _get_window(self, provider_id: str) -> RateWindow:
        window = self._windows.get(provider_id)
        if window is None:
            raise ConfigurationError(f"No rate limit policy for provider '{provider_id}'")
        return window

    def _current_window(self, provider_id: str) -> RateWindow:
        """Get window with timestamps outside it trimmed."""
        window = self._get_window(provider_id)
        now = self._clock()
        self._trim(window.requests, now - window.policy.window_ms)
        self._trim(window.daily, now - DAY_MS)
        return window

    @staticmethod
    def _trim(timestamps: Deque[float], window_start: float) -> None:
        """Drop timestamps at or before window start (prefix trim)."""
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

    @staticmethod
    def _has_capacity(window: RateWindow) -> bool:
        policy = window.policy
        if len(window.requests) >= policy.max_requests:
            return False
        if policy.requests_per_day is not None:
            return len(window.daily) < policy.requests_per_day
        return True

    def _time_until_reset(self, window: RateWindow) -> int:
        """Compute reset delay for an already trimmed window."""
        if self._has_capacity(window):
            return 0

        now = self._clock()
        policy = window.policy
        waits = []
        if len(window.requests) >= policy.max_requests:
            waits.append(self._oldest_exit(window.requests, policy.window_ms, now))
        if policy.requests_per_day is not None and len(window.daily) >= policy.requests_per_day:
            waits.append(self._oldest_exit(window.daily, DAY_MS, now))
        return max(waits)

    @staticmethod
    def _oldest_exit(timestamps: Deque[float], window_ms: int, now: float) -> int:
        """Time until the oldest timestamp leaves the window."""
        if not timestamps:
            return window_ms
        return max(0, math.ceil(timestamps[0] + window_ms - now))
