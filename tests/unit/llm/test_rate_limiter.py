"""
Tests for rate limiter.
"""

import pytest

from modelgate.exceptions import ConfigurationError
from modelgate.llm.rate_limiter import DAY_MS, RateLimiter
from modelgate.models.provider import RateLimitPolicy
from modelgate.utils.clock import ManualClock


class TestRateLimiter:
    """Test rate limiter functionality."""

    @pytest.fixture
    def limiter(self, clock: ManualClock) -> RateLimiter:
        """Create limiter allowing 3 requests per minute."""
        return RateLimiter(
            {"groq": RateLimitPolicy(max_requests=3, window_ms=60_000)}, clock=clock
        )

    def test_admits_up_to_limit_then_denies(self, limiter: RateLimiter) -> None:
        """Test calls 1-3 admitted, call 4 denied."""
        results = [limiter.admit("groq") for _ in range(4)]

        assert results == [True, True, True, False]

    def test_denied_request_is_not_recorded(self, limiter: RateLimiter) -> None:
        """Test denial leaves the count unchanged."""
        for _ in range(5):
            limiter.admit("groq")

        assert limiter.info("groq").current_count == 3

    def test_admits_again_after_window(
        self, limiter: RateLimiter, clock: ManualClock
    ) -> None:
        """Test admission resumes once the first call leaves the window."""
        for _ in range(3):
            limiter.admit("groq")
        assert limiter.admit("groq") is False

        clock.advance(60_000)

        assert limiter.admit("groq") is True

    def test_window_is_sliding(self, limiter: RateLimiter, clock: ManualClock) -> None:
        """Test only the oldest timestamp expires first."""
        limiter.admit("groq")
        clock.advance(30_000)
        limiter.admit("groq")
        limiter.admit("groq")

        clock.advance(30_000)

        assert limiter.info("groq").current_count == 2
        assert limiter.admit("groq") is True
        assert limiter.admit("groq") is False

    def test_check_never_records(self, limiter: RateLimiter) -> None:
        """Test check is a dry run."""
        for _ in range(10):
            assert limiter.check("groq") is True

        assert limiter.info("groq").remaining == 3

    def test_info_reports_counts(self, limiter: RateLimiter, clock: ManualClock) -> None:
        """Test info fields."""
        limiter.admit("groq")
        info = limiter.info("groq")

        assert info.limit == 3
        assert info.remaining == 2
        assert info.current_count == 1
        assert info.window_ms == 60_000
        assert info.reset_in_ms == 0

    def test_time_until_reset_is_zero_under_limit(self, limiter: RateLimiter) -> None:
        """Test no wait while capacity remains."""
        limiter.admit("groq")

        assert limiter.time_until_reset("groq") == 0

    def test_time_until_reset_at_limit(
        self, limiter: RateLimiter, clock: ManualClock
    ) -> None:
        """Test wait is until the oldest request leaves the window."""
        limiter.admit("groq")
        clock.advance(10_000)
        limiter.admit("groq")
        limiter.admit("groq")
        clock.advance(5_000)

        assert limiter.time_until_reset("groq") == 45_000
        assert limiter.info("groq").retry_after_seconds == 45

    def test_daily_limit(self, clock: ManualClock) -> None:
        """Test rolling day cap applies on top of the window."""
        limiter = RateLimiter(
            {"gemini": RateLimitPolicy(max_requests=10, window_ms=1_000, requests_per_day=2)},
            clock=clock,
        )
        assert limiter.admit("gemini") is True
        clock.advance(2_000)
        assert limiter.admit("gemini") is True
        clock.advance(2_000)

        assert limiter.admit("gemini") is False
        assert limiter.time_until_reset("gemini") == DAY_MS - 4_000

        clock.advance(DAY_MS)
        assert limiter.admit("gemini") is True

    def test_unknown_provider_fails_fast(self, limiter: RateLimiter) -> None:
        """Test unknown ids raise instead of admitting."""
        with pytest.raises(ConfigurationError):
            limiter.admit("missing")

        with pytest.raises(ConfigurationError):
            limiter.info("missing")

    def test_register_keeps_history(self, limiter: RateLimiter) -> None:
        """Test changing a policy keeps recorded requests."""
        limiter.admit("groq")
        limiter.admit("groq")

        limiter.register("groq", RateLimitPolicy(max_requests=2, window_ms=60_000))

        assert limiter.admit("groq") is False
        assert limiter.policy("groq").max_requests == 2

    def test_update_limits_adds_providers(self, limiter: RateLimiter) -> None:
        """Test several policies applied at once."""
        limiter.update_limits({"openai": RateLimitPolicy.per_minute(10)})

        assert limiter.has_provider("openai")
        assert sorted(limiter.list_providers()) == ["groq", "openai"]

    def test_reset_and_clear_history(self, limiter: RateLimiter) -> None:
        """Test forgetting request history."""
        for _ in range(3):
            limiter.admit("groq")

        limiter.reset("groq")
        assert limiter.info("groq").remaining == 3

        limiter.admit("groq")
        limiter.clear_history()
        assert limiter.info("groq").current_count == 0

    def test_zero_limit_never_admits(self, clock: ManualClock) -> None:
        """Test a zero budget denies everything."""
        limiter = RateLimiter({"off": RateLimitPolicy(max_requests=0)}, clock=clock)

        assert limiter.admit("off") is False
        assert limiter.time_until_reset("off") == 60_000
