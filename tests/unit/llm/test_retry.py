"""
Tests for retry handler.
"""

from unittest.mock import AsyncMock, patch

import pytest

from modelgate.exceptions import ProviderError, RateLimitExceededError
from modelgate.llm.retry import RetryConfig, RetryHandler


@pytest.fixture
def mock_sleep():
    """Mock asyncio.sleep to make tests instant."""
    with patch("modelgate.llm.retry.asyncio.sleep", new=AsyncMock()) as mock:
        yield mock


class TestRetryHandler:
    """Test retry handler functionality."""

    @pytest.fixture
    def retry_handler(self) -> RetryHandler:
        """Create retry handler instance."""
        return RetryHandler(
            RetryConfig(max_attempts=3, initial_delay=0.1, max_delay=1.0, exponential_base=2.0)
        )

    @pytest.mark.asyncio
    async def test_execute_success_first_attempt(self, retry_handler, mock_sleep) -> None:
        """Test successful execution on first attempt."""
        func = AsyncMock(return_value="success")

        assert await retry_handler.execute(func) == "success"
        assert func.await_count == 1
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_provider_errors(self, retry_handler, mock_sleep) -> None:
        """Test provider errors are retried with backoff."""
        func = AsyncMock(side_effect=[ProviderError("503"), ProviderError("503"), "ok"])

        assert await retry_handler.execute(func) == "ok"
        assert func.await_count == 3
        assert [c.args[0] for c in mock_sleep.await_args_list] == [0.1, 0.2]

    @pytest.mark.asyncio
    async def test_raises_after_max_attempts(self, retry_handler, mock_sleep) -> None:
        """Test last error raised when attempts run out."""
        func = AsyncMock(side_effect=ProviderError("down"))

        with pytest.raises(ProviderError, match="down"):
            await retry_handler.execute(func)
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_rate_limit_not_retried(self, retry_handler, mock_sleep) -> None:
        """Test rate limit denial is returned immediately."""
        func = AsyncMock(side_effect=RateLimitExceededError("slow down"))

        with pytest.raises(RateLimitExceededError):
            await retry_handler.execute(func)
        assert func.await_count == 1

    def test_delays_are_capped(self) -> None:
        """Test exponential delay never exceeds max_delay."""
        config = RetryConfig(max_attempts=5, initial_delay=1.0, max_delay=5.0)

        assert list(config.delays()) == [1.0, 2.0, 4.0, 5.0]

    def test_single_attempt_never_sleeps(self) -> None:
        """Test one attempt means no delays."""
        assert list(RetryConfig(max_attempts=1).delays()) == []
