"""Tests for provider call timeout handler."""

import asyncio

import pytest

from modelgate.exceptions import ProviderError
from modelgate.llm.timeout_handler import TimeoutConfig, TimeoutHandler


class TestTimeoutConfig:
    """Test timeout configuration."""

    def test_default_config(self):
        """Test default timeout configuration."""
        assert TimeoutConfig().timeout_seconds == 30.0

    def test_rejects_non_positive_timeout(self):
        """Test zero timeout is invalid."""
        with pytest.raises(ValueError):
            TimeoutConfig(timeout_seconds=0)


class TestTimeoutHandler:
    """Test timeout handler."""

    @pytest.fixture
    def handler(self) -> TimeoutHandler:
        return TimeoutHandler(TimeoutConfig(timeout_seconds=0.05))

    @pytest.mark.asyncio
    async def test_returns_result_in_time(self, handler: TimeoutHandler):
        """Test fast operation result is returned."""

        async def operation():
            return "done"

        assert await handler.execute(operation) == "done"

    @pytest.mark.asyncio
    async def test_timeout_raises_provider_error(self, handler: TimeoutHandler):
        """Test slow operation becomes a provider error."""

        async def operation():
            await asyncio.sleep(1)

        with pytest.raises(ProviderError, match="timed out"):
            await handler.execute(operation)

    @pytest.mark.asyncio
    async def test_override_timeout(self, handler: TimeoutHandler):
        """Test per-call timeout wins over config."""

        async def operation():
            await asyncio.sleep(0.1)
            return "slow but allowed"

        assert await handler.execute(operation, timeout_seconds=1.0) == "slow but allowed"

    @pytest.mark.asyncio
    async def test_operation_errors_propagate(self, handler: TimeoutHandler):
        """Test non-timeout errors are not wrapped."""

        async def operation():
            raise KeyError("boom")

        with pytest.raises(KeyError):
            await handler.execute(operation)

    @pytest.mark.asyncio
    async def test_timeout_names_provider(self, handler: TimeoutHandler):
        """Test the provider id appears in the error."""

        async def operation():
            await asyncio.sleep(1)

        with pytest.raises(ProviderError, match="Provider 'groq' timed out"):
            await handler.execute(operation, provider_id="groq")

    def test_timeout_seconds(self, handler: TimeoutHandler):
        """Test configured deadline is exposed."""
        assert handler.timeout_seconds == 0.05

    @pytest.mark.asyncio
    async def test_explicit_zero_timeout_is_honored(self):
        """Test a zero per-call deadline is not replaced by the default."""
        handler = TimeoutHandler(TimeoutConfig(timeout_seconds=30.0))

        async def operation():
            await asyncio.sleep(1)

        with pytest.raises(ProviderError, match="after 0 seconds"):
            await handler.execute(operation, timeout_seconds=0)
