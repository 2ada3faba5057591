"""
Tests for provider registry.
"""

from typing import Any, Dict

import pytest

from modelgate.exceptions import (
    ConfigurationError,
    ErrorKind,
    ModelUnavailableError,
    NotFoundError,
    ProviderInactiveError,
    ValidationError,
)
from modelgate.llm.registry import ProviderRegistry
from modelgate.models.provider import ModelDescriptor, Provider
from modelgate.utils.clock import ManualClock, to_datetime


class TestProviderRegistry:
    """Test provider registry functionality."""

    @pytest.fixture
    def acme(self, registry: ProviderRegistry, provider_data: Dict[str, Any]) -> Provider:
        """Register the acme provider."""
        return registry.load([provider_data])[0]

    def test_loads_catalog(self, registry: ProviderRegistry) -> None:
        """Test built-in catalog is registered in order."""
        assert registry.list_ids() == ["groq", "openai", "gemini", "openrouter"]
        assert len(registry.list_active()) == 4

    def test_get_unknown_provider(self, registry: ProviderRegistry) -> None:
        """Test unknown id raises NotFound."""
        with pytest.raises(NotFoundError) as exc_info:
            registry.get("unknown")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND

    def test_resolve_inactive_provider(self, registry: ProviderRegistry) -> None:
        """Test inactive provider raises Inactive, not NotFound."""
        registry.deactivate("openai")

        with pytest.raises(ProviderInactiveError):
            registry.resolve("openai")

        assert registry.get("openai").is_active is False

    def test_resolve_model_checks_provider_first(self, registry: ProviderRegistry) -> None:
        """Test provider state is checked before the model catalog."""
        registry.deactivate("groq")

        with pytest.raises(ProviderInactiveError):
            registry.resolve_model("groq", "no-such-model")

        with pytest.raises(NotFoundError):
            registry.resolve_model("nope", "gpt-4")

    def test_resolve_model_unavailable(self, registry: ProviderRegistry) -> None:
        """Test model not served by provider."""
        with pytest.raises(ModelUnavailableError):
            registry.resolve_model("groq", "gpt-4")

        assert registry.resolve_model("openai", "gpt-4").model_id == "gpt-4"

    def test_default_model(self, registry: ProviderRegistry) -> None:
        """Test first catalog model is the default."""
        assert registry.default_model("groq").model_id == "llama3-8b-8192"

    def test_activate_is_idempotent(
        self, registry: ProviderRegistry, clock: ManualClock
    ) -> None:
        """Test updated_at only moves on a state change."""
        before = registry.get("groq").updated_at
        clock.advance(1_000)

        registry.activate("groq")
        assert registry.get("groq").updated_at == before

        registry.deactivate("groq")
        assert registry.get("groq").updated_at == to_datetime(clock())

        clock.advance(1_000)
        registry.deactivate("groq")
        assert registry.get("groq").updated_at == to_datetime(clock() - 1_000)

    def test_add_model(self, registry: ProviderRegistry, clock: ManualClock) -> None:
        """Test adding a model and re-adding the same id."""
        clock.advance(5_000)
        model = ModelDescriptor(model_id="llama-3.3-70b", name="Llama 3.3 70B")

        assert registry.add_model("groq", model) is True
        assert registry.add_model("groq", model) is False
        assert registry.get("groq").model_ids.count("llama-3.3-70b") == 1
        assert registry.get("groq").updated_at == to_datetime(clock())

    def test_remove_model(self, registry: ProviderRegistry) -> None:
        """Test removing a model."""
        assert registry.remove_model("gemini", "gemini-pro") is True
        assert registry.remove_model("gemini", "gemini-pro") is False
        assert registry.get("gemini").model_ids == ["gemini-2.5-flash"]

    def test_register_duplicate(self, registry: ProviderRegistry, acme: Provider) -> None:
        """Test duplicate id rejected."""
        with pytest.raises(ConfigurationError):
            registry.register(acme)

    def test_validate_collects_all_errors(self) -> None:
        """Test every violation is reported together."""
        errors = ProviderRegistry.validate(
            {"id": "", "name": "  ", "endpoint": "not a url", "is_active": "yes"}
        )

        assert len(errors) == 4
        assert errors[0].startswith("id:")
        assert any(e.startswith("endpoint:") for e in errors)
        assert any(e.startswith("is_active:") for e in errors)

    def test_validate_valid_data(self, provider_data: Dict[str, Any]) -> None:
        """Test valid data has no errors."""
        assert ProviderRegistry.validate(provider_data) == []

    def test_load_is_all_or_nothing(
        self, registry: ProviderRegistry, provider_data: Dict[str, Any]
    ) -> None:
        """Test one bad record blocks the whole batch."""
        bad = {"id": "broken", "name": "Broken", "endpoint": "ftp//bad"}

        with pytest.raises(ValidationError) as exc_info:
            registry.load([provider_data, bad])

        assert not registry.has_provider("acme")
        assert exc_info.value.errors[0].startswith("broken: endpoint")

    def test_load_rejects_repeated_ids(
        self, registry: ProviderRegistry, provider_data: Dict[str, Any]
    ) -> None:
        """Test a batch repeating an id registers nothing."""
        other = {**provider_data, "id": "other"}

        with pytest.raises(ValidationError) as exc_info:
            registry.load([provider_data, other, provider_data])

        assert exc_info.value.errors == ["acme: id: duplicated in catalog"]
        assert not registry.has_provider("acme")
        assert not registry.has_provider("other")

    def test_load_rejects_registered_ids(
        self, registry: ProviderRegistry, provider_data: Dict[str, Any]
    ) -> None:
        """Test loading an id already in the registry registers nothing."""
        groq = {**provider_data, "id": "groq"}

        with pytest.raises(ValidationError) as exc_info:
            registry.load([provider_data, groq])

        assert exc_info.value.errors == ["groq: id: already registered"]
        assert not registry.has_provider("acme")
        assert registry.get("groq").name != provider_data["name"]

    def test_reads_return_snapshots(self, registry: ProviderRegistry) -> None:
        """Test mutating a returned provider leaves the registry untouched."""
        provider = registry.get("groq")
        provider.is_active = False
        provider.models.clear()

        listed = registry.list_all()[0]
        listed.name = "Changed"

        assert registry.resolve("groq").is_active is True
        assert registry.get("groq").models
        assert registry.get("groq").name != "Changed"

    def test_update_validates_result(
        self, registry: ProviderRegistry, acme: Provider
    ) -> None:
        """Test updates are validated and the id is kept."""
        updated = registry.update("acme", {"name": "Acme 2", "id": "renamed"})
        assert updated.id == "acme"
        assert updated.name == "Acme 2"
        assert updated.created_at == acme.created_at

        with pytest.raises(ValidationError) as exc_info:
            registry.update("acme", {"endpoint": "nope", "tier": "platinum"})
        assert len(exc_info.value.errors) == 2
        assert registry.get("acme").endpoint == "https://api.acme.test/v1"

    def test_rate_limit_policies(self, registry: ProviderRegistry) -> None:
        """Test policies exposed per provider."""
        policies = registry.rate_limit_policies()

        assert policies["groq"].max_requests == 30
        assert policies["openai"].requests_per_day == 200
