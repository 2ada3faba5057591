"""
Provider catalog registry.

Sandi Metz Principles:
- Single Responsibility: Hold and resolve provider definitions
- Open/Closed: Providers added from configuration, never hard-coded here
- Fail fast: Unknown, inactive and unserved models are distinct errors
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from modelgate.exceptions import (
    ConfigurationError,
    ModelUnavailableError,
    NotFoundError,
    ProviderInactiveError,
    ValidationError,
)
from modelgate.models.provider import (
    ModelDescriptor,
    Provider,
    RateLimitPolicy,
    format_validation_errors,
    validate_provider_data,
)
from modelgate.utils.clock import Clock, system_clock, to_datetime
from modelgate.utils.logger import get_logger

logger = get_logger(__name__)


class ProviderRegistry:
    """
    Registry of known providers.

    Providers are never removed during a session, only deactivated.
    """

    def __init__(
        self,
        providers: Optional[Iterable[Provider]] = None,
        clock: Clock = system_clock,
    ):
        """
        Initialize registry.

        Args:
            providers: Initial providers
            clock: Epoch-millisecond clock used for updated_at
        """
        self._clock = clock
        self._providers: Dict[str, Provider] = {}
        for provider in providers or []:
            self.register(provider)

    @staticmethod
    def validate(data: Mapping[str, Any]) -> List[str]:
        """
        Validate raw provider data.

        Args:
            data: Raw provider fields

        Returns:
            Every violation in order, empty when valid
        """
        return validate_provider_data(data)

    @classmethod
    def from_records(
        cls, records: Iterable[Mapping[str, Any]], clock: Clock = system_clock
    ) -> "ProviderRegistry":
        """Build a registry from raw catalog records."""
        registry = cls(clock=clock)
        registry.load(records)
        return registry

    def load(self, records: Iterable[Mapping[str, Any]]) -> List[Provider]:
        """
        Validate and register raw provider records.

        Nothing is registered unless every record is valid and every id is
        new to the registry and unique within the batch.

        Args:
            records: Raw provider dictionaries

        Returns:
            Registered providers

        Raises:
            ValidationError: With every violation across all records
        """
        providers = []
        errors = []
        for index, record in enumerate(records):
            try:
                providers.append(Provider.model_validate(dict(record)))
            except PydanticValidationError as e:
                label = record.get("id") or f"#{index}"
                errors.extend(f"{label}: {msg}" for msg in format_validation_errors(e))

        errors.extend(self._duplicate_ids(providers))
        if errors:
            raise ValidationError.from_errors("provider catalog", errors)

        for provider in providers:
            self.register(provider)
        return providers

    def register(self, provider: Provider) -> None:
        """
        Register a provider.

        Args:
            provider: Provider to register

        Raises:
            ConfigurationError: If provider with same id already registered
        """
        if provider.id in self._providers:
            raise ConfigurationError(f"Provider '{provider.id}' is already registered")

        self._providers[provider.id] = provider.model_copy(deep=True)
        logger.info("Registered provider", provider=provider.id, active=provider.is_active)

    def get(self, provider_id: str) -> Provider:
        """
        Get provider regardless of state.

        Returns a snapshot; state changes go through the registry so
        updated_at stays accurate.

        Raises:
            NotFoundError: If provider unknown
        """
        return self._require(provider_id).model_copy(deep=True)

    def resolve(self, provider_id: str) -> Provider:
        """
        Get a usable provider.

        Args:
            provider_id: Provider id

        Returns:
            Active provider

        Raises:
            NotFoundError: If provider unknown
            ProviderInactiveError: If provider deactivated
        """
        provider = self.get(provider_id)
        if not provider.is_active:
            raise ProviderInactiveError(f"Provider '{provider_id}' is inactive")
        return provider

    def resolve_model(self, provider_id: str, model_id: str) -> ModelDescriptor:
        """
        Get a usable model of a usable provider.

        Provider state is checked before the model catalog.

        Raises:
            NotFoundError: If provider unknown
            ProviderInactiveError: If provider deactivated
            ModelUnavailableError: If provider does not serve model_id
        """
        provider = self.resolve(provider_id)
        model = provider.find_model(model_id)
        if model is None:
            raise ModelUnavailableError(
                f"Model '{model_id}' not available for provider '{provider_id}'"
            )
        return model

    def default_model(self, provider_id: str) -> ModelDescriptor:
        """First model in the provider's catalog."""
        provider = self.resolve(provider_id)
        if not provider.models:
            raise ModelUnavailableError(f"Provider '{provider_id}' has no models")
        return provider.models[0]

    def list_active(self) -> List[Provider]:
        return [p.model_copy(deep=True) for p in self._providers.values() if p.is_active]

    def list_all(self) -> List[Provider]:
        return [p.model_copy(deep=True) for p in self._providers.values()]

    def list_ids(self) -> List[str]:
        return list(self._providers.keys())

    def has_provider(self, provider_id: str) -> bool:
        return provider_id in self._providers

    def activate(self, provider_id: str) -> Provider:
        """Mark provider active (idempotent)."""
        return self._set_active(provider_id, True)

    def deactivate(self, provider_id: str) -> Provider:
        """Mark provider inactive (idempotent)."""
        return self._set_active(provider_id, False)

    def add_model(self, provider_id: str, model: ModelDescriptor) -> bool:
        """
        Add a model to a provider's catalog.

        Args:
            provider_id: Provider id
            model: Model to add

        Returns:
            False if a model with the same id already exists
        """
        provider = self._require(provider_id)
        if provider.find_model(model.model_id) is not None:
            return False

        provider.models = [*provider.models, model]
        self._touch(provider)
        logger.info("Model added", provider=provider_id, model=model.model_id)
        return True

    def remove_model(self, provider_id: str, model_id: str) -> bool:
        """
        Remove a model from a provider's catalog.

        Returns:
            True if a model was removed
        """
        provider = self._require(provider_id)
        remaining = [m for m in provider.models if m.model_id != model_id]
        if len(remaining) == len(provider.models):
            return False

        provider.models = remaining
        self._touch(provider)
        logger.info("Model removed", provider=provider_id, model=model_id)
        return True

    def update(self, provider_id: str, changes: Mapping[str, Any]) -> Provider:
        """
        Apply changes to a provider after validating the result.

        The id cannot change.

        Raises:
            NotFoundError: If provider unknown
            ValidationError: With every violation of the updated provider
        """
        provider = self._require(provider_id)
        data = provider.model_dump()
        data.update(changes)
        data["id"] = provider.id

        errors = validate_provider_data(data)
        if errors:
            raise ValidationError.from_errors(f"provider '{provider_id}'", errors)

        updated = Provider.model_validate(data)
        updated.created_at = provider.created_at
        self._touch(updated)
        self._providers[provider_id] = updated
        return updated.model_copy(deep=True)

    def rate_limit_policies(self) -> Dict[str, RateLimitPolicy]:
        """Rate limit policy per provider id."""
        return {pid: p.rate_limit for pid, p in self._providers.items()}

    def _set_active(self, provider_id: str, active: bool) -> Provider:
        provider = self._require(provider_id)
        if provider.is_active != active:
            provider.is_active = active
            self._touch(provider)
            logger.info("Provider state changed", provider=provider_id, active=active)
        return provider.model_copy(deep=True)

    def _require(self, provider_id: str) -> Provider:
        provider = self._providers.get(provider_id)
        if provider is None:
            available = ", ".join(self.list_ids())
            raise NotFoundError(
                f"Provider '{provider_id}' not found. Available providers: {available}"
            )
        return provider

    def _duplicate_ids(self, providers: List[Provider]) -> List[str]:
        """Ids already registered or repeated within a batch."""
        errors = []
        seen = set()
        for provider in providers:
            if provider.id in self._providers:
                errors.append(f"{provider.id}: id: already registered")
            elif provider.id in seen:
                errors.append(f"{provider.id}: id: duplicated in catalog")
            seen.add(provider.id)
        return errors

    def _touch(self, provider: Provider) -> None:
        provider.updated_at = to_datetime(self._clock())
