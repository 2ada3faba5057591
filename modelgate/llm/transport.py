"""
Outbound transport interface.

Sandi Metz Principles:
- Single Responsibility: Transport abstraction
- Interface Segregation: Minimal transport interface
- Dependency Inversion: Gateway depends on abstraction, not SDKs
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from modelgate.models.provider import ModelDescriptor, Provider


class CompletionResult(BaseModel):
    """Text produced by a provider for one request."""

    content: str = Field(..., description="Generated text")
    model: str = Field(..., description="Model that produced the text")
    provider_id: str = Field(..., description="Provider that served the request")
    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class BaseTransport(ABC):
    """
    Abstract outbound transport.

    Implementations talk to the provider's network API.
    """

    @abstractmethod
    async def complete(
        self,
        provider: Provider,
        model: ModelDescriptor,
        payload: Dict[str, Any],
    ) -> CompletionResult:
        """
        Send one generation request.

        Args:
            provider: Resolved, active provider
            model: Resolved model of that provider
            payload: Request payload (``messages`` plus sampling options)

        Returns:
            Completion result

        Raises:
            ProviderError: If the call fails
        """

    @abstractmethod
    async def probe(self, provider: Provider) -> bool:
        """
        Check whether the provider's endpoint answers.

        Args:
            provider: Provider to probe

        Returns:
            True if reachable
        """

    @staticmethod
    def build_messages(payload: Dict[str, Any]) -> List[Dict[str, str]]:
        """Extract chat messages, wrapping a bare prompt."""
        messages = payload.get("messages")
        if messages:
            return list(messages)
        return [{"role": "user", "content": str(payload.get("prompt", ""))}]
