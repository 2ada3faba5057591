"""
OpenAI-compatible transport.

Sandi Metz Principles:
- Single Responsibility: OpenAI-compatible API interaction
- Small methods: Each method < 10 lines
- Dependency Injection: API keys injected
"""

from typing import Any, Dict, Mapping

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError

from modelgate.exceptions import ProviderError
from modelgate.llm.transport import BaseTransport, CompletionResult
from modelgate.models.provider import ModelDescriptor, Provider
from modelgate.utils.logger import get_logger, log_provider_call

logger = get_logger(__name__)


class OpenAICompatibleTransport(BaseTransport):
    """
    Transport for every provider exposing the OpenAI chat API.

    One client is kept per provider, pointed at the provider's endpoint.
    """

    def __init__(
        self,
        api_keys: Mapping[str, str] | None = None,
        timeout_seconds: float = 30.0,
        max_retries: int = 0,
    ):
        """
        Initialize transport.

        Args:
            api_keys: API key per provider id
            timeout_seconds: SDK request timeout
            max_retries: SDK-level retries (retries are done by the caller)
        """
        self._api_keys = dict(api_keys or {})
        self._timeout = timeout_seconds
        self._max_retries = max_retries
        self._clients: Dict[str, AsyncOpenAI] = {}

    async def complete(
        self,
        provider: Provider,
        model: ModelDescriptor,
        payload: Dict[str, Any],
    ) -> CompletionResult:
        """
        Generate a chat completion.

        Raises:
            ProviderError: If no key is configured or the API call fails
        """
        if not self._api_keys.get(provider.id):
            raise ProviderError(f"No API key configured for provider '{provider.id}'")

        client = self._get_client(provider)
        try:
            response = await client.chat.completions.create(
                model=model.model_id,
                messages=self.build_messages(payload),
                **self._sampling_options(payload),
            )
        except OpenAIError as e:
            logger.error("Provider call failed", provider=provider.id, error=str(e))
            raise ProviderError(
                f"{provider.name} API call failed: {type(e).__name__} - {e}"
            ) from e

        result = CompletionResult(
            content=response.choices[0].message.content or "",
            model=response.model or model.model_id,
            provider_id=provider.id,
            prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
            completion_tokens=(
                response.usage.completion_tokens if response.usage else 0
            ),
        )
        log_provider_call(provider=provider.id, model=result.model, tokens=result.total_tokens)
        return result

    async def probe(self, provider: Provider) -> bool:
        """
        Probe the provider by listing its models.

        Any HTTP answer below 500 means the endpoint is reachable, even an
        authentication failure.
        """
        client = self._get_client(provider)
        try:
            await client.models.list()
        except APIConnectionError as e:
            logger.warning("Provider unreachable", provider=provider.id, error=str(e))
            return False
        except APIStatusError as e:
            return e.status_code < 500
        return True

    async def close(self) -> None:
        """Close every client."""
        for client in self._clients.values():
            await client.close()
        self._clients.clear()

    def _get_client(self, provider: Provider) -> AsyncOpenAI:
        """
        Get or create the client for a provider.

        Returns:
            OpenAI async client bound to the provider endpoint
        """
        client = self._clients.get(provider.id)
        if client is None or str(client.base_url).rstrip("/") != provider.endpoint.rstrip("/"):
            client = AsyncOpenAI(
                api_key=self._api_keys.get(provider.id, ""),
                base_url=provider.endpoint,
                timeout=self._timeout,
                max_retries=self._max_retries,
            )
            self._clients[provider.id] = client
        return client

    @staticmethod
    def _sampling_options(payload: Dict[str, Any]) -> Dict[str, Any]:
        options = {}
        for name in ("max_tokens", "temperature", "top_p"):
            if payload.get(name) is not None:
                options[name] = payload[name]
        return options
