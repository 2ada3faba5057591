"""
Chat orchestration service.

Routes a user message to a provider through the gateway and records both
sides of the exchange.

Sandi Metz Principles:
- Single Responsibility: Chat turn orchestration
- Small methods: Each method < 10 lines
- Dependency Injection: Gateway, store and transport injected
"""

import time
from typing import Any, Dict, List, Optional, Tuple

from modelgate.exceptions import ConfigurationError
from modelgate.llm.retry import RetryHandler
from modelgate.llm.transport import CompletionResult
from modelgate.models.chat import ChatRequest, ChatResponse, UsageMetrics
from modelgate.services.conversation_store import ConversationStore
from modelgate.services.gateway import ProviderGateway
from modelgate.utils.hasher import generate_fingerprint
from modelgate.utils.logger import get_logger

logger = get_logger(__name__)


class ChatService:
    """
    Main chat processing service.

    Provider choice: explicit request, then session selection, then the
    configured default.
    """

    def __init__(
        self,
        gateway: ProviderGateway,
        store: ConversationStore,
        default_provider: str,
        default_model: Optional[str] = None,
        history_limit: int = 20,
        retry_handler: Optional[RetryHandler] = None,
    ):
        """
        Initialize service.

        Args:
            gateway: Provider gateway
            store: Conversation store
            default_provider: Provider used when nothing else is chosen
            default_model: Model used with the default provider
            history_limit: Messages sent as context
            retry_handler: Optional retry around dispatch
        """
        self._gateway = gateway
        self._store = store
        self._default_provider = default_provider
        self._default_model = default_model
        self._history_limit = history_limit
        self._retry = retry_handler

    async def process(self, request: ChatRequest) -> ChatResponse:
        """
        Process one chat turn.

        The user message is recorded even if the provider call fails.

        Args:
            request: Chat request

        Returns:
            Chat response

        Raises:
            AppError: Routing, rate limit or provider failures
        """
        start_time = time.time()
        provider_id, model_id = self.resolve_route(request)
        conversation_id = self._conversation_for(request)

        self._store.append(conversation_id, {"role": "user", "content": request.message})
        payload = self._build_payload(conversation_id, request)
        fingerprint = generate_fingerprint(provider_id, model_id, payload)
        from_cache = self._gateway.is_cached(fingerprint)

        result = await self._dispatch(provider_id, model_id, fingerprint, payload)
        self._store.append(conversation_id, {"role": "assistant", "content": result.content})

        logger.info(
            "Chat turn completed",
            provider=provider_id,
            model=model_id,
            from_cache=from_cache,
        )
        return ChatResponse(
            conversation_id=conversation_id,
            response=result.content,
            provider_id=provider_id,
            model_id=model_id,
            usage=UsageMetrics.create(result.prompt_tokens, result.completion_tokens),
            from_cache=from_cache,
            latency_ms=(time.time() - start_time) * 1000,
        )

    def resolve_route(self, request: ChatRequest) -> Tuple[str, str]:
        """
        Decide provider and model for a request.

        An explicit provider wins, then the task type's assignment, then the
        session selection, then the configured default.

        Returns:
            (provider_id, model_id)
        """
        provider_id, model_id = request.provider_id, request.model_id
        assignment = None
        if provider_id is None and request.task_type is not None:
            assignment = self._gateway.get_task_assignment(request.task_type)

        if assignment is not None:
            provider_id = assignment.provider_id
            model_id = model_id or assignment.model_id
        elif provider_id is None:
            selection = self._gateway.get_selection(request.session_id)
            if selection is not None:
                provider_id = selection.provider_id
                model_id = model_id or selection.model_id
            else:
                provider_id = self._default_provider
                model_id = model_id or self._default_model

        if model_id is None:
            model_id = self._gateway.registry.default_model(provider_id).model_id
        return provider_id, model_id

    async def _dispatch(
        self,
        provider_id: str,
        model_id: str,
        fingerprint: str,
        payload: Dict[str, Any],
    ) -> CompletionResult:
        transport = self._gateway.transport
        if transport is None:
            raise ConfigurationError("No transport configured for outbound calls")

        registry = self._gateway.registry

        async def loader() -> CompletionResult:
            return await transport.complete(
                registry.resolve(provider_id),
                registry.resolve_model(provider_id, model_id),
                payload,
            )

        async def attempt() -> CompletionResult:
            return await self._gateway.dispatch(provider_id, model_id, fingerprint, loader)

        if self._retry is None:
            return await attempt()
        return await self._retry.execute(attempt)

    def _conversation_for(self, request: ChatRequest) -> str:
        if request.conversation_id is not None:
            return request.conversation_id
        current = self._store.current()
        if current is not None:
            return current.id
        return self._store.create().id

    def _build_payload(self, conversation_id: str, request: ChatRequest) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = [
            m.as_prompt() for m in self._store.history(conversation_id, self._history_limit)
        ]
        payload: Dict[str, Any] = {"messages": messages}
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        return payload
