"""
Chat endpoint.

Sandi Metz Principles:
- Single Responsibility: HTTP request handling
- Small functions: Minimal logic in endpoints
- Dependency Injection: Service injected
"""

from fastapi import APIRouter, Depends

from modelgate.api.deps import get_chat_service
from modelgate.models.chat import ChatRequest, ChatResponse
from modelgate.services.chat_service import ChatService

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),  # noqa: B008
) -> ChatResponse:
    """
    Send a message to the selected provider.

    Args:
        request: Chat request
        service: Chat service (injected)

    Returns:
        Assistant reply

    Domain errors are rendered by the application error handlers
    (429 with Retry-After when the provider's budget is spent).
    """
    return await service.process(request)
