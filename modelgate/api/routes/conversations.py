"""
Conversation endpoints.

Sandi Metz Principles:
- Single Responsibility: HTTP request handling
- Small functions: Minimal logic in endpoints
- Dependency Injection: Store injected
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from modelgate.api.deps import get_store
from modelgate.exceptions import NotFoundError
from modelgate.models.conversation import Conversation, ConversationStats
from modelgate.models.response import DeleteResponse
from modelgate.services.conversation_store import ConversationStore

router = APIRouter(prefix="/conversations")


class CreateConversationRequest(BaseModel):
    """New conversation options."""

    id: Optional[str] = Field(None, description="Conversation id (generated if omitted)")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class AppendMessageRequest(BaseModel):
    """Raw message; role and content are checked by the store."""

    role: Optional[str] = Field(None, description="user, assistant or system")
    content: Optional[Any] = Field(None, description="Message text")


@router.post("", response_model=Conversation, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    request: Optional[CreateConversationRequest] = None,
    store: ConversationStore = Depends(get_store),  # noqa: B008
) -> Conversation:
    """Start a conversation and make it current."""
    request = request or CreateConversationRequest()
    return store.create(request.id, request.metadata)


@router.get("/current", response_model=Conversation)
async def get_current_conversation(
    store: ConversationStore = Depends(get_store),  # noqa: B008
) -> Conversation:
    current = store.current()
    if current is None:
        raise NotFoundError("No current conversation")
    return current


@router.get("/{conversation_id}", response_model=Conversation)
async def get_conversation(
    conversation_id: str,
    store: ConversationStore = Depends(get_store),  # noqa: B008
) -> Conversation:
    return store.get(conversation_id)


@router.post("/{conversation_id}/messages", response_model=Conversation)
async def append_message(
    conversation_id: str,
    request: AppendMessageRequest,
    store: ConversationStore = Depends(get_store),  # noqa: B008
) -> Conversation:
    """
    Append a message.

    Raises:
        NotFoundError: Unknown conversation
        ValidationError: Bad role or content
    """
    return store.append(conversation_id, request.model_dump())


@router.post("/{conversation_id}/current", response_model=Conversation)
async def set_current_conversation(
    conversation_id: str,
    store: ConversationStore = Depends(get_store),  # noqa: B008
) -> Conversation:
    return store.set_current(conversation_id)


@router.get("/{conversation_id}/stats", response_model=ConversationStats)
async def get_conversation_stats(
    conversation_id: str,
    store: ConversationStore = Depends(get_store),  # noqa: B008
) -> ConversationStats:
    return store.stats(conversation_id)


@router.post("/{conversation_id}/clear", response_model=Conversation)
async def clear_conversation(
    conversation_id: str,
    store: ConversationStore = Depends(get_store),  # noqa: B008
) -> Conversation:
    """Remove every message but keep the conversation."""
    return store.clear(conversation_id)


@router.delete("/{conversation_id}", response_model=DeleteResponse)
async def delete_conversation(
    conversation_id: str,
    store: ConversationStore = Depends(get_store),  # noqa: B008
) -> DeleteResponse:
    return DeleteResponse(deleted=store.delete(conversation_id), id=conversation_id)
