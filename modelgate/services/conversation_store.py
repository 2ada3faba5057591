"""
Conversation store.

Sandi Metz Principles:
- Single Responsibility: Keep per-session message logs
- Memory-bounded: Oldest conversations evicted first
- Dependency Injection: Clock injected
"""

import math
import uuid
from typing import Any, Dict, List, Mapping, Optional

from modelgate.cache.bounded_map import BoundedOrderedMap, EvictionPolicy
from modelgate.exceptions import NotFoundError, ValidationError
from modelgate.models.conversation import (
    Conversation,
    ConversationStats,
    Message,
    MessageRole,
)
from modelgate.utils.clock import Clock, system_clock, to_datetime
from modelgate.utils.logger import get_logger

logger = get_logger(__name__)

_ROLES = {role.value for role in MessageRole}


def _new_id() -> str:
    return uuid.uuid4().hex


class ConversationStore:
    """
    In-memory conversation logs.

    Conversations leave the store oldest-created first once more than
    ``max_conversations`` exist. Callers always receive copies.
    """

    def __init__(self, max_conversations: int = 100, clock: Clock = system_clock):
        """
        Initialize store.

        Args:
            max_conversations: Maximum retained conversations
            clock: Epoch-millisecond clock
        """
        self._clock = clock
        self._current_id: Optional[str] = None
        self._conversations: BoundedOrderedMap[str, Conversation] = BoundedOrderedMap(
            max_conversations, policy=EvictionPolicy.FIFO, on_evict=self._on_evict
        )

    def create(
        self,
        conversation_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Conversation:
        """
        Start a conversation and make it current.

        Args:
            conversation_id: Id to use (generated if None)
            metadata: Free-form metadata

        Returns:
            New conversation

        Raises:
            ValidationError: If the id is blank or already used
        """
        if conversation_id is not None and not str(conversation_id).strip():
            raise ValidationError("Conversation id cannot be blank")
        if conversation_id is not None and conversation_id in self._conversations:
            raise ValidationError(f"Conversation '{conversation_id}' already exists")

        now = self._now()
        conversation = Conversation(
            id=conversation_id or _new_id(),
            metadata=dict(metadata or {}),
            created_at=now,
            last_modified=now,
        )
        self._conversations.put(conversation.id, conversation)
        self._current_id = conversation.id
        logger.debug("Conversation created", conversation_id=conversation.id)
        return conversation.model_copy(deep=True)

    def append(self, conversation_id: str, message: Mapping[str, Any]) -> Conversation:
        """
        Append a message.

        Args:
            conversation_id: Target conversation
            message: Raw message with ``role`` and ``content``

        Returns:
            Updated conversation

        Raises:
            NotFoundError: If the conversation is unknown
            ValidationError: With every role/content violation; nothing is stored
        """
        conversation = self._require(conversation_id)

        errors = self.validate_message(message)
        if errors:
            raise ValidationError.from_errors("message", errors)

        now = self._now()
        conversation.messages.append(
            Message(
                id=_new_id(),
                role=MessageRole(message["role"]),
                content=message["content"],
                timestamp=now,
            )
        )
        conversation.last_modified = now
        return conversation.model_copy(deep=True)

    @staticmethod
    def validate_message(message: Mapping[str, Any]) -> List[str]:
        """
        Validate raw message fields.

        Returns:
            Every violation in order, empty when valid
        """
        errors = []
        role = message.get("role")
        content = message.get("content")
        if not role:
            errors.append("role: is required")
        elif not isinstance(role, str):
            errors.append("role: must be a string")
        elif role not in _ROLES:
            errors.append(f"role: must be one of {', '.join(sorted(_ROLES))}")
        if content is None:
            errors.append("content: is required")
        elif not isinstance(content, str):
            errors.append("content: must be a string")
        elif not content.strip():
            errors.append("content: cannot be empty")
        return errors

    def update_message(
        self, conversation_id: str, message_id: str, content: str
    ) -> Message:
        """
        Replace a message's content and refresh its timestamp.

        Raises:
            NotFoundError: If the conversation or message is unknown
            ValidationError: If content is empty
        """
        conversation = self._require(conversation_id)
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("Message content cannot be empty")

        for index, existing in enumerate(conversation.messages):
            if existing.id == message_id:
                now = self._now()
                updated = existing.model_copy(update={"content": content, "timestamp": now})
                conversation.messages[index] = updated
                conversation.last_modified = now
                return updated

        raise NotFoundError(
            f"Message '{message_id}' not found in conversation '{conversation_id}'"
        )

    def get(self, conversation_id: str) -> Conversation:
        """
        Get a conversation.

        Raises:
            NotFoundError: If the conversation is unknown
        """
        return self._require(conversation_id).model_copy(deep=True)

    def messages(self, conversation_id: str) -> List[Message]:
        return list(self._require(conversation_id).messages)

    def history(self, conversation_id: str, limit: Optional[int] = None) -> List[Message]:
        """Most recent messages, oldest first."""
        messages = self.messages(conversation_id)
        if limit is not None and limit >= 0:
            return messages[-limit:] if limit else []
        return messages

    def current(self) -> Optional[Conversation]:
        """Current conversation, or None."""
        if self._current_id is None:
            return None
        return self.get(self._current_id)

    def set_current(self, conversation_id: str) -> Conversation:
        """
        Make a conversation current.

        Raises:
            NotFoundError: If the conversation is unknown
        """
        conversation = self._require(conversation_id)
        self._current_id = conversation_id
        return conversation.model_copy(deep=True)

    def add_user_message(self, content: str) -> Conversation:
        """Append a user message to the current conversation, starting one if needed."""
        return self.append(self._current_or_new(), {"role": "user", "content": content})

    def add_assistant_message(self, content: str) -> Conversation:
        """Append an assistant message to the current conversation, starting one if needed."""
        return self.append(
            self._current_or_new(), {"role": "assistant", "content": content}
        )

    def clear(self, conversation_id: str) -> Conversation:
        """
        Remove every message but keep the conversation.

        Raises:
            NotFoundError: If the conversation is unknown
        """
        conversation = self._require(conversation_id)
        conversation.messages = []
        conversation.last_modified = self._now()
        return conversation.model_copy(deep=True)

    def delete(self, conversation_id: str) -> bool:
        """
        Remove a conversation entirely.

        Returns:
            True if a conversation was removed
        """
        removed = self._conversations.pop(conversation_id)
        if removed is None:
            return False
        if self._current_id == conversation_id:
            self._current_id = None
        return True

    def list_ids(self) -> List[str]:
        """Conversation ids, oldest first."""
        return self._conversations.keys()

    def stats(self, conversation_id: str) -> ConversationStats:
        """
        Summarize a conversation.

        The token count is ceil(len(content) / 4) summed over messages.

        Raises:
            NotFoundError: If the conversation is unknown
        """
        conversation = self._require(conversation_id)
        return ConversationStats(
            id=conversation.id,
            message_count=len(conversation.messages),
            approx_token_count=sum(
                math.ceil(len(m.content) / 4) for m in conversation.messages
            ),
            created_at=conversation.created_at,
            last_modified=conversation.last_modified,
        )

    @property
    def current_id(self) -> Optional[str]:
        return self._current_id

    def __len__(self) -> int:
        return len(self._conversations)

    def _require(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.peek(conversation_id)
        if conversation is None:
            raise NotFoundError(f"Conversation '{conversation_id}' not found")
        return conversation

    def _current_or_new(self) -> str:
        if self._current_id is None:
            self.create()
        return self._current_id  # type: ignore[return-value]

    def _on_evict(self, conversation_id: str, _: Conversation) -> None:
        if self._current_id == conversation_id:
            self._current_id = None
        logger.info("Conversation evicted", conversation_id=conversation_id)

    def _now(self):
        return to_datetime(self._clock())
