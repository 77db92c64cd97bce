"""Chat store interface.

The store is an append-only, order-preserving turn log keyed by owner and
conversation id, plus the conversation list and reference library that
belong to an owner.

Stored documents use the web client's camelCase field names
(``createdAt``, ``lastMessageAt``, ``imageDataUri``, ``sourceBookName``,
``userId``), so both clients read and write the same records.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from services.types import Language, ReferenceBook, Speaker, StoredTurn

DEFAULT_CHAT_TITLE = "New chat"
TITLE_MAX_CHARS = 50
PREVIEW_MAX_CHARS = 80


class ChatStoreError(Exception):
    """Raised when a store operation fails."""


class ChatNotFoundError(ChatStoreError):
    """Raised when a conversation does not exist."""


@dataclass
class ConversationInfo:
    """Conversation metadata for list views."""

    id: str
    title: str
    last_message_preview: str = ""
    created_at: str | None = None
    last_message_at: str | None = None


def conversation_title(seed_text: str | None) -> str:
    """Title from the first characters of the seed text, or the placeholder."""
    if seed_text and seed_text.strip():
        return seed_text[:TITLE_MAX_CHARS]
    return DEFAULT_CHAT_TITLE


def message_preview(text: str | None) -> str:
    return (text or "")[:PREVIEW_MAX_CHARS]


def chat_update_for_turn(turn: StoredTurn, now: datetime) -> dict[str, Any]:
    """Conversation metadata fields touched by appending a turn."""
    update: dict[str, Any] = {"updatedAt": now, "lastMessageAt": now}
    if turn.content:
        update["lastMessagePreview"] = message_preview(turn.content)
    if turn.role is Speaker.USER and turn.content and turn.content.strip():
        update["title"] = turn.content[:TITLE_MAX_CHARS]
    return update


def turn_to_document(turn: StoredTurn) -> dict[str, Any]:
    """Serialize a turn, omitting unset optional fields."""
    data: dict[str, Any] = {"role": turn.role.value, "content": turn.content or ""}
    if turn.image_data_uri:
        data["imageDataUri"] = turn.image_data_uri
    if turn.source:
        data["source"] = turn.source
    if turn.source_title:
        data["sourceBookName"] = turn.source_title
    if turn.lang:
        data["lang"] = turn.lang.value
    return data


def turn_from_document(doc_id: str, data: dict[str, Any]) -> StoredTurn:
    """Deserialize a stored turn document."""
    created_at = data.get("createdAt")
    if isinstance(created_at, datetime):
        created_at = created_at.isoformat()
    lang = data.get("lang")
    return StoredTurn(
        id=doc_id,
        role=Speaker(data.get("role", Speaker.USER.value)),
        content=data.get("content", "") or "",
        image_data_uri=data.get("imageDataUri"),
        source=data.get("source"),
        source_title=data.get("sourceBookName"),
        lang=Language(lang) if lang in ("en", "ar") else None,
        created_at=created_at,
    )


class BaseChatStore(ABC):
    """Abstract chat/document store."""

    @abstractmethod
    async def create_conversation(self, owner_id: str, seed_text: str | None) -> str:
        """Create a conversation titled from the seed text. Returns its id."""

    @abstractmethod
    async def append_turn(self, owner_id: str, chat_id: str, turn: StoredTurn) -> str:
        """Append a turn to a conversation. Returns the stored turn id."""

    @abstractmethod
    async def list_turns(self, owner_id: str, chat_id: str) -> list[StoredTurn]:
        """Read the ordered turn log, oldest first."""

    @abstractmethod
    def subscribe_turns(self, owner_id: str, chat_id: str) -> AsyncIterator[list[StoredTurn]]:
        """Yield the full ordered turn log now and after every change.

        Stores may end the stream once the conversation is deleted.
        """

    @abstractmethod
    async def list_conversations(self, owner_id: str, limit: int = 50) -> list[ConversationInfo]:
        """List conversations, most recent activity first."""

    @abstractmethod
    async def rename_conversation(self, owner_id: str, chat_id: str, title: str) -> None:
        """Set a conversation's title."""

    @abstractmethod
    async def delete_conversation(self, owner_id: str, chat_id: str) -> bool:
        """Delete a conversation and its turns. Returns False if it does not exist."""

    @abstractmethod
    async def list_reference_books(self, owner_id: str) -> list[ReferenceBook]:
        """Reference books uploaded by the owner."""

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Check store health."""
