"""In-process chat store for development and tests.

Keeps conversations in dictionaries and notifies subscribers through
per-subscription asyncio queues. Not shared across processes.
"""

import asyncio
import logging
import uuid
from collections import defaultdict
from collections.abc import AsyncIterator
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from db.base import (
    BaseChatStore,
    ChatNotFoundError,
    ConversationInfo,
    chat_update_for_turn,
    conversation_title,
    message_preview,
)
from services.types import ReferenceBook, StoredTurn

logger = logging.getLogger(__name__)


class InMemoryChatStore(BaseChatStore):
    """Chat store held in process memory."""

    def __init__(self) -> None:
        self._chats: dict[tuple[str, str], dict[str, Any]] = {}
        self._turns: dict[tuple[str, str], list[StoredTurn]] = defaultdict(list)
        self._books: dict[str, list[ReferenceBook]] = defaultdict(list)
        self._subscribers: dict[tuple[str, str], list[asyncio.Queue]] = {}

    def add_reference_book(self, owner_id: str, file_name: str) -> ReferenceBook:
        """Register a reference book for an owner."""
        book = ReferenceBook(id=uuid.uuid4().hex, file_name=file_name)
        self._books[owner_id].append(book)
        return book

    def _publish(self, key: tuple[str, str], snapshot: list[StoredTurn] | None) -> None:
        for queue in self._subscribers.get(key, ()):
            queue.put_nowait(snapshot)

    async def create_conversation(self, owner_id: str, seed_text: str | None) -> str:
        chat_id = uuid.uuid4().hex
        now = datetime.now(UTC)
        self._chats[(owner_id, chat_id)] = {
            "title": conversation_title(seed_text),
            "createdAt": now,
            "updatedAt": now,
            "lastMessageAt": now,
            "lastMessagePreview": message_preview(seed_text),
        }
        logger.info("Created chat %s for owner %s", chat_id, owner_id)
        return chat_id

    async def append_turn(self, owner_id: str, chat_id: str, turn: StoredTurn) -> str:
        key = (owner_id, chat_id)
        now = datetime.now(UTC)
        stored = replace(turn, id=uuid.uuid4().hex, created_at=now.isoformat())
        self._turns[key].append(stored)
        self._chats.setdefault(key, {"title": conversation_title(None), "createdAt": now})
        self._chats[key].update(chat_update_for_turn(turn, now))
        self._publish(key, list(self._turns[key]))
        return stored.id

    async def list_turns(self, owner_id: str, chat_id: str) -> list[StoredTurn]:
        return list(self._turns.get((owner_id, chat_id), []))

    async def subscribe_turns(
        self, owner_id: str, chat_id: str
    ) -> AsyncIterator[list[StoredTurn]]:
        key = (owner_id, chat_id)
        queue: asyncio.Queue[list[StoredTurn] | None] = asyncio.Queue()
        queue.put_nowait(list(self._turns.get(key, [])))
        self._subscribers.setdefault(key, []).append(queue)
        try:
            while True:
                turns = await queue.get()
                # None marks the conversation as deleted
                if turns is None:
                    return
                yield turns
        finally:
            subscribers = self._subscribers.get(key, [])
            if queue in subscribers:
                subscribers.remove(queue)
            if not subscribers:
                self._subscribers.pop(key, None)

    async def list_conversations(self, owner_id: str, limit: int = 50) -> list[ConversationInfo]:
        chats = [
            (chat_id, data)
            for (owner, chat_id), data in self._chats.items()
            if owner == owner_id
        ]
        chats.sort(
            key=lambda item: item[1].get("lastMessageAt") or item[1]["createdAt"],
            reverse=True,
        )
        return [
            ConversationInfo(
                id=chat_id,
                title=data.get("title") or conversation_title(None),
                last_message_preview=data.get("lastMessagePreview", ""),
                created_at=data["createdAt"].isoformat(),
                last_message_at=(
                    data["lastMessageAt"].isoformat() if data.get("lastMessageAt") else None
                ),
            )
            for chat_id, data in chats[:limit]
        ]

    async def rename_conversation(self, owner_id: str, chat_id: str, title: str) -> None:
        key = (owner_id, chat_id)
        if key not in self._chats:
            raise ChatNotFoundError(f"Chat {chat_id} not found")
        self._chats[key].update({"title": title, "updatedAt": datetime.now(UTC)})

    async def delete_conversation(self, owner_id: str, chat_id: str) -> bool:
        key = (owner_id, chat_id)
        existed = self._chats.pop(key, None) is not None
        self._turns.pop(key, None)
        self._publish(key, None)
        return existed

    async def list_reference_books(self, owner_id: str) -> list[ReferenceBook]:
        return list(self._books.get(owner_id, []))

    async def health_check(self) -> dict[str, Any]:
        return {"status": "healthy", "latency_ms": 0.0}
