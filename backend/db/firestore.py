"""Firestore chat store.

Stores conversations per owner with a messages subcollection:
- `users/{owner_id}/chats/{chat_id}` - conversation metadata
- `users/{owner_id}/chats/{chat_id}/messages/...` - ordered turn log
- `books` (filtered by `userId`) - reference library written by the upload UI
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import Any

from firebase_admin import firestore
from google.cloud.firestore_v1 import AsyncClient, Client
from google.oauth2 import service_account

from config import Settings, get_settings
from db.base import (
    BaseChatStore,
    ChatNotFoundError,
    ChatStoreError,
    ConversationInfo,
    chat_update_for_turn,
    conversation_title,
    message_preview,
    turn_from_document,
    turn_to_document,
)
from db.firebase import init_firebase_app
from services.types import ReferenceBook, StoredTurn

logger = logging.getLogger(__name__)


def _iso(value: Any) -> str | None:
    return value.isoformat() if isinstance(value, datetime) else value


class FirestoreChatStore(BaseChatStore):
    """Chat store backed by Firestore."""

    _initialized: bool = False
    _db: AsyncClient | None = None
    _watch_db: Client | None = None

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize Firestore clients (singleton pattern)."""
        if FirestoreChatStore._initialized:
            self.db = FirestoreChatStore._db
            self.watch_db = FirestoreChatStore._watch_db
            return

        settings = settings or get_settings()

        try:
            creds_dict = init_firebase_app(settings)
            gcp_credentials = service_account.Credentials.from_service_account_info(
                creds_dict
            )
            project = creds_dict.get("project_id")

            FirestoreChatStore._db = AsyncClient(project=project, credentials=gcp_credentials)
            # Snapshot listeners are only available on the synchronous client
            FirestoreChatStore._watch_db = Client(project=project, credentials=gcp_credentials)
            self.db = FirestoreChatStore._db
            self.watch_db = FirestoreChatStore._watch_db

            FirestoreChatStore._initialized = True
            logger.info("Firestore client initialized successfully")
        except Exception as e:
            logger.error("Failed to initialize Firestore: %s", e)
            raise

    def _chat_ref(self, owner_id: str, chat_id: str):
        return (
            self.db.collection("users")
            .document(owner_id)
            .collection("chats")
            .document(chat_id)
        )

    # --- Turn Log ---

    async def create_conversation(self, owner_id: str, seed_text: str | None) -> str:
        """Create a new conversation for an owner."""
        try:
            now = datetime.now(UTC)
            chat_ref = (
                self.db.collection("users").document(owner_id).collection("chats").document()
            )
            await chat_ref.set(
                {
                    "title": conversation_title(seed_text),
                    "createdAt": now,
                    "updatedAt": now,
                    "lastMessageAt": now,
                    "lastMessagePreview": message_preview(
                        seed_text if seed_text and seed_text.strip() else ""
                    ),
                }
            )
            logger.info("Created chat %s for owner %s", chat_ref.id, owner_id)
            return chat_ref.id

        except Exception as e:
            logger.error("Failed to create chat: %s", e)
            raise ChatStoreError(f"Failed to create chat: {e}") from e

    async def append_turn(self, owner_id: str, chat_id: str, turn: StoredTurn) -> str:
        """Append a turn and update the conversation's activity fields."""
        try:
            now = datetime.now(UTC)
            chat_ref = self._chat_ref(owner_id, chat_id)
            doc_ref = chat_ref.collection("messages").document()

            await doc_ref.set({**turn_to_document(turn), "createdAt": now})
            await chat_ref.set(chat_update_for_turn(turn, now), merge=True)

            logger.debug("Added %s turn to chat %s", turn.role.value, chat_id)
            return doc_ref.id

        except Exception as e:
            logger.error("Failed to add turn: %s", e)
            raise ChatStoreError(f"Failed to add turn: {e}") from e

    async def list_turns(self, owner_id: str, chat_id: str) -> list[StoredTurn]:
        """Get the ordered turn log of a conversation."""
        try:
            messages_ref = (
                self._chat_ref(owner_id, chat_id)
                .collection("messages")
                .order_by("createdAt", direction=firestore.Query.ASCENDING)
            )
            docs = await messages_ref.get()
            return [turn_from_document(doc.id, doc.to_dict()) for doc in docs]

        except Exception as e:
            logger.error("Failed to get turns: %s", e)
            raise ChatStoreError(f"Failed to get turns: {e}") from e

    async def subscribe_turns(
        self, owner_id: str, chat_id: str
    ) -> AsyncIterator[list[StoredTurn]]:
        """Yield the ordered turn log on every change until the consumer stops."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[list[StoredTurn]] = asyncio.Queue()

        def on_snapshot(docs, changes, read_time) -> None:
            turns = [turn_from_document(doc.id, doc.to_dict()) for doc in docs]
            loop.call_soon_threadsafe(queue.put_nowait, turns)

        query = (
            self.watch_db.collection("users")
            .document(owner_id)
            .collection("chats")
            .document(chat_id)
            .collection("messages")
            .order_by("createdAt")
        )
        watch = query.on_snapshot(on_snapshot)
        logger.debug("Subscribed to chat %s", chat_id)
        try:
            while True:
                yield await queue.get()
        finally:
            watch.unsubscribe()
            logger.debug("Unsubscribed from chat %s", chat_id)

    # --- Conversation Management ---

    async def list_conversations(self, owner_id: str, limit: int = 50) -> list[ConversationInfo]:
        """Get an owner's conversations, most recent first."""
        try:
            chats_ref = (
                self.db.collection("users")
                .document(owner_id)
                .collection("chats")
                .order_by("lastMessageAt", direction=firestore.Query.DESCENDING)
                .limit(limit)
            )
            docs = await chats_ref.get()

            chats = []
            for doc in docs:
                data = doc.to_dict()
                chats.append(
                    ConversationInfo(
                        id=doc.id,
                        title=data.get("title") or conversation_title(None),
                        last_message_preview=data.get("lastMessagePreview", ""),
                        created_at=_iso(data.get("createdAt")),
                        last_message_at=_iso(data.get("lastMessageAt")),
                    )
                )
            return chats

        except Exception as e:
            logger.error("Failed to get chats: %s", e)
            raise ChatStoreError(f"Failed to get chats: {e}") from e

    async def rename_conversation(self, owner_id: str, chat_id: str, title: str) -> None:
        """Rename a conversation."""
        chat_ref = self._chat_ref(owner_id, chat_id)
        try:
            doc = await chat_ref.get()
        except Exception as e:
            logger.error("Failed to read chat %s: %s", chat_id, e)
            raise ChatStoreError(f"Failed to read chat: {e}") from e

        if not doc.exists:
            raise ChatNotFoundError(f"Chat {chat_id} not found")

        try:
            await chat_ref.set({"title": title, "updatedAt": datetime.now(UTC)}, merge=True)
        except Exception as e:
            logger.error("Failed to rename chat: %s", e)
            raise ChatStoreError(f"Failed to rename chat: {e}") from e

    async def delete_conversation(self, owner_id: str, chat_id: str) -> bool:
        """Delete a conversation and all its turns.

        Returns:
            False if the conversation does not exist.
        """
        chat_ref = self._chat_ref(owner_id, chat_id)
        try:
            doc = await chat_ref.get()
            if not doc.exists:
                return False

            docs = await chat_ref.collection("messages").get()
            deleted_count = 0

            batch = self.db.batch()
            for message_doc in docs:
                batch.delete(message_doc.reference)
                deleted_count += 1

                if deleted_count % 500 == 0:
                    await batch.commit()
                    batch = self.db.batch()

            if deleted_count % 500 != 0:
                await batch.commit()

            await chat_ref.delete()
            logger.info("Deleted chat %s (%d turns)", chat_id, deleted_count)
            return True

        except Exception as e:
            logger.error("Failed to delete chat: %s", e)
            raise ChatStoreError(f"Failed to delete chat: {e}") from e

    async def list_reference_books(self, owner_id: str) -> list[ReferenceBook]:
        """Get the reference books an owner has uploaded."""
        try:
            books_ref = self.db.collection("books").where("userId", "==", owner_id)
            docs = await books_ref.get()
            return [
                ReferenceBook(id=doc.id, file_name=doc.to_dict().get("fileName", ""))
                for doc in docs
                if doc.to_dict().get("fileName")
            ]

        except Exception as e:
            logger.error("Failed to get books: %s", e)
            raise ChatStoreError(f"Failed to get books: {e}") from e

    async def health_check(self) -> dict[str, Any]:
        """Check Firestore connection health."""
        start = time.time()
        try:
            test_ref = self.db.collection("_health_check").document("test")
            await test_ref.set({"timestamp": datetime.now(UTC)})
            await test_ref.get()

            latency = (time.time() - start) * 1000
            return {"status": "healthy", "latency_ms": round(latency, 2)}
        except Exception as e:
            return {"status": "unhealthy", "error": str(e)}
