"""Tests for the Firestore chat store against a mocked client."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from db.base import ChatStoreError
from db.firestore import FirestoreChatStore


@pytest.fixture
def firestore_store():
    """Firestore store with a mocked client, bypassing credential setup."""
    store = FirestoreChatStore.__new__(FirestoreChatStore)
    store.db = MagicMock()
    store.watch_db = MagicMock()
    return store


@pytest.fixture
def chat_ref(firestore_store):
    """Mocked document reference returned for every chat lookup."""
    ref = MagicMock()
    ref.delete = AsyncMock()
    firestore_store._chat_ref = MagicMock(return_value=ref)
    return ref


class TestDeleteConversation:
    """Tests for FirestoreChatStore.delete_conversation."""

    @pytest.mark.asyncio
    async def test_missing_chat_returns_false(self, firestore_store, chat_ref):
        """Test an unknown chat is reported as not deleted."""
        chat_ref.get = AsyncMock(return_value=MagicMock(exists=False))

        assert await firestore_store.delete_conversation("u1", "missing") is False
        chat_ref.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deletes_messages_then_chat(self, firestore_store, chat_ref):
        """Test every message is batch-deleted before the chat document."""
        chat_ref.get = AsyncMock(return_value=MagicMock(exists=True))
        chat_ref.collection.return_value.get = AsyncMock(return_value=[MagicMock(), MagicMock()])
        batch = MagicMock()
        batch.commit = AsyncMock()
        firestore_store.db.batch.return_value = batch

        assert await firestore_store.delete_conversation("u1", "c1") is True
        assert batch.delete.call_count == 2
        batch.commit.assert_awaited_once()
        chat_ref.delete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_store_failure_raises(self, firestore_store, chat_ref):
        """Test a Firestore error is raised instead of reported as a missing chat."""
        chat_ref.get = AsyncMock(side_effect=RuntimeError("deadline exceeded"))

        with pytest.raises(ChatStoreError):
            await firestore_store.delete_conversation("u1", "c1")


class TestFieldNames:
    """Tests that queries use the web client's field names."""

    @pytest.mark.asyncio
    async def test_turns_ordered_by_created_at(self, firestore_store, chat_ref):
        """Test the turn log is ordered by createdAt."""
        doc = MagicMock(id="m1")
        doc.to_dict.return_value = {"role": "user", "content": "q", "imageDataUri": "AAAA"}
        query = chat_ref.collection.return_value.order_by.return_value
        query.get = AsyncMock(return_value=[doc])

        turns = await firestore_store.list_turns("u1", "c1")

        assert chat_ref.collection.return_value.order_by.call_args.args[0] == "createdAt"
        assert turns[0].image_data_uri == "AAAA"

    @pytest.mark.asyncio
    async def test_conversations_ordered_by_last_message_at(self, firestore_store):
        """Test chats are listed by lastMessageAt with their stored preview."""
        now = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        doc = MagicMock(id="c1")
        doc.to_dict.return_value = {
            "title": "Biology",
            "lastMessagePreview": "Mitosis has four phases.",
            "createdAt": now,
            "lastMessageAt": now,
        }
        chats_ref = (
            firestore_store.db.collection.return_value.document.return_value.collection.return_value
        )
        chats_ref.order_by.return_value.limit.return_value.get = AsyncMock(return_value=[doc])

        chats = await firestore_store.list_conversations("u1")

        assert chats_ref.order_by.call_args.args[0] == "lastMessageAt"
        assert chats[0].title == "Biology"
        assert chats[0].last_message_preview == "Mitosis has four phases."
        assert chats[0].last_message_at == now.isoformat()
