"""Persistence for conversations, turns and the reference library."""

from db.base import (
    BaseChatStore,
    ChatNotFoundError,
    ChatStoreError,
    ConversationInfo,
)
from db.memory import InMemoryChatStore

__all__ = [
    "BaseChatStore",
    "ChatNotFoundError",
    "ChatStoreError",
    "ConversationInfo",
    "InMemoryChatStore",
]
