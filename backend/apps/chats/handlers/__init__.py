"""Chats handlers."""

from apps.chats.handlers.delete_chat import delete_chat
from apps.chats.handlers.list_chats import list_chats
from apps.chats.handlers.rename_chat import rename_chat

__all__ = ["list_chats", "rename_chat", "delete_chat"]
