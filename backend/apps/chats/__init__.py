"""Chats module - conversation list management."""

from apps.chats.routes import router

__all__ = ["router"]
