"""Chat module - question dispatch, sending and history."""

from apps.chat.routes import router

__all__ = ["router"]
