"""Chat handlers."""

from apps.chat.handlers.dispatch_question import dispatch_question
from apps.chat.handlers.get_chat_history import get_chat_history
from apps.chat.handlers.get_send_status import get_send_status
from apps.chat.handlers.send_message import send_message
from apps.chat.handlers.stream_turns import stream_turns

__all__ = [
    "dispatch_question",
    "send_message",
    "get_chat_history",
    "stream_turns",
    "get_send_status",
]
