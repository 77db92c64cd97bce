"""Chats routes - registers conversation management endpoints."""

from fastapi import APIRouter

from apps.chats.handlers import delete_chat, list_chats, rename_chat
from apps.chats.handlers.list_chats import ChatListResponse

router = APIRouter(prefix="/chats", tags=["Chats"])

# GET /chats - List chats for an owner
router.get("", response_model=ChatListResponse)(list_chats)

# PATCH /chats/{chat_id} - Rename chat
router.patch("/{chat_id}")(rename_chat)

# DELETE /chats/{chat_id} - Delete chat
router.delete("/{chat_id}")(delete_chat)
