"""GET /chats - List an owner's chats, most recent first."""

import logging

from fastapi import Depends, HTTPException, Query
from pydantic import BaseModel, Field

from db import BaseChatStore, ChatStoreError
from dependencies import get_chat_store
from responses import ResponseCode, error_dict

logger = logging.getLogger(__name__)


# --- Response Schemas ---


class ChatMetadata(BaseModel):
    """Metadata for a chat."""

    id: str = Field(..., description="Chat ID")
    title: str = Field(default="New chat", description="Chat title")
    last_message_preview: str = Field(default="", description="Start of the last message")
    created_at: str | None = Field(None, description="ISO timestamp of creation")
    last_message_at: str | None = Field(None, description="ISO timestamp of last activity")


class ChatListResponse(BaseModel):
    """Response for listing chats."""

    chats: list[ChatMetadata]
    owner_id: str


# --- Handler ---


async def list_chats(
    owner_id: str = Query(..., min_length=1, description="Owner ID"),
    limit: int = Query(default=50, ge=1, le=200, description="Max chats to return"),
    store: BaseChatStore = Depends(get_chat_store),
) -> ChatListResponse:
    """List an owner's chats by most recent activity."""
    try:
        chats = await store.list_conversations(owner_id, limit=limit)
    except ChatStoreError as e:
        logger.exception("Failed to list chats")
        raise HTTPException(
            status_code=500,
            detail=error_dict(ResponseCode.STORE_ERROR, f"Failed to list chats: {e}"),
        )

    return ChatListResponse(
        chats=[
            ChatMetadata(
                id=c.id,
                title=c.title,
                last_message_preview=c.last_message_preview,
                created_at=c.created_at,
                last_message_at=c.last_message_at,
            )
            for c in chats
        ],
        owner_id=owner_id,
    )
