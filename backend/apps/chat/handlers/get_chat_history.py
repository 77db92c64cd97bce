"""GET /chat/history - Get the persisted turns of a chat."""

import logging

from fastapi import Depends, HTTPException, Query
from pydantic import BaseModel, Field

from db import BaseChatStore, ChatStoreError
from dependencies import get_chat_store
from responses import ResponseCode, error_dict
from services.types import StoredTurn

logger = logging.getLogger(__name__)


# --- Response Schemas ---


class ChatHistoryMessage(BaseModel):
    """A message in chat history response."""

    id: str = Field(..., description="Message ID")
    role: str = Field(..., description="Message role (user/assistant)")
    content: str = Field(..., description="Message content")
    image_data_uri: str | None = Field(None, description="Uploaded image URL or inline image")
    source: str | None = Field(None, description="textbook or web (assistant messages)")
    source_title: str | None = Field(None, description="Matched reference book")
    lang: str | None = Field(None, description="Answer language (assistant messages)")
    created_at: str | None = Field(None, description="ISO timestamp")

    @classmethod
    def from_turn(cls, turn: StoredTurn) -> "ChatHistoryMessage":
        return cls(
            id=turn.id,
            role=turn.role.value,
            content=turn.content,
            image_data_uri=turn.image_data_uri,
            source=turn.source,
            source_title=turn.source_title,
            lang=turn.lang.value if turn.lang else None,
            created_at=turn.created_at,
        )


class ChatHistoryResponse(BaseModel):
    """Response for chat history endpoint."""

    chat_id: str
    messages: list[ChatHistoryMessage]
    total_count: int = Field(..., description="Total message count")


# --- Handler ---


async def get_chat_history(
    owner_id: str = Query(..., min_length=1, description="Owner ID"),
    chat_id: str = Query(..., min_length=1, description="Chat ID"),
    store: BaseChatStore = Depends(get_chat_store),
) -> ChatHistoryResponse:
    """Get the ordered turn log of a chat, oldest first."""
    try:
        turns = await store.list_turns(owner_id, chat_id)
    except ChatStoreError as e:
        logger.exception("Failed to get chat history")
        raise HTTPException(
            status_code=500,
            detail=error_dict(
                ResponseCode.STORE_ERROR, f"Failed to retrieve chat history: {e}"
            ),
        )

    return ChatHistoryResponse(
        chat_id=chat_id,
        messages=[ChatHistoryMessage.from_turn(turn) for turn in turns],
        total_count=len(turns),
    )
