"""PATCH /chats/{chat_id} - Rename a chat."""

import logging
import uuid

from fastapi import Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from db import BaseChatStore, ChatNotFoundError, ChatStoreError
from dependencies import get_chat_store
from responses import ResponseCode, error_response, success_response

logger = logging.getLogger(__name__)


class RenameChatRequest(BaseModel):
    """Request body for renaming a chat."""

    title: str = Field(..., min_length=1, max_length=200, description="New chat title")


async def rename_chat(
    chat_id: str,
    request: RenameChatRequest,
    owner_id: str = Query(..., min_length=1, description="Owner ID"),
    store: BaseChatStore = Depends(get_chat_store),
) -> JSONResponse:
    """Set a chat's title."""
    request_id = str(uuid.uuid4())[:8]
    title = request.title.strip()
    logger.info("[%s] Rename chat %s", request_id, chat_id)

    if not title:
        return error_response(ResponseCode.VALIDATION_ERROR, "Title must not be blank", request_id)

    try:
        await store.rename_conversation(owner_id, chat_id, title)
    except ChatNotFoundError:
        return error_response(ResponseCode.CHAT_NOT_FOUND, request_id=request_id)
    except ChatStoreError as e:
        logger.exception("[%s] Failed to rename chat", request_id)
        return error_response(
            ResponseCode.STORE_ERROR, f"Failed to rename chat: {e}", request_id
        )

    return success_response(
        ResponseCode.CHAT_RENAMED, {"chat_id": chat_id, "title": title}, request_id
    )
