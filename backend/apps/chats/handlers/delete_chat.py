"""DELETE /chats/{chat_id} - Delete a chat."""

import logging
import uuid

from fastapi import Depends, Query
from fastapi.responses import JSONResponse

from db import BaseChatStore, ChatStoreError
from dependencies import get_chat_store
from responses import ResponseCode, error_response, success_response

logger = logging.getLogger(__name__)


async def delete_chat(
    chat_id: str,
    owner_id: str = Query(..., min_length=1, description="Owner ID"),
    store: BaseChatStore = Depends(get_chat_store),
) -> JSONResponse:
    """Delete a chat and all its messages."""
    request_id = str(uuid.uuid4())[:8]
    logger.info("[%s] Delete chat request: %s", request_id, chat_id)

    try:
        deleted = await store.delete_conversation(owner_id, chat_id)
    except ChatStoreError as e:
        logger.exception("[%s] Failed to delete chat", request_id)
        return error_response(
            ResponseCode.STORE_ERROR, f"Failed to delete chat: {e}", request_id
        )

    if not deleted:
        return error_response(
            ResponseCode.CHAT_NOT_FOUND, f"Chat {chat_id} not found", request_id
        )

    return success_response(ResponseCode.CHAT_DELETED, {"deleted_chat_id": chat_id}, request_id)
