"""GET /chat/stream - Live turn list of a chat as Server-Sent Events.

Every change in the store produces one ``snapshot`` event carrying the
full ordered turn list, so clients render store state instead of
predicting it.
"""

import json
import logging
import uuid

from fastapi import Depends, Query, Request
from fastapi.responses import StreamingResponse

from apps.chat.handlers.get_chat_history import ChatHistoryMessage
from db import BaseChatStore, ChatStoreError
from dependencies import get_chat_store

logger = logging.getLogger(__name__)


async def stream_turns(
    request: Request,
    owner_id: str = Query(..., min_length=1, description="Owner ID"),
    chat_id: str = Query(..., min_length=1, description="Chat ID"),
    store: BaseChatStore = Depends(get_chat_store),
) -> StreamingResponse:
    """Stream the chat's turn list.

    Events:
    - event: "snapshot" - Full ordered turn list
    - event: "error" - Subscription failed
    """
    request_id = str(uuid.uuid4())[:8]
    logger.info("[%s] Subscribe: owner=%s, chat=%s", request_id, owner_id, chat_id)

    async def generate_sse_events():
        subscription = store.subscribe_turns(owner_id, chat_id)
        try:
            async for turns in subscription:
                if await request.is_disconnected():
                    break
                payload = {
                    "chat_id": chat_id,
                    "messages": [
                        ChatHistoryMessage.from_turn(turn).model_dump() for turn in turns
                    ],
                }
                yield f"event: snapshot\ndata: {json.dumps(payload)}\n\n"

        except ChatStoreError as e:
            logger.exception("[%s] Subscription error", request_id)
            yield f"event: error\ndata: {json.dumps({'error': str(e)})}\n\n"

        finally:
            await subscription.aclose()
            logger.info("[%s] Unsubscribed from chat %s", request_id, chat_id)

    return StreamingResponse(
        generate_sse_events(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Request-ID": request_id,
        },
    )
