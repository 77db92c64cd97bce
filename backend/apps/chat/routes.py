"""Chat routes - registers all chat endpoints."""

from fastapi import APIRouter

from apps.chat.handlers import (
    dispatch_question,
    get_chat_history,
    get_send_status,
    send_message,
    stream_turns,
)
from apps.chat.handlers.get_chat_history import ChatHistoryResponse
from apps.chat.handlers.get_send_status import SendStatusResponse

router = APIRouter(prefix="/chat", tags=["Chat"])

# POST /chat - Stateless question dispatch
router.post("")(dispatch_question)

# POST /chat/send - Send a message in a persisted chat
router.post("/send")(send_message)

# GET /chat/history - Get chat history
router.get("/history", response_model=ChatHistoryResponse)(get_chat_history)

# GET /chat/stream - Live chat history (SSE)
router.get("/stream")(stream_turns)

# GET /chat/status - Typing indicator
router.get("/status", response_model=SendStatusResponse)(get_send_status)
