"""GET /chat/status - Whether a send is in flight for a chat."""

from fastapi import Depends, Query
from pydantic import BaseModel, Field

from dependencies import get_send_orchestrator
from services.orchestrator import SendOrchestrator


class SendStatusResponse(BaseModel):
    """Typing indicator state."""

    chat_id: str
    typing: bool = Field(..., description="True while a send is in flight")


async def get_send_status(
    chat_id: str = Query(..., min_length=1, description="Chat ID"),
    orchestrator: SendOrchestrator = Depends(get_send_orchestrator),
) -> SendStatusResponse:
    return SendStatusResponse(chat_id=chat_id, typing=orchestrator.is_typing(chat_id))
