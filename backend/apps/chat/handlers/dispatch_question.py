"""POST /chat - Stateless question dispatch.

Answers one question from the request body alone: nothing is read from
or written to the chat store.
"""

import logging
import uuid
from typing import Literal

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config import get_settings
from dependencies import get_deep_gateway, get_fast_gateway
from llm import BaseModelGateway, ask_model, build_conversation_request
from services import compact_history
from services.media import normalize_media
from services.types import Speaker, Turn

logger = logging.getLogger(__name__)

INVALID_PAYLOAD_ERROR = "Invalid payload"


# --- Request Schemas ---


class HistoryItem(BaseModel):
    """A prior turn supplied by the caller."""

    model_config = ConfigDict(populate_by_name=True)

    role: Speaker
    content: str | None = ""
    image_data: str | None = Field(
        None, alias="imageData", description="Inline image data or image URL"
    )
    image_base64: str | None = Field(None, alias="imageBase64")

    def to_turn(self) -> Turn:
        image = self.image_data or self.image_base64
        return Turn(
            speaker=self.role,
            text=self.content or "",
            media=normalize_media(image) if image else None,
        )


class DispatchRequest(BaseModel):
    """Request body for the dispatch endpoint.

    Both the camelCase field names and the older ``imageBase64`` /
    ``pdfBase64`` names are accepted.
    """

    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(..., description="The user's question")
    system_prompt: str | None = Field(None, alias="systemPrompt")
    image_data: str | None = Field(None, alias="imageData")
    image_base64: str | None = Field(None, alias="imageBase64")
    document_data: str | None = Field(None, alias="documentData")
    pdf_base64: str | None = Field(None, alias="pdfBase64")
    history: list[HistoryItem] = Field(default_factory=list)
    model: Literal["fast", "deep"] = Field(
        "fast", description="fast (multimodal) or deep (text only)"
    )

    @property
    def image(self) -> str | None:
        return self.image_data or self.image_base64

    @property
    def document(self) -> str | None:
        return self.document_data or self.pdf_base64


# --- Handler ---


async def dispatch_question(
    request: Request,
    fast_gateway: BaseModelGateway = Depends(get_fast_gateway),
    deep_gateway: BaseModelGateway = Depends(get_deep_gateway),
) -> JSONResponse:
    """Answer a question with optional attachments and caller-held history.

    Returns ``{"answer": ...}``, ``{"error": "Invalid payload"}`` with 400
    when the body is malformed, or ``{"error": ...}`` with 500 when the
    model call fails.
    """
    request_id = str(uuid.uuid4())[:8]

    try:
        body = DispatchRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        logger.info("[%s] Invalid dispatch payload: %s", request_id, e)
        return JSONResponse(status_code=400, content={"error": INVALID_PAYLOAD_ERROR})

    image = body.image
    logger.info(
        "[%s] Dispatch: question=%s, history=%d, image=%s, document=%s, model=%s",
        request_id,
        body.question[:100],
        len(body.history),
        f"{len(image)} chars ({image[:30]})" if image else None,
        bool(body.document),
        body.model,
    )

    history = compact_history(
        [item.to_turn() for item in body.history],
        get_settings().chat_history_max_messages,
    )
    conversation = build_conversation_request(
        body.question,
        system_prompt=body.system_prompt or "",
        history=history,
        image=image,
        document=body.document,
    )
    gateway = deep_gateway if body.model == "deep" else fast_gateway

    try:
        answer = await ask_model(gateway, conversation)
    except Exception as e:
        logger.exception("[%s] Dispatch failed", request_id)
        return JSONResponse(status_code=500, content={"error": str(e) or "Server error"})

    return JSONResponse(content={"answer": answer.text})
