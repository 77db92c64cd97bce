"""POST /chat/send - Send a message in a persisted conversation.

Runs the send pipeline:
1. Ensure the chat exists
2. Upload the image (inline fallback on failure)
3. Save the user turn
4. Ask the model
5. Save the classified assistant turn
"""

import logging
import uuid

from fastapi import Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from db import ChatStoreError
from dependencies import get_send_orchestrator
from responses import ResponseCode, error_response, success_response
from services.orchestrator import (
    InvalidPayloadError,
    SendCommand,
    SendInProgressError,
    SendOrchestrator,
)
from services.types import Language, UploadOk

logger = logging.getLogger(__name__)


# --- Request/Response Schemas (API-specific) ---


class SendMessageRequest(BaseModel):
    """Request body for the send endpoint."""

    owner_id: str = Field(..., min_length=1, description="Owner of the conversation")
    chat_id: str | None = Field(None, description="Existing chat ID; a new chat if omitted")
    question: str = Field(default="", max_length=8000, description="The user's question")
    image_data: str | None = Field(None, description="Inline image as a data URL or base64")
    expand_search_online: bool = Field(
        default=False, description="Label unmatched answers as web-sourced"
    )
    language: Language | None = Field(None, description="Override language detection")
    reference_titles: list[str] | None = Field(
        None,
        description="Available reference book file names. Read from the store if omitted.",
    )
    reference_text: str = Field(default="", description="Reference material for the prompt")


class SendMessageResult(BaseModel):
    """Successful send result."""

    chat_id: str
    answer: str
    source: str
    source_title: str | None = None
    lang: Language
    image_uploaded: bool = Field(..., description="False when the inline image was kept")


# --- Handler ---


async def send_message(
    request: SendMessageRequest,
    orchestrator: SendOrchestrator = Depends(get_send_orchestrator),
) -> JSONResponse:
    """Send a message and wait for the classified answer.

    On a model failure the user's turn stays saved and the response
    carries the localized apology with the chat ID.
    """
    request_id = str(uuid.uuid4())[:8]
    logger.info(
        "[%s] Send: owner=%s, chat=%s, question=%s, image=%s",
        request_id,
        request.owner_id,
        request.chat_id,
        request.question[:100],
        bool(request.image_data),
    )

    command = SendCommand(
        owner_id=request.owner_id,
        question=request.question,
        chat_id=request.chat_id,
        image_data=request.image_data,
        expand_search_online=request.expand_search_online,
        language=request.language,
        reference_titles=request.reference_titles,
        reference_text=request.reference_text,
    )

    try:
        outcome = await orchestrator.send(command)
    except InvalidPayloadError as e:
        return error_response(ResponseCode.INVALID_PAYLOAD, str(e), request_id)
    except SendInProgressError as e:
        return error_response(ResponseCode.SEND_IN_PROGRESS, str(e), request_id)
    except ChatStoreError as e:
        logger.exception("[%s] Store failure during send", request_id)
        return error_response(ResponseCode.STORE_ERROR, f"Failed to save message: {e}", request_id)

    if not outcome.succeeded:
        return error_response(
            ResponseCode.MODEL_INVOCATION_FAILED,
            outcome.error,
            request_id,
            error_details={"chat_id": outcome.chat_id, "lang": outcome.language.value},
        )

    result = outcome.result
    logger.info(
        "[%s] Answered chat %s: source=%s, title=%s",
        request_id,
        outcome.chat_id,
        result.source_kind.value,
        result.source_title,
    )
    data = SendMessageResult(
        chat_id=outcome.chat_id,
        answer=result.answer,
        source=result.source_kind.value,
        source_title=result.source_title,
        lang=result.language,
        image_uploaded=isinstance(outcome.upload, UploadOk),
    )
    return success_response(ResponseCode.SUCCESS, data.model_dump(mode="json"), request_id)
