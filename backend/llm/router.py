"""Routes a conversation request to a model gateway.

Usage:
    request = build_conversation_request("What is mitosis?", system_prompt=prompt)
    answer = await ask_model(gateway, request)
"""

import logging
from collections.abc import Sequence

from services.assembler import assemble_request
from services.media import normalize_media
from services.types import (
    ConversationRequest,
    MediaKind,
    ModelAnswer,
    Speaker,
    Turn,
)

from .base import BaseModelGateway

logger = logging.getLogger(__name__)


def build_conversation_request(
    question: str,
    *,
    system_prompt: str = "",
    history: Sequence[Turn] = (),
    image: str | None = None,
    document: str | None = None,
) -> ConversationRequest:
    """Build a request from a question and optional attachments."""
    pending = Turn(
        speaker=Speaker.USER,
        text=question or "",
        media=normalize_media(image) if image else None,
        document=normalize_media(document, MediaKind.DOCUMENT) if document else None,
    )
    return ConversationRequest(
        system_prompt=system_prompt or "",
        turns=tuple(history),
        pending_turn=pending,
    )


async def ask_model(gateway: BaseModelGateway, request: ConversationRequest) -> ModelAnswer:
    """Assemble a request and invoke the gateway.

    Failures propagate unchanged; there is no retry at this layer.
    """
    blocks = assemble_request(request)
    pending = request.pending_turn
    logger.info(
        "Asking %s: history=%d, blocks=%d, image=%s, document=%s",
        gateway.model,
        len(request.turns),
        len(blocks),
        pending.media is not None,
        pending.document is not None,
    )
    answer = await gateway.generate(blocks)
    logger.info("Answer from %s: %d chars", gateway.model, len(answer.text))
    return answer
