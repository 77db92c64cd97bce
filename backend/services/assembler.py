"""Request assembly.

Merges the system prompt, compacted history and the pending turn into one
ordered list of role-tagged content blocks. Within a turn the text part
always precedes its media parts, since the model associates media with the
text next to it.
"""

from services.types import (
    ContentBlock,
    ContentPart,
    ConversationRequest,
    MediaPart,
    ModelRole,
    Speaker,
    TextPart,
    Turn,
)

_ROLE_MAP: dict[Speaker, ModelRole] = {
    Speaker.USER: ModelRole.USER,
    Speaker.ASSISTANT: ModelRole.MODEL,
}


def turn_parts(turn: Turn) -> list[ContentPart]:
    """Content parts of a turn: text first, then image, then document."""
    parts: list[ContentPart] = []
    text = (turn.text or "").strip()
    if text:
        parts.append(TextPart(text))
    if turn.media is not None:
        parts.append(MediaPart(turn.media))
    if turn.document is not None:
        parts.append(MediaPart(turn.document))
    return parts


def turn_block(turn: Turn) -> ContentBlock | None:
    """Build the block for one turn, or None if it has nothing to send."""
    parts = turn_parts(turn)
    if not parts:
        return None
    return ContentBlock(role=_ROLE_MAP[turn.speaker], parts=tuple(parts))


def assemble_request(request: ConversationRequest) -> list[ContentBlock]:
    """Assemble the ordered block list for a model adapter.

    Order: optional system block, one block per history turn, then the
    pending user block.
    """
    blocks: list[ContentBlock] = []

    system_prompt = (request.system_prompt or "").strip()
    if system_prompt:
        blocks.append(ContentBlock(role=ModelRole.SYSTEM, parts=(TextPart(system_prompt),)))

    for turn in request.turns:
        block = turn_block(turn)
        if block is not None:
            blocks.append(block)

    pending = turn_block(request.pending_turn)
    if pending is not None:
        blocks.append(pending)

    return blocks
