"""Services module for the conversation pipeline.

Contains the pure building blocks used by the send orchestrator and the
dispatch endpoint:
- Media reference normalization
- History compaction
- System prompt composition
- Request assembly
- Response source classification

Note: The orchestrator lives in services.orchestrator and is wired via
dependencies.py using FastAPI DI.
"""

from services.assembler import assemble_request
from services.classifier import classify_response, match_reference_title
from services.history import compact_history, turns_from_records
from services.media import normalize_media, resolve_mime_type
from services.prompts import compose_system_prompt, detect_language, resolve_language
from services.types import (
    ClassifiedResult,
    ContentBlock,
    ConversationRequest,
    Language,
    MediaRef,
    ModelAnswer,
    SourceKind,
    Speaker,
    StoredTurn,
    Turn,
)

__all__ = [
    # Pipeline steps
    "assemble_request",
    "classify_response",
    "match_reference_title",
    "compact_history",
    "turns_from_records",
    "normalize_media",
    "resolve_mime_type",
    "compose_system_prompt",
    "detect_language",
    "resolve_language",
    # Types
    "ClassifiedResult",
    "ContentBlock",
    "ConversationRequest",
    "Language",
    "MediaRef",
    "ModelAnswer",
    "SourceKind",
    "Speaker",
    "StoredTurn",
    "Turn",
]
