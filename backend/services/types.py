"""Shared types and dataclasses for the chat pipeline.

Provides typed alternatives to loose message dicts for better type safety.
Content parts and blocks reject empty values at construction time, so
code downstream of the assembler never checks for emptiness again.
"""

from dataclasses import dataclass
from enum import Enum


class Speaker(str, Enum):
    """Who produced a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ModelRole(str, Enum):
    """Role vocabulary of assembled model requests."""

    SYSTEM = "system"
    USER = "user"
    MODEL = "model"


class MediaKind(str, Enum):
    """Attachment category."""

    IMAGE = "image"
    DOCUMENT = "document"


class LocatorKind(str, Enum):
    """How a media payload is addressed."""

    INLINE = "inline"
    REMOTE = "remote"


class Language(str, Enum):
    """Conversation languages."""

    EN = "en"
    AR = "ar"


class SourceKind(str, Enum):
    """Where an answer's information came from."""

    TEXTBOOK = "textbook"
    WEB = "web"


@dataclass(frozen=True)
class MediaRef:
    """A resolved media reference. ``mime_type`` is never empty."""

    kind: MediaKind
    locator_kind: LocatorKind
    locator: str
    mime_type: str

    @property
    def is_remote(self) -> bool:
        return self.locator_kind is LocatorKind.REMOTE


@dataclass(frozen=True)
class Turn:
    """One speaker's contribution to a conversation.

    A turn carries at most one image and, independently, one document.
    """

    speaker: Speaker
    text: str = ""
    media: MediaRef | None = None
    document: MediaRef | None = None

    @property
    def has_content(self) -> bool:
        return (
            bool(self.text and self.text.strip())
            or self.media is not None
            or self.document is not None
        )


@dataclass(frozen=True)
class TextPart:
    """Text content of a block."""

    text: str

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise ValueError("TextPart requires non-empty text")


@dataclass(frozen=True)
class MediaPart:
    """Media content of a block."""

    media: MediaRef


ContentPart = TextPart | MediaPart


@dataclass(frozen=True)
class ContentBlock:
    """A role-tagged, non-empty sequence of content parts."""

    role: ModelRole
    parts: tuple[ContentPart, ...]

    def __post_init__(self) -> None:
        if not self.parts:
            raise ValueError("ContentBlock requires at least one part")

    @property
    def text_parts(self) -> list[TextPart]:
        return [p for p in self.parts if isinstance(p, TextPart)]

    @property
    def media_parts(self) -> list[MediaPart]:
        return [p for p in self.parts if isinstance(p, MediaPart)]


@dataclass(frozen=True)
class ConversationRequest:
    """Everything one dispatch needs. Owned by a single dispatch call."""

    system_prompt: str
    turns: tuple[Turn, ...]
    pending_turn: Turn


@dataclass(frozen=True)
class ModelAnswer:
    """Plain-text answer extracted from a model response envelope."""

    text: str


@dataclass(frozen=True)
class ReferenceBook:
    """A reference document available to the student."""

    id: str
    file_name: str


@dataclass(frozen=True)
class ClassifiedResult:
    """An answer labelled with its detected source."""

    answer: str
    source_kind: SourceKind
    language: Language
    source_title: str | None = None


@dataclass(frozen=True)
class UploadOk:
    """Blob upload succeeded; ``url`` is publicly fetchable."""

    url: str


@dataclass(frozen=True)
class UploadErr:
    """Blob upload failed; the caller falls back to inline data."""

    reason: str


UploadResult = UploadOk | UploadErr


@dataclass
class StoredTurn:
    """A turn as persisted in the chat store."""

    role: Speaker
    content: str = ""
    image_data_uri: str | None = None
    source: str | None = None
    source_title: str | None = None
    lang: Language | None = None
    id: str = ""
    created_at: str | None = None
