"""Send orchestration for one user-initiated message.

Sequences, strictly one step at a time:
1. Ensure a conversation exists
2. Attempt the image upload (falls back to the inline image on failure)
3. Persist the user turn
4. Invoke the model on the compacted prior history plus the new turn
5. Persist the classified assistant turn

The user turn is written before the model is called, so it survives a
model failure. On model failure the assistant turn is never written and
the caller receives a localized apology.

One send may be in flight per conversation. This is cooperative: a
second send for the same conversation is rejected, nothing is cancelled.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from db.base import BaseChatStore
from llm.base import BaseModelGateway
from llm.router import ask_model, build_conversation_request
from services.classifier import classify_response
from services.history import compact_history, turns_from_records
from services.images import ImageProcessingError, compress_image
from services.prompts import compose_system_prompt, model_failure_message, resolve_language
from services.types import (
    ClassifiedResult,
    Language,
    Speaker,
    StoredTurn,
    UploadErr,
    UploadOk,
    UploadResult,
)
from storage.blob import BaseBlobUploader, UploadError

logger = logging.getLogger(__name__)

MEDIA_ONLY_SEED: dict[Language, str] = {
    Language.EN: "Image",
    Language.AR: "صورة",
}


class InvalidPayloadError(Exception):
    """Raised when a send has neither text nor an image."""


class SendInProgressError(Exception):
    """Raised when a conversation already has a send in flight."""


class SendState(str, Enum):
    """Pipeline states, in order."""

    IDLE = "idle"
    CHAT_ENSURED = "chat_ensured"
    MEDIA_UPLOAD_ATTEMPTED = "media_upload_attempted"
    USER_TURN_PERSISTED = "user_turn_persisted"
    MODEL_INVOKED = "model_invoked"
    ASSISTANT_TURN_PERSISTED = "assistant_turn_persisted"


@dataclass
class SendCommand:
    """One user send."""

    owner_id: str
    question: str = ""
    chat_id: str | None = None
    image_data: str | None = None
    expand_search_online: bool = False
    language: Language | None = None
    reference_titles: list[str] | None = None
    reference_text: str = ""


@dataclass
class SendOutcome:
    """Result of a send.

    ``error`` is set (and ``result`` is None) when the model call failed.
    """

    chat_id: str
    language: Language
    states: list[SendState] = field(default_factory=list)
    result: ClassifiedResult | None = None
    error: str | None = None
    upload: UploadResult | None = None
    user_image_locator: str | None = None

    @property
    def state(self) -> SendState:
        return self.states[-1] if self.states else SendState.IDLE

    @property
    def succeeded(self) -> bool:
        return self.result is not None


class SendOrchestrator:
    """Runs the send pipeline against injected collaborators."""

    def __init__(
        self,
        store: BaseChatStore,
        uploader: BaseBlobUploader,
        gateway: BaseModelGateway,
        *,
        history_window: int = 10,
        image_max_dimension: int = 1200,
        image_quality: int = 80,
    ) -> None:
        self.store = store
        self.uploader = uploader
        self.gateway = gateway
        self.history_window = history_window
        self.image_max_dimension = image_max_dimension
        self.image_quality = image_quality
        self._in_flight: set[str] = set()

    def is_typing(self, chat_id: str) -> bool:
        """Whether a send is in flight for the conversation."""
        return chat_id in self._in_flight

    def _claim(self, chat_id: str) -> None:
        if chat_id in self._in_flight:
            raise SendInProgressError(f"A message is already being sent in chat {chat_id}")
        self._in_flight.add(chat_id)

    async def attempt_upload(self, owner_id: str, image_data: str) -> UploadResult:
        """Re-encode and upload an image, reporting failure as a value."""
        path = f"users/{owner_id}/uploads/{int(time.time() * 1000)}.jpg"
        try:
            payload = await asyncio.to_thread(
                compress_image,
                image_data,
                max_dimension=self.image_max_dimension,
                quality=self.image_quality,
            )
            url = await self.uploader.upload(payload, path, content_type="image/jpeg")
        except (ImageProcessingError, UploadError) as e:
            return UploadErr(reason=str(e))
        return UploadOk(url=url)

    async def send(self, command: SendCommand) -> SendOutcome:
        """Run the pipeline for one send.

        Raises:
            InvalidPayloadError: If there is neither text nor an image.
            SendInProgressError: If the conversation has a send in flight.
        """
        question = (command.question or "").strip()
        if not question and not command.image_data:
            raise InvalidPayloadError("A message needs text or an image")

        language = resolve_language(question, command.language)
        chat_id = command.chat_id
        if chat_id:
            self._claim(chat_id)

        try:
            # --- ChatEnsured ---
            prior_records: list[StoredTurn] = []
            if not chat_id:
                chat_id = await self.store.create_conversation(
                    command.owner_id, question or MEDIA_ONLY_SEED[language]
                )
                self._claim(chat_id)
            else:
                prior_records = await self.store.list_turns(command.owner_id, chat_id)

            outcome = SendOutcome(chat_id=chat_id, language=language)
            outcome.states.append(SendState.CHAT_ENSURED)

            # --- MediaUploadAttempted ---
            if command.image_data:
                outcome.upload = await self.attempt_upload(command.owner_id, command.image_data)
                outcome.states.append(SendState.MEDIA_UPLOAD_ATTEMPTED)
                if isinstance(outcome.upload, UploadOk):
                    outcome.user_image_locator = outcome.upload.url
                else:
                    logger.warning(
                        "Upload failed for chat %s, using inline image instead: %s",
                        chat_id,
                        outcome.upload.reason,
                    )
                    outcome.user_image_locator = command.image_data

            # --- UserTurnPersisted ---
            await self.store.append_turn(
                command.owner_id,
                chat_id,
                StoredTurn(
                    role=Speaker.USER,
                    content=question,
                    image_data_uri=outcome.user_image_locator,
                ),
            )
            outcome.states.append(SendState.USER_TURN_PERSISTED)

            # --- ModelInvoked ---
            titles = command.reference_titles
            if titles is None:
                books = await self.store.list_reference_books(command.owner_id)
                titles = [book.file_name for book in books]

            request = build_conversation_request(
                question,
                system_prompt=compose_system_prompt(language, command.reference_text, titles),
                history=compact_history(turns_from_records(prior_records), self.history_window),
                image=command.image_data,
            )

            try:
                answer = await ask_model(self.gateway, request)
            except Exception as e:
                logger.error("Model invocation failed for chat %s: %s", chat_id, e)
                outcome.states.append(SendState.MODEL_INVOKED)
                outcome.error = model_failure_message(language)
                return outcome
            outcome.states.append(SendState.MODEL_INVOKED)

            # --- AssistantTurnPersisted ---
            result = classify_response(
                answer.text, titles, command.expand_search_online, language
            )
            await self.store.append_turn(
                command.owner_id,
                chat_id,
                StoredTurn(
                    role=Speaker.ASSISTANT,
                    content=result.answer,
                    source=result.source_kind.value,
                    source_title=result.source_title,
                    lang=result.language,
                ),
            )
            outcome.states.append(SendState.ASSISTANT_TURN_PERSISTED)
            outcome.result = result
            return outcome

        finally:
            if chat_id:
                self._in_flight.discard(chat_id)
