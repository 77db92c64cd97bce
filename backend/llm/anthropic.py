"""Anthropic Claude gateway implementation."""

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from anthropic import APIError, AsyncAnthropic, RateLimitError

from config import Settings, get_settings
from services.media import inline_payload
from services.types import (
    ContentBlock,
    MediaKind,
    MediaPart,
    MediaRef,
    ModelAnswer,
    ModelRole,
    TextPart,
)

from .base import BaseModelGateway, ModelInvocationError, extract_answer_text

logger = logging.getLogger(__name__)

_ANTHROPIC_ROLES: dict[ModelRole, str] = {
    ModelRole.USER: "user",
    ModelRole.MODEL: "assistant",
}


def _media_source(media: MediaRef) -> dict[str, Any]:
    if media.is_remote:
        return {"type": "url", "url": media.locator}
    return {
        "type": "base64",
        "media_type": media.mime_type,
        "data": inline_payload(media),
    }


def to_anthropic_content(part: TextPart | MediaPart) -> dict[str, Any]:
    """Translate one content part to an Anthropic content block."""
    if isinstance(part, TextPart):
        return {"type": "text", "text": part.text}
    block_type = "document" if part.media.kind is MediaKind.DOCUMENT else "image"
    return {"type": block_type, "source": _media_source(part.media)}


def to_anthropic_messages(
    blocks: Sequence[ContentBlock],
) -> tuple[str, list[dict[str, Any]]]:
    """Split assembled blocks into Anthropic's system text and message list."""
    system_parts: list[str] = []
    messages: list[dict[str, Any]] = []

    for block in blocks:
        if block.role is ModelRole.SYSTEM:
            system_parts.extend(p.text for p in block.text_parts)
            continue
        messages.append(
            {
                "role": _ANTHROPIC_ROLES[block.role],
                "content": [to_anthropic_content(p) for p in block.parts],
            }
        )

    return "\n\n".join(system_parts), messages


class AnthropicGateway(BaseModelGateway):
    """Model gateway via the Anthropic Messages API.

    Args:
        model: Model identifier. Defaults to settings.fast_model.
        multimodal: When False, media parts are dropped before dispatch.
        settings: Application settings.
        client: Preconfigured client (tests inject one).
    """

    def __init__(
        self,
        model: str | None = None,
        *,
        multimodal: bool = True,
        settings: Settings | None = None,
        client: AsyncAnthropic | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.model = model or self.settings.fast_model
        self.multimodal = multimodal

        # Retry and backoff belong to callers
        self._client = client or AsyncAnthropic(
            api_key=self.settings.anthropic_api_key,
            timeout=httpx.Timeout(timeout=self.settings.llm_timeout_seconds, connect=10.0),
            max_retries=0,
        )

    def _prepare(self, blocks: Sequence[ContentBlock]) -> list[ContentBlock]:
        if self.multimodal:
            return list(blocks)

        prepared: list[ContentBlock] = []
        dropped = 0
        for block in blocks:
            text_parts = block.text_parts
            dropped += len(block.parts) - len(text_parts)
            if text_parts:
                prepared.append(ContentBlock(role=block.role, parts=tuple(text_parts)))
        if dropped:
            logger.info("Dropped %d media part(s) for text-only model %s", dropped, self.model)
        return prepared

    async def generate(self, blocks: Sequence[ContentBlock]) -> ModelAnswer:
        """Generate an answer using Claude."""
        system, messages = to_anthropic_messages(self._prepare(blocks))

        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.settings.llm_max_tokens,
            "temperature": self.settings.llm_temperature,
            "messages": messages,
        }
        if system:
            request["system"] = system

        logger.debug(
            "Dispatching %d message(s) to %s (system prompt: %d chars)",
            len(messages),
            self.model,
            len(system),
        )

        try:
            response = await self._client.messages.create(**request)
        except RateLimitError as e:
            logger.warning("Rate limit: %s", e)
            raise ModelInvocationError(f"Rate limit exceeded: {e}") from e
        except APIError as e:
            logger.error("API error: %s", e)
            raise ModelInvocationError(f"Model error: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Transport error: %s", e)
            raise ModelInvocationError(f"Transport error: {e}") from e

        envelope = response.model_dump() if hasattr(response, "model_dump") else response
        return ModelAnswer(text=extract_answer_text(envelope))
