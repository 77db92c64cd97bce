"""Base model gateway interface.

Defines the contract that all model adapters must implement, and the
response-envelope text extraction shared by them.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from services.types import ContentBlock, ModelAnswer

NO_RESPONSE_TEXT = "No response received."

# Searched in order; the first non-empty string wins.
ENVELOPE_TEXT_PATHS: tuple[tuple[str | int, ...], ...] = (
    ("candidates", 0, "content", 0, "parts", 0, "text"),
    ("candidates", 0, "content", "parts", 0, "text"),
    ("candidates", 0, "content", 0, "text"),
    ("content", 0, "text"),
    ("text",),
)


class ModelInvocationError(Exception):
    """Raised when the remote model call fails. Never retried here."""


def _dig(envelope: Any, path: tuple[str | int, ...]) -> Any:
    node = envelope
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, Sequence) or isinstance(node, str | bytes):
                return None
            if key >= len(node):
                return None
            node = node[key]
        elif isinstance(node, Mapping):
            node = node.get(key)
        else:
            node = getattr(node, key, None)
        if node is None:
            return None
    return node


def extract_answer_text(envelope: Any) -> str:
    """Extract the answer text from a provider response envelope.

    Args:
        envelope: Response as a dict (or attribute-bearing object).

    Returns:
        The first non-empty text found, or NO_RESPONSE_TEXT.
    """
    for path in ENVELOPE_TEXT_PATHS:
        value = _dig(envelope, path)
        if isinstance(value, str) and value.strip():
            return value
    return NO_RESPONSE_TEXT


class BaseModelGateway(ABC):
    """Abstract base class for model gateways.

    All adapters (Anthropic, test doubles, etc.) must implement generate().
    """

    model: str

    @abstractmethod
    async def generate(self, blocks: Sequence[ContentBlock]) -> ModelAnswer:
        """Invoke the remote model with an assembled request.

        Args:
            blocks: Ordered role-tagged content blocks.

        Returns:
            The extracted answer.

        Raises:
            ModelInvocationError: If the transport or provider fails.
        """
