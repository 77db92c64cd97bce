"""Pytest configuration and fixtures for Study Chat tests."""

import base64
import io
import os
import sys

# Set required env vars BEFORE any imports that might trigger Settings
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("CHAT_STORE", "memory")
os.environ.setdefault("FIREBASE_CREDENTIALS", "")

from unittest.mock import MagicMock

import pytest
from PIL import Image

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from db.memory import InMemoryChatStore  # noqa: E402
from llm.base import BaseModelGateway, ModelInvocationError  # noqa: E402
from services.orchestrator import SendOrchestrator  # noqa: E402
from services.types import ModelAnswer  # noqa: E402
from storage.blob import BaseBlobUploader, UploadError  # noqa: E402


class FakeUploader(BaseBlobUploader):
    """Records uploads; fails every upload when ``fail`` is set."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: list[tuple[bytes, str, str]] = []

    async def upload(self, data: bytes, path: str, content_type: str = "image/jpeg") -> str:
        if self.fail:
            raise UploadError("storage unavailable")
        self.uploads.append((data, path, content_type))
        return f"https://storage.example.com/{path}"


class FakeGateway(BaseModelGateway):
    """Returns a canned answer and records the blocks it was given."""

    def __init__(self, answer: str = "Mitosis is cell division.", error: Exception | None = None):
        self.model = "fake-model"
        self.answer = answer
        self.error = error
        self.calls: list = []

    async def generate(self, blocks):
        self.calls.append(list(blocks))
        if self.error is not None:
            raise self.error
        return ModelAnswer(text=self.answer)


def make_png_data_url(width: int = 40, height: int = 20, color: str = "red") -> str:
    """Build a real PNG data URL."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def mock_settings():
    """Mock application settings."""
    settings = MagicMock()
    settings.anthropic_api_key = "test-anthropic-key"
    settings.environment = "test"
    settings.debug = True
    settings.chat_store = "memory"
    settings.fast_model = "claude-sonnet-4-20250514"
    settings.deep_model = "claude-opus-4-20250514"
    settings.llm_temperature = 0.4
    settings.llm_max_tokens = 2048
    settings.llm_timeout_seconds = 120.0
    settings.chat_history_max_messages = 10
    settings.image_max_dimension = 1200
    settings.image_jpeg_quality = 80
    return settings


@pytest.fixture
def store():
    """In-memory chat store."""
    return InMemoryChatStore()


@pytest.fixture
def uploader():
    """Uploader that succeeds."""
    return FakeUploader()


@pytest.fixture
def failing_uploader():
    """Uploader that always fails."""
    return FakeUploader(fail=True)


@pytest.fixture
def gateway():
    """Gateway with a canned answer."""
    return FakeGateway()


@pytest.fixture
def failing_gateway():
    """Gateway whose call always fails."""
    return FakeGateway(error=ModelInvocationError("API error: overloaded"))


@pytest.fixture
def orchestrator(store, uploader, gateway):
    """Orchestrator wired to the in-memory fakes."""
    return SendOrchestrator(store, uploader, gateway)


@pytest.fixture
def png_data_url():
    """A small PNG image as a data URL."""
    return make_png_data_url()


@pytest.fixture
def make_png():
    """Factory for PNG data URLs of a given size."""
    return make_png_data_url
