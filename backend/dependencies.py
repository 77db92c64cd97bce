"""FastAPI dependency injection for services.

Services are cached with @lru_cache() to avoid recreation per request.
Tests replace them through app.dependency_overrides.
"""

from functools import lru_cache

from config import get_settings
from db import BaseChatStore, InMemoryChatStore
from llm import AnthropicGateway, BaseModelGateway
from services.orchestrator import SendOrchestrator
from storage import BaseBlobUploader, FirebaseBlobUploader, UnavailableBlobUploader

# --- Cached Singletons ---
# These are created once and reused across all requests


@lru_cache
def get_chat_store() -> BaseChatStore:
    """Get cached chat store (Firestore, or in-memory for development)."""
    settings = get_settings()
    if settings.chat_store == "memory":
        return InMemoryChatStore()

    # Imported lazily so the memory store runs without Firebase installed
    from db.firestore import FirestoreChatStore

    return FirestoreChatStore(settings)


@lru_cache
def get_blob_uploader() -> BaseBlobUploader:
    """Get cached blob uploader (expensive - initializes Firebase).

    Without Firebase credentials every upload fails, so images fall back
    to their inline form.
    """
    settings = get_settings()
    if not settings.firebase_credentials:
        return UnavailableBlobUploader()
    return FirebaseBlobUploader(settings)


@lru_cache
def get_fast_gateway() -> BaseModelGateway:
    """Get cached multimodal gateway used by default."""
    settings = get_settings()
    return AnthropicGateway(settings.fast_model, settings=settings)


@lru_cache
def get_deep_gateway() -> BaseModelGateway:
    """Get cached text-only gateway for the deep model."""
    settings = get_settings()
    return AnthropicGateway(settings.deep_model, multimodal=False, settings=settings)


# --- Composed Services ---


@lru_cache
def get_send_orchestrator() -> SendOrchestrator:
    """Get cached send orchestrator.

    Cached so the in-flight tracking is shared by every request.
    """
    settings = get_settings()
    return SendOrchestrator(
        get_chat_store(),
        get_blob_uploader(),
        get_fast_gateway(),
        history_window=settings.chat_history_max_messages,
        image_max_dimension=settings.image_max_dimension,
        image_quality=settings.image_jpeg_quality,
    )
