"""Configuration and settings for the study chat backend.

Uses Pydantic Settings for fail-fast validation on startup.
All required environment variables are validated at import time.
"""

import logging
import sys
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_VERSION = "0.1.0"


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)
    logging.getLogger("google.cloud").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Raises ValidationError on startup if required variables are missing.
    """

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Keys (required)
    anthropic_api_key: str = Field(..., description="Anthropic API key for Claude")

    # Firebase Configuration
    # Can be either a JSON string, a file path or base64 of the credentials JSON
    firebase_credentials: str = Field(
        default="", description="Firebase service account JSON string or path"
    )
    firebase_storage_bucket: str = Field(
        default="", description="Storage bucket for uploaded chat images"
    )
    chat_store: Literal["firestore", "memory"] = Field(
        default="firestore", description="Backing store for chats and messages"
    )

    # Application Settings
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # Model Settings
    fast_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Default multimodal model for chat answers",
    )
    deep_model: str = Field(
        default="claude-opus-4-20250514",
        description="Alternate text-only model for deeper answers",
    )
    llm_temperature: float = Field(default=0.4, description="Sampling temperature")
    llm_max_tokens: int = Field(default=2048, description="Max tokens for generation")
    llm_timeout_seconds: float = Field(
        default=120.0, description="Transport timeout of the model client"
    )

    # Chat History Settings
    chat_history_max_messages: int = Field(
        default=10, description="Max prior turns included in a model request"
    )

    # Image Upload Settings
    image_max_dimension: int = Field(
        default=1200, description="Longest edge of re-encoded upload images"
    )
    image_jpeg_quality: int = Field(
        default=80, ge=1, le=95, description="JPEG quality of re-encoded images"
    )

    @field_validator("anthropic_api_key")
    @classmethod
    def validate_api_key_not_empty(cls, v: str, info) -> str:
        """Ensure API keys are not empty strings."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_store_credentials(self) -> "Settings":
        """Firestore needs service account credentials."""
        if self.chat_store == "firestore" and not self.firebase_credentials.strip():
            raise ValueError("firebase_credentials is required when chat_store=firestore")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# CORS Configuration
CORS_CONFIG: dict[str, Any] = {
    "allow_origins": [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    "allow_credentials": True,
    "allow_methods": ["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    "allow_headers": ["*"],
    "expose_headers": ["*"],
    "max_age": 600,
}

# FastAPI App Configuration
APP_CONFIG: dict[str, Any] = {
    "title": "Study Chat",
    "description": (
        "Bilingual study assistant. Forwards questions, images and prior turns "
        "to a generative model and returns answers with a detected source."
    ),
    "version": APP_VERSION,
    "docs_url": "/api/docs",
    "redoc_url": "/api/redoc",
    "openapi_url": "/api/openapi.json",
    "openapi_tags": [
        {
            "name": "Health",
            "description": "Health check and service status",
        },
        {
            "name": "Chat",
            "description": "Question dispatch and conversation turns",
        },
        {
            "name": "Chats",
            "description": "Conversation list management",
        },
    ],
}


def get_app_config() -> dict[str, Any]:
    """Get FastAPI application configuration."""
    return APP_CONFIG.copy()


def get_cors_config() -> dict[str, Any]:
    """Get CORS middleware configuration."""
    return CORS_CONFIG.copy()
