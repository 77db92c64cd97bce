"""GET /health - Check health of all services."""

from datetime import UTC, datetime

from fastapi import Depends
from pydantic import BaseModel, Field

from config import APP_VERSION, get_settings
from db import BaseChatStore
from dependencies import get_chat_store

# --- Response Schemas ---


class ServiceStatus(BaseModel):
    """Status of an individual service."""

    name: str
    status: str = Field(..., description="healthy, degraded, or unhealthy")
    latency_ms: float | None = Field(None, description="Response time in ms")
    error: str | None = Field(None, description="Error message if unhealthy")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status: healthy, degraded, unhealthy")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Environment name")
    services: list[ServiceStatus] = Field(
        ..., description="Individual service statuses"
    )
    timestamp: datetime


# --- Handler ---


async def check_health(store: BaseChatStore = Depends(get_chat_store)) -> HealthResponse:
    """Check health of all services."""
    settings = get_settings()

    store_health = await store.health_check()

    services = [
        ServiceStatus(
            name=f"chat_store:{settings.chat_store}",
            status=store_health["status"],
            latency_ms=store_health.get("latency_ms"),
            error=store_health.get("error"),
        ),
    ]

    statuses = [s.status for s in services]
    if all(s == "healthy" for s in statuses):
        overall = "healthy"
    elif any(s == "unhealthy" for s in statuses):
        overall = "unhealthy"
    else:
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=APP_VERSION,
        environment=settings.environment,
        services=services,
        timestamp=datetime.now(UTC),
    )
