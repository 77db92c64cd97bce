"""Health module - service health checks."""

from apps.health.routes import router

__all__ = ["router"]
