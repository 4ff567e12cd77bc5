"""
API Routes

Modular route definitions for the Monday partner relay.
"""
from src.api.routes.health import router as health_router
from src.api.routes.webhooks import router as webhooks_router
from src.api.routes.queues import router as queues_router
from src.api.routes.metrics import router as metrics_router

__all__ = [
    "health_router",
    "webhooks_router",
    "queues_router",
    "metrics_router",
]
