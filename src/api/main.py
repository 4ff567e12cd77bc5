"""
FastAPI Application

Main entry point for the Monday partner relay.
Handles application lifecycle and router mounting.
"""
import asyncio
from contextlib import asynccontextmanager
from fastapi import FastAPI
from loguru import logger

from src.config import settings
from src.core.integrations import build_integrations
from src.services.monday_service import MondayService
from src.utils.observability import configure_logging
from src.api.routes import health_router, webhooks_router, queues_router, metrics_router
from src.api.routes.health import API_VERSION


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle: startup and shutdown events.

    Startup:
    - Configure logging
    - Build one delivery queue + processor per partner

    Shutdown:
    - Let every queue finish its drain cycle (bounded), then cancel
    """
    configure_logging()
    logger.info("Starting Monday partner relay...")

    integrations = build_integrations(settings, MondayService())
    app.state.integrations = integrations

    logger.info(f"Relay ready for partners: {', '.join(integrations)}")

    yield

    # Shutdown
    logger.info("Shutting down, draining partner queues...")

    await asyncio.gather(*(
        integration.queue.shutdown(settings.queue_shutdown_timeout_seconds)
        for integration in integrations.values()
    ))

    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Monday Partner Relay",
    description="Relays Monday.com leads to partner APIs through per-partner sequential queues",
    version=API_VERSION,
    lifespan=lifespan
)

# Mount routers
app.include_router(health_router)
app.include_router(webhooks_router)
app.include_router(queues_router)
app.include_router(metrics_router)
