"""
Health Endpoints

Liveness check and service information.
"""
from fastapi import APIRouter

router = APIRouter(tags=["Health"])

# API version - single source of truth
API_VERSION = "1.0.0"
SERVICE_NAME = "monday-partner-relay"


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if service is running.
    Used by load balancers and monitoring systems.
    """
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": API_VERSION
    }


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Monday Partner Relay",
        "version": API_VERSION,
        "endpoints": {
            "health": "/health",
            "metrics": "/metrics",
            "queues": "/queues",
            "queue_status": "/queues/{partner}",
            "queue_clear": "/queues/{partner} (DELETE)",
            "monday_webhook": "/webhook/monday/{partner} (POST)"
        }
    }
