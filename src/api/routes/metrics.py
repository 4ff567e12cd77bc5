"""
Metrics Endpoint

Prometheus-compatible metrics for observability.
"""
from fastapi import APIRouter, Request
from fastapi.responses import Response
from loguru import logger

from src.api.dependencies import get_integrations
from src.utils.metrics import metrics

router = APIRouter(tags=["Metrics"])


@router.get("/metrics")
async def prometheus_metrics(request: Request):
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text exposition format for scraping.
    Includes:
    - Webhook requests per partner
    - Queue depth and draining state
    - Delivery outcomes and durations
    - Partner API results and Slack notifications

    Content-Type: text/plain; version=0.0.4; charset=utf-8
    """
    try:
        # Update queue gauges from current state
        for name, integration in get_integrations(request).items():
            metrics.queue_pending.set(len(integration.queue), partner=name)
            metrics.queue_draining.set(1 if integration.queue.is_draining else 0, partner=name)

        output = metrics.export()

        return Response(
            content=output,
            media_type="text/plain; version=0.0.4; charset=utf-8"
        )

    except Exception as e:
        logger.opt(exception=e).error(f"Failed to export metrics: {e}")
        return Response(
            content=f"# Error exporting metrics: {e}\n",
            media_type="text/plain",
            status_code=500
        )
