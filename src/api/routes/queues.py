"""
Queue Endpoints

Operator view of the partner delivery queues.
"""
from fastapi import APIRouter, Depends, Request
from loguru import logger

from src.api.dependencies import get_integrations, get_partner_integration
from src.core.integrations import PartnerIntegration

router = APIRouter(prefix="/queues", tags=["Queues"])


@router.get("")
async def list_queues(request: Request):
    """Status of every partner queue."""
    return {
        "status": "ok",
        "queues": {
            name: integration.queue.get_status().model_dump(mode="json")
            for name, integration in get_integrations(request).items()
        }
    }


@router.get("/{partner}")
async def queue_status(integration: PartnerIntegration = Depends(get_partner_integration)):
    """
    Status of one partner queue.

    Returns length, draining flag, counters and the pending items
    (position, Monday item id, enqueue time).
    """
    return integration.queue.get_status().model_dump(mode="json")


@router.delete("/{partner}")
async def clear_queue(integration: PartnerIntegration = Depends(get_partner_integration)):
    """Drop every pending item; a lead already being delivered still completes."""
    removed = integration.queue.clear()
    logger.warning(f"[{integration.name}] Queue cleared by operator ({removed} removed)")
    return {"status": "ok", "removed": removed}
