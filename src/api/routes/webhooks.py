"""
Webhook Endpoints

Monday.com webhook handler: answers the URL challenge and queues every
item event for the partner named in the path.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from src.api.dependencies import get_partner_integration
from src.api.models.monday import MondayWebhookPayload
from src.core.integrations import PartnerIntegration
from src.delivery_queue import QueueFullError
from src.utils.metrics import metrics

router = APIRouter(prefix="/webhook", tags=["Webhooks"])


async def _read_payload(request: Request) -> MondayWebhookPayload | None:
    try:
        body = await request.json()
    except ValueError:
        logger.warning("Webhook body is not valid JSON, ignoring")
        return None

    if not isinstance(body, dict):
        return None

    try:
        return MondayWebhookPayload.model_validate(body)
    except ValidationError as e:
        logger.warning(f"Webhook body is not a Monday event, ignoring: {e.error_count()} error(s)")
        return None


@router.post("/monday/{partner}")
async def monday_webhook(
    request: Request,
    integration: PartnerIntegration = Depends(get_partner_integration),
):
    """
    Monday webhook endpoint, one per partner.

    Flow:
    1. {"challenge": ...} → echo it back (URL verification)
    2. {"event": {"pulseId", "boardId"}} → enqueue a lead reference
    3. Return 200 immediately; the partner queue delivers in the background

    Monday times out after 10 seconds, so processing never happens inline.

    Returns:
        JSON acknowledgment, with the queue position for events
    """
    partner = integration.name
    payload = await _read_payload(request)

    if payload is not None and payload.challenge:
        logger.info(f"🤝 [{partner}] Monday challenge received")
        metrics.webhook_events.inc(partner=partner, kind="challenge")
        return {"challenge": payload.challenge}

    if payload is None or payload.event is None:
        metrics.webhook_events.inc(partner=partner, kind="ignored")
        return {"message": "OK"}

    reference = payload.event.to_reference()
    logger.info(
        f"🎯 [{partner}] Webhook received - item {reference.item_id}, board {reference.board_id}"
    )

    try:
        position = integration.queue.enqueue(reference, key=str(reference.item_id))
    except QueueFullError as e:
        metrics.webhook_events.inc(partner=partner, kind="rejected")
        return JSONResponse(
            status_code=503,
            content={
                "status": "queue_full",
                "partner": partner,
                "error": str(e)
            }
        )

    metrics.webhook_events.inc(partner=partner, kind="event")
    return {"message": "OK", "position": position}
