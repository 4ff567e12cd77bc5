"""
Structured Logging & Observability
Human-readable in development, machine-parseable JSON in production.
"""
import sys
from loguru import logger
from typing import Any, Optional
from src.config import get_settings


def configure_logging():
    """
    Configure loguru sinks.

    In development: colorized console output
    In production: JSON lines for log ingestion
    """
    settings = get_settings()

    logger.remove()

    if not settings.enable_structured_logging:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            level=settings.log_level,
            colorize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=settings.log_level,
            serialize=True,
        )

    logger.info(
        f"Logging configured: level={settings.log_level}, "
        f"structured={settings.enable_structured_logging}"
    )


def log_delivery_event(
    partner: str,
    item_id: Any,
    outcome: str,
    ordinal: Optional[int] = None,
    total: Optional[int] = None,
    duration_ms: Optional[float] = None,
    **context
):
    """
    Structured log line for one lead delivered (or not) to a partner.

    Args:
        partner: Integration name (e.g. "credius")
        item_id: Monday item id of the lead
        outcome: Delivery status reported by the partner client
        ordinal: Position of the item in the drain cycle
        total: Batch total reported to the processor
        duration_ms: Partner call latency in milliseconds
        **context: Extra fields (board, partner id, reason)

    Example:
        >>> log_delivery_event(
        ...     partner="credius",
        ...     item_id=1234567890,
        ...     outcome="success",
        ...     ordinal=3,
        ...     total=7,
        ...     partner_id="98765"
        ... )
    """
    log_data = {
        "event_type": "partner_delivery",
        "partner": partner,
        "item_id": item_id,
        "outcome": outcome,
    }

    if ordinal is not None:
        log_data["ordinal"] = ordinal
    if total is not None:
        log_data["total"] = total
    if duration_ms is not None:
        log_data["duration_ms"] = round(duration_ms, 2)

    log_data.update(context)

    level = "SUCCESS" if outcome == "success" else "WARNING"
    progress = f" #{ordinal}/{total}" if ordinal is not None else ""
    logger.bind(**log_data).log(level, f"[{partner}]{progress} item {item_id}: {outcome}")


def log_queue_cycle(
    partner: str,
    processed: int,
    failed: int,
    duration_seconds: float,
):
    """Summary line emitted when a delivery queue returns to idle."""
    logger.bind(
        event_type="queue_cycle",
        partner=partner,
        processed=processed,
        failed=failed,
        duration_seconds=round(duration_seconds, 1),
    ).info(
        f"[{partner}] Queue drained: {processed} processed, "
        f"{failed} failed in {duration_seconds:.1f}s"
    )
