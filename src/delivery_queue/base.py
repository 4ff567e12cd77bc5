"""
Delivery Queue Models

Item, status and policy types shared by the partner delivery queues.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Optional
from pydantic import BaseModel


# (payload, ordinal, total) -> awaitable
QueueHandler = Callable[[Any, int, int], Awaitable[None]]


class OverflowPolicy(str, Enum):
    """What enqueue does when the pending sequence is at max_pending."""
    REJECT = "reject"
    DROP_OLDEST = "drop_oldest"


class QueueFullError(Exception):
    """Raised by enqueue under the reject policy when the queue is full."""

    def __init__(self, queue_name: str, max_pending: int):
        self.queue_name = queue_name
        self.max_pending = max_pending
        super().__init__(f"Queue '{queue_name}' is full ({max_pending} pending items)")


@dataclass
class QueueItem:
    """
    One pending delivery.

    Attributes:
        payload: Opaque reference handed to the handler unchanged
        key: Identifier shown in status snapshots (e.g. Monday item id)
        enqueued_at: When the item was appended
        position: 1-based position at insertion time; a snapshot label,
            not the ordinal the item will eventually be processed under
    """
    payload: Any
    position: int
    key: Optional[str] = None
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class QueueItemSnapshot(BaseModel):
    """Pending item as exposed by get_status()."""
    position: int
    key: Optional[str] = None
    enqueued_at: datetime


class QueueStatus(BaseModel):
    """
    Point-in-time copy of a delivery queue's state.

    Attributes:
        partner: Queue name
        queue_length: Items waiting to be processed
        is_draining: True while a drain cycle owns the queue
        processed_count: Items handled successfully since process start
        failed_count: Handler failures in the current cycle
        dropped_count: Items consumed without processing (no handler, evicted)
        cycle_started_at: Start of the current drain cycle, None when idle
        delay_seconds: Fixed pause between consecutive deliveries
        max_pending: Capacity ceiling, None if unbounded
        items: Pending items in processing order
    """
    partner: str
    queue_length: int = 0
    is_draining: bool = False
    processed_count: int = 0
    failed_count: int = 0
    dropped_count: int = 0
    cycle_started_at: Optional[datetime] = None
    delay_seconds: float = 0.0
    max_pending: Optional[int] = None
    items: list[QueueItemSnapshot] = []
