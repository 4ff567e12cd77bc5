"""
Partner Delivery Queues

In-process, FIFO, rate-limited dispatch of Monday leads to partner APIs:
- One queue per partner, one handler invocation in flight per queue
- Fixed per-partner delay between deliveries
- Failed items are logged and counted, never retried
- Optional capacity ceiling with reject / drop-oldest overflow policy
- Optional per-item handler timeout
"""

from src.delivery_queue.base import (
    OverflowPolicy,
    QueueFullError,
    QueueHandler,
    QueueItem,
    QueueItemSnapshot,
    QueueStatus,
)
from src.delivery_queue.queue import DeliveryQueue

__all__ = [
    "DeliveryQueue",
    "OverflowPolicy",
    "QueueFullError",
    "QueueHandler",
    "QueueItem",
    "QueueItemSnapshot",
    "QueueStatus",
]
