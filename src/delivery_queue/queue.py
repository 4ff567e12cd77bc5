"""
Partner Delivery Queue

In-memory FIFO that serializes outbound calls to one partner API.
Items are drained one at a time through the registered handler with a
fixed pause between consecutive deliveries.
"""

import asyncio
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any, Optional

from loguru import logger

from src.delivery_queue.base import (
    OverflowPolicy,
    QueueFullError,
    QueueHandler,
    QueueItem,
    QueueItemSnapshot,
    QueueStatus,
)
from src.utils.metrics import Timer, metrics
from src.utils.observability import log_queue_cycle


class DeliveryQueue:
    """
    Sequential, rate-limited delivery queue for a single partner.

    Guarantees:
    - Strict FIFO processing, no reordering and no automatic retry
    - At most one handler invocation in flight per queue
    - A failing item is counted and logged, the next item still runs
    - `delay_seconds` between consecutive items, none after the last one

    Counters:
    - processed_count is a lifetime counter, so ordinals keep increasing
      across drain cycles
    - failed_count covers the current cycle and resets when the queue idles
    - dropped_count is a lifetime count of items that were never handled
      (no handler registered, or evicted by the drop_oldest policy)

    `enqueue` must be called from a running event loop; it never awaits,
    so a webhook can acknowledge immediately.

    Usage:
        queue = DeliveryQueue("credius", delay_seconds=5.0, handler=process_lead)
        position = queue.enqueue(LeadReference(item_id=1, board_id=2), key="1")
        await queue.wait_until_idle()
    """

    def __init__(
        self,
        name: str,
        delay_seconds: float,
        handler: Optional[QueueHandler] = None,
        max_pending: Optional[int] = None,
        overflow_policy: OverflowPolicy | str = OverflowPolicy.REJECT,
        handler_timeout: Optional[float] = None,
    ):
        """
        Initialize an idle, empty queue.

        Args:
            name: Partner name, used in logs, metrics and status
            delay_seconds: Fixed pause between consecutive deliveries
            handler: Async callable invoked as handler(payload, ordinal, total)
            max_pending: Capacity ceiling for pending items (None = unbounded)
            overflow_policy: Behaviour when max_pending is reached
            handler_timeout: Seconds before a hung handler call is failed
        """
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        if max_pending is not None and max_pending < 1:
            raise ValueError("max_pending must be >= 1 or None")
        if handler_timeout is not None and handler_timeout <= 0:
            raise ValueError("handler_timeout must be > 0 or None")

        self.name = name
        self.delay_seconds = delay_seconds
        self.max_pending = max_pending
        self.overflow_policy = OverflowPolicy(overflow_policy)
        self.handler_timeout = handler_timeout

        self._handler = handler
        self._pending: deque[QueueItem] = deque()
        self._is_draining = False
        self._processed_count = 0
        self._failed_count = 0
        self._dropped_count = 0
        self._cycle_started_at: Optional[datetime] = None
        self._drain_task: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def is_draining(self) -> bool:
        return self._is_draining

    @property
    def processed_count(self) -> int:
        return self._processed_count

    @property
    def failed_count(self) -> int:
        return self._failed_count

    @property
    def dropped_count(self) -> int:
        return self._dropped_count

    @property
    def has_handler(self) -> bool:
        return self._handler is not None

    def register_handler(self, handler: QueueHandler) -> None:
        """Replace the handler used for every item dequeued from now on."""
        if self._handler is not None and self._handler is not handler:
            logger.info(f"[{self.name}] Replacing queue handler")
        self._handler = handler

    def enqueue(self, payload: Any, key: Optional[str] = None) -> int:
        """
        Append an item and make sure a drain cycle is running.

        Args:
            payload: Reference passed to the handler as-is
            key: Identifier shown in status snapshots

        Returns:
            1-based position at insertion time

        Raises:
            QueueFullError: Queue at max_pending under the reject policy
            RuntimeError: Called without a running event loop
        """
        loop = asyncio.get_running_loop()

        if self.max_pending is not None and len(self._pending) >= self.max_pending:
            metrics.queue_overflow.inc(partner=self.name, policy=self.overflow_policy.value)
            if self.overflow_policy is OverflowPolicy.REJECT:
                logger.error(
                    f"[{self.name}] Queue full ({self.max_pending} pending), rejecting item {key}"
                )
                raise QueueFullError(self.name, self.max_pending)

            evicted = self._pending.popleft()
            self._dropped_count += 1
            metrics.deliveries.inc(partner=self.name, outcome="evicted")
            logger.error(
                f"[{self.name}] Queue full ({self.max_pending} pending), "
                f"evicted oldest item {evicted.key} enqueued at {evicted.enqueued_at.isoformat()}"
            )

        if self._handler is None:
            logger.warning(
                f"[{self.name}] Item {key} enqueued but no handler is registered; it will be dropped"
            )

        item = QueueItem(payload=payload, key=key, position=len(self._pending) + 1)
        self._pending.append(item)

        logger.info(
            f"📋 [{self.name}] Item {key} queued at position {item.position} "
            f"({len(self._pending)} pending)"
        )

        self._start_draining(loop)
        return item.position

    def get_status(self) -> QueueStatus:
        """Snapshot of the queue; mutating it does not affect the queue."""
        return QueueStatus(
            partner=self.name,
            queue_length=len(self._pending),
            is_draining=self._is_draining,
            processed_count=self._processed_count,
            failed_count=self._failed_count,
            dropped_count=self._dropped_count,
            cycle_started_at=self._cycle_started_at,
            delay_seconds=self.delay_seconds,
            max_pending=self.max_pending,
            items=[
                QueueItemSnapshot(position=index, key=item.key, enqueued_at=item.enqueued_at)
                for index, item in enumerate(self._pending, start=1)
            ],
        )

    def clear(self) -> int:
        """
        Drop every pending item.

        An item already handed to the handler finishes on its own.

        Returns:
            Number of items removed
        """
        removed = len(self._pending)
        self._pending.clear()
        if removed:
            logger.warning(f"[{self.name}] Queue cleared, {removed} pending item(s) removed")
        return removed

    async def wait_until_idle(self) -> None:
        """Wait until no drain cycle is running."""
        while self._drain_task is not None and not self._drain_task.done():
            await asyncio.wait({self._drain_task})

    async def shutdown(self, timeout: float = 30.0) -> None:
        """
        Give the current drain cycle `timeout` seconds to finish, then cancel it.

        Items still pending after cancellation are lost.
        """
        task = self._drain_task
        if task is None or task.done():
            return

        logger.info(
            f"[{self.name}] Waiting up to {timeout}s for {len(self._pending)} pending item(s)"
        )
        done, _ = await asyncio.wait({task}, timeout=timeout)
        if not done:
            logger.warning(
                f"[{self.name}] Drain still running after {timeout}s, cancelling "
                f"({len(self._pending)} pending item(s) abandoned)"
            )
            task.cancel()
            await asyncio.wait({task})

    def _start_draining(self, loop: asyncio.AbstractEventLoop) -> None:
        # Claiming the flag before the task exists keeps a second enqueue
        # from spawning a competing consumer.
        if self._is_draining or not self._pending:
            return

        self._is_draining = True
        if self._cycle_started_at is None:
            self._cycle_started_at = datetime.now(timezone.utc)

        self._drain_task = loop.create_task(self._drain(), name=f"delivery-queue-{self.name}")

    async def _drain(self) -> None:
        """Consume pending items until the queue is empty."""
        started = time.monotonic()
        processed_before = self._processed_count
        # Point-in-time estimate; items added mid-cycle are processed but not counted
        total = self._processed_count + len(self._pending)

        logger.info(f"🚀 [{self.name}] Drain started: {len(self._pending)} item(s) pending")

        try:
            while self._pending:
                item = self._pending.popleft()
                ordinal = self._processed_count + 1

                await self._deliver(item, ordinal, total)

                if self._pending and self.delay_seconds > 0:
                    logger.debug(
                        f"[{self.name}] Waiting {self.delay_seconds}s "
                        f"({len(self._pending)} remaining)"
                    )
                    await asyncio.sleep(self.delay_seconds)
        finally:
            log_queue_cycle(
                partner=self.name,
                processed=self._processed_count - processed_before,
                failed=self._failed_count,
                duration_seconds=time.monotonic() - started,
            )
            self._is_draining = False
            self._cycle_started_at = None
            self._failed_count = 0

    async def _deliver(self, item: QueueItem, ordinal: int, total: int) -> None:
        """Run the handler for one item, containing any failure."""
        handler = self._handler
        if handler is None:
            self._dropped_count += 1
            metrics.deliveries.inc(partner=self.name, outcome="dropped")
            logger.error(f"[{self.name}] No handler registered, dropped item {item.key}")
            return

        try:
            with Timer(metrics.delivery_duration, partner=self.name):
                if self.handler_timeout is not None:
                    await asyncio.wait_for(
                        handler(item.payload, ordinal, total),
                        timeout=self.handler_timeout,
                    )
                else:
                    await handler(item.payload, ordinal, total)
        except Exception as e:
            self._failed_count += 1
            # A handler may raise TimeoutError on its own when no watchdog is set
            if isinstance(e, asyncio.TimeoutError) and self.handler_timeout is not None:
                metrics.deliveries.inc(partner=self.name, outcome="timeout")
                logger.error(
                    f"❌ [{self.name}] Item {item.key} (#{ordinal}/{total}) "
                    f"timed out after {self.handler_timeout}s"
                )
            else:
                metrics.deliveries.inc(partner=self.name, outcome="failed")
                logger.opt(exception=e).error(
                    f"❌ [{self.name}] Item {item.key} (#{ordinal}/{total}) failed: {e}"
                )
        else:
            self._processed_count += 1
            metrics.deliveries.inc(partner=self.name, outcome="processed")
