"""
Lead Processor
Shared queue handler flow for every partner integration.

Flow:
    LeadReference → board lookup → Monday item → partner client → Slack
"""
import time
from abc import ABC, abstractmethod
from typing import Awaitable, Optional

from src.core.boards import get_board_config
from src.models.delivery import DeliveryResult, DeliveryStatus
from src.models.monday import BoardConfig, LeadReference, MondayItem
from src.services.monday_service import MondayService
from src.services.slack_notifier import (
    LeadSummary,
    NotificationKind,
    SlackNotifier,
    kind_for_status,
)
from src.utils.metrics import metrics
from src.utils.observability import log_delivery_event, logger


class LeadProcessor(ABC):
    """
    Queue handler for one partner: handler(reference, ordinal, total).

    Monday failures propagate so the delivery queue counts the item as
    failed. Partner answers and bad data never raise; they are reported
    to Slack and the item counts as processed.

    Subclasses implement `process_item` and finish every path with either
    `report` (partner was called) or `reject` (data unusable).
    """

    #: Integration name, also the queue name
    partner: str = "partner"
    #: Name shown in Slack messages
    display_name: str = "Partner"

    def __init__(
        self,
        monday: MondayService,
        notifier: SlackNotifier,
        boards: Optional[dict[str, BoardConfig]] = None,
    ):
        self.monday = monday
        self.notifier = notifier
        self._boards = boards

    async def __call__(self, reference: LeadReference, ordinal: int, total: int) -> None:
        logger.info(
            f"📋 [{self.partner}] Processing lead #{ordinal}/{total} "
            f"(item {reference.item_id}, board {reference.board_id})"
        )

        board = get_board_config(reference.board_id, self._boards)
        if board is None:
            logger.warning(
                f"[{self.partner}] Board {reference.board_id} is not configured, "
                f"skipping item {reference.item_id}"
            )
            return

        item = await self.monday.fetch_item_details(reference.item_id)
        await self.process_item(reference, item, board, ordinal, total)

    @abstractmethod
    async def process_item(
        self,
        reference: LeadReference,
        item: MondayItem,
        board: BoardConfig,
        ordinal: int,
        total: int,
    ) -> None:
        """Extract, validate and deliver one Monday item."""
        ...

    async def call_partner(self, call: Awaitable[DeliveryResult]) -> tuple[DeliveryResult, float]:
        """Await a partner client call and time it (milliseconds)."""
        started = time.perf_counter()
        result = await call
        return result, (time.perf_counter() - started) * 1000

    async def report(
        self,
        reference: LeadReference,
        lead: LeadSummary,
        result: DeliveryResult,
        ordinal: int,
        total: int,
        duration_ms: Optional[float] = None,
    ) -> None:
        """Record and announce what the partner answered."""
        metrics.partner_results.inc(partner=self.partner, status=result.status.value)

        context = {"board": lead.board_name}
        if result.partner_id:
            context["partner_id"] = result.partner_id
        if result.status is not DeliveryStatus.SUCCESS:
            context["reason"] = result.message

        log_delivery_event(
            partner=self.partner,
            item_id=reference.item_id,
            outcome=result.status.value,
            ordinal=ordinal,
            total=total,
            duration_ms=duration_ms,
            **context,
        )

        await self.notifier.notify_outcome(
            self.display_name,
            kind_for_status(result.status),
            lead,
            ordinal=ordinal,
            result=result,
        )

    async def reject(
        self,
        reference: LeadReference,
        lead: LeadSummary,
        reason: str,
        ordinal: int,
        total: int,
    ) -> None:
        """Report a lead that was never sent because its data is unusable."""
        metrics.partner_results.inc(partner=self.partner, status=DeliveryStatus.INVALID.value)
        log_delivery_event(
            partner=self.partner,
            item_id=reference.item_id,
            outcome="invalid_data",
            ordinal=ordinal,
            total=total,
            board=lead.board_name,
            reason=reason,
        )

        await self.notifier.notify_outcome(
            self.display_name,
            NotificationKind.INVALID_DATA,
            lead,
            ordinal=ordinal,
            reason=reason,
        )
