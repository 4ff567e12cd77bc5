"""
Slack Partner Notifications

Posts a human-readable outcome message to a partner's Slack channel for
every lead the relay handles: sent, duplicate, rejected for bad data, or
failed at the partner.
"""

import httpx
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Optional

from src.config import get_settings
from src.models.delivery import DeliveryResult, DeliveryStatus
from src.utils.metrics import metrics
from src.utils.observability import logger


MISSING = "MISSING"


class NotificationKind(StrEnum):
    SUCCESS = "success"
    DUPLICATE = "duplicate"
    INVALID_DATA = "invalid_data"
    ERROR = "error"


def kind_for_status(status: DeliveryStatus) -> NotificationKind:
    """Slack message kind for a partner delivery status."""
    return {
        DeliveryStatus.SUCCESS: NotificationKind.SUCCESS,
        DeliveryStatus.DUPLICATE: NotificationKind.DUPLICATE,
        DeliveryStatus.INVALID: NotificationKind.INVALID_DATA,
    }.get(status, NotificationKind.ERROR)


@dataclass
class LeadSummary:
    """
    Lead fields shown in the notification.

    Optional fields left as None are omitted from success/duplicate/error
    messages; on invalid_data messages they are listed as MISSING when the
    partner requires them (see `required`).
    """
    name: Optional[str]
    phone: Optional[str] = None
    original_phone: Optional[str] = None
    board_name: Optional[str] = None
    email: Optional[str] = None
    cnp: Optional[str] = None
    employer: Optional[str] = None
    income: Optional[Any] = None
    amount: Optional[Any] = None
    cashing_method: Optional[str] = None
    sms_message: Optional[str] = None
    required: tuple[str, ...] = ("name", "phone")


class SlackNotifier:
    """
    Slack incoming-webhook client for one partner channel.

    Never raises: a Slack outage must not turn a delivered lead into a
    failed queue item.
    """

    def __init__(self, webhook_url: Optional[str], timeout: Optional[float] = None):
        self._webhook_url = webhook_url
        self._timeout = timeout or get_settings().slack_timeout_seconds

    @property
    def is_configured(self) -> bool:
        """Check if the Slack webhook is configured."""
        return bool(self._webhook_url)

    async def send_text(self, text: str) -> bool:
        """
        Post a plain mrkdwn message.

        Returns:
            True if Slack accepted the message
        """
        if not self._webhook_url:
            logger.warning("Slack webhook not configured, skipping notification")
            metrics.slack_notifications.inc(outcome="skipped")
            return False

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self._webhook_url,
                    json={"text": text},
                    timeout=self._timeout
                )
                response.raise_for_status()

            logger.debug("📨 Slack notification sent")
            metrics.slack_notifications.inc(outcome="sent")
            return True

        except httpx.HTTPError as e:
            logger.error(f"Failed to send Slack notification: {e}")
            metrics.slack_notifications.inc(outcome="failed")
            return False

    async def notify_outcome(
        self,
        partner_name: str,
        kind: NotificationKind,
        lead: LeadSummary,
        ordinal: Optional[int] = None,
        result: Optional[DeliveryResult] = None,
        reason: Optional[str] = None,
    ) -> bool:
        """
        Post the outcome of one lead.

        Args:
            partner_name: Display name (e.g. "Credius")
            kind: Which message template to use
            lead: Fields to show
            ordinal: Lead number in the drain cycle
            result: Partner response, if the partner was called
            reason: Explanation for invalid_data without a partner call
        """
        text = build_outcome_message(partner_name, kind, lead, ordinal, result, reason)
        return await self.send_text(text)


def _phone_lines(lead: LeadSummary) -> str:
    if not lead.phone:
        return ""
    if lead.original_phone and lead.original_phone != lead.phone:
        return f"\nMonday phone: *{lead.original_phone}*\nSent phone: *{lead.phone}*"
    return f"\nPhone: *{lead.phone}*"


def _extra_lines(lead: LeadSummary) -> str:
    lines = ""
    if lead.email:
        lines += f"\nEmail: *{lead.email}*"
    if lead.cnp:
        lines += f"\nCNP: *{lead.cnp}*"
    if lead.employer:
        lines += f"\nEmployer: *{lead.employer}*"
    if lead.income:
        lines += f"\nIncome: *{lead.income} RON*"
    if lead.amount:
        lines += f"\nRequested amount: *{lead.amount} RON*"
    if lead.cashing_method:
        lines += f"\nCashing method: *{lead.cashing_method}*"
    if lead.sms_message:
        lines += f"\nSMS: {lead.sms_message}"
    return lines


def build_outcome_message(
    partner_name: str,
    kind: NotificationKind,
    lead: LeadSummary,
    ordinal: Optional[int] = None,
    result: Optional[DeliveryResult] = None,
    reason: Optional[str] = None,
) -> str:
    """Render the Slack text for one lead outcome."""
    number = f"#{ordinal or 1}"
    board = f"\nBoard: *{lead.board_name}*" if lead.board_name else ""

    if kind is NotificationKind.SUCCESS:
        partner_id = f"\n{partner_name} ID: *{result.partner_id}*" if result and result.partner_id else ""
        return (
            f"✅ *Lead sent to {partner_name}* ({number}){board}\n"
            f"Name: *{lead.name}*{_phone_lines(lead)}{_extra_lines(lead)}{partner_id}"
        )

    if kind is NotificationKind.DUPLICATE:
        why = (result.message if result else None) or reason or "Duplicate lead"
        email = f"\nEmail: *{lead.email}*" if lead.email else ""
        return (
            f"🔄 *Duplicate lead in {partner_name}* ({number}){board}\n"
            f"Name: *{lead.name}*{_phone_lines(lead)}{email}\nReason: {why}"
        )

    if kind is NotificationKind.INVALID_DATA:
        data = f"\nName: *{lead.name or MISSING}*"
        labels = (
            ("phone", "Phone"),
            ("email", "Email"),
            ("cnp", "CNP"),
            ("employer", "Employer"),
            ("income", "Income"),
            ("amount", "Requested amount"),
            ("cashing_method", "Cashing method"),
        )
        for field_name, label in labels:
            value = getattr(lead, field_name)
            if value or field_name in lead.required:
                data += f"\n{label}: *{value or MISSING}*"

        why = reason or (result.message if result else None) or "Invalid or incomplete data"
        errors = ""
        if result and result.errors:
            errors = "\nErrors:\n" + "\n".join(
                f"  • {field_name}: {', '.join(messages)}"
                for field_name, messages in result.errors.items()
            )
        return (
            f"⚠️ *Lead NOT sent to {partner_name} - invalid data* ({number}){board}"
            f"{data}\nReason: {why}{errors}"
        )

    why = (result.message if result else None) or reason or "Unknown error"
    email = f"\nEmail: *{lead.email}*" if lead.email else ""
    return (
        f"❌ *Lead rejected by {partner_name}* ({number}){board}\n"
        f"Name: *{lead.name}*{_phone_lines(lead)}{email}\nError: {why}"
    )
