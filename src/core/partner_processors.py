"""
Partner-specific lead processors.

Each one reads its fields from the Monday item, validates them and hands
the lead to its partner client.
"""
from typing import Optional

from src.config import get_settings
from src.core.lead_processor import LeadProcessor
from src.models.monday import BoardConfig, LeadReference, MondayItem
from src.services.monday_service import MondayService, extract_column_value
from src.services.partners import (
    BCCreditRapidClient,
    BCCreditRapidLead,
    CreditFixClient,
    CrediusClient,
    FlexClient,
    FlexCreditClient,
    FourPayClient,
    ICreditClient,
)
from src.services.partners.base import parse_int
from src.services.partners.flexcredit import mask_cnp
from src.services.slack_notifier import LeadSummary, SlackNotifier
from src.utils.observability import logger
from src.utils.phone_normalizer import to_national


def missing_name_or_phone(name: Optional[str], phone: Optional[str]) -> str:
    if not name and not phone:
        return "Incomplete data - name and phone are missing"
    if not name:
        return "Name is missing"
    return "Phone number is invalid or missing"


def missing_fields(lead: LeadSummary) -> list[str]:
    """Required fields of the lead that are empty."""
    return [field_name for field_name in lead.required if not getattr(lead, field_name)]


def missing_fields_reason(missing: list[str]) -> str:
    return f"Missing required fields: {', '.join(missing)}"


def cashing_method_for(raw: Optional[str]) -> str:
    """Monday payout column to CreditFix: empty or "Cash" is Cash, any bank is Card."""
    if not raw or raw.strip().lower() == "cash":
        return "Cash"
    return "Card"


class FlexProcessor(LeadProcessor):
    """Monday FLEX board → Mediatel."""

    partner = "flex"
    display_name = "Mediatel"

    def __init__(
        self,
        monday: MondayService,
        notifier: SlackNotifier,
        client: Optional[FlexClient] = None,
        boards: Optional[dict[str, BoardConfig]] = None,
    ):
        super().__init__(monday, notifier, boards)
        self.client = client or FlexClient()

    async def process_item(
        self,
        reference: LeadReference,
        item: MondayItem,
        board: BoardConfig,
        ordinal: int,
        total: int,
    ) -> None:
        name = item.name
        original_phone = extract_column_value(item, board.columns.phone)
        phone = to_national(original_phone)

        lead = LeadSummary(
            name=name,
            phone=phone or original_phone,
            original_phone=original_phone,
            board_name=board.board_name,
        )

        if not name or not phone:
            await self.reject(reference, lead, missing_name_or_phone(name, phone), ordinal, total)
            return

        result, duration_ms = await self.call_partner(
            self.client.send(str(reference.item_id), name, phone)
        )
        await self.report(reference, lead, result, ordinal, total, duration_ms)


class CrediusProcessor(LeadProcessor):
    """IFN hub board → Credius. The client does the phone normalization."""

    partner = "credius"
    display_name = "Credius"

    def __init__(
        self,
        monday: MondayService,
        notifier: SlackNotifier,
        client: Optional[CrediusClient] = None,
        boards: Optional[dict[str, BoardConfig]] = None,
    ):
        super().__init__(monday, notifier, boards)
        self.client = client or CrediusClient()

    async def process_item(
        self,
        reference: LeadReference,
        item: MondayItem,
        board: BoardConfig,
        ordinal: int,
        total: int,
    ) -> None:
        name = item.name
        original_phone = extract_column_value(item, board.columns.phone)

        lead = LeadSummary(
            name=name,
            phone=original_phone,
            original_phone=original_phone,
            board_name=board.board_name,
        )

        if not name or not original_phone:
            await self.reject(
                reference, lead, missing_name_or_phone(name, original_phone), ordinal, total
            )
            return

        result, duration_ms = await self.call_partner(self.client.send(name, original_phone))
        lead.phone = result.details.get("phone", original_phone)
        await self.report(reference, lead, result, ordinal, total, duration_ms)


class BCCreditRapidProcessor(LeadProcessor):
    """IFN hub board → BC Credit Rapid (salaried employees only)."""

    partner = "bccreditrapid"
    display_name = "BC Credit Rapid"

    REQUIRED_FIELDS = ("name", "email", "phone", "employer", "income", "amount")

    def __init__(
        self,
        monday: MondayService,
        notifier: SlackNotifier,
        client: Optional[BCCreditRapidClient] = None,
        boards: Optional[dict[str, BoardConfig]] = None,
    ):
        super().__init__(monday, notifier, boards)
        self.client = client or BCCreditRapidClient()

    async def process_item(
        self,
        reference: LeadReference,
        item: MondayItem,
        board: BoardConfig,
        ordinal: int,
        total: int,
    ) -> None:
        columns = board.columns
        original_phone = extract_column_value(item, columns.phone)

        lead = LeadSummary(
            name=item.name,
            phone=original_phone,
            original_phone=original_phone,
            board_name=board.board_name,
            email=extract_column_value(item, columns.email),
            employer=extract_column_value(item, columns.employer),
            income=extract_column_value(item, columns.income),
            amount=extract_column_value(item, columns.amount),
            required=self.REQUIRED_FIELDS,
        )

        missing = missing_fields(lead)
        if missing:
            await self.reject(reference, lead, missing_fields_reason(missing), ordinal, total)
            return

        result, duration_ms = await self.call_partner(
            self.client.send(
                BCCreditRapidLead(
                    name=lead.name,
                    email=lead.email,
                    phone=original_phone,
                    employer=lead.employer,
                    income=lead.income,
                    amount=lead.amount,
                )
            )
        )
        lead.phone = result.details.get("phone", original_phone)
        await self.report(reference, lead, result, ordinal, total, duration_ms)


class IfnSmsProcessor(LeadProcessor):
    """IFN hub board → 4Pay: texts the Credilink partner link to the lead."""

    partner = "ifn-sms"
    display_name = "IFN-SMS"

    TEMPLATE = "CREDILINK"

    def __init__(
        self,
        monday: MondayService,
        notifier: SlackNotifier,
        client: Optional[FourPayClient] = None,
        link_url: Optional[str] = None,
        boards: Optional[dict[str, BoardConfig]] = None,
    ):
        super().__init__(monday, notifier, boards)
        self.client = client or FourPayClient()
        self.link_url = link_url or get_settings().ifn_sms_link_url

    async def process_item(
        self,
        reference: LeadReference,
        item: MondayItem,
        board: BoardConfig,
        ordinal: int,
        total: int,
    ) -> None:
        name = item.name
        original_phone = extract_column_value(item, board.columns.phone)
        phone = FourPayClient.normalize_phone(original_phone)

        lead = LeadSummary(
            name=name,
            phone=phone or original_phone,
            original_phone=original_phone,
            board_name=board.board_name,
            sms_message=f"Credilink: {self.link_url}",
        )

        if not name or not phone:
            await self.reject(reference, lead, missing_name_or_phone(name, phone), ordinal, total)
            return

        logger.info(f"📤 [{self.partner}] Sending {self.TEMPLATE} SMS to {phone}")
        result, duration_ms = await self.call_partner(
            self.client.send_template(
                phone,
                self.TEMPLATE,
                {"url": self.link_url},
                external_message_id=f"monday-{reference.item_id}",
            )
        )
        await self.report(reference, lead, result, ordinal, total, duration_ms)


class CreditFixProcessor(LeadProcessor):
    """IFN hub board → CreditFix. Needs the CNP and the payout method."""

    partner = "creditfix"
    display_name = "CreditFix"

    REQUIRED_FIELDS = ("name", "email", "phone", "cnp")

    def __init__(
        self,
        monday: MondayService,
        notifier: SlackNotifier,
        client: Optional[CreditFixClient] = None,
        boards: Optional[dict[str, BoardConfig]] = None,
    ):
        super().__init__(monday, notifier, boards)
        self.client = client or CreditFixClient()

    async def process_item(
        self,
        reference: LeadReference,
        item: MondayItem,
        board: BoardConfig,
        ordinal: int,
        total: int,
    ) -> None:
        columns = board.columns
        original_phone = extract_column_value(item, columns.phone)
        raw_cashing_method = extract_column_value(item, columns.cashing_method)

        lead = LeadSummary(
            name=item.name,
            phone=original_phone,
            original_phone=original_phone,
            board_name=board.board_name,
            email=extract_column_value(item, columns.email),
            cnp=extract_column_value(item, columns.cnp),
            cashing_method=cashing_method_for(raw_cashing_method),
            required=self.REQUIRED_FIELDS,
        )

        missing = missing_fields(lead)
        if missing:
            await self.reject(reference, lead, missing_fields_reason(missing), ordinal, total)
            return

        result, duration_ms = await self.call_partner(
            self.client.send(lead.cnp, lead.email, original_phone, cashing_method=lead.cashing_method)
        )
        lead.amount = result.details.get("amount")
        await self.report(reference, lead, result, ordinal, total, duration_ms)


class ICreditProcessor(LeadProcessor):
    """IFN hub board → iCredit (name and phone only)."""

    partner = "icredit"
    display_name = "iCredit"

    def __init__(
        self,
        monday: MondayService,
        notifier: SlackNotifier,
        client: Optional[ICreditClient] = None,
        boards: Optional[dict[str, BoardConfig]] = None,
    ):
        super().__init__(monday, notifier, boards)
        self.client = client or ICreditClient()

    async def process_item(
        self,
        reference: LeadReference,
        item: MondayItem,
        board: BoardConfig,
        ordinal: int,
        total: int,
    ) -> None:
        name = item.name
        original_phone = extract_column_value(item, board.columns.phone)

        lead = LeadSummary(
            name=name,
            phone=original_phone,
            original_phone=original_phone,
            board_name=board.board_name,
        )

        if not name or not original_phone:
            await self.reject(
                reference, lead, missing_name_or_phone(name, original_phone), ordinal, total
            )
            return

        result, duration_ms = await self.call_partner(self.client.send(name, original_phone))
        lead.phone = result.details.get("phone", original_phone)
        await self.report(reference, lead, result, ordinal, total, duration_ms)


class FlexCreditProcessor(LeadProcessor):
    """IFN hub board → FlexCredit loan request. The CNP is masked in Slack."""

    partner = "flexcredit"
    display_name = "FlexCredit"

    REQUIRED_FIELDS = ("name", "phone", "email", "cnp")

    def __init__(
        self,
        monday: MondayService,
        notifier: SlackNotifier,
        client: Optional[FlexCreditClient] = None,
        boards: Optional[dict[str, BoardConfig]] = None,
    ):
        super().__init__(monday, notifier, boards)
        self.client = client or FlexCreditClient()

    async def process_item(
        self,
        reference: LeadReference,
        item: MondayItem,
        board: BoardConfig,
        ordinal: int,
        total: int,
    ) -> None:
        columns = board.columns
        original_phone = extract_column_value(item, columns.phone)
        email = extract_column_value(item, columns.email)
        cnp = extract_column_value(item, columns.cnp)
        amount = parse_int(extract_column_value(item, columns.amount))

        lead = LeadSummary(
            name=item.name,
            phone=original_phone,
            original_phone=original_phone,
            board_name=board.board_name,
            email=email,
            cnp=mask_cnp(cnp),
            amount=amount,
            required=self.REQUIRED_FIELDS,
        )

        missing = missing_fields(lead)
        if missing:
            await self.reject(reference, lead, missing_fields_reason(missing), ordinal, total)
            return

        result, duration_ms = await self.call_partner(
            self.client.send(lead.name, original_phone, email, cnp, amount=amount)
        )
        lead.phone = result.details.get("phone", original_phone)
        lead.amount = result.details.get("amount", amount)
        await self.report(reference, lead, result, ordinal, total, duration_ms)
