"""
Partner Integration Registry

Wires each partner's processor to its own delivery queue and Slack channel.
"""
from dataclasses import dataclass
from typing import Optional

from src.config import Settings, get_settings
from src.core.lead_processor import LeadProcessor
from src.core.partner_processors import (
    BCCreditRapidProcessor,
    CreditFixProcessor,
    CrediusProcessor,
    FlexCreditProcessor,
    FlexProcessor,
    ICreditProcessor,
    IfnSmsProcessor,
)
from src.delivery_queue import DeliveryQueue
from src.services.monday_service import MondayService
from src.services.partners import (
    BCCreditRapidClient,
    CreditFixClient,
    CrediusClient,
    FlexClient,
    FlexCreditClient,
    FourPayClient,
    ICreditClient,
)
from src.services.slack_notifier import SlackNotifier
from src.utils.observability import logger


PARTNERS = ("flex", "credius", "bccreditrapid", "ifn-sms", "creditfix", "icredit", "flexcredit")


@dataclass
class PartnerIntegration:
    """One partner: its queue and the processor registered as its handler."""
    name: str
    display_name: str
    queue: DeliveryQueue
    processor: LeadProcessor


def _settings_key(partner: str) -> str:
    return partner.replace("-", "_")


def build_queue(partner: str, processor: LeadProcessor, settings: Settings) -> DeliveryQueue:
    """Queue for a partner, using its configured delay and the shared limits."""
    return DeliveryQueue(
        name=partner,
        delay_seconds=getattr(settings, f"{_settings_key(partner)}_queue_delay_seconds"),
        handler=processor,
        max_pending=settings.queue_max_pending,
        overflow_policy=settings.queue_overflow_policy,
        handler_timeout=settings.queue_handler_timeout_seconds,
    )


def build_processor(partner: str, monday: MondayService, settings: Settings) -> LeadProcessor:
    """Processor for a partner, with its client and Slack channel taken from settings."""
    if partner not in PARTNERS:
        raise ValueError(f"Unknown partner: {partner}")

    webhook_url = getattr(settings, f"slack_webhook_{_settings_key(partner)}")
    if not webhook_url:
        logger.warning(f"[{partner}] Slack webhook not configured, notifications disabled")
    notifier = SlackNotifier(webhook_url, timeout=settings.slack_timeout_seconds)

    if partner == "flex":
        client = FlexClient(
            api_url=settings.flex_api_url,
            auth_token=settings.flex_auth_token,
            campaign=settings.flex_campaign,
            source=settings.flex_source,
            timeout=settings.flex_timeout_seconds,
        )
        return FlexProcessor(monday, notifier, client=client)

    if partner == "credius":
        client = CrediusClient(
            url=settings.credius_url,
            username=settings.credius_username,
            api_key=settings.credius_api_key,
            county=settings.credius_default_county,
            timeout=settings.credius_timeout_seconds,
        )
        return CrediusProcessor(monday, notifier, client=client)

    if partner == "bccreditrapid":
        client = BCCreditRapidClient(
            api_url=settings.bccreditrapid_api_url,
            website_secret=settings.bccreditrapid_website_secret,
            website_code=settings.bccreditrapid_website_code,
            timeout=settings.bccreditrapid_timeout_seconds,
        )
        return BCCreditRapidProcessor(monday, notifier, client=client)

    if partner == "ifn-sms":
        client = FourPayClient(
            api_url=settings.fourpay_api_url,
            serv_id=settings.fourpay_serv_id,
            password=settings.fourpay_password,
            timeout=settings.fourpay_timeout_seconds,
        )
        return IfnSmsProcessor(monday, notifier, client=client, link_url=settings.ifn_sms_link_url)

    if partner == "creditfix":
        client = CreditFixClient(
            api_url=settings.creditfix_api_url,
            aff_id=settings.creditfix_aff_id,
            username=settings.creditfix_username,
            password=settings.creditfix_password,
            timeout=settings.creditfix_timeout_seconds,
        )
        return CreditFixProcessor(monday, notifier, client=client)

    if partner == "icredit":
        client = ICreditClient(
            api_url=settings.icredit_api_url,
            auth_token=settings.icredit_auth_token,
            timeout=settings.icredit_timeout_seconds,
        )
        return ICreditProcessor(monday, notifier, client=client)

    client = FlexCreditClient(
        api_url=settings.flexcredit_api_url,
        api_key=settings.flexcredit_api_key,
        callback_url=settings.flexcredit_callback_url,
        product_id=settings.flexcredit_product_id,
        default_amount=settings.flexcredit_default_amount,
        installments=settings.flexcredit_installments,
        timeout=settings.flexcredit_timeout_seconds,
    )
    return FlexCreditProcessor(monday, notifier, client=client)


def build_integrations(
    settings: Optional[Settings] = None,
    monday: Optional[MondayService] = None,
    processors: Optional[dict[str, LeadProcessor]] = None,
) -> dict[str, PartnerIntegration]:
    """
    Build every partner integration.

    Args:
        settings: Application settings (cached settings if None)
        monday: Shared Monday client (created if None)
        processors: Processor overrides by partner name, for tests

    Returns:
        Integrations keyed by partner name (the webhook path segment)
    """
    settings = settings or get_settings()
    monday = monday or MondayService()
    processors = processors or {}

    integrations: dict[str, PartnerIntegration] = {}
    for partner in PARTNERS:
        processor = processors.get(partner) or build_processor(partner, monday, settings)

        queue = build_queue(partner, processor, settings)
        integrations[partner] = PartnerIntegration(
            name=partner,
            display_name=processor.display_name,
            queue=queue,
            processor=processor,
        )
        logger.info(
            f"[{partner}] Integration ready ({processor.display_name}, "
            f"{queue.delay_seconds}s between deliveries)"
        )

    return integrations
