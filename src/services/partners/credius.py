"""
Credius lead API client.
"""
import time
from typing import Optional

import httpx
from loguru import logger

from src.config import get_settings
from src.models.delivery import DeliveryResult, DeliveryStatus
from src.services.partners.base import PartnerClient
from src.utils.phone_normalizer import to_national


CREDIUS_OK = "OK"
CREDIUS_DUPLICATE = "Lead Existent"


class CrediusClient(PartnerClient):
    """
    Sends name + phone leads to Credius.

    Credius wants the national format (07XXXXXXXX, landlines 02/03 too)
    and answers {"Mesaj": ..., "Id": ...}; newer deployments use
    {"message": ..., "lead_id": ...}. Both are accepted.
    """

    display_name = "Credius"

    def __init__(
        self,
        url: Optional[str] = None,
        username: Optional[str] = None,
        api_key: Optional[str] = None,
        county: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        super().__init__(timeout or settings.credius_timeout_seconds)
        self.url = url or settings.credius_url
        self.username = username or settings.credius_username
        self.api_key = api_key or settings.credius_api_key
        self.county = county or settings.credius_default_county

    @staticmethod
    def normalize_phone(phone: Optional[str]) -> Optional[str]:
        return to_national(phone)

    async def send(self, name: str, phone: str) -> DeliveryResult:
        """
        Create one Credius lead.

        Args:
            name: Full name
            phone: Phone as typed in Monday; normalized here

        Raises:
            ValueError: If name or phone is empty
        """
        if not name or not phone:
            raise ValueError("Name and phone are required")

        normalized = self.normalize_phone(phone)
        if not normalized:
            return DeliveryResult.failed(
                DeliveryStatus.INVALID,
                "Invalid or non-Romanian phone number",
                errors={"phone": [f"Invalid Romanian number: {phone}"]},
            )

        if not self.url:
            return DeliveryResult.failed(DeliveryStatus.ERROR, "CREDIUS_URL not configured")

        payload = {
            "UserName": self.username,
            "ApiKey": self.api_key,
            "terminalCounty": self.county,
            "leadName": name,
            "leadPhone": normalized,
            "amount": None,
            "leadcnp": None,
        }

        logger.info(f"📤 [CREDIUS] Sending lead: {name} - {normalized} (original: {phone})")
        started = time.perf_counter()

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(self.url, json=payload, timeout=self.timeout)
                response.raise_for_status()
                data = response.json() if response.content else None
        except httpx.HTTPError as e:
            logger.error(f"⏱️ [CREDIUS] Failed after {(time.perf_counter() - started) * 1000:.0f}ms")
            return self.transport_error(e)
        except ValueError:
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "Credius returned a non-JSON response"
            )

        logger.info(f"⏱️ [CREDIUS] Answered in {(time.perf_counter() - started) * 1000:.0f}ms")
        result = self.parse_response(data)
        result.details["phone"] = normalized
        return result

    @staticmethod
    def parse_response(data) -> DeliveryResult:
        if not data or not isinstance(data, dict):
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "Empty response from Credius", raw_response=data
            )

        message = data.get("Mesaj") or data.get("message")
        lead_id = data.get("Id") or data.get("lead_id")

        try:
            has_id = int(lead_id) > 0
        except (TypeError, ValueError):
            has_id = False

        if message == CREDIUS_OK and has_id:
            return DeliveryResult.ok("Lead created", partner_id=lead_id, raw_response=data)
        if message == CREDIUS_DUPLICATE:
            return DeliveryResult.failed(
                DeliveryStatus.DUPLICATE, "Duplicate lead", raw_response=data
            )
        return DeliveryResult.failed(
            DeliveryStatus.ERROR,
            message or "Unexpected response from Credius",
            partner_id=str(lead_id) if lead_id else None,
            raw_response=data,
        )
