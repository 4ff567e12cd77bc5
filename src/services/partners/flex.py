"""
Flex (Mediatel) lead import client.
"""
from typing import Optional

import httpx
from loguru import logger

from src.config import get_settings
from src.models.delivery import DeliveryResult, DeliveryStatus
from src.services.partners.base import PartnerClient


class FlexClient(PartnerClient):
    """
    Sends leads to the Mediatel campaign API.

    Mediatel answers {"leadsImported": n, "error": str | null}: one import
    is a success, zero imports without an error is a duplicate.
    """

    display_name = "Mediatel"

    def __init__(
        self,
        api_url: Optional[str] = None,
        auth_token: Optional[str] = None,
        campaign: Optional[str] = None,
        source: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        super().__init__(timeout or settings.flex_timeout_seconds)
        self.api_url = api_url or settings.flex_api_url
        self.auth_token = auth_token or settings.flex_auth_token
        self.campaign = campaign or settings.flex_campaign
        self.source = source or settings.flex_source

    def build_payload(self, lead_id: str, name: str, phone: str) -> list[dict]:
        return [
            {
                "campaign": self.campaign,
                "data": {"Name": name, "Sursa": self.source},
                "id": lead_id,
                "phones": [{"phoneNo": phone, "phoneType": "main phone"}],
            }
        ]

    async def send(self, lead_id: str, name: str, phone: str) -> DeliveryResult:
        """
        Import one lead.

        Args:
            lead_id: Monday item id, used as the Mediatel lead id
            name: Full name
            phone: Normalized national number (07XXXXXXXX)
        """
        if not self.api_url:
            return DeliveryResult.failed(DeliveryStatus.ERROR, "FLEX_API_URL not configured")

        logger.info(f"📤 [FLEX] Sending lead {lead_id}: {name} - {phone}")

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url,
                    json=self.build_payload(lead_id, name, phone),
                    headers={"Authorization": f"Bearer {self.auth_token}"},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            return self.transport_error(e)
        except ValueError:
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "Mediatel returned a non-JSON response"
            )

        logger.debug(f"[FLEX] Raw response: {data}")
        return self.parse_response(data)

    @staticmethod
    def parse_response(data) -> DeliveryResult:
        if not isinstance(data, dict):
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "Unexpected response from Mediatel", raw_response=data
            )

        imported = data.get("leadsImported")
        error = data.get("error")

        if error is not None:
            return DeliveryResult.failed(DeliveryStatus.ERROR, str(error), raw_response=data)
        if imported == 1:
            return DeliveryResult.ok("Lead imported", raw_response=data)
        if imported == 0:
            return DeliveryResult.failed(
                DeliveryStatus.DUPLICATE,
                "Lead not imported - duplicate or failed validation",
                raw_response=data,
            )
        return DeliveryResult.failed(
            DeliveryStatus.ERROR, "Unexpected response from Mediatel", raw_response=data
        )
