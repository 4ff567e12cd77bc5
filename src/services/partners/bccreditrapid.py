"""
BC Credit Rapid client (ADSY leads API v2, bulk endpoint).
"""
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from loguru import logger

from src.config import get_settings
from src.models.delivery import DeliveryResult, DeliveryStatus
from src.services.partners.base import PartnerClient, field_errors, parse_int
from src.utils.phone_normalizer import to_e164


# ADSY limits: income 4-7 digits, amount 4-8 digits
INCOME_RANGE = (1000, 9_999_999)
AMOUNT_RANGE = (1000, 99_999_999)


@dataclass
class BCCreditRapidLead:
    name: str
    email: str
    phone: str
    employer: str
    income: Any
    amount: Any


def validate_range(value: Any, bounds: tuple[int, int]) -> Optional[int]:
    number = parse_int(value)
    if number is None or not bounds[0] <= number <= bounds[1]:
        return None
    return number


class BCCreditRapidClient(PartnerClient):
    """
    Sends salaried-employee leads to BC Credit Rapid.

    Input is validated locally first (mobile phone, income, amount) so an
    obviously bad lead never reaches the API. Each lead is posted as a
    bulk request with a single item; the per-item status decides the result.
    """

    display_name = "BC Credit Rapid"

    def __init__(
        self,
        api_url: Optional[str] = None,
        website_secret: Optional[str] = None,
        website_code: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        super().__init__(timeout or settings.bccreditrapid_timeout_seconds)
        self.api_url = api_url or settings.bccreditrapid_api_url
        self.website_secret = website_secret or settings.bccreditrapid_website_secret
        self.website_code = website_code or settings.bccreditrapid_website_code

    @staticmethod
    def normalize_phone(phone: Optional[str]) -> Optional[str]:
        return to_e164(phone, mobile_only=True)

    def validate(self, lead: BCCreditRapidLead) -> tuple[Optional[dict], Optional[DeliveryResult]]:
        """
        Validate and convert a lead into an API item.

        Returns:
            (item, None) when valid, (None, invalid result) otherwise
        """
        phone = self.normalize_phone(lead.phone)
        if not phone:
            return None, DeliveryResult.failed(
                DeliveryStatus.INVALID,
                "Invalid phone number: must be a Romanian mobile (07... / +407...)",
                errors={"phone": ["Invalid Romanian mobile number"]},
            )

        income = validate_range(lead.income, INCOME_RANGE)
        if income is None:
            return None, DeliveryResult.failed(
                DeliveryStatus.INVALID,
                "Invalid income (must be between 1000 and 9999999)",
                errors={"income": ["Between 1000 and 9999999 RON"]},
            )

        amount = validate_range(lead.amount, AMOUNT_RANGE)
        if amount is None:
            return None, DeliveryResult.failed(
                DeliveryStatus.INVALID,
                "Invalid requested amount (must be between 1000 and 99999999)",
                errors={"amount": ["Between 1000 and 99999999 RON"]},
            )

        item = {
            "website_code": self.website_code,
            "name": lead.name,
            "email": lead.email,
            "phone": phone,
            "employer": lead.employer,
            "income_type": "salariat",  # every relayed lead is salaried
            "income": income,
            "amount": amount,
            "agree_gdpr": True,
            "agree_policy": True,
            "agree_anaf": True,
        }
        return item, None

    async def send(self, lead: BCCreditRapidLead) -> DeliveryResult:
        """
        Submit one lead.

        Raises:
            ValueError: If name, email, phone or employer is empty
        """
        if not (lead.name and lead.email and lead.phone and lead.employer):
            raise ValueError("Name, email, phone and employer are required")

        item, invalid = self.validate(lead)
        if invalid is not None:
            return invalid

        logger.info(
            f"📤 [BC CREDIT RAPID] Sending lead: {lead.name} "
            f"({lead.phone} -> {item['phone']}), income {item['income']}, amount {item['amount']}"
        )

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url,
                    json={"items": [item]},
                    headers={"Authorization": f"Bearer {self.website_secret}"},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            return self.transport_error(e)
        except ValueError:
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "BC Credit Rapid returned a non-JSON response"
            )

        logger.debug(f"[BC CREDIT RAPID] Raw response: {data}")
        result = self.parse_response(data)
        result.details.update({"phone": item["phone"], "income": item["income"], "amount": item["amount"]})
        return result

    @staticmethod
    def parse_response(data) -> DeliveryResult:
        items = data.get("items") if isinstance(data, dict) else None
        item = (items or [{}])[0] or {}
        status = item.get("status")

        if status == "inserted":
            return DeliveryResult.ok(
                "Lead sent to BC Credit Rapid", partner_id=item.get("id"), raw_response=data
            )
        if status == "skipped":
            reason = item.get("reason")
            message = (
                "Duplicate lead (already submitted in the last 30 days)"
                if reason == "duplicate_30_days"
                else "Duplicate lead"
            )
            return DeliveryResult.failed(
                DeliveryStatus.DUPLICATE, message, details={"reason": reason}, raw_response=data
            )
        if status == "invalid":
            return DeliveryResult.failed(
                DeliveryStatus.INVALID,
                "Invalid data",
                errors=field_errors(item.get("errors")),
                raw_response=data,
            )
        return DeliveryResult.failed(
            DeliveryStatus.ERROR, "Unexpected response from BC Credit Rapid", raw_response=data
        )
