"""
CreditFix affiliate API client (v2).
"""
import random
from typing import Optional

import httpx
from loguru import logger

from src.config import get_settings
from src.models.delivery import DeliveryResult, DeliveryStatus
from src.services.partners.base import PartnerClient, field_errors


# Requested amount is not on the board; CreditFix gets a random one in this range
LOAN_AMOUNT_RANGE = (3000, 7000)
LOAN_AMOUNT_STEP = 50

CREDITFIX_SUCCESS = "success"
CREDITFIX_EXISTING_CLIENT = "existing client"
CREDITFIX_DUPLICATE = "previously transmitted client"


def generate_loan_amount() -> int:
    """Random amount between 3000 and 7000 RON, in steps of 50."""
    low, high = LOAN_AMOUNT_RANGE
    return low + random.randint(0, (high - low) // LOAN_AMOUNT_STEP) * LOAN_AMOUNT_STEP


class CreditFixClient(PartnerClient):
    """
    Sends full leads (CNP, email, phone, cashing method) to CreditFix.

    Authenticates with HTTP Basic auth. The answer carries `status`,
    `message`, `uid` and, for rejected input, an `errors` list.
    """

    display_name = "CreditFix"

    def __init__(
        self,
        api_url: Optional[str] = None,
        aff_id: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        super().__init__(timeout or settings.creditfix_timeout_seconds)
        self.api_url = (api_url or settings.creditfix_api_url).rstrip("/")
        self.aff_id = aff_id or settings.creditfix_aff_id
        self.username = username or settings.creditfix_username
        self.password = password or settings.creditfix_password

    async def send(
        self,
        cnp: str,
        email: str,
        phone: str,
        cashing_method: str = "Card",
        click_id: Optional[str] = None,
        amount: Optional[int] = None,
    ) -> DeliveryResult:
        """
        Create one CreditFix lead.

        Args:
            cnp: Personal numeric code
            email: Email address
            phone: Phone as typed in Monday
            cashing_method: "Cash" or "Card"
            click_id: Affiliate click id, if any
            amount: Requested amount; random in LOAN_AMOUNT_RANGE when None

        Raises:
            ValueError: If cnp, email or phone is empty
        """
        if not cnp or not email or not phone:
            raise ValueError("CNP, email and phone are required")

        amount = amount or generate_loan_amount()
        payload = {
            "aff": self.aff_id,
            "cid": click_id,
            "cnp": cnp,
            "eml": email,
            "tel": phone,
            "amt": amount,
            "vir": "Da",  # recurring income
            "tpv": cashing_method or "Card",
        }

        logger.info(f"📤 [CREDITFIX] Sending lead: {email} - {phone}, {amount} RON, {cashing_method}")

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.api_url}/create",
                    json=payload,
                    auth=(self.username or "", self.password or ""),
                    timeout=self.timeout,
                )
            if response.status_code in (401, 403):
                logger.error(f"❌ [CREDITFIX] Authentication failed: HTTP {response.status_code}")
                return DeliveryResult.failed(
                    DeliveryStatus.ERROR,
                    "Authentication failed - check the CreditFix username and password",
                    details={"http_status": response.status_code},
                )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            return self.transport_error(e)
        except ValueError:
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "CreditFix returned a non-JSON response"
            )

        logger.debug(f"[CREDITFIX] Raw response: {data}")
        result = self.parse_response(data)
        result.details["amount"] = amount
        return result

    @staticmethod
    def parse_response(data) -> DeliveryResult:
        if not isinstance(data, dict):
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "Unexpected response from CreditFix", raw_response=data
            )

        status = data.get("status")
        message = data.get("message")
        uid = data.get("uid")

        if CREDITFIX_SUCCESS in (status, message):
            return DeliveryResult.ok("Lead created", partner_id=uid, raw_response=data)
        if status == CREDITFIX_EXISTING_CLIENT:
            return DeliveryResult.failed(
                DeliveryStatus.DUPLICATE,
                "Existing client",
                partner_id=str(uid) if uid else None,
                details={"reason": "existing_client"},
                raw_response=data,
            )
        if CREDITFIX_DUPLICATE in (status, message):
            return DeliveryResult.failed(
                DeliveryStatus.DUPLICATE,
                "Duplicate lead",
                partner_id=str(uid) if uid else None,
                details={"reason": "previously_transmitted"},
                raw_response=data,
            )

        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            return DeliveryResult.failed(
                DeliveryStatus.INVALID,
                ", ".join(str(error) for error in errors),
                errors=field_errors(errors),
                raw_response=data,
            )

        return DeliveryResult.failed(
            DeliveryStatus.ERROR,
            message or "Unexpected response from CreditFix",
            partner_id=str(uid) if uid else None,
            raw_response=data,
        )
