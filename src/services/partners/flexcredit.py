"""
FlexCredit loan request API client.
"""
import uuid
from typing import Optional

import httpx
from loguru import logger

from src.config import get_settings
from src.models.delivery import DeliveryResult, DeliveryStatus
from src.services.partners.base import PartnerClient, field_errors
from src.utils.phone_normalizer import to_national


ACCEPTED_STATUSES = {"accepted", "accept"}
REJECTED_STATUSES = {"rejected"}


def split_name(full_name: Optional[str]) -> tuple[str, str]:
    """
    "Ion Popescu" -> ("Ion", "Popescu").

    The first word is the first name, the rest is the last name.
    """
    parts = (full_name or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def mask_cnp(cnp: Optional[str]) -> Optional[str]:
    return f"{cnp[:4]}****" if cnp else None


class FlexCreditClient(PartnerClient):
    """
    Creates FlexCredit loan requests.

    Every request gets a fresh request_id (UUID4); FlexCredit answers with
    a status of accepted or rejected and later calls `callback_url`.
    """

    display_name = "FlexCredit"

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        callback_url: Optional[str] = None,
        product_id: Optional[int] = None,
        default_amount: Optional[int] = None,
        installments: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        super().__init__(timeout or settings.flexcredit_timeout_seconds)
        self.api_url = (api_url or settings.flexcredit_api_url or "").rstrip("/")
        self.api_key = api_key or settings.flexcredit_api_key
        self.callback_url = callback_url or settings.flexcredit_callback_url
        self.product_id = product_id or settings.flexcredit_product_id
        self.default_amount = default_amount or settings.flexcredit_default_amount
        self.installments = installments or settings.flexcredit_installments

    @staticmethod
    def normalize_phone(phone: Optional[str]) -> Optional[str]:
        return to_national(phone)

    async def send(
        self,
        name: str,
        phone: str,
        email: str,
        cnp: str,
        amount: Optional[int] = None,
    ) -> DeliveryResult:
        """
        Create one loan request.

        Args:
            name: Full name, split into first and last name
            phone: Phone as typed in Monday; normalized here
            email: Email address
            cnp: Personal numeric code
            amount: Requested amount; the configured default when None

        Raises:
            ValueError: If name, phone, email or cnp is empty
        """
        if not (name and phone and email and cnp):
            raise ValueError("Name, phone, email and CNP are required")

        normalized = self.normalize_phone(phone)
        if not normalized:
            return DeliveryResult.failed(
                DeliveryStatus.INVALID,
                "Invalid or non-Romanian phone number",
                errors={"phone": [f"Invalid Romanian number: {phone}"]},
            )

        if not self.api_url:
            return DeliveryResult.failed(DeliveryStatus.ERROR, "FLEXCREDIT_API_URL not configured")

        first_name, last_name = split_name(name)
        request_id = str(uuid.uuid4())
        payload = {
            "request_id": request_id,
            "loan": {
                "product_id": self.product_id,
                "amount": amount or self.default_amount,
                "installments": self.installments,
            },
            "client": {
                "personal_id": cnp,
                "first_name": first_name,
                "last_name": last_name,
                "phone_number": normalized,
                "email": email,
            },
            "callback_url": self.callback_url,
        }

        logger.info(
            f"📤 [FLEXCREDIT] Sending request {request_id}: {first_name} {last_name} - "
            f"{normalized}, CNP {mask_cnp(cnp)}, {payload['loan']['amount']} RON"
        )

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.api_url}/requests",
                    json=payload,
                    headers={"X-Api-Key": self.api_key or ""},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            result = self.parse_validation_error(e.response)
            if result is None:
                return self.transport_error(e)
        except httpx.HTTPError as e:
            return self.transport_error(e)
        except ValueError:
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "FlexCredit returned a non-JSON response"
            )
        else:
            logger.debug(f"[FLEXCREDIT] Raw response: {data}")
            result = self.parse_response(data, request_id)

        result.details.update({"phone": normalized, "amount": payload["loan"]["amount"]})
        return result

    @staticmethod
    def parse_response(data, request_id: Optional[str] = None) -> DeliveryResult:
        if not isinstance(data, dict):
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "Unexpected response from FlexCredit", raw_response=data
            )

        status = str(data.get("status") or "").lower()
        partner_id = data.get("request_id") or request_id

        if status in ACCEPTED_STATUSES:
            return DeliveryResult.ok(
                "Lead accepted",
                partner_id=partner_id,
                details={"url": data.get("url")},
                raw_response=data,
            )
        # FlexCredit rejects clients it already knows
        if status in REJECTED_STATUSES:
            return DeliveryResult.failed(
                DeliveryStatus.DUPLICATE,
                "Lead rejected by FlexCredit",
                partner_id=str(partner_id) if partner_id else None,
                raw_response=data,
            )
        return DeliveryResult.failed(
            DeliveryStatus.ERROR,
            data.get("message") or "Unexpected response from FlexCredit",
            partner_id=str(partner_id) if partner_id else None,
            raw_response=data,
        )

    @staticmethod
    def parse_validation_error(response: httpx.Response) -> Optional[DeliveryResult]:
        """
        Field errors from a 4xx body shaped {"field": ["message", ...]}.

        Returns None when the body carries no field errors.
        """
        try:
            data = response.json()
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None

        errors = field_errors({k: v for k, v in data.items() if isinstance(v, list)})
        if not errors:
            return None

        message = "; ".join(f"{field_name}: {', '.join(messages)}" for field_name, messages in errors.items())
        logger.warning(f"[FLEXCREDIT] Validation errors (HTTP {response.status_code}): {message}")
        return DeliveryResult.failed(
            DeliveryStatus.INVALID,
            message,
            errors=errors,
            details={"http_status": response.status_code},
            raw_response=data,
        )
