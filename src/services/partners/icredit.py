"""
iCredit affiliate API client.
"""
import re
from typing import Optional

import httpx
from loguru import logger

from src.config import get_settings
from src.models.delivery import DeliveryResult, DeliveryStatus
from src.services.partners.base import PartnerClient, field_errors
from src.utils.phone_normalizer import to_national


NAME_MAX_LENGTH = 190
_NAME_RE = re.compile(r"^[a-zA-ZăâîșțĂÂÎȘȚ\s]+$")

# Markers iCredit uses for an application already under review
_UNDER_REVIEW_MARKERS = ("deja in analiza", "duplicate")


def validate_name(name: Optional[str]) -> bool:
    """Letters (Romanian diacritics included) and spaces, at most 190 characters."""
    if not name or len(name) > NAME_MAX_LENGTH:
        return False
    return bool(_NAME_RE.match(name))


class ICreditClient(PartnerClient):
    """
    Sends name + phone leads to iCredit.

    iCredit wants the phone as 9 digits without the leading 0
    (722123456). Authentication is an X-Auth-Token header; rejected
    input comes back as HTTP 422 with an `errors` object.
    """

    display_name = "iCredit"

    def __init__(
        self,
        api_url: Optional[str] = None,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        super().__init__(timeout or settings.icredit_timeout_seconds)
        self.api_url = api_url or settings.icredit_api_url
        self.auth_token = auth_token or settings.icredit_auth_token

    @staticmethod
    def normalize_phone(phone: Optional[str]) -> Optional[str]:
        national = to_national(phone)
        return national[1:] if national else None

    async def send(self, name: str, phone: str) -> DeliveryResult:
        """
        Create one iCredit application.

        Raises:
            ValueError: If name or phone is empty
        """
        if not name or not phone:
            raise ValueError("Name and phone are required")

        if not validate_name(name):
            return DeliveryResult.failed(
                DeliveryStatus.INVALID,
                f"Invalid name - letters and spaces only, at most {NAME_MAX_LENGTH} characters",
                errors={"name": [f"Invalid name: {name}"]},
            )

        normalized = self.normalize_phone(phone)
        if not normalized:
            return DeliveryResult.failed(
                DeliveryStatus.INVALID,
                "Invalid phone number - must be a Romanian number (9 digits without the leading 0)",
                errors={"phone": [f"Invalid Romanian number: {phone}"]},
            )

        logger.info(f"📤 [ICREDIT] Sending lead: {name} - {normalized} (original: {phone})")

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.api_url,
                    json={"name": name, "telephone": normalized},
                    headers={"X-Auth-Token": self.auth_token or ""},
                    timeout=self.timeout,
                )
            if response.status_code in (401, 403, 422, 429):
                result = self.parse_rejection(response)
            else:
                response.raise_for_status()
                result = self.parse_response(response.json())
        except httpx.HTTPError as e:
            return self.transport_error(e)
        except ValueError:
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "iCredit returned a non-JSON response"
            )

        result.details["phone"] = normalized
        return result

    @staticmethod
    def parse_response(data) -> DeliveryResult:
        """Translate a 2xx answer."""
        if not isinstance(data, dict):
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "Unexpected response from iCredit", raw_response=data
            )

        payload = data.get("payload") if isinstance(data.get("payload"), dict) else {}
        lead_id = payload.get("ID") or data.get("id")
        if data.get("success") is True or payload.get("ID"):
            return DeliveryResult.ok("Lead created", partner_id=lead_id, raw_response=data)

        return DeliveryResult.failed(
            DeliveryStatus.ERROR,
            data.get("message") or "Unexpected response from iCredit",
            raw_response=data,
        )

    @staticmethod
    def parse_rejection(response: httpx.Response) -> DeliveryResult:
        """Translate the 401/403/422/429 answers iCredit documents."""
        code = response.status_code
        details = {"http_status": code}

        if code == 401:
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "Authentication token missing", details=details
            )
        if code == 403:
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "Authentication token invalid", details=details
            )
        if code == 429:
            return DeliveryResult.failed(
                DeliveryStatus.ERROR, "Too many requests - iCredit rate limit hit", details=details
            )

        try:
            data = response.json()
        except ValueError:
            data = None
        errors = data.get("errors") if isinstance(data, dict) else None
        errors = errors if isinstance(errors, dict) else {}

        credit_application = str(errors.get("credit_application") or "")
        if any(marker in credit_application for marker in _UNDER_REVIEW_MARKERS):
            return DeliveryResult.failed(
                DeliveryStatus.DUPLICATE,
                "Duplicate lead - application already under review at iCredit",
                details=details,
                raw_response=data,
            )
        phone_errors = field_errors(errors).get("telephone")
        if phone_errors:
            return DeliveryResult.failed(
                DeliveryStatus.DUPLICATE,
                f"Duplicate lead - phone already registered: {', '.join(phone_errors)}",
                details=details,
                raw_response=data,
            )

        message = data.get("message") if isinstance(data, dict) else None
        return DeliveryResult.failed(
            DeliveryStatus.INVALID,
            message or "Validation errors",
            errors=field_errors(errors),
            details=details,
            raw_response=data,
        )
