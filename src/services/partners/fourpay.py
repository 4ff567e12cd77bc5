"""
4Pay SMS gateway client.
Sends SMS through https://sms.4pay.ro and translates its plain-text answers.
"""
import re
from typing import Callable, Optional

import httpx
from loguru import logger

from src.config import get_settings
from src.models.delivery import DeliveryResult, DeliveryStatus
from src.services.partners.base import PartnerClient
from src.utils.phone_normalizer import to_national


SMS_SEGMENT_LENGTH = 160

NETWORK_NAMES = {
    "O": "Orange",
    "V": "Vodafone",
    "C": "Telekom Mobile",
    "R": "RDS/Digi",
    "I": "International",
    "L": "Lycamobile",
    "T": "Telekom",
}

ERROR_MESSAGES = {
    "ERROR_SERV_NOT_FOUND": "Invalid credentials (wrong servID or password)",
    "ERROR_SERV_CFG_ERROR": "4Pay service configuration error",
    "ERROR_DEST_PARAMETER_INVALID": "Phone number contains invalid characters",
    "ERROR_DEST_NOT_FOUND": "Phone number does not belong to a known network",
    "ERROR_NO_ROUTE": "Destination not allowed",
    "ERROR_LIMIT_EXCEEDED": "Sending limit exceeded",
    "ERROR_IP_ACL": "Server IP is not allowed to send",
    "ERROR_PARAM_VALIDITY_INVALID": "Invalid msg_validity parameter",
}

_NETWORK_RE = re.compile(r"network=([A-Z])")
_MSG_ID_RE = re.compile(r"msgID=(\d+)")


# Customer-facing texts stay in Romanian
SMS_TEMPLATES: dict[str, Callable[..., str]] = {
    "CREDILINK": lambda url="", **_: (
        "Buna ziua,\nIn urma convorbirii telefonice, va transmitem link-ul "
        f"catre partenerii nostri:\n{url}"
    ),
}


class UnknownTemplateError(Exception):
    """Raised when an SMS template name is not defined."""
    pass


def render_template(template_name: str, **data) -> str:
    template = SMS_TEMPLATES.get(template_name)
    if template is None:
        raise UnknownTemplateError(f"Unknown SMS template: {template_name}")
    return template(**data)


class FourPayClient(PartnerClient):
    """
    4Pay HTTP API client.

    Answers are plain text:
        OK network=V msgID=987654321
        ERROR ERROR_SERV_NOT_FOUND
    """

    display_name = "4Pay"

    def __init__(
        self,
        api_url: Optional[str] = None,
        serv_id: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        super().__init__(timeout or settings.fourpay_timeout_seconds)
        self.api_url = api_url or settings.fourpay_api_url
        self.serv_id = serv_id or settings.fourpay_serv_id
        self.password = password or settings.fourpay_password

        if not self.serv_id or not self.password:
            logger.warning("4Pay credentials not configured - SMS sending will fail")

    @staticmethod
    def normalize_phone(phone: Optional[str]) -> Optional[str]:
        return to_national(phone, mobile_only=True)

    async def send(
        self,
        phone: str,
        message: str,
        external_message_id: Optional[str] = None,
    ) -> DeliveryResult:
        """
        Send one SMS.

        Args:
            phone: Recipient, any Romanian mobile format
            message: Text; longer than 160 chars is billed as several segments
            external_message_id: Our id for delivery tracking

        Raises:
            ValueError: If phone or message is empty
        """
        if not phone or not message:
            raise ValueError("Phone and message are required")

        normalized = self.normalize_phone(phone)
        if not normalized:
            return DeliveryResult.failed(
                DeliveryStatus.INVALID,
                f"Invalid phone: {phone}",
                errors={"phone": ["Invalid Romanian mobile number"]},
            )

        if len(message) > SMS_SEGMENT_LENGTH:
            segments = -(-len(message) // SMS_SEGMENT_LENGTH)
            logger.warning(
                f"⚠️ [4PAY] Long message ({len(message)} chars) will be sent as {segments} segments"
            )

        params = {
            "servID": self.serv_id,
            "password": self.password,
            "msg_dst": normalized,
            "msg_text": message,
        }
        if external_message_id:
            params["external_messageID"] = external_message_id

        logger.info(f"📱 [4PAY] Sending SMS to {normalized}")

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.api_url, params=params, timeout=self.timeout)
                response.raise_for_status()
                body = response.text
        except httpx.HTTPError as e:
            return self.transport_error(e)

        logger.debug(f"[4PAY] Raw response: {body}")
        result = self.parse_response(body)
        result.details["phone"] = normalized
        return result

    async def send_template(
        self,
        phone: str,
        template_name: str,
        template_data: Optional[dict] = None,
        external_message_id: Optional[str] = None,
    ) -> DeliveryResult:
        """
        Send an SMS rendered from SMS_TEMPLATES.

        Raises:
            UnknownTemplateError: If the template does not exist
        """
        message = render_template(template_name, **(template_data or {}))
        return await self.send(phone, message, external_message_id)

    @staticmethod
    def parse_response(body: str) -> DeliveryResult:
        text = (body or "").strip()

        if text.startswith("OK"):
            network_match = _NETWORK_RE.search(text)
            msg_id_match = _MSG_ID_RE.search(text)
            code = network_match.group(1) if network_match else None
            network = NETWORK_NAMES.get(code, code or "unknown")
            msg_id = msg_id_match.group(1) if msg_id_match else None
            return DeliveryResult.ok(
                f"SMS sent ({network})",
                partner_id=msg_id,
                details={"network": network},
                raw_response=text,
            )

        if text.startswith("ERROR"):
            code = text[len("ERROR"):].strip()
            return DeliveryResult.failed(
                DeliveryStatus.ERROR,
                ERROR_MESSAGES.get(code, f"4Pay error: {code}"),
                details={"error_code": code},
                raw_response=text,
            )

        return DeliveryResult.failed(
            DeliveryStatus.ERROR, "Unexpected response from 4Pay", raw_response=text
        )
