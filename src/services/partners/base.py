"""
Shared pieces of the partner gateway clients.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
from loguru import logger

from src.models.delivery import DeliveryResult, DeliveryStatus


def parse_int(value: Any) -> Optional[int]:
    """
    Lenient integer parse of a Monday number column.

    "4500", "4500.00", " 4 500 " all give 4500; anything else gives None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip().replace(" ", "")
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return None


def field_errors(errors: Any, default_field: str = "lead") -> dict[str, list[str]]:
    """Partner validation errors as {field: [messages]}."""
    if isinstance(errors, dict):
        return {
            str(field_name): [str(m) for m in messages] if isinstance(messages, list) else [str(messages)]
            for field_name, messages in errors.items()
        }
    if isinstance(errors, list) and errors:
        return {default_field: [str(message) for message in errors]}
    if errors:
        return {default_field: [str(errors)]}
    return {}


class PartnerClient(ABC):
    """
    HTTP client for one partner API.

    Implementations translate every partner answer, and every transport
    failure, into a DeliveryResult instead of raising.
    """

    #: Display name used in logs and notifications
    display_name: str = "partner"

    def __init__(self, timeout: float):
        self.timeout = timeout

    @abstractmethod
    async def send(self, *args: Any, **kwargs: Any) -> DeliveryResult:
        ...

    def transport_error(self, error: httpx.HTTPError) -> DeliveryResult:
        """Map an httpx failure to an ERROR result."""
        if isinstance(error, httpx.TimeoutException):
            message = f"Request timed out after {self.timeout:g}s"
        elif isinstance(error, httpx.ConnectError):
            message = f"Cannot connect to the {self.display_name} server"
        elif isinstance(error, httpx.HTTPStatusError):
            message = f"{self.display_name} API error: HTTP {error.response.status_code}"
        else:
            message = str(error) or error.__class__.__name__

        logger.error(f"❌ [{self.display_name}] {message}")

        details = {"error_type": error.__class__.__name__}
        raw = None
        if isinstance(error, httpx.HTTPStatusError):
            details["http_status"] = error.response.status_code
            raw = error.response.text

        return DeliveryResult.failed(DeliveryStatus.ERROR, message, details=details, raw_response=raw)
