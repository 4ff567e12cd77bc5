from enum import StrEnum
from typing import Any, Optional
from pydantic import BaseModel, Field


class DeliveryStatus(StrEnum):
    """Normalized outcome of a partner API call."""
    SUCCESS = "success"
    DUPLICATE = "duplicate"
    INVALID = "invalid"
    ERROR = "error"


class DeliveryResult(BaseModel):
    """
    What a partner gateway client reports back for one lead or SMS.

    `errors` maps a field name to its validation messages, for INVALID results.
    """
    success: bool
    status: DeliveryStatus
    message: str
    partner_id: Optional[str] = None
    errors: dict[str, list[str]] = Field(default_factory=dict)
    details: dict[str, Any] = Field(default_factory=dict)
    raw_response: Optional[Any] = None

    @classmethod
    def ok(cls, message: str, partner_id: Optional[Any] = None, **kwargs) -> "DeliveryResult":
        return cls(
            success=True,
            status=DeliveryStatus.SUCCESS,
            message=message,
            partner_id=str(partner_id) if partner_id is not None else None,
            **kwargs,
        )

    @classmethod
    def failed(cls, status: DeliveryStatus, message: str, **kwargs) -> "DeliveryResult":
        return cls(success=False, status=status, message=message, **kwargs)
