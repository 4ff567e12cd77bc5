"""
Pydantic models for Monday webhook payloads.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from src.models.monday import LeadReference


class MondayEvent(BaseModel):
    """
    The `event` object Monday posts when a watched column changes.

    See: https://developer.monday.com/api-reference/docs/webhooks
    """
    model_config = ConfigDict(extra="allow")

    pulseId: int = Field(..., description="Item (pulse) id")
    boardId: int = Field(..., description="Board the item belongs to")
    type: Optional[str] = Field(None, description="Event type, e.g. update_column_value")
    columnId: Optional[str] = Field(None, description="Column that triggered the webhook")

    def to_reference(self) -> LeadReference:
        return LeadReference(item_id=self.pulseId, board_id=self.boardId)


class MondayWebhookPayload(BaseModel):
    """
    Monday webhook body.

    Monday first verifies the URL with {"challenge": "..."} and expects it
    echoed back; afterwards each change arrives as {"event": {...}}.
    """
    model_config = ConfigDict(extra="allow")

    challenge: Optional[str] = None
    event: Optional[MondayEvent] = None
