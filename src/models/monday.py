"""
Monday board models: items fetched over GraphQL, board column mappings,
and the lead reference that travels through the delivery queues.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class LeadReference(BaseModel):
    """Minimal pointer to a Monday item, enqueued by the webhook."""
    model_config = ConfigDict(frozen=True)

    item_id: int
    board_id: int


class ColumnValue(BaseModel):
    """One column of a Monday item."""
    id: str
    text: Optional[str] = None
    value: Optional[str] = None


class MondayItem(BaseModel):
    """Monday item with its name and column values."""
    id: Optional[str] = None
    name: Optional[str] = None
    column_values: list[ColumnValue] = Field(default_factory=list)

    def column(self, column_id: str) -> Optional[ColumnValue]:
        return next((c for c in self.column_values if c.id == column_id), None)


class BoardColumns(BaseModel):
    """Column ids on a board; None when the board lacks the column."""
    phone: str
    email: Optional[str] = None
    cnp: Optional[str] = None
    cashing_method: Optional[str] = None
    employer: Optional[str] = None
    income: Optional[str] = None
    amount: Optional[str] = None


class BoardConfig(BaseModel):
    """Mapping of a Monday board to a display name and its columns."""
    board_name: str
    columns: BoardColumns
