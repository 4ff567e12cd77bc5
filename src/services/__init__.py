"""Services package."""
from src.services.monday_service import (
    MondayService,
    MondayAPIError,
    MondayItemNotFoundError,
    extract_column_value,
)
from src.services.slack_notifier import (
    SlackNotifier,
    LeadSummary,
    NotificationKind,
)

__all__ = [
    "MondayService",
    "MondayAPIError",
    "MondayItemNotFoundError",
    "extract_column_value",
    "SlackNotifier",
    "LeadSummary",
    "NotificationKind",
]
