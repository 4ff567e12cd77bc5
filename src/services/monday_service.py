"""
Monday GraphQL client.
Fetches item details (name + column values) for leads referenced by webhooks.
"""
import json
from typing import Optional

import httpx
from loguru import logger

from src.config import get_settings
from src.models.monday import MondayItem


ITEM_DETAILS_QUERY = """
query ($ids: [ID!]) {
  items(ids: $ids) {
    id
    name
    column_values {
      id
      text
      value
    }
  }
}
"""


class MondayAPIError(Exception):
    """Monday API returned GraphQL errors or an HTTP failure."""
    pass


class MondayItemNotFoundError(MondayAPIError):
    """The requested item does not exist (or is not visible to the token)."""

    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found in Monday")


class MondayService:
    """
    Read-only access to Monday items.

    Errors are raised, not swallowed: the delivery queue counts a failed
    fetch as a failed item.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self._api_url = api_url or settings.monday_api_url
        self._api_token = api_token if api_token is not None else settings.monday_api_token
        self._timeout = timeout or settings.monday_timeout_seconds

        if not self._api_token:
            logger.warning("MONDAY_API_TOKEN not configured - item lookups will fail")

    async def fetch_item_details(self, item_id) -> MondayItem:
        """
        Fetch one item with its column values.

        Args:
            item_id: Monday item (pulse) id

        Returns:
            The Monday item

        Raises:
            MondayAPIError: HTTP failure or GraphQL errors
            MondayItemNotFoundError: No item with this id
        """
        payload = {"query": ITEM_DETAILS_QUERY, "variables": {"ids": [str(item_id)]}}
        headers = {
            "Authorization": self._api_token or "",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self._api_url,
                    json=payload,
                    headers=headers,
                    timeout=self._timeout,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise MondayAPIError(f"Monday request failed for item {item_id}: {e}") from e

        if data.get("errors"):
            logger.error(f"Monday API errors for item {item_id}: {data['errors']}")
            raise MondayAPIError(f"Monday API error for item {item_id}")

        items = (data.get("data") or {}).get("items") or []
        if not items:
            raise MondayItemNotFoundError(item_id)

        return MondayItem.model_validate(items[0])


def extract_column_value(item: MondayItem, column_id: Optional[str]) -> Optional[str]:
    """
    Read a column as a plain string.

    Prefers the rendered `text`, falls back to the raw `value`. Raw JSON
    values (phone columns store {"phone": ..., "countryShortName": ...})
    are unwrapped via their phone/value/text keys.

    Returns:
        The value, or None if the column is missing or empty
    """
    if not column_id:
        return None

    column = item.column(column_id)
    if column is None:
        return None

    value = column.text or column.value
    if value and value.startswith("{"):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, dict):
            unwrapped = decoded.get("phone") or decoded.get("value") or decoded.get("text")
            if unwrapped is not None:
                value = str(unwrapped)

    return value or None
