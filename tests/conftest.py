import pytest
from unittest.mock import AsyncMock, MagicMock

from src.models.monday import ColumnValue, LeadReference, MondayItem
from src.utils.metrics import metrics


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test from empty metrics."""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def lead_reference():
    """A lead from the IFN hub board."""
    return LeadReference(item_id=1234567890, board_id=5056951158)


@pytest.fixture
def ifn_item():
    """Monday item from the IFN hub board with every column filled."""
    return MondayItem(
        id="1234567890",
        name="Ion Popescu",
        column_values=[
            ColumnValue(id="phone", text="0722 123 456", value='{"phone":"0722123456","countryShortName":"RO"}'),
            ColumnValue(id="email", text="ion.popescu@example.ro"),
            ColumnValue(id="cnp__1", text="1800101123456"),
            ColumnValue(id="dropdown__1", text="Card"),
            ColumnValue(id="angajator2__1", text="ACME SRL"),
            ColumnValue(id="numbers__1", text="4500"),
            ColumnValue(id="numeric_mkwr1ncc", text="15000"),
        ],
    )


@pytest.fixture
def mock_monday(ifn_item):
    """MondayService double returning the IFN item."""
    monday = MagicMock()
    monday.fetch_item_details = AsyncMock(return_value=ifn_item)
    return monday


@pytest.fixture
def mock_notifier():
    """SlackNotifier double that records notifications."""
    notifier = MagicMock()
    notifier.notify_outcome = AsyncMock(return_value=True)
    notifier.is_configured = True
    return notifier
