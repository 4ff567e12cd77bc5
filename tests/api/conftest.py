import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from src.api.main import app
from src.core.integrations import PartnerIntegration
from src.delivery_queue import DeliveryQueue, QueueStatus


@pytest.fixture
def mock_queue():
    """Queue double; enqueue reports position 1."""
    queue = MagicMock()
    queue.enqueue.return_value = 1
    queue.get_status.return_value = QueueStatus(partner="credius", queue_length=2, delay_seconds=5.0)
    return queue


@pytest.fixture
def integrations(mock_queue):
    """Credius wired to the queue double, Flex to a real idle queue."""
    return {
        "credius": PartnerIntegration(
            name="credius", display_name="Credius", queue=mock_queue, processor=MagicMock()
        ),
        "flex": PartnerIntegration(
            name="flex",
            display_name="Mediatel",
            queue=DeliveryQueue("flex", delay_seconds=2.0, handler=MagicMock(), max_pending=500),
            processor=MagicMock(),
        ),
    }


@pytest.fixture
def client(integrations):
    """Test client without lifespan; app.state populated by hand."""
    app.state.integrations = integrations
    return TestClient(app)
