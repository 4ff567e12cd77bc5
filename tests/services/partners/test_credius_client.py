"""
Tests for the Credius client.
"""
import pytest
import httpx
from unittest.mock import patch

from src.models.delivery import DeliveryStatus
from src.services.partners import CrediusClient
from tests.helpers import json_response, mock_async_client


@pytest.fixture
def client():
    return CrediusClient(
        url="https://credius.test/lead",
        username="fidem",
        api_key="key",
        county="Cluj",
        timeout=5,
    )


class TestCrediusClient:
    """Tests for CrediusClient.send."""

    @pytest.mark.asyncio
    async def test_created_lead_is_success(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            http = mock_async_client(mock_client_class, post=json_response({"Mesaj": "OK", "Id": 98765}))

            result = await client.send("Ion Popescu", "+40 722 123 456")

        assert result.success is True
        assert result.partner_id == "98765"
        assert result.details["phone"] == "0722123456"

        payload = http.post.call_args.kwargs["json"]
        assert payload == {
            "UserName": "fidem",
            "ApiKey": "key",
            "terminalCounty": "Cluj",
            "leadName": "Ion Popescu",
            "leadPhone": "0722123456",
            "amount": None,
            "leadcnp": None,
        }

    @pytest.mark.asyncio
    async def test_accepts_landline(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            http = mock_async_client(mock_client_class, post=json_response({"message": "OK", "lead_id": 7}))

            result = await client.send("Ion Popescu", "021 312 3456")

        assert result.success is True
        assert http.post.call_args.kwargs["json"]["leadPhone"] == "0213123456"

    @pytest.mark.asyncio
    async def test_existing_lead_is_duplicate(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=json_response({"Mesaj": "Lead Existent", "Id": 0}))

            result = await client.send("Ion Popescu", "0722123456")

        assert result.status is DeliveryStatus.DUPLICATE

    @pytest.mark.asyncio
    async def test_invalid_phone_never_calls_api(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            result = await client.send("Ion Popescu", "12345")

        assert result.status is DeliveryStatus.INVALID
        assert "phone" in result.errors
        mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_connection_error(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=httpx.ConnectError("refused"))

            result = await client.send("Ion Popescu", "0722123456")

        assert result.status is DeliveryStatus.ERROR
        assert result.message == "Cannot connect to the Credius server"

    @pytest.mark.asyncio
    async def test_requires_name_and_phone(self, client):
        with pytest.raises(ValueError):
            await client.send("", "0722123456")

    @pytest.mark.parametrize("data, status", [
        ({"Mesaj": "OK", "Id": "12"}, DeliveryStatus.SUCCESS),
        ({"Mesaj": "OK", "Id": 0}, DeliveryStatus.ERROR),
        ({"Mesaj": "CNP invalid"}, DeliveryStatus.ERROR),
        ({}, DeliveryStatus.ERROR),
        (None, DeliveryStatus.ERROR),
    ])
    def test_parse_response(self, data, status):
        assert CrediusClient.parse_response(data).status is status
