"""
Tests for the FlexCredit client.
"""
import uuid

import pytest
import httpx
from unittest.mock import patch

from src.models.delivery import DeliveryStatus
from src.services.partners import FlexCreditClient
from src.services.partners.flexcredit import mask_cnp, split_name
from tests.helpers import json_response, mock_async_client


@pytest.fixture
def client():
    return FlexCreditClient(
        api_url="https://flexcredit.test/api/",
        api_key="key-1",
        callback_url="https://relay.test/flexcredit/callback",
        product_id=52,
        default_amount=5000,
        installments=5,
        timeout=5,
    )


class TestFlexCreditClient:
    """Tests for FlexCreditClient.send."""

    @pytest.mark.asyncio
    async def test_accepted_request_is_success(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            http = mock_async_client(
                mock_client_class,
                post=json_response({"status": "Accept", "request_id": "req-9", "url": "https://fc.test/r/9"}),
            )

            result = await client.send("Ion Vasile Popescu", "+40 722 123 456", "ion@example.ro", "1800101123456")

        assert result.success is True
        assert result.partner_id == "req-9"
        assert result.details["url"] == "https://fc.test/r/9"
        assert result.details["phone"] == "0722123456"
        assert result.details["amount"] == 5000

        call = http.post.call_args
        assert call.args[0] == "https://flexcredit.test/api/requests"
        assert call.kwargs["headers"] == {"X-Api-Key": "key-1"}
        payload = call.kwargs["json"]
        uuid.UUID(payload["request_id"])
        assert payload["loan"] == {"product_id": 52, "amount": 5000, "installments": 5}
        assert payload["client"] == {
            "personal_id": "1800101123456",
            "first_name": "Ion",
            "last_name": "Vasile Popescu",
            "phone_number": "0722123456",
            "email": "ion@example.ro",
        }
        assert payload["callback_url"] == "https://relay.test/flexcredit/callback"

    @pytest.mark.asyncio
    async def test_board_amount_overrides_default(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            http = mock_async_client(mock_client_class, post=json_response({"status": "accepted"}))

            result = await client.send("Ion Popescu", "0722123456", "ion@example.ro", "1800101123456", amount=15000)

        assert http.post.call_args.kwargs["json"]["loan"]["amount"] == 15000
        assert result.details["amount"] == 15000

    @pytest.mark.asyncio
    async def test_rejected_is_duplicate(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=json_response({"status": "Rejected", "request_id": "req-1"}))

            result = await client.send("Ion Popescu", "0722123456", "ion@example.ro", "1800101123456")

        assert result.status is DeliveryStatus.DUPLICATE
        assert result.message == "Lead rejected by FlexCredit"

    @pytest.mark.asyncio
    async def test_field_errors_are_invalid(self, client):
        body = {"personal_id": ["Invalid CNP"], "email": ["Invalid email", "Too long"]}
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=json_response(body, status_code=400))

            result = await client.send("Ion Popescu", "0722123456", "ion@example.ro", "1800101123456")

        assert result.status is DeliveryStatus.INVALID
        assert result.errors == body
        assert result.message == "personal_id: Invalid CNP; email: Invalid email, Too long"
        assert result.details["phone"] == "0722123456"

    @pytest.mark.asyncio
    async def test_server_error_without_field_errors(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=json_response({"detail": "boom"}, status_code=500))

            result = await client.send("Ion Popescu", "0722123456", "ion@example.ro", "1800101123456")

        assert result.status is DeliveryStatus.ERROR
        assert result.message == "FlexCredit API error: HTTP 500"

    @pytest.mark.asyncio
    async def test_invalid_phone_never_calls_api(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            result = await client.send("Ion Popescu", "12345", "ion@example.ro", "1800101123456")

        assert result.status is DeliveryStatus.INVALID
        mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_api_url(self):
        client = FlexCreditClient(api_url="", api_key="key-1", timeout=5)

        with patch("httpx.AsyncClient") as mock_client_class:
            result = await client.send("Ion Popescu", "0722123456", "ion@example.ro", "1800101123456")

        assert result.status is DeliveryStatus.ERROR
        mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_timeout(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=httpx.ReadTimeout("slow"))

            result = await client.send("Ion Popescu", "0722123456", "ion@example.ro", "1800101123456")

        assert result.message == "Request timed out after 5s"

    @pytest.mark.asyncio
    async def test_requires_all_fields(self, client):
        with pytest.raises(ValueError):
            await client.send("Ion Popescu", "0722123456", "ion@example.ro", "")


class TestHelpers:
    """Name split and CNP masking."""

    @pytest.mark.parametrize("full_name, expected", [
        ("Ion Popescu", ("Ion", "Popescu")),
        ("  Ion   Vasile Popescu ", ("Ion", "Vasile Popescu")),
        ("Ion", ("Ion", "")),
        (None, ("", "")),
    ])
    def test_split_name(self, full_name, expected):
        assert split_name(full_name) == expected

    def test_mask_cnp(self):
        assert mask_cnp("1800101123456") == "1800****"
        assert mask_cnp(None) is None
