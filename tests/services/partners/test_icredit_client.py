"""
Tests for the iCredit client.
"""
import pytest
import httpx
from unittest.mock import patch

from src.models.delivery import DeliveryStatus
from src.services.partners import ICreditClient
from src.services.partners.icredit import validate_name
from tests.helpers import json_response, mock_async_client


@pytest.fixture
def client():
    return ICreditClient(
        api_url="https://icredit.test/application/create",
        auth_token="token-1",
        timeout=5,
    )


class TestICreditClient:
    """Tests for ICreditClient.send."""

    @pytest.mark.asyncio
    async def test_created_application_is_success(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            http = mock_async_client(
                mock_client_class, post=json_response({"success": True, "payload": {"ID": 4411}})
            )

            result = await client.send("Ion Popescu", "+40 722 123 456")

        assert result.success is True
        assert result.partner_id == "4411"
        assert result.details["phone"] == "722123456"

        call = http.post.call_args
        assert call.kwargs["json"] == {"name": "Ion Popescu", "telephone": "722123456"}
        assert call.kwargs["headers"] == {"X-Auth-Token": "token-1"}

    @pytest.mark.asyncio
    async def test_invalid_name_never_calls_api(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            result = await client.send("Ion Popescu 2", "0722123456")

        assert result.status is DeliveryStatus.INVALID
        assert "name" in result.errors
        mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_phone_never_calls_api(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            result = await client.send("Ion Popescu", "12345")

        assert result.status is DeliveryStatus.INVALID
        assert "phone" in result.errors
        mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_application_under_review_is_duplicate(self, client):
        body = {"message": "Validation failed", "errors": {"credit_application": "Cererea este deja in analiza"}}
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=json_response(body, status_code=422))

            result = await client.send("Ion Popescu", "0722123456")

        assert result.status is DeliveryStatus.DUPLICATE
        assert "already under review" in result.message

    @pytest.mark.asyncio
    async def test_known_phone_is_duplicate(self, client):
        body = {"errors": {"telephone": ["Numarul de telefon exista deja"]}}
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=json_response(body, status_code=422))

            result = await client.send("Ion Popescu", "0722123456")

        assert result.status is DeliveryStatus.DUPLICATE
        assert result.message.endswith("Numarul de telefon exista deja")

    @pytest.mark.asyncio
    async def test_other_validation_errors_are_invalid(self, client):
        body = {"message": "Validation failed", "errors": {"name": ["Too short"]}}
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=json_response(body, status_code=422))

            result = await client.send("Ion Popescu", "0722123456")

        assert result.status is DeliveryStatus.INVALID
        assert result.message == "Validation failed"
        assert result.errors == {"name": ["Too short"]}

    @pytest.mark.parametrize("status_code, message", [
        (401, "Authentication token missing"),
        (403, "Authentication token invalid"),
        (429, "Too many requests - iCredit rate limit hit"),
    ])
    @pytest.mark.asyncio
    async def test_documented_error_codes(self, client, status_code, message):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=json_response({}, status_code=status_code))

            result = await client.send("Ion Popescu", "0722123456")

        assert result.status is DeliveryStatus.ERROR
        assert result.message == message

    @pytest.mark.asyncio
    async def test_server_error(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=json_response({}, status_code=502))

            result = await client.send("Ion Popescu", "0722123456")

        assert result.status is DeliveryStatus.ERROR
        assert result.message == "iCredit API error: HTTP 502"

    @pytest.mark.asyncio
    async def test_connection_error(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, post=httpx.ConnectError("refused"))

            result = await client.send("Ion Popescu", "0722123456")

        assert result.message == "Cannot connect to the iCredit server"

    def test_unexpected_success_body_is_error(self):
        result = ICreditClient.parse_response({"success": False, "message": "Try later"})

        assert result.status is DeliveryStatus.ERROR
        assert result.message == "Try later"


class TestPhoneAndName:
    """iCredit input formats."""

    @pytest.mark.parametrize("raw, expected", [
        ("0722123456", "722123456"),
        ("+40722123456", "722123456"),
        ("0040 722 123 456", "722123456"),
        ("021 312 3456", "213123456"),
        ("12345", None),
    ])
    def test_normalize_phone(self, raw, expected):
        assert ICreditClient.normalize_phone(raw) == expected

    @pytest.mark.parametrize("name, valid", [
        ("Ion Popescu", True),
        ("Ion Bălan", True),
        ("Ion-Popescu", False),
        ("a" * 191, False),
        ("", False),
    ])
    def test_validate_name(self, name, valid):
        assert validate_name(name) is valid
