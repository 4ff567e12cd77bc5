"""
Tests for the 4Pay SMS client and templates.
"""
import pytest
import httpx
from unittest.mock import patch

from src.models.delivery import DeliveryStatus
from src.services.partners import FourPayClient, UnknownTemplateError, render_template
from tests.helpers import mock_async_client, text_response


@pytest.fixture
def client():
    return FourPayClient(
        api_url="https://sms.4pay.test/api.send_sms",
        serv_id="123",
        password="pass",
        timeout=5,
    )


class TestTemplates:
    """SMS_TEMPLATES rendering."""

    def test_credilink_contains_link(self):
        text = render_template("CREDILINK", url="https://fidem.ro/pr/")

        assert text.startswith("Buna ziua,\n")
        assert text.endswith("\nhttps://fidem.ro/pr/")

    def test_unknown_template_raises(self):
        with pytest.raises(UnknownTemplateError):
            render_template("BIRTHDAY")


class TestSend:
    """Tests for FourPayClient.send."""

    @pytest.mark.asyncio
    async def test_ok_response(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            http = mock_async_client(mock_client_class, get=text_response("OK network=V msgID=987654321"))

            result = await client.send("+40 722 123 456", "Salut", external_message_id="monday-42")

        assert result.success is True
        assert result.partner_id == "987654321"
        assert result.details["network"] == "Vodafone"
        assert result.details["phone"] == "0722123456"

        call = http.get.call_args
        assert call.args[0] == "https://sms.4pay.test/api.send_sms"
        assert call.kwargs["params"] == {
            "servID": "123",
            "password": "pass",
            "msg_dst": "0722123456",
            "msg_text": "Salut",
            "external_messageID": "monday-42",
        }

    @pytest.mark.asyncio
    async def test_no_external_id_param_when_absent(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            http = mock_async_client(mock_client_class, get=text_response("OK network=O msgID=1"))

            await client.send("0722123456", "Salut")

        assert "external_messageID" not in http.get.call_args.kwargs["params"]

    @pytest.mark.asyncio
    async def test_long_message_still_sent(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            http = mock_async_client(mock_client_class, get=text_response("OK network=O msgID=1"))

            result = await client.send("0722123456", "x" * 200)

        assert result.success is True
        assert http.get.call_args.kwargs["params"]["msg_text"] == "x" * 200

    @pytest.mark.asyncio
    async def test_landline_is_invalid(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            result = await client.send("0213123456", "Salut")

        assert result.status is DeliveryStatus.INVALID
        mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_timeout(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, get=httpx.ConnectTimeout("slow"))

            result = await client.send("0722123456", "Salut")

        assert result.status is DeliveryStatus.ERROR
        assert result.message == "Request timed out after 5s"

    @pytest.mark.asyncio
    async def test_connect_error(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_async_client(mock_client_class, get=httpx.ConnectError("refused"))

            result = await client.send("0722123456", "Salut")

        assert result.message == "Cannot connect to the 4Pay server"

    @pytest.mark.asyncio
    async def test_requires_phone_and_message(self, client):
        with pytest.raises(ValueError):
            await client.send("0722123456", "")

    @pytest.mark.asyncio
    async def test_send_template(self, client):
        with patch("httpx.AsyncClient") as mock_client_class:
            http = mock_async_client(mock_client_class, get=text_response("OK network=C msgID=5"))

            result = await client.send_template("0722123456", "CREDILINK", {"url": "https://l.test"})

        assert result.details["network"] == "Telekom Mobile"
        assert http.get.call_args.kwargs["params"]["msg_text"].endswith("https://l.test")


class TestParseResponse:
    """4Pay plain-text answers."""

    @pytest.mark.parametrize("code, network", [
        ("O", "Orange"),
        ("R", "RDS/Digi"),
        ("L", "Lycamobile"),
        ("T", "Telekom"),
        ("I", "International"),
    ])
    def test_network_names(self, code, network):
        result = FourPayClient.parse_response(f"OK network={code} msgID=77")
        assert result.details["network"] == network

    @pytest.mark.parametrize("code, message", [
        ("ERROR_SERV_NOT_FOUND", "Invalid credentials (wrong servID or password)"),
        ("ERROR_LIMIT_EXCEEDED", "Sending limit exceeded"),
        ("ERROR_IP_ACL", "Server IP is not allowed to send"),
    ])
    def test_error_codes(self, code, message):
        result = FourPayClient.parse_response(f"ERROR {code}")

        assert result.status is DeliveryStatus.ERROR
        assert result.message == message
        assert result.details["error_code"] == code

    def test_unknown_error_code(self):
        result = FourPayClient.parse_response("ERROR ERROR_SOMETHING_NEW")
        assert result.message == "4Pay error: ERROR_SOMETHING_NEW"

    def test_garbage(self):
        assert FourPayClient.parse_response("<html>").status is DeliveryStatus.ERROR
