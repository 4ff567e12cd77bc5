"""
HTTP doubles shared by the client tests.
"""
import httpx
from unittest.mock import AsyncMock, MagicMock


def json_response(data, status_code: int = 200, method: str = "POST", url: str = "https://partner.test/api"):
    """Real httpx response, so raise_for_status() and .json() behave as in production."""
    return httpx.Response(status_code, json=data, request=httpx.Request(method, url))


def text_response(text: str, status_code: int = 200, method: str = "GET", url: str = "https://partner.test/api"):
    return httpx.Response(status_code, text=text, request=httpx.Request(method, url))


def mock_async_client(mock_client_class, post=None, get=None):
    """
    Wire a patched httpx.AsyncClient class so `async with` yields a client
    whose post/get return (or raise) the given values.
    """
    client = MagicMock()
    client.post = AsyncMock()
    client.get = AsyncMock()
    for method, value in (("post", post), ("get", get)):
        if value is None:
            continue
        if isinstance(value, BaseException):
            getattr(client, method).side_effect = value
        else:
            getattr(client, method).return_value = value

    mock_client_class.return_value.__aenter__ = AsyncMock(return_value=client)
    mock_client_class.return_value.__aexit__ = AsyncMock(return_value=None)
    return client
