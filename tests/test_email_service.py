"""
Tests for MIME composition and the Gmail API client.
"""
import base64
import email
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from meetingapp import email_service
from meetingapp.email_service import (
    compose_mime_message,
    encode_message,
    get_access_token,
    reset_token_cache,
    send_email,
)
from meetingapp.exceptions import EmailDeliveryError


def http_response(status_code, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = text
    return response


@pytest.fixture(autouse=True)
def gmail_configured():
    reset_token_cache()
    with patch.multiple(
        email_service,
        GOOGLE_CLIENT_ID="client-id",
        GOOGLE_CLIENT_SECRET="client-secret",
        GOOGLE_REFRESH_TOKEN="refresh-token",
        EMAIL_FROM_ADDRESS="minutes@example.com",
    ):
        yield
    reset_token_cache()


@pytest.mark.unit
class TestComposeMessage:
    """Test multipart/alternative composition."""

    def test_plain_part_falls_back_to_stripped_html(self):
        message = compose_mime_message("ana@example.com", "Minutes", "<h1>Hello &amp; welcome</h1>")
        assert message.get_content_type() == "multipart/alternative"
        assert message.get_boundary() == "boundary123"

        plain, html = message.get_payload()
        assert plain.get_content_type() == "text/plain"
        assert plain.get_payload(decode=True).decode("utf-8") == "Hello & welcome"
        assert html.get_content_type() == "text/html"

    def test_explicit_text_is_used(self):
        message = compose_mime_message("ana@example.com", "Minutes", "<p>x</p>", "plain body")
        assert message.get_payload()[0].get_payload(decode=True).decode("utf-8") == "plain body"

    def test_encoded_message_is_base64url(self):
        message = compose_mime_message("ana@example.com", "Réunion", "<p>x</p>", sender="me@example.com")
        raw = encode_message(message)
        assert "+" not in raw and "/" not in raw

        parsed = email.message_from_bytes(base64.urlsafe_b64decode(raw))
        assert parsed["To"] == "ana@example.com"
        assert parsed["From"] == "me@example.com"


@pytest.mark.unit
class TestAccessToken:
    """Test OAuth2 refresh and caching."""

    async def test_token_is_refreshed_once_and_cached(self):
        client = Mock()
        client.post = AsyncMock(return_value=http_response(200, {"access_token": "tok", "expires_in": 3600}))

        assert await get_access_token(client) == "tok"
        assert await get_access_token(client) == "tok"
        client.post.assert_awaited_once()
        assert client.post.call_args.kwargs["data"]["grant_type"] == "refresh_token"

    async def test_short_lived_token_is_refreshed_again(self):
        client = Mock()
        client.post = AsyncMock(return_value=http_response(200, {"access_token": "tok", "expires_in": 60}))

        await get_access_token(client)
        await get_access_token(client)
        assert client.post.await_count == 2

    async def test_refresh_failure(self):
        client = Mock()
        client.post = AsyncMock(return_value=http_response(400, text="invalid_grant"))
        with pytest.raises(EmailDeliveryError):
            await get_access_token(client)

    async def test_not_configured(self):
        with patch.object(email_service, "GOOGLE_REFRESH_TOKEN", None):
            with pytest.raises(EmailDeliveryError):
                await get_access_token(Mock())


@pytest.mark.unit
class TestSendEmail:
    """Test the Gmail API send."""

    async def test_send_returns_provider_message_id(self):
        client = Mock()
        client.post = AsyncMock(
            side_effect=[
                http_response(200, {"access_token": "tok", "expires_in": 3600}),
                http_response(200, {"id": "msg-1"}),
            ]
        )

        assert await send_email("ana@example.com", "Minutes", "<p>Hi</p>", client=client) == "msg-1"
        send_call = client.post.call_args_list[1]
        assert send_call.args[0] == email_service.GMAIL_SEND_URL
        assert send_call.kwargs["headers"]["Authorization"] == "Bearer tok"
        assert "raw" in send_call.kwargs["json"]

    async def test_provider_rejection(self):
        client = Mock()
        client.post = AsyncMock(
            side_effect=[
                http_response(200, {"access_token": "tok", "expires_in": 3600}),
                http_response(403, text="forbidden"),
            ]
        )
        with pytest.raises(EmailDeliveryError):
            await send_email("ana@example.com", "Minutes", "<p>Hi</p>", client=client)

    async def test_network_error(self):
        client = Mock()
        client.post = AsyncMock(side_effect=httpx.ConnectError("unreachable"))
        with pytest.raises(EmailDeliveryError):
            await send_email("ana@example.com", "Minutes", "<p>Hi</p>", client=client)

    async def test_malformed_provider_response(self):
        sent = http_response(200)
        sent.json.side_effect = ValueError("Expecting value")
        client = Mock()
        client.post = AsyncMock(
            side_effect=[http_response(200, {"access_token": "tok", "expires_in": 3600}), sent]
        )
        with pytest.raises(EmailDeliveryError):
            await send_email("ana@example.com", "Minutes", "<p>Hi</p>", client=client)
