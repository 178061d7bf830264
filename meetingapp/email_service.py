"""
Outbound email through the Gmail API
Messages are composed as MIME multipart/alternative, base64url-encoded and
posted to the provider with an OAuth2 access token obtained from a
server-held refresh token.
"""

import base64
import logging
from datetime import timedelta
from email.header import Header
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import httpx

from .config import EMAIL_FROM_ADDRESS, GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REFRESH_TOKEN
from .exceptions import EmailDeliveryError
from .models import utcnow
from .utils.sanitization import strip_html_tags

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GMAIL_SEND_URL = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"
MIME_BOUNDARY = "boundary123"

# Cached OAuth2 access token for the sending mailbox
_cached_token: Optional[dict] = None


def compose_mime_message(
    to: str,
    subject: str,
    html_content: str,
    text_content: Optional[str] = None,
    sender: Optional[str] = None,
) -> MIMEMultipart:
    """
    Build a multipart/alternative message with a plain-text and an HTML part.
    Without explicit text the plain part is the HTML with its tags stripped.
    """
    msg = MIMEMultipart("alternative", boundary=MIME_BOUNDARY)
    msg["To"] = to
    msg["Subject"] = Header(subject, "utf-8").encode()
    if sender:
        msg["From"] = sender

    plain = text_content if text_content else strip_html_tags(html_content)
    msg.attach(MIMEText(plain, "plain", "utf-8"))
    msg.attach(MIMEText(html_content, "html", "utf-8"))
    return msg


def encode_message(message: MIMEMultipart) -> str:
    """base64url transport encoding expected by the Gmail API `raw` field"""
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii")


def reset_token_cache() -> None:
    global _cached_token
    _cached_token = None


async def get_access_token(client: httpx.AsyncClient) -> str:
    """
    Get a valid access token, refreshing it with the offline refresh token
    when missing or about to expire (within 5 minutes)
    """
    global _cached_token
    if _cached_token and _cached_token["expires_at"] > utcnow() + timedelta(minutes=5):
        logger.debug("✅ Using cached Gmail access token")
        return _cached_token["access_token"]

    if not (GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET and GOOGLE_REFRESH_TOKEN):
        logger.error("❌ Gmail API not configured - GOOGLE_CLIENT_ID/SECRET/REFRESH_TOKEN missing")
        raise EmailDeliveryError("Email service not configured")

    logger.info("🔄 Refreshing Gmail access token...")
    response = await client.post(
        GOOGLE_TOKEN_URL,
        data={
            "client_id": GOOGLE_CLIENT_ID,
            "client_secret": GOOGLE_CLIENT_SECRET,
            "refresh_token": GOOGLE_REFRESH_TOKEN,
            "grant_type": "refresh_token",
        },
    )
    if response.status_code != 200:
        logger.error(f"❌ Token refresh failed: {response.text}")
        raise EmailDeliveryError("Failed to refresh mail provider credentials")

    tokens = response.json()
    access_token = tokens.get("access_token")
    if not access_token:
        logger.error("❌ No access token in refresh response")
        raise EmailDeliveryError("Failed to refresh mail provider credentials")

    expires_in = tokens.get("expires_in", 3600)
    _cached_token = {
        "access_token": access_token,
        "expires_at": utcnow() + timedelta(seconds=expires_in),
    }
    logger.info("✅ Gmail access token refreshed successfully")
    return access_token


async def send_email(
    to: str,
    subject: str,
    html_content: str,
    text_content: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Send one email through the Gmail API

    Returns:
        The provider-assigned message id

    Raises:
        EmailDeliveryError: If credentials cannot be refreshed or the send fails
    """
    message = compose_mime_message(to, subject, html_content, text_content, sender=EMAIL_FROM_ADDRESS)
    payload = {"raw": encode_message(message)}

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=30)
    try:
        access_token = await get_access_token(client)
        logger.info(f"📧 Sending email via Gmail API to: {to}")
        response = await client.post(
            GMAIL_SEND_URL,
            json=payload,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if response.status_code != 200:
            logger.error(f"❌ Gmail send failed for {to}: HTTP {response.status_code} {response.text}")
            raise EmailDeliveryError(f"Failed to send email: HTTP {response.status_code}")

        message_id = response.json().get("id")
        logger.info(f"✅ Email sent successfully via Gmail API: {message_id}")
        return message_id
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"❌ Email send error to {to}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e
    finally:
        if owns_client:
            await client.aclose()
