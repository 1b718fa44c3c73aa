"""MIME parser for inbound vendor replies.

Turns raw RFC 822 bytes into a RawMessage {sender_address, subject,
body_text}. The plain-text body is preferred; HTML-only mail falls back to
its HTML source.
"""

import email
import email.errors
import email.policy
import hashlib
import logging
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import parseaddr
from typing import Optional

from ...errors import MessageParseError

logger = logging.getLogger(__name__)

_DECODE_ERRORS = (LookupError, UnicodeError, ValueError, email.errors.MessageError)


@dataclass(frozen=True)
class RawMessage:
    """Normalized inbound message, alive for one ingestion pass only."""

    sender_address: str
    subject: str
    body_text: str
    message_id: Optional[str] = None


def parse_mime_message(raw_mime: bytes) -> EmailMessage:
    """Parse raw MIME bytes into an EmailMessage.

    Raises:
        MessageParseError: If the input is not bytes or cannot be parsed
    """
    if not isinstance(raw_mime, (bytes, bytearray)):
        raise MessageParseError(f"Expected raw message bytes, got {type(raw_mime).__name__}")
    try:
        return email.message_from_bytes(bytes(raw_mime), policy=email.policy.default)
    except Exception as e:
        logger.error(f"Failed to parse MIME message: {e}")
        raise MessageParseError(f"Invalid MIME message: {e}")


def extract_sender_address(msg: EmailMessage) -> str:
    """Bare address of the first From mailbox, whitespace-trimmed."""
    _, address = parseaddr(str(msg.get("From", "") or ""))
    return address.strip()


def extract_body_text(msg: EmailMessage) -> str:
    """Text of the preferred body part ("" when the message has none).

    Raises:
        MessageParseError: If the body part cannot be decoded
    """
    part = msg.get_body(preferencelist=("plain", "html"))
    if part is None:
        return ""
    try:
        content = part.get_content()
    except _DECODE_ERRORS as e:
        raise MessageParseError(f"Undecodable message body: {e}")
    if isinstance(content, bytes):
        charset = part.get_content_charset() or "utf-8"
        try:
            content = content.decode(charset)
        except (LookupError, UnicodeError) as e:
            raise MessageParseError(f"Undecodable message body: {e}")
    return content


def synthetic_message_id(sender: str, subject: str, date: str) -> str:
    """Deterministic Message-ID for mail missing the header."""
    header_hash = hashlib.sha256(f"{sender}{subject}{date}".encode()).hexdigest()[:16]
    return f"<synthetic-{header_hash}@rfpflow.generated>"


def parse_inbound_message(raw_mime: bytes) -> RawMessage:
    """Raw mail bytes -> RawMessage.

    Raises:
        MessageParseError: The structure or body cannot be decoded, or the
            message carries no sender address
    """
    msg = parse_mime_message(raw_mime)

    try:
        sender = extract_sender_address(msg)
        subject = str(msg.get("Subject", "") or "")
    except _DECODE_ERRORS as e:
        raise MessageParseError(f"Undecodable message headers: {e}")

    if not sender:
        raise MessageParseError("Message has no sender address")

    body = extract_body_text(msg)

    message_id = msg.get("Message-ID")
    if not message_id:
        message_id = synthetic_message_id(sender, subject, str(msg.get("Date", "")))

    return RawMessage(
        sender_address=sender,
        subject=subject,
        body_text=body,
        message_id=str(message_id),
    )
