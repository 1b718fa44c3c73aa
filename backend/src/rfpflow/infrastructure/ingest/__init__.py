"""Inbound mail infrastructure: IMAP client and MIME parsing."""

from .imap_client import ConnectionState, MailboxClient
from .mime_parser import RawMessage, parse_inbound_message

__all__ = ["ConnectionState", "MailboxClient", "RawMessage", "parse_inbound_message"]
