#!/usr/bin/env python3
"""Vendor Reply Generator for mailbox ingest testing.

Builds a vendor reply to a solicitation as an RFC 822 message, either
written as .eml or sent via SMTP to the watched inbox.

Usage:
    # Write the reply to stdout
    python scripts/generate_vendor_reply.py --from v@x.com --rfp-id 7

    # Subject matched by title instead of tag
    python scripts/generate_vendor_reply.py --from v@x.com --title "Laptops Q3"

    # Send to the watched inbox via SMTP_* settings
    python scripts/generate_vendor_reply.py --from v@x.com --rfp-id 7 \
        --to procurement@example.com --send
"""

import argparse
import os
import smtplib
import sys
from email.message import EmailMessage
from typing import Optional

# Add backend/src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from rfpflow.config import get_settings

DEFAULT_BODY = (
    "Hello,\n\n"
    "Thank you for the RFP. We can offer 20 units at $1200 each, "
    "30 day delivery, net 30, 1yr warranty.\n\n"
    "Best regards,\nSales"
)


def build_subject(rfp_id: Optional[int], title: Optional[str]) -> str:
    """Subject carrying either the numeric tag or the solicitation title."""
    if rfp_id is not None:
        return f"Re: RFP #{rfp_id}" + (f": {title}" if title else "")
    return f"Re: RFP: {title}"


def create_reply(
    from_email: str,
    to_email: str,
    subject: str,
    body: Optional[str] = None,
) -> EmailMessage:
    """Create a plain-text vendor reply.

    Args:
        from_email: Vendor address (must match a registered vendor)
        to_email: Watched inbox address
        subject: Subject line
        body: Reply text (optional)
    """
    msg = EmailMessage()
    msg['From'] = from_email
    msg['To'] = to_email
    msg['Subject'] = subject
    msg['Message-ID'] = f"<test-{os.urandom(8).hex()}@rfpflow-test>"
    msg.set_content(body or DEFAULT_BODY)
    return msg


def send_reply(msg: EmailMessage) -> None:
    """Send the reply through the configured SMTP server."""
    settings = get_settings()
    if not settings.SMTP_HOST:
        print("ERROR: SMTP_HOST is not configured", file=sys.stderr)
        sys.exit(1)

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as smtp:
            if settings.SMTP_PORT != 25:
                smtp.starttls()
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        print(f"ERROR sending email: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Reply sent to {msg['To']} via {settings.SMTP_HOST}:{settings.SMTP_PORT}", file=sys.stderr)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Generate vendor replies for rfpflow mailbox ingest testing',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--from', dest='from_email', required=True, help='Vendor email address')
    parser.add_argument('--to', dest='to_email', help='Watched inbox address (default: IMAP_USER)')
    parser.add_argument('--rfp-id', type=int, help='Solicitation id used as "RFP #<id>" subject tag')
    parser.add_argument('--title', help='Solicitation title used for subject matching')
    parser.add_argument('--body', help='Reply text (optional)')
    parser.add_argument('--output', metavar='FILE', help='Write .eml to FILE instead of stdout')
    parser.add_argument('--send', action='store_true', help='Send via SMTP_* settings')

    args = parser.parse_args()

    if args.rfp_id is None and not args.title:
        parser.error("Either --rfp-id or --title must be specified")

    to_email = args.to_email or get_settings().IMAP_USER or "procurement@example.com"
    msg = create_reply(args.from_email, to_email, build_subject(args.rfp_id, args.title), args.body)

    if args.send:
        send_reply(msg)
    elif args.output:
        with open(args.output, 'wb') as f:
            f.write(bytes(msg))
        print(f"Wrote {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(msg.as_string())


if __name__ == '__main__':
    main()
