"""Identity resolution for inbound vendor mail.

Maps a sender address to a Vendor and a subject line to a Solicitation,
reading only the current persisted state. A miss raises ResolutionMiss,
which the ingestion pipeline treats as a normal, informational outcome.
"""

import logging
import re
from typing import Optional

from ..errors import ResolutionMiss
from ..models import Solicitation, SolicitationStatus, Vendor
from ..repositories import ProcurementRepository

logger = logging.getLogger(__name__)

# "RFP #7", "RFP: 7", "rfp7", "Re: RFP #12 - Laptops"
SUBJECT_TAG_PATTERN = re.compile(r"RFP[:\s]*#?(\d+)", re.IGNORECASE)


def extract_solicitation_tag(subject: Optional[str]) -> Optional[int]:
    """Return the numeric solicitation id tagged in subject, if any."""
    if not subject:
        return None
    match = SUBJECT_TAG_PATTERN.search(subject)
    return int(match.group(1)) if match else None


def pick_title_match(subject: str, candidates: list[Solicitation]) -> Optional[Solicitation]:
    """Choose the solicitation whose title appears in subject.

    Longest title wins so that "Laptops Q3 Refresh" beats "Laptops";
    on equal length the most recently created (highest id) wins.
    Empty titles never match.
    """
    matches = [s for s in candidates if s.title and s.title in subject]
    if not matches:
        return None
    return max(matches, key=lambda s: (len(s.title), s.id))


class IdentityResolver:
    """Vendor and solicitation lookups for one inbound message."""

    def __init__(self, repository: ProcurementRepository):
        """Initialize resolver.

        Args:
            repository: Repository bound to the current session
        """
        self.repository = repository

    def resolve_vendor(self, sender_address: str) -> Vendor:
        """Exact match of the sender address against Vendor.email.

        Raises:
            ResolutionMiss: No vendor is registered with that address
        """
        address = (sender_address or "").strip()
        vendor = self.repository.find_vendor_by_email(address) if address else None
        if vendor is None:
            logger.info(f"Vendor not found for email: {address}", extra={"sender": address})
            raise ResolutionMiss("vendor", address)
        return vendor

    def resolve_solicitation(self, subject: Optional[str]) -> Solicitation:
        """Map a subject line to a solicitation.

        A numeric tag is treated as ground truth and resolves any status.
        Without a tag, only `sent` solicitations are matched by title.

        Raises:
            ResolutionMiss: Neither path found a solicitation
        """
        subject = subject or ""
        tagged_id = extract_solicitation_tag(subject)

        if tagged_id is not None:
            solicitation = self.repository.find_solicitation_by_id(tagged_id)
            if solicitation is None:
                logger.info(f"Subject tag RFP #{tagged_id} does not exist: {subject!r}")
                raise ResolutionMiss("solicitation", f"tagged id {tagged_id} not found")
            return solicitation

        sent = list(self.repository.list_solicitations(status=SolicitationStatus.SENT))
        solicitation = pick_title_match(subject, sent)
        if solicitation is None:
            logger.info(f"No sent solicitation title matches subject: {subject!r}")
            raise ResolutionMiss("solicitation", subject)
        return solicitation
