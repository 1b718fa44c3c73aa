"""Proposal recorder: persists one resolved vendor reply as a Proposal."""

import logging

from ..extraction.schemas import ExtractedPayload
from ..models import TERM_FIELDS, Proposal, ProposalStatus, Solicitation, Vendor
from ..observability.metrics import proposals_recorded_total
from ..repositories import ProcurementRepository

logger = logging.getLogger(__name__)


class ProposalRecorder:
    """Creates exactly one `received` Proposal per call.

    Never checks for duplicates: revised quotes from the same vendor for the
    same solicitation become additional proposals.
    """

    def __init__(self, repository: ProcurementRepository):
        self.repository = repository

    def record(
        self,
        vendor: Vendor,
        solicitation: Solicitation,
        email_body: str,
        payload: ExtractedPayload,
        source: str = "mailbox",
    ) -> Proposal:
        """Persist the extracted payload as a new proposal.

        Pricing and the term fields are copied verbatim; absent terms stay
        absent rather than being defaulted.

        Args:
            vendor: Resolved vendor
            solicitation: Resolved solicitation
            email_body: Raw reply body
            payload: Validated extraction output
            source: 'mailbox' or 'manual' (metrics label)
        """
        extracted = payload.to_wire()
        terms = {field: extracted[field] for field in TERM_FIELDS if field in extracted}

        proposal = self.repository.create_proposal(
            solicitation_id=solicitation.id,
            vendor_id=vendor.id,
            email_body=email_body,
            extracted_data=extracted,
            pricing=extracted.get("pricing") or {},
            terms=terms,
            status=ProposalStatus.RECEIVED,
        )
        proposals_recorded_total.labels(source=source).inc()

        total = self.repository.count_proposals(solicitation.id, vendor.id)
        logger.info(
            f"Created proposal {proposal.id} for RFP {solicitation.id} from vendor {vendor.name} "
            f"(total proposals from this vendor for this RFP: {total})",
            extra={
                "proposal_id": proposal.id,
                "solicitation_id": solicitation.id,
                "vendor_id": vendor.id,
            },
        )
        return proposal
