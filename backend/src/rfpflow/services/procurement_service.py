"""On-demand procurement operations invoked by an outer surface.

Every public method reports failure as OperationFailed carrying a message
fit for the invoking user; the underlying exception is kept as `cause`.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..errors import (
    ExtractionFormatError,
    InvalidStateTransition,
    NoProposalsError,
    NotFoundError,
    OperationFailed,
    ServiceError,
)
from ..extraction.schemas import SolicitationDraft
from ..extraction.service import ExtractionService
from ..models import Proposal, ProposalStatus, Solicitation, SolicitationStatus, Vendor
from ..proposals import ComparisonEngine, ComparisonReport, ProposalRecorder
from ..repositories import ProcurementRepository

logger = logging.getLogger(__name__)

# Caller-facing messages
MSG_INVALID_AI_JSON = "Failed to parse AI response. The AI may have returned invalid JSON. Please try again."
MSG_SYNTHESIS_FAILED = "Failed to parse procurement description. Please try again with more details."
MSG_VENDOR_PARSE_FAILED = "Failed to parse vendor response. Please review manually."
MSG_COMPARISON_FAILED = "Failed to generate comparison. Please review proposals manually."
MSG_NO_PROPOSALS = "No proposals found for this RFP"
MSG_RFP_NOT_FOUND = "RFP not found"
MSG_VENDOR_NOT_FOUND = "Vendor not found"
MSG_PROPOSAL_NOT_FOUND = "Proposal not found"


def parse_deadline(value: Optional[str]) -> Optional[datetime]:
    """ISO date/datetime string -> datetime; unparseable values become None."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Ignoring unparseable deadline: {value!r}")
        return None


class ProcurementService:
    """Solicitation synthesis, manual proposal submission, review and comparison.

    The caller owns the session transaction.
    """

    def __init__(self, db: Session, extraction: ExtractionService):
        self.db = db
        self.repository = ProcurementRepository(db)
        self.extraction = extraction

    def register_vendor(self, name: str, email: str, **fields) -> Vendor:
        """Add a vendor that inbound mail can be resolved against."""
        if not name or not email:
            raise OperationFailed("Name and email are required")
        email = email.strip()
        if self.repository.find_vendor_by_email(email) is not None:
            raise OperationFailed("Vendor with this email already exists")
        return self.repository.create_vendor(name=name, email=email, **fields)

    def create_solicitation_from_text(self, description: str) -> Solicitation:
        """Synthesize a structured solicitation and persist it as `draft`."""
        if not description or not description.strip():
            raise OperationFailed("Description is required")

        try:
            draft = self.extraction.synthesize_solicitation(description)
        except ExtractionFormatError as e:
            logger.error(f"Error creating RFP from text: {e}")
            raise OperationFailed(MSG_INVALID_AI_JSON, cause=e)
        except ServiceError as e:
            logger.error(f"Error creating RFP from text: {e}")
            raise OperationFailed(MSG_SYNTHESIS_FAILED, cause=e)

        solicitation = self.repository.create_solicitation(**self._solicitation_fields(draft, description))
        logger.info(f"Created solicitation {solicitation.id} from text", extra={"solicitation_id": solicitation.id})
        return solicitation

    @staticmethod
    def _solicitation_fields(draft: SolicitationDraft, original_text: str) -> dict:
        return {
            "title": draft.title,
            "description": draft.description or original_text,
            "budget": draft.budget,
            "deadline": parse_deadline(draft.deadline),
            "requirements": [item.to_wire() for item in draft.requirements],
            "payment_terms": draft.payment_terms,
            "warranty": draft.warranty,
            "status": SolicitationStatus.DRAFT,
            "original_text": original_text,
        }

    def mark_solicitation_sent(self, solicitation_id: int) -> Solicitation:
        """draft -> sent, making the solicitation eligible for title matching."""
        return self._set_solicitation_status(solicitation_id, SolicitationStatus.SENT)

    def close_solicitation(self, solicitation_id: int) -> Solicitation:
        return self._set_solicitation_status(solicitation_id, SolicitationStatus.CLOSED)

    def _set_solicitation_status(self, solicitation_id: int, status: SolicitationStatus) -> Solicitation:
        try:
            return self.repository.update_solicitation_status(solicitation_id, status)
        except NotFoundError as e:
            raise OperationFailed(MSG_RFP_NOT_FOUND, cause=e)
        except InvalidStateTransition as e:
            raise OperationFailed(str(e), cause=e)

    def record_manual_submission(self, solicitation_id: int, vendor_id: int, email_body: str) -> Proposal:
        """Manual parse path: extract a pasted vendor reply and record it."""
        if not solicitation_id or not vendor_id or not email_body:
            raise OperationFailed("rfpId, vendorId, and emailBody are required")

        solicitation = self.repository.find_solicitation_by_id(solicitation_id)
        if solicitation is None:
            raise OperationFailed(MSG_RFP_NOT_FOUND)
        vendor = self.repository.find_vendor_by_id(vendor_id)
        if vendor is None:
            raise OperationFailed(MSG_VENDOR_NOT_FOUND)

        try:
            payload = self.extraction.extract_proposal(solicitation.to_context(), email_body)
        except (ServiceError, ExtractionFormatError) as e:
            logger.error(f"Error parsing vendor response: {e}")
            raise OperationFailed(MSG_VENDOR_PARSE_FAILED, cause=e)

        return ProposalRecorder(self.repository).record(vendor, solicitation, email_body, payload, source="manual")

    def update_proposal_status(self, proposal_id: int, status: str) -> Proposal:
        try:
            status = ProposalStatus(status)
        except ValueError as e:
            raise OperationFailed("Invalid status", cause=e)

        try:
            return self.repository.update_proposal(proposal_id, {"status": status})
        except NotFoundError as e:
            raise OperationFailed(MSG_PROPOSAL_NOT_FOUND, cause=e)
        except InvalidStateTransition as e:
            raise OperationFailed(str(e), cause=e)

    def compare_proposals(self, solicitation_id: int) -> ComparisonReport:
        """Score every proposal for the solicitation and report per vendor."""
        if self.repository.find_solicitation_by_id(solicitation_id) is None:
            raise OperationFailed(MSG_RFP_NOT_FOUND)

        proposals = list(self.repository.list_proposals(solicitation_id))
        engine = ComparisonEngine(self.repository, self.extraction)
        try:
            result = engine.compare(proposals)
        except NoProposalsError as e:
            raise OperationFailed(MSG_NO_PROPOSALS, cause=e)
        except (ServiceError, ExtractionFormatError) as e:
            logger.error(f"Error comparing proposals: {e}")
            raise OperationFailed(MSG_COMPARISON_FAILED, cause=e)

        return ComparisonReport.build(result, proposals)
