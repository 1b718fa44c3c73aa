"""Unit tests for ProcurementService on-demand operations."""

import json

import pytest

from rfpflow.ai.ports import LLMServiceError
from rfpflow.errors import OperationFailed
from rfpflow.extraction import ExtractionClient, ExtractionService
from rfpflow.models import ProposalStatus, SolicitationStatus
from rfpflow.services import ProcurementService

from conftest import LAPTOP_EXTRACTION, FakeLLMProvider

DRAFT = json.dumps({
    "title": "Laptops Q3",
    "description": "20 laptops with 16GB RAM",
    "budget": 30000,
    "deadline": "2026-09-30",
    "requirements": [{"item": "laptops", "quantity": 20, "specifications": {"RAM": "16GB"}}],
    "paymentTerms": "net 30",
    "warranty": "1 year",
})

COMPARISON = json.dumps({
    "summary": "Only one vendor replied.",
    "scores": {"Acme": 80},
    "recommendation": "Acme",
    "strengths": {"Acme": ["complete quote"]},
    "weaknesses": {},
})


def make_service(db_session, *responses, error=None) -> ProcurementService:
    provider = FakeLLMProvider(responses=list(responses), error=error)
    return ProcurementService(db_session, ExtractionService(ExtractionClient(provider)))


class TestVendorRegistration:
    """Test register_vendor."""

    def test_register(self, db_session):
        """Test a vendor is created."""
        vendor = make_service(db_session).register_vendor("Acme", " v@x.com ")
        assert vendor.id is not None
        assert vendor.email == "v@x.com"

    def test_duplicate_email(self, db_session, make_vendor):
        """Test duplicate addresses are rejected."""
        make_vendor("Acme", "v@x.com")
        with pytest.raises(OperationFailed, match="already exists"):
            make_service(db_session).register_vendor("Other", "v@x.com")

    def test_required_fields(self, db_session):
        """Test name and email are required."""
        with pytest.raises(OperationFailed, match="Name and email are required"):
            make_service(db_session).register_vendor("", "v@x.com")


class TestSolicitationFromText:
    """Test create_solicitation_from_text."""

    def test_creates_draft(self, db_session):
        """Test a synthesized solicitation is stored as draft with its source text."""
        solicitation = make_service(db_session, DRAFT).create_solicitation_from_text("We need 20 laptops")

        assert solicitation.status == SolicitationStatus.DRAFT.value
        assert solicitation.title == "Laptops Q3"
        assert solicitation.budget == 30000
        assert solicitation.deadline.year == 2026
        assert solicitation.requirements == [{"item": "laptops", "quantity": 20, "specifications": {"RAM": "16GB"}}]
        assert solicitation.payment_terms == "net 30"
        assert solicitation.original_text == "We need 20 laptops"

    def test_invalid_json_message(self, db_session):
        """Test undecodable output reports the invalid-JSON message."""
        with pytest.raises(OperationFailed) as exc_info:
            make_service(db_session, "not json at all").create_solicitation_from_text("laptops")
        assert exc_info.value.user_message.startswith("Failed to parse AI response")

    def test_service_error_message(self, db_session):
        """Test a provider failure reports the generic synthesis message."""
        with pytest.raises(OperationFailed) as exc_info:
            make_service(db_session, error=LLMServiceError("down")).create_solicitation_from_text("laptops")
        assert exc_info.value.user_message == (
            "Failed to parse procurement description. Please try again with more details."
        )
        assert isinstance(exc_info.value.cause, LLMServiceError)

    def test_empty_description(self, db_session):
        """Test an empty description is rejected before any call."""
        with pytest.raises(OperationFailed, match="Description is required"):
            make_service(db_session).create_solicitation_from_text("  ")

    def test_unparseable_deadline_dropped(self, db_session):
        """Test a non-ISO deadline is stored as None."""
        draft = json.loads(DRAFT)
        draft["deadline"] = "end of Q3"
        solicitation = make_service(db_session, json.dumps(draft)).create_solicitation_from_text("laptops")
        assert solicitation.deadline is None


class TestSolicitationStatus:
    """Test mark_solicitation_sent."""

    def test_mark_sent(self, db_session, make_solicitation):
        """Test draft -> sent."""
        solicitation = make_solicitation(status=SolicitationStatus.DRAFT)
        assert make_service(db_session).mark_solicitation_sent(solicitation.id).status == "sent"

    def test_missing(self, db_session):
        """Test an unknown id reports RFP not found."""
        with pytest.raises(OperationFailed, match="RFP not found"):
            make_service(db_session).mark_solicitation_sent(404)

    def test_closed_cannot_be_sent(self, db_session, make_solicitation):
        """Test invalid transitions are reported, not raised raw."""
        solicitation = make_solicitation(status=SolicitationStatus.CLOSED)
        with pytest.raises(OperationFailed, match="Invalid solicitation status transition"):
            make_service(db_session).mark_solicitation_sent(solicitation.id)


class TestManualSubmission:
    """Test record_manual_submission."""

    def test_records_proposal(self, db_session, make_vendor, make_solicitation):
        """Test a pasted reply becomes a received proposal."""
        vendor, solicitation = make_vendor(), make_solicitation()
        proposal = make_service(db_session, LAPTOP_EXTRACTION).record_manual_submission(
            solicitation.id, vendor.id, "20 units at $1200 each"
        )

        assert proposal.status == ProposalStatus.RECEIVED.value
        assert proposal.pricing["laptops"]["total"] == 24000

    def test_missing_fields(self, db_session):
        """Test all three inputs are required."""
        with pytest.raises(OperationFailed, match="rfpId, vendorId, and emailBody are required"):
            make_service(db_session).record_manual_submission(1, 1, "")

    def test_unknown_vendor(self, db_session, make_solicitation):
        """Test an unknown vendor id is reported."""
        solicitation = make_solicitation()
        with pytest.raises(OperationFailed, match="Vendor not found"):
            make_service(db_session).record_manual_submission(solicitation.id, 999, "body")

    def test_unknown_solicitation(self, db_session, make_vendor):
        """Test an unknown solicitation id is reported."""
        vendor = make_vendor()
        with pytest.raises(OperationFailed, match="RFP not found"):
            make_service(db_session).record_manual_submission(999, vendor.id, "body")

    def test_extraction_failure(self, db_session, make_vendor, make_solicitation):
        """Test extraction failures ask for manual review."""
        vendor, solicitation = make_vendor(), make_solicitation()
        with pytest.raises(OperationFailed) as exc_info:
            make_service(db_session, "garbage").record_manual_submission(solicitation.id, vendor.id, "body")
        assert exc_info.value.user_message == "Failed to parse vendor response. Please review manually."


class TestProposalStatusUpdate:
    """Test update_proposal_status."""

    def test_review_then_accept(self, db_session, make_vendor, make_solicitation):
        """Test received -> reviewed -> accepted."""
        vendor, solicitation = make_vendor(), make_solicitation()
        service = make_service(db_session, LAPTOP_EXTRACTION)
        proposal = service.record_manual_submission(solicitation.id, vendor.id, "body")

        service.update_proposal_status(proposal.id, "reviewed")
        assert service.update_proposal_status(proposal.id, "accepted").status == "accepted"

    def test_rejected_can_be_reopened(self, db_session, make_vendor, make_solicitation):
        """Test a rejected proposal can be moved back to received."""
        vendor, solicitation = make_vendor(), make_solicitation()
        service = make_service(db_session, LAPTOP_EXTRACTION)
        proposal = service.record_manual_submission(solicitation.id, vendor.id, "body")

        service.update_proposal_status(proposal.id, "rejected")
        assert service.update_proposal_status(proposal.id, "received").status == "received"

    def test_invalid_status(self, db_session):
        """Test unknown status names are rejected."""
        with pytest.raises(OperationFailed, match="Invalid status"):
            make_service(db_session).update_proposal_status(1, "pending")

    def test_missing_proposal(self, db_session):
        """Test an unknown proposal is reported."""
        with pytest.raises(OperationFailed, match="Proposal not found"):
            make_service(db_session).update_proposal_status(999, "reviewed")


class TestCompareProposals:
    """Test compare_proposals."""

    def test_no_proposals(self, db_session, make_solicitation):
        """Test comparing zero proposals is reported."""
        solicitation = make_solicitation()
        with pytest.raises(OperationFailed, match="No proposals found for this RFP"):
            make_service(db_session, COMPARISON).compare_proposals(solicitation.id)

    def test_missing_solicitation(self, db_session):
        """Test an unknown solicitation is reported."""
        with pytest.raises(OperationFailed, match="RFP not found"):
            make_service(db_session).compare_proposals(404)

    def test_report(self, db_session, make_vendor, make_solicitation):
        """Test the report carries scores and per-vendor strengths."""
        vendor, solicitation = make_vendor("Acme", "v@x.com"), make_solicitation()
        service = make_service(db_session, LAPTOP_EXTRACTION, COMPARISON)
        service.record_manual_submission(solicitation.id, vendor.id, "body")

        report = service.compare_proposals(solicitation.id)

        assert report.result.recommendation == "Acme"
        assert report.proposals[0].ai_score == 80
        assert report.proposals[0].strengths == ["complete quote"]
        assert report.proposals[0].weaknesses == []

    def test_null_strengths_and_weaknesses(self, db_session, make_vendor, make_solicitation):
        """Test a comparison with null strengths and weaknesses still reports scores."""
        vendor, solicitation = make_vendor("Acme", "v@x.com"), make_solicitation()
        comparison = json.dumps({
            "summary": "s",
            "scores": {"Acme": 80},
            "recommendation": "Acme",
            "strengths": None,
            "weaknesses": None,
        })
        service = make_service(db_session, LAPTOP_EXTRACTION, comparison)
        service.record_manual_submission(solicitation.id, vendor.id, "body")

        report = service.compare_proposals(solicitation.id)

        assert report.proposals[0].ai_score == 80
        assert report.proposals[0].strengths == []
        assert report.proposals[0].weaknesses == []

    def test_comparison_failure(self, db_session, make_vendor, make_solicitation):
        """Test extraction failures ask for manual review."""
        vendor, solicitation = make_vendor(), make_solicitation()
        service = make_service(db_session, LAPTOP_EXTRACTION, "not json")
        service.record_manual_submission(solicitation.id, vendor.id, "body")

        with pytest.raises(OperationFailed) as exc_info:
            service.compare_proposals(solicitation.id)
        assert exc_info.value.user_message == "Failed to generate comparison. Please review proposals manually."
