"""Comparison engine: relative AI scoring of all proposals for a solicitation."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from ..errors import NoProposalsError
from ..extraction.schemas import ComparisonResult
from ..extraction.service import ExtractionService
from ..models import Proposal
from ..repositories import ProcurementRepository

logger = logging.getLogger(__name__)


def _vendor_name(proposal: Proposal) -> str:
    return proposal.vendor.name if proposal.vendor is not None else f"vendor-{proposal.vendor_id}"


def build_comparison_context(proposals: Sequence[Proposal]) -> list[dict[str, Any]]:
    """One summary per proposal, keyed the way the scoring prompt expects."""
    return [
        {
            "vendorName": _vendor_name(p),
            "pricing": p.pricing or {},
            "terms": p.terms or {},
            "extractedData": p.extracted_data or {},
            "emailBody": p.email_body or "",
        }
        for p in proposals
    ]


@dataclass
class ComparedProposal:
    """Per-proposal view of a comparison run."""

    proposal_id: int
    vendor_id: int
    vendor_name: str
    ai_score: Optional[float]
    status: str
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)


@dataclass
class ComparisonReport:
    """Comparison result plus the annotated proposals it was computed for."""

    result: ComparisonResult
    proposals: list[ComparedProposal]

    @classmethod
    def build(cls, result: ComparisonResult, proposals: Sequence[Proposal]) -> "ComparisonReport":
        rows = []
        for p in proposals:
            name = _vendor_name(p)
            rows.append(ComparedProposal(
                proposal_id=p.id,
                vendor_id=p.vendor_id,
                vendor_name=name,
                ai_score=p.ai_score,
                status=p.status,
                strengths=list(result.strengths.get(name, [])),
                weaknesses=list(result.weaknesses.get(name, [])),
            ))
        return cls(result=result, proposals=rows)


class ComparisonEngine:
    """Scores a solicitation's proposals against each other.

    Proposals whose vendor name is missing from the returned score map are
    left untouched.
    """

    def __init__(self, repository: ProcurementRepository, extraction: ExtractionService):
        self.repository = repository
        self.extraction = extraction

    def compare(self, proposals: Sequence[Proposal]) -> ComparisonResult:
        """Run comparative scoring and write scores back.

        Raises:
            NoProposalsError: proposals is empty (no extraction call is made)
            ServiceError: Extraction call failed
            ExtractionFormatError: Extraction output was not a ComparisonResult
        """
        if not proposals:
            raise NoProposalsError("No proposals found for this RFP")

        result = self.extraction.compare(build_comparison_context(proposals))

        updated = 0
        for proposal in proposals:
            name = _vendor_name(proposal)
            if name not in result.scores:
                logger.info(f"No score returned for vendor {name!r}, proposal {proposal.id} left unchanged")
                continue
            self.repository.update_proposal(
                proposal.id,
                {
                    "ai_score": result.scores[name],
                    "ai_summary": result.summary,
                    "ai_recommendation": result.recommendation,
                },
            )
            updated += 1

        logger.info(f"Comparison scored {updated}/{len(proposals)} proposal(s)")
        return result
