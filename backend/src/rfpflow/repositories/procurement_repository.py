"""Procurement repository for vendor, solicitation and proposal persistence."""

from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from ..errors import NotFoundError
from ..models import Proposal, Solicitation, SolicitationStatus, Vendor


# Fields the comparison engine and manual review may write back
UPDATABLE_PROPOSAL_FIELDS = frozenset(
    {"ai_score", "ai_summary", "ai_recommendation", "status"}
)


class ProcurementRepository:
    """Repository for the records the ingestion core reads and writes.

    Reads are plain lookups with no locking; writes never check for
    duplicates. Callers own the session and its transaction.
    """

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    # Vendors

    def find_vendor_by_email(self, address: str) -> Optional[Vendor]:
        """Exact match of address against Vendor.email."""
        stmt = select(Vendor).where(Vendor.email == address)
        return self.db.execute(stmt).scalar_one_or_none()

    def find_vendor_by_id(self, vendor_id: int) -> Optional[Vendor]:
        return self.db.get(Vendor, vendor_id)

    def create_vendor(self, name: str, email: str, **fields: Any) -> Vendor:
        vendor = Vendor(name=name, email=email, **fields)
        self.db.add(vendor)
        self.db.flush()
        return vendor

    # Solicitations

    def find_solicitation_by_id(self, solicitation_id: int) -> Optional[Solicitation]:
        return self.db.get(Solicitation, solicitation_id)

    def list_solicitations(
        self,
        status: Optional[SolicitationStatus] = None,
    ) -> Sequence[Solicitation]:
        """List solicitations, optionally filtered by status, ordered by id."""
        stmt = select(Solicitation)
        if status is not None:
            stmt = stmt.where(Solicitation.status == SolicitationStatus(status).value)
        stmt = stmt.order_by(Solicitation.id)
        return self.db.execute(stmt).scalars().all()

    def create_solicitation(self, **fields: Any) -> Solicitation:
        solicitation = Solicitation(**fields)
        self.db.add(solicitation)
        self.db.flush()
        return solicitation

    def update_solicitation_status(
        self,
        solicitation_id: int,
        status: SolicitationStatus,
    ) -> Solicitation:
        """Change solicitation status (validated by the model state machine)."""
        solicitation = self.find_solicitation_by_id(solicitation_id)
        if solicitation is None:
            raise NotFoundError(f"Solicitation {solicitation_id} not found")
        solicitation.status = status
        self.db.flush()
        return solicitation

    # Proposals

    def create_proposal(self, **fields: Any) -> Proposal:
        """Insert a new proposal. Never deduplicates."""
        proposal = Proposal(**fields)
        self.db.add(proposal)
        self.db.flush()
        return proposal

    def find_proposal_by_id(self, proposal_id: int) -> Optional[Proposal]:
        return self.db.get(Proposal, proposal_id)

    def list_proposals(self, solicitation_id: int) -> Sequence[Proposal]:
        """All proposals for a solicitation with their vendor loaded."""
        stmt = (
            select(Proposal)
            .options(joinedload(Proposal.vendor))
            .where(Proposal.solicitation_id == solicitation_id)
            .order_by(Proposal.id)
        )
        return self.db.execute(stmt).scalars().all()

    def count_proposals(self, solicitation_id: int, vendor_id: Optional[int] = None) -> int:
        stmt = select(func.count(Proposal.id)).where(Proposal.solicitation_id == solicitation_id)
        if vendor_id is not None:
            stmt = stmt.where(Proposal.vendor_id == vendor_id)
        return self.db.execute(stmt).scalar_one()

    def update_proposal(self, proposal_id: int, fields: dict[str, Any]) -> Proposal:
        """Write the given fields onto an existing proposal.

        Raises:
            NotFoundError: If the proposal does not exist
            ValueError: If a field outside UPDATABLE_PROPOSAL_FIELDS is given
        """
        unknown = set(fields) - UPDATABLE_PROPOSAL_FIELDS
        if unknown:
            raise ValueError(f"Proposal fields not updatable: {sorted(unknown)}")

        proposal = self.find_proposal_by_id(proposal_id)
        if proposal is None:
            raise NotFoundError(f"Proposal {proposal_id} not found")

        for key, value in fields.items():
            setattr(proposal, key, value)
        self.db.flush()
        return proposal
