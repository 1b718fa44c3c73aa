"""Proposal model - a vendor's structured answer to a solicitation.

Several proposals may share the same (solicitation_id, vendor_id) pair:
vendors are allowed to send revised quotes, so there is no uniqueness
constraint on that pair.

Status state machine:
    new -> received
    any of received | reviewed | accepted | rejected -> any other

Review decisions can be revised, so no status is terminal.
"""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship, validates

from .base import Base, PortableJSONB, check_transition


class ProposalStatus(str, Enum):
    RECEIVED = "received"
    REVIEWED = "reviewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


ALLOWED_TRANSITIONS = {
    None: [ProposalStatus.RECEIVED],
    ProposalStatus.RECEIVED: [ProposalStatus.REVIEWED, ProposalStatus.ACCEPTED, ProposalStatus.REJECTED],
    ProposalStatus.REVIEWED: [ProposalStatus.RECEIVED, ProposalStatus.ACCEPTED, ProposalStatus.REJECTED],
    ProposalStatus.ACCEPTED: [ProposalStatus.RECEIVED, ProposalStatus.REVIEWED, ProposalStatus.REJECTED],
    ProposalStatus.REJECTED: [ProposalStatus.RECEIVED, ProposalStatus.REVIEWED, ProposalStatus.ACCEPTED],
}

TERM_FIELDS = ("deliveryTime", "paymentTerms", "warranty", "additionalTerms")


class Proposal(Base):
    """
    Proposal model.

    extracted_data holds the full recovered payload; pricing and terms are
    copied from it verbatim at creation. ai_* fields are written only by the
    comparison engine.
    """
    __tablename__ = "proposals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    solicitation_id = Column(
        Integer,
        ForeignKey("solicitations.id", ondelete="CASCADE"),
        nullable=False,
    )
    vendor_id = Column(
        Integer,
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
    )

    email_body = Column(Text, nullable=True)
    extracted_data = Column(PortableJSONB, nullable=True, default=dict)
    pricing = Column(PortableJSONB, nullable=True, default=dict)
    terms = Column(PortableJSONB, nullable=True, default=dict)

    ai_score = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    ai_summary = Column(Text, nullable=True)
    ai_recommendation = Column(Text, nullable=True)

    status = Column(String(16), nullable=False, default=ProposalStatus.RECEIVED.value)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        # Non-unique on purpose: revised quotes share the pair
        Index("idx_proposal_solicitation_vendor", "solicitation_id", "vendor_id"),
    )

    solicitation = relationship("Solicitation", back_populates="proposals")
    vendor = relationship("Vendor", back_populates="proposals")

    @validates("status")
    def validate_status_transition(self, key, new_status):
        """Ensure status changes follow ALLOWED_TRANSITIONS."""
        return check_transition(
            "proposal", ALLOWED_TRANSITIONS, self.__dict__.get(key), new_status, ProposalStatus
        )

    def __repr__(self):
        return (
            f"<Proposal(id={self.id}, solicitation_id={self.solicitation_id}, "
            f"vendor_id={self.vendor_id}, status={self.status})>"
        )
