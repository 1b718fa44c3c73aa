"""Solicitation model - a structured request for proposal (RFP).

Status state machine:
    draft -> sent -> closed
    draft -> closed

Only `sent` solicitations take part in subject/title matching of inbound
mail; the explicit `RFP #<id>` tag resolves any status.
"""

from enum import Enum

from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship, validates

from .base import Base, PortableJSONB, check_transition


class SolicitationStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    CLOSED = "closed"


ALLOWED_TRANSITIONS = {
    None: [SolicitationStatus.DRAFT, SolicitationStatus.SENT, SolicitationStatus.CLOSED],
    SolicitationStatus.DRAFT: [SolicitationStatus.SENT, SolicitationStatus.CLOSED],
    SolicitationStatus.SENT: [SolicitationStatus.CLOSED],
    SolicitationStatus.CLOSED: [],
}


class Solicitation(Base):
    """
    Solicitation model.

    requirements is an ordered list of
    {"item": str, "quantity": number, "specifications": {str: str}}.
    """
    __tablename__ = "solicitations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False, default="")
    budget = Column(Numeric(15, 2, asdecimal=False), nullable=True)
    deadline = Column(DateTime(timezone=True), nullable=True)
    requirements = Column(PortableJSONB, nullable=False, default=list)
    payment_terms = Column(String(255), nullable=True)
    warranty = Column(String(255), nullable=True)
    status = Column(String(16), nullable=False, default=SolicitationStatus.DRAFT.value)
    original_text = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    proposals = relationship("Proposal", back_populates="solicitation")

    @validates("status")
    def validate_status_transition(self, key, new_status):
        """Ensure status changes follow ALLOWED_TRANSITIONS."""
        return check_transition(
            "solicitation", ALLOWED_TRANSITIONS, self.__dict__.get(key), new_status, SolicitationStatus
        )

    def to_context(self) -> dict:
        """Solicitation fields handed to the extraction service."""
        return {
            "title": self.title,
            "budget": self.budget,
            "requirements": self.requirements or [],
        }

    def __repr__(self):
        return f"<Solicitation(id={self.id}, title={self.title!r}, status={self.status})>"
