"""Vendor model - a supplier that can answer solicitations by email."""

from sqlalchemy import Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship

from .base import Base


class Vendor(Base):
    """
    Vendor model - identity used to resolve inbound mail senders.

    Looked up by exact email during ingestion; never created or mutated by
    the ingestion pipeline.
    """
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    contact_person = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    address = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    proposals = relationship("Proposal", back_populates="vendor")

    def __repr__(self):
        return f"<Vendor(id={self.id}, name={self.name!r}, email={self.email!r})>"
