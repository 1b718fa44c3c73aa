"""SQLAlchemy Models for rfpflow"""

from .base import Base, PortableJSONB
from .vendor import Vendor
from .solicitation import Solicitation, SolicitationStatus
from .proposal import Proposal, ProposalStatus, TERM_FIELDS

__all__ = [
    "Base",
    "PortableJSONB",
    "Vendor",
    "Solicitation",
    "SolicitationStatus",
    "Proposal",
    "ProposalStatus",
    "TERM_FIELDS",
]
