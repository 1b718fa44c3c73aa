"""Extraction: client, response recovery, schemas and task service."""

from .client import ExtractionClient
from .response_recovery import recover_structured_payload
from .schemas import ComparisonResult, ExtractedPayload, PricingLine, RequirementItem, SolicitationDraft
from .service import ExtractionService

__all__ = [
    "ComparisonResult",
    "ExtractedPayload",
    "ExtractionClient",
    "ExtractionService",
    "PricingLine",
    "RequirementItem",
    "SolicitationDraft",
    "recover_structured_payload",
]
