"""Extraction service: binds prompts, temperatures, recovery and validation.

Every task goes through the same path:
    ExtractionClient.invoke -> recover_structured_payload -> pydantic model

Provider failures surface as ServiceError; undecodable or structurally
invalid output surfaces as ExtractionFormatError.
"""

import logging
from typing import Any, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import ExtractionFormatError
from .client import ExtractionClient
from .prompts import (
    COMPARISON_INSTRUCTION,
    COMPARISON_SYSTEM,
    PROPOSAL_EXTRACTION_INSTRUCTION,
    PROPOSAL_EXTRACTION_SYSTEM,
    SOLICITATION_SYNTHESIS_INSTRUCTION,
    SOLICITATION_SYNTHESIS_SYSTEM,
)
from .response_recovery import recover_structured_payload
from .schemas import ComparisonResult, ExtractedPayload, SolicitationDraft

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_EXTRACTION_TEMPERATURE = 0.3
DEFAULT_COMPARISON_TEMPERATURE = 0.5


class ExtractionService:
    """The three instruction variants sharing one client."""

    def __init__(
        self,
        client: ExtractionClient,
        extraction_temperature: float = DEFAULT_EXTRACTION_TEMPERATURE,
        comparison_temperature: float = DEFAULT_COMPARISON_TEMPERATURE,
    ):
        self.client = client
        self.extraction_temperature = extraction_temperature
        self.comparison_temperature = comparison_temperature

    def synthesize_solicitation(self, description: str) -> SolicitationDraft:
        """Free-text procurement description -> structured solicitation fields."""
        raw = self.client.invoke(
            SOLICITATION_SYNTHESIS_INSTRUCTION,
            {"description": description},
            temperature=self.extraction_temperature,
            system_prompt=SOLICITATION_SYNTHESIS_SYSTEM,
            call_type="solicitation_synthesis",
        )
        return self._validate(raw, SolicitationDraft)

    def extract_proposal(self, solicitation_context: dict[str, Any], email_body: str) -> ExtractedPayload:
        """Solicitation context plus vendor email body -> ExtractedPayload.

        Args:
            solicitation_context: {title, budget, requirements} of the solicitation
            email_body: Plain-text body of the vendor reply
        """
        context = {
            "rfp": {
                "title": solicitation_context.get("title"),
                "budget": solicitation_context.get("budget") or "Not specified",
                "requirements": solicitation_context.get("requirements") or [],
            },
            "emailBody": email_body,
        }
        raw = self.client.invoke(
            PROPOSAL_EXTRACTION_INSTRUCTION,
            context,
            temperature=self.extraction_temperature,
            system_prompt=PROPOSAL_EXTRACTION_SYSTEM,
            call_type="proposal_extraction",
        )
        return self._validate(raw, ExtractedPayload)

    def compare(self, proposal_summaries: Sequence[dict[str, Any]]) -> ComparisonResult:
        """Relative scoring of proposal summaries keyed by vendorName."""
        raw = self.client.invoke(
            COMPARISON_INSTRUCTION,
            {"proposals": list(proposal_summaries)},
            temperature=self.comparison_temperature,
            system_prompt=COMPARISON_SYSTEM,
            call_type="comparison",
        )
        return self._validate(raw, ComparisonResult)

    @staticmethod
    def _validate(raw: str, model: Type[ModelT]) -> ModelT:
        value = recover_structured_payload(raw)
        if not isinstance(value, dict):
            raise ExtractionFormatError(
                f"Expected a JSON object for {model.__name__}, got {type(value).__name__}",
                snippet=raw,
            )
        try:
            return model.model_validate(value)
        except ValidationError as e:
            logger.warning(f"Schema validation failed for {model.__name__}: {e}")
            raise ExtractionFormatError(
                f"Extraction response does not match {model.__name__}: {e.error_count()} error(s)",
                snippet=raw,
            )
