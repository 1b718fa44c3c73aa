"""Per-message ingestion: parse -> resolve -> extract -> record.

Every failure is contained to the message being processed; process()
always returns an IngestionResult and never raises.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..database import SessionFactory, session_scope
from ..errors import ExtractionFormatError, MessageParseError, ResolutionMiss, ServiceError
from ..extraction.service import ExtractionService
from ..infrastructure.ingest.mime_parser import RawMessage, parse_inbound_message
from ..observability import generate_correlation_id, set_correlation_id
from ..observability.metrics import messages_ingested_total
from ..proposals.recorder import ProposalRecorder
from ..repositories import ProcurementRepository
from ..resolution import IdentityResolver

logger = logging.getLogger(__name__)


class IngestionOutcome(str, Enum):
    RECORDED = "recorded"
    PARSE_FAILED = "parse_failed"
    VENDOR_UNRESOLVED = "vendor_unresolved"
    SOLICITATION_UNRESOLVED = "solicitation_unresolved"
    EXTRACTION_FAILED = "extraction_failed"
    ERROR = "error"


@dataclass
class IngestionResult:
    """Outcome of one inbound message."""

    outcome: IngestionOutcome
    message_id: Optional[str] = None
    sender: Optional[str] = None
    proposal_id: Optional[int] = None
    error: Optional[str] = None


class IngestionPipeline:
    """Turns one raw inbound message into at most one Proposal.

    Resolution and recording use separate short sessions so no database
    connection is held during the extraction call.
    """

    def __init__(self, session_factory: SessionFactory, extraction: ExtractionService):
        self.session_factory = session_factory
        self.extraction = extraction

    def process(self, raw_mime: bytes) -> IngestionResult:
        set_correlation_id(generate_correlation_id("msg"))
        result = self._process(raw_mime)
        messages_ingested_total.labels(outcome=result.outcome.value).inc()
        return result

    def _process(self, raw_mime: bytes) -> IngestionResult:
        try:
            message = parse_inbound_message(raw_mime)
        except MessageParseError as e:
            logger.warning(f"Error parsing email: {e}", extra={"outcome": IngestionOutcome.PARSE_FAILED.value})
            return IngestionResult(IngestionOutcome.PARSE_FAILED, error=str(e))

        logger.info(
            f"Processing email from: {message.sender_address}, Subject: {message.subject}",
            extra={"sender": message.sender_address},
        )

        try:
            return self._ingest(message)
        except ResolutionMiss as e:
            outcome = (
                IngestionOutcome.VENDOR_UNRESOLVED
                if e.reason == "vendor"
                else IngestionOutcome.SOLICITATION_UNRESOLVED
            )
            logger.info(f"Message dropped: {e}", extra={"sender": message.sender_address, "outcome": outcome.value})
            return self._result(message, outcome, error=str(e))
        except (ServiceError, ExtractionFormatError) as e:
            logger.error(
                f"Extraction failed, no proposal recorded: {e}",
                extra={"sender": message.sender_address, "outcome": IngestionOutcome.EXTRACTION_FAILED.value},
            )
            return self._result(message, IngestionOutcome.EXTRACTION_FAILED, error=str(e))
        except Exception as e:
            logger.exception(
                f"Error processing vendor response: {e}",
                extra={"sender": message.sender_address, "outcome": IngestionOutcome.ERROR.value},
            )
            return self._result(message, IngestionOutcome.ERROR, error=str(e))

    def _ingest(self, message: RawMessage) -> IngestionResult:
        with session_scope(self.session_factory) as session:
            resolver = IdentityResolver(ProcurementRepository(session))
            vendor = resolver.resolve_vendor(message.sender_address)
            solicitation = resolver.resolve_solicitation(message.subject)
            context = solicitation.to_context()

        payload = self.extraction.extract_proposal(context, message.body_text)

        with session_scope(self.session_factory) as session:
            recorder = ProposalRecorder(ProcurementRepository(session))
            proposal = recorder.record(vendor, solicitation, message.body_text, payload, source="mailbox")
            proposal_id = proposal.id

        return self._result(message, IngestionOutcome.RECORDED, proposal_id=proposal_id)

    @staticmethod
    def _result(message: RawMessage, outcome: IngestionOutcome, **kwargs) -> IngestionResult:
        return IngestionResult(outcome, message_id=message.message_id, sender=message.sender_address, **kwargs)
