"""Exception taxonomy for the proposal ingestion core.

Errors raised inside the autonomous ingestion loop are contained per message
(logged, message dropped). Errors raised inside caller-invoked operations are
wrapped in OperationFailed with a human-readable message.
"""

from typing import Optional


SNIPPET_MAX_CHARS = 500


class RFPFlowError(Exception):
    """Base exception for rfpflow."""
    pass


class MailboxConnectionError(RFPFlowError):
    """Mailbox authentication or network failure.

    Retried only by the next watcher tick, never within a cycle.
    """
    pass


class MessageParseError(RFPFlowError):
    """Inbound mail message could not be decoded."""
    pass


class ResolutionMiss(RFPFlowError):
    """Sender or subject did not resolve to a known vendor / solicitation."""

    def __init__(self, reason: str, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason} not resolved: {detail}" if detail else f"{reason} not resolved")


class ServiceError(RFPFlowError):
    """External extraction service call failed or returned no text."""
    pass


class ExtractionFormatError(RFPFlowError):
    """Extraction service returned text that does not decode to the expected structure."""

    def __init__(self, message: str, snippet: Optional[str] = None):
        self.snippet = (snippet or "")[:SNIPPET_MAX_CHARS]
        super().__init__(message)


class NoProposalsError(RFPFlowError):
    """Comparison requested for a solicitation with zero proposals."""
    pass


class NotFoundError(RFPFlowError):
    """Referenced vendor, solicitation or proposal does not exist."""
    pass


class InvalidStateTransition(RFPFlowError, ValueError):
    """A status or connection state change is not allowed."""
    pass


class OperationFailed(RFPFlowError):
    """Caller-facing failure of an on-demand operation.

    Attributes:
        user_message: Message safe to show to the invoking user
        cause: Underlying exception, if any
    """

    def __init__(self, user_message: str, cause: Optional[BaseException] = None):
        self.user_message = user_message
        self.cause = cause
        super().__init__(user_message)
