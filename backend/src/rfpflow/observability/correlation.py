"""Correlation id management for ingestion cycles and inbound messages.

Each poll cycle and each inbound message runs under its own id so every log
line for one message can be grouped. Worker threads inherit the id through
contextvars.copy_context().
"""

import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable for correlation_id (thread- and async-safe)
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def generate_correlation_id(prefix: Optional[str] = None) -> str:
    """Generate a new unique correlation id.

    Args:
        prefix: Optional short prefix ("cycle", "msg") for readability

    Returns:
        str: UUID v4 based id
    """
    value = str(uuid.uuid4())
    return f"{prefix}-{value}" if prefix else value


def get_correlation_id() -> str:
    """Get current correlation id from context.

    Returns:
        str: Current id or "no-correlation-id" if not set
    """
    return correlation_id_var.get() or "no-correlation-id"


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation id in current context."""
    correlation_id_var.set(correlation_id)
