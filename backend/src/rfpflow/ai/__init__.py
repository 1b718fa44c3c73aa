"""AI domain ports (Hexagonal Architecture)."""

from .ports import (
    LLMAuthError,
    LLMCompletionResult,
    LLMProviderPort,
    LLMRateLimitError,
    LLMServiceError,
    LLMTimeoutError,
)

__all__ = [
    "LLMAuthError",
    "LLMCompletionResult",
    "LLMProviderPort",
    "LLMRateLimitError",
    "LLMServiceError",
    "LLMTimeoutError",
]
