"""
LLM Provider Port - Abstract interface for generative text providers.

Hexagonal Architecture: extraction code depends on this port, not on a
concrete SDK. Providers are injected, so tests substitute a scripted fake.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ServiceError


@dataclass
class LLMCompletionResult:
    """
    Result from a single completion call.

    Attributes:
        raw_output: Raw text returned by the model ("" when none)
        provider: Provider name (e.g., 'openai', 'anthropic')
        model: Model name
        tokens_in: Input tokens used (None if provider doesn't report)
        tokens_out: Output tokens used (None if provider doesn't report)
        latency_ms: Latency in milliseconds
        cost_micros: Cost in micro-USD (0 when unknown)
        warnings: Non-critical warnings
    """
    raw_output: str
    provider: str
    model: str
    tokens_in: Optional[int] = None
    tokens_out: Optional[int] = None
    latency_ms: int = 0
    cost_micros: int = 0
    warnings: list[str] = field(default_factory=list)


class LLMProviderPort(ABC):
    """
    Abstract interface for LLM providers.

    Implementations must handle:
    - API authentication
    - Request formatting for provider
    - Structured (JSON) response mode
    - Translating SDK errors into the exceptions below

    No retry is performed at this layer.
    """

    name: str = "unknown"

    @abstractmethod
    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        json_mode: bool = True,
    ) -> LLMCompletionResult:
        """
        Run one completion.

        Args:
            system_prompt: Role/format instruction
            user_prompt: Task instruction with its context payload
            temperature: Sampling temperature
            json_mode: Ask the provider for a structured-data response

        Returns:
            LLMCompletionResult with raw text and usage metadata

        Raises:
            LLMTimeoutError: Request timed out
            LLMRateLimitError: Rate limit or quota exceeded
            LLMAuthError: Authentication failed
            LLMServiceError: Provider service unavailable or returned error
        """
        pass


# Provider exceptions, all surfaced to callers as ServiceError
class LLMTimeoutError(ServiceError):
    """LLM request timed out"""
    pass


class LLMRateLimitError(ServiceError):
    """Rate limit or quota exceeded"""
    pass


class LLMAuthError(ServiceError):
    """Authentication failed"""
    pass


class LLMServiceError(ServiceError):
    """Provider service unavailable or returned error"""
    pass
