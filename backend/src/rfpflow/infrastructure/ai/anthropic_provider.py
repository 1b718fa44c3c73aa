"""
Anthropic Provider - Concrete implementation of LLMProviderPort for Claude.

The Messages API has no JSON response flag, so JSON mode is requested
through the system prompt.
"""

import os
import time
from typing import Optional

from anthropic import (
    Anthropic,
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    RateLimitError,
)

from ...ai.ports import (
    LLMAuthError,
    LLMCompletionResult,
    LLMProviderPort,
    LLMRateLimitError,
    LLMServiceError,
    LLMTimeoutError,
)
from .cost_calculator import CostCalculator

JSON_ONLY_SUFFIX = (
    "\n\nRespond with a single JSON value only. "
    "Do not wrap it in markdown and do not add any text before or after it."
)


class AnthropicProvider(LLMProviderPort):
    """Anthropic Claude implementation of LLMProviderPort."""

    name = "anthropic"
    default_model = "claude-3-5-haiku-latest"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 60.0,
        max_tokens: int = 4096,
        client: Optional[Anthropic] = None,
    ):
        """
        Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            model: Model name
            timeout: Per-request timeout in seconds
            max_tokens: Completion token cap
            client: Pre-built SDK client (tests)

        Raises:
            ValueError: If API key is not provided
        """
        self.model = model or self.default_model
        self.timeout = timeout
        self.max_tokens = max_tokens

        if client is not None:
            self.client = client
            return

        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("Anthropic API key not provided. Set ANTHROPIC_API_KEY environment variable.")
        self.client = Anthropic(api_key=self.api_key)

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        json_mode: bool = True,
    ) -> LLMCompletionResult:
        start_time = time.perf_counter()
        warnings = []

        system = system_prompt + JSON_ONLY_SUFFIX if json_mode else system_prompt

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=[{"role": "user", "content": user_prompt}],
                temperature=temperature,
                timeout=self.timeout,
            )

        except APITimeoutError as e:
            raise LLMTimeoutError(f"Anthropic API timeout: {str(e)}")

        except RateLimitError as e:
            raise LLMRateLimitError(f"Anthropic rate limit exceeded: {str(e)}")

        except AuthenticationError as e:
            raise LLMAuthError(f"Anthropic authentication failed: {str(e)}")

        except (APIConnectionError, APIError) as e:
            raise LLMServiceError(f"Anthropic service error: {str(e)}")

        except Exception as e:
            raise LLMServiceError(f"Unexpected error calling Anthropic: {str(e)}")

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        raw_output = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if response.stop_reason == "max_tokens":
            warnings.append("Anthropic response truncated at max_tokens")

        usage = response.usage
        input_tokens = usage.input_tokens if usage else None
        output_tokens = usage.output_tokens if usage else None

        cost_micros = 0
        if input_tokens and output_tokens:
            try:
                cost_micros = CostCalculator.calculate_cost_micros(
                    provider=self.name,
                    model=self.model,
                    prompt_tokens=input_tokens,
                    completion_tokens=output_tokens
                )
            except ValueError as e:
                warnings.append(f"Failed to calculate cost: {str(e)}")

        return LLMCompletionResult(
            raw_output=raw_output,
            provider=self.name,
            model=self.model,
            tokens_in=input_tokens,
            tokens_out=output_tokens,
            latency_ms=latency_ms,
            cost_micros=cost_micros,
            warnings=warnings
        )
