"""
OpenAI Provider - Concrete implementation of LLMProviderPort for OpenAI.

Uses chat completions with JSON mode (gpt-4o-mini by default).
"""

import os
import time
from typing import Optional

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    OpenAI,
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


class OpenAIProvider(LLMProviderPort):
    """
    OpenAI implementation of LLMProviderPort.

    Uses OpenAI Python SDK (v1.x+) with structured output (JSON mode).
    Handles authentication, request formatting, response parsing, error handling.
    """

    name = "openai"
    default_model = "gpt-4o-mini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 60.0,
        client: Optional[OpenAI] = None,
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            model: Model name (defaults to gpt-4o-mini)
            timeout: Per-request timeout in seconds
            client: Pre-built SDK client (tests)

        Raises:
            ValueError: If API key is not provided
        """
        self.model = model or self.default_model
        self.timeout = timeout

        if client is not None:
            self.client = client
            return

        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError("OpenAI API key not provided. Set OPENAI_API_KEY environment variable.")
        self.client = OpenAI(api_key=self.api_key)

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        json_mode: bool = True,
    ) -> LLMCompletionResult:
        """
        Make one chat completion call with error translation.

        Raises:
            LLMTimeoutError, LLMRateLimitError, LLMAuthError, LLMServiceError
        """
        start_time = time.perf_counter()
        warnings = []

        request = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "timeout": self.timeout,
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**request)

        except APITimeoutError as e:
            raise LLMTimeoutError(f"OpenAI API timeout: {str(e)}")

        except RateLimitError as e:
            raise LLMRateLimitError(f"OpenAI rate limit exceeded: {str(e)}")

        except AuthenticationError as e:
            raise LLMAuthError(f"OpenAI authentication failed: {str(e)}")

        except (APIConnectionError, APIError) as e:
            raise LLMServiceError(f"OpenAI service error: {str(e)}")

        except Exception as e:
            raise LLMServiceError(f"Unexpected error calling OpenAI: {str(e)}")

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        raw_output = ""
        if response.choices:
            raw_output = response.choices[0].message.content or ""
        else:
            warnings.append("OpenAI response contained no choices")

        usage = response.usage
        prompt_tokens = usage.prompt_tokens if usage else None
        completion_tokens = usage.completion_tokens if usage else None

        cost_micros = 0
        if prompt_tokens and completion_tokens:
            try:
                cost_micros = CostCalculator.calculate_cost_micros(
                    provider=self.name,
                    model=self.model,
                    prompt_tokens=prompt_tokens,
                    completion_tokens=completion_tokens
                )
            except ValueError as e:
                warnings.append(f"Failed to calculate cost: {str(e)}")

        return LLMCompletionResult(
            raw_output=raw_output,
            provider=self.name,
            model=self.model,
            tokens_in=prompt_tokens,
            tokens_out=completion_tokens,
            latency_ms=latency_ms,
            cost_micros=cost_micros,
            warnings=warnings
        )
