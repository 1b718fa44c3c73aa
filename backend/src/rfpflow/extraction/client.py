"""Extraction client: one structured-data call to the generative service."""

import json
import logging
from typing import Any, Mapping

from ..ai.ports import LLMCompletionResult, LLMProviderPort
from ..errors import ServiceError
from ..observability.metrics import ai_calls_total, ai_latency_ms, ai_tokens_total

logger = logging.getLogger(__name__)


def render_user_prompt(instruction: str, context: Mapping[str, Any]) -> str:
    """Append the context payload to the instruction as JSON."""
    payload = json.dumps(context, indent=2, ensure_ascii=False, default=str)
    return f"{instruction}\n\nCONTEXT:\n{payload}"


class ExtractionClient:
    """Thin wrapper around an injected LLMProviderPort.

    Requests JSON-mode output at a caller-chosen temperature. No retry is
    performed; provider failures propagate as ServiceError subclasses.
    """

    def __init__(self, provider: LLMProviderPort):
        self.provider = provider

    def invoke(
        self,
        instruction: str,
        context: Mapping[str, Any],
        temperature: float,
        system_prompt: str,
        call_type: str = "extraction",
    ) -> str:
        """Run one extraction call and return the raw response text.

        Raises:
            ServiceError: Provider call failed or returned no text
        """
        provider_name = getattr(self.provider, "name", "unknown")
        user_prompt = render_user_prompt(instruction, context)

        try:
            result = self.provider.complete(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                temperature=temperature,
                json_mode=True,
            )
        except ServiceError as e:
            ai_calls_total.labels(call_type=call_type, provider=provider_name, status="error").inc()
            logger.error(f"{call_type} call to {provider_name} failed: {e}")
            raise

        self._record_usage(call_type, result)

        if not result.raw_output or not result.raw_output.strip():
            ai_calls_total.labels(call_type=call_type, provider=result.provider, status="error").inc()
            logger.error(f"{call_type} call to {result.provider} returned no text")
            raise ServiceError("Empty response received from extraction service")

        ai_calls_total.labels(call_type=call_type, provider=result.provider, status="success").inc()
        for warning in result.warnings:
            logger.warning(f"{call_type}: {warning}")

        logger.info(
            f"{call_type} call completed: provider={result.provider}, model={result.model}, "
            f"latency={result.latency_ms}ms, tokens_in={result.tokens_in}, tokens_out={result.tokens_out}"
        )
        return result.raw_output

    def _record_usage(self, call_type: str, result: LLMCompletionResult) -> None:
        ai_latency_ms.labels(call_type=call_type, provider=result.provider).observe(result.latency_ms)
        if result.tokens_in:
            ai_tokens_total.labels(call_type=call_type, provider=result.provider, direction="input").inc(result.tokens_in)
        if result.tokens_out:
            ai_tokens_total.labels(call_type=call_type, provider=result.provider, direction="output").inc(result.tokens_out)
