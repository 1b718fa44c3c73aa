"""Provider selection from settings."""

from ...ai.ports import LLMProviderPort
from ...config import Settings


def get_llm_provider(settings: Settings) -> LLMProviderPort:
    """Build the provider named by LLM_PROVIDER.

    Raises:
        ValueError: Unknown provider name or missing API key
    """
    provider = settings.LLM_PROVIDER.lower()

    if provider == "openai":
        from .openai_provider import OpenAIProvider
        return OpenAIProvider(
            api_key=settings.OPENAI_API_KEY,
            model=settings.LLM_MODEL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    if provider == "anthropic":
        from .anthropic_provider import AnthropicProvider
        return AnthropicProvider(
            api_key=settings.ANTHROPIC_API_KEY,
            model=settings.LLM_MODEL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")
