"""AI Infrastructure - Adapters for LLM providers.

This module contains concrete implementations of the AI domain port.
"""

from .anthropic_provider import AnthropicProvider
from .cost_calculator import CostCalculator
from .factory import get_llm_provider
from .openai_provider import OpenAIProvider

__all__ = [
    "AnthropicProvider",
    "CostCalculator",
    "OpenAIProvider",
    "get_llm_provider",
]
