"""
Cost Calculator - Calculate LLM API costs from token usage.

Calculates costs in micro-USD (1/1,000,000 USD) for logging and metrics.
"""

from typing import Dict, Tuple


class CostCalculator:
    """
    Calculate LLM API costs based on provider pricing.

    Pricing stored as USD per million tokens.
    Cost calculation: (tokens * rate_per_million) / 1_000_000 = cost in USD
    Then convert to micro-USD: cost_usd * 1_000_000
    """

    # (input, output) USD per 1M tokens
    PRICING: Dict[str, Dict[str, Tuple[float, float]]] = {
        "openai": {
            "gpt-4o-mini": (0.150, 0.600),
            "gpt-4o": (2.50, 10.00),
            "gpt-4.1-mini": (0.40, 1.60),
            "gpt-4.1": (2.00, 8.00),
        },
        "anthropic": {
            "claude-3-5-haiku-latest": (0.80, 4.00),
            "claude-3-5-sonnet-latest": (3.00, 15.00),
            "claude-sonnet-4-0": (3.00, 15.00),
        },
    }

    @staticmethod
    def calculate_cost_micros(
        provider: str,
        model: str,
        prompt_tokens: int,
        completion_tokens: int
    ) -> int:
        """
        Calculate cost in micro-USD (1/1,000,000 USD).

        Args:
            provider: Provider name (e.g., 'openai', 'anthropic')
            model: Model name (e.g., 'gpt-4o-mini')
            prompt_tokens: Input tokens used
            completion_tokens: Output tokens used

        Returns:
            Cost in micro-USD (integer)

        Raises:
            ValueError: If provider or model not found in pricing table

        Example:
            >>> CostCalculator.calculate_cost_micros("openai", "gpt-4o-mini", 1000, 500)
            450
        """
        provider_pricing = CostCalculator.PRICING.get(provider.lower())
        if provider_pricing is None:
            raise ValueError(f"Unknown provider: {provider}")

        rates = provider_pricing.get(model.lower())
        if rates is None:
            raise ValueError(f"Unknown model for {provider}: {model}")

        input_rate, output_rate = rates
        input_cost_usd = (prompt_tokens * input_rate) / 1_000_000
        output_cost_usd = (completion_tokens * output_rate) / 1_000_000

        return round((input_cost_usd + output_cost_usd) * 1_000_000)
