"""Per-model token pricing (USD per million tokens).

The table is read-only.  Callers pass it explicitly to the functions that
price token usage (see ``token_usage.compute_token_totals``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

LEGACY_DAVINCI_PREFIX = "text-davinci-002-render"


@dataclass(frozen=True)
class ModelPricing:
    input_cost: float
    output_cost: float


ZERO_PRICING = ModelPricing(0.0, 0.0)

MODEL_PRICING: Mapping[str, ModelPricing] = MappingProxyType(
    {
        "gpt-5-2-pro": ModelPricing(21.00, 168.00),
        "gpt-5-2-thinking": ModelPricing(1.75, 14.00),
        "gpt-5-2-instant": ModelPricing(1.75, 14.00),
        "gpt-5-2-chat": ModelPricing(1.75, 14.00),
        "gpt-5-2": ModelPricing(1.75, 14.00),
        "gpt-5-1-pro": ModelPricing(15.00, 120.00),
        "gpt-5-1-thinking": ModelPricing(1.25, 10.00),
        "gpt-5-1-instant": ModelPricing(1.25, 10.00),
        "gpt-5-1": ModelPricing(1.25, 10.00),
        "gpt-5-instant": ModelPricing(1.25, 10.00),
        "gpt-5-pro": ModelPricing(15.00, 120.00),
        "gpt-5-a-t-mini": ModelPricing(0.25, 2.00),
        "gpt-5-t-mini": ModelPricing(0.25, 2.00),
        "gpt-5-thinking": ModelPricing(1.25, 10.00),
        "gpt-5-mini": ModelPricing(0.25, 2.00),
        "gpt-5": ModelPricing(1.25, 10.00),
        "o3-pro": ModelPricing(20.00, 80.00),
        "gpt-4-1-mini": ModelPricing(0.40, 1.60),
        "gpt-4-1": ModelPricing(2.00, 8.00),
        "gpt-4-5": ModelPricing(75.00, 150.00),
        "o3": ModelPricing(2.00, 8.00),
        "o4-mini-high": ModelPricing(1.10, 4.40),
        "o4-mini": ModelPricing(1.10, 4.40),
        # deep research runs on o3
        "research": ModelPricing(10.00, 40.00),
        "o1-pro": ModelPricing(150.00, 600.00),
        "o3-mini-high": ModelPricing(1.10, 4.40),
        "o3-mini": ModelPricing(1.10, 4.40),
        "o1": ModelPricing(15.00, 60.00),
        "o1-preview": ModelPricing(15.00, 60.00),
        "o1-mini": ModelPricing(1.10, 4.40),
        # gpt-4o in canvas mode
        "gpt-4o-canmore": ModelPricing(2.50, 10.00),
        "gpt-4o-mini": ModelPricing(0.15, 0.60),
        "gpt-4o": ModelPricing(2.50, 10.00),
        "gpt-4-turbo": ModelPricing(10.00, 30.00),
        "gpt-4": ModelPricing(30.00, 60.00),
        "gpt-4-vision-preview": ModelPricing(10.00, 30.00),
        "gpt-3.5-turbo": ModelPricing(0.50, 1.50),
        "text-davinci-002": ModelPricing(20.00, 20.00),
    }
)


def get_pricing(model: str, table: Mapping[str, ModelPricing]) -> ModelPricing:
    """Look up the pricing for a model slug.

    Args:
        model: Model slug as found in message metadata.
        table: Pricing table to consult, usually ``MODEL_PRICING``.

    Returns:
        The matching ``ModelPricing``.  Legacy ``text-davinci-002-render*``
        slugs share the ``text-davinci-002`` entry; unknown slugs are free.
    """
    if model.startswith(LEGACY_DAVINCI_PREFIX):
        return table.get("text-davinci-002", ZERO_PRICING)
    return table.get(model, ZERO_PRICING)


def calculate_cost(tokens: int, cost_per_million: float) -> float:
    return (tokens / 1_000_000) * cost_per_million
