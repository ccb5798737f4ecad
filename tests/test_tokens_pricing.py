"""Tests for tokens.py and pricing.py."""

from __future__ import annotations

import pytest

from pricing import MODEL_PRICING, ZERO_PRICING, ModelPricing, calculate_cost, get_pricing
from tokens import HeuristicTokenCounter, count_tokens


# ── count_tokens ───────────────────────────────


class TestCountTokens:
    def test_empty(self):
        assert count_tokens("") == 0

    def test_none(self):
        assert count_tokens(None) == 0

    @pytest.mark.parametrize(
        "text, expected",
        [("a", 1), ("abcd", 1), ("abcde", 2), ("x" * 400, 100), ("x" * 401, 101)],
    )
    def test_rounds_up(self, text, expected):
        assert count_tokens(text) == expected

    def test_monotonic_in_length(self):
        counts = [count_tokens("x" * n) for n in range(50)]
        assert counts == sorted(counts)

    def test_counter_wraps_function(self):
        assert HeuristicTokenCounter().count_tokens("abcdefgh") == 2


# ── Pricing ────────────────────────────────────


class TestGetPricing:
    def test_known_model(self):
        assert get_pricing("gpt-4o", MODEL_PRICING) == ModelPricing(2.50, 10.00)

    def test_unknown_model_is_free(self):
        assert get_pricing("mystery-model", MODEL_PRICING) is ZERO_PRICING

    def test_legacy_davinci_prefix(self):
        assert get_pricing("text-davinci-002-render-sha", MODEL_PRICING) == (
            MODEL_PRICING["text-davinci-002"]
        )

    def test_custom_table(self):
        table = {"local-model": ModelPricing(1.0, 2.0)}
        assert get_pricing("local-model", table) == ModelPricing(1.0, 2.0)
        assert get_pricing("gpt-4o", table) is ZERO_PRICING

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            MODEL_PRICING["gpt-4o"] = ZERO_PRICING


class TestCalculateCost:
    def test_per_million(self):
        assert calculate_cost(1_000_000, 2.5) == pytest.approx(2.5)
        assert calculate_cost(500_000, 10.0) == pytest.approx(5.0)

    def test_zero_tokens(self):
        assert calculate_cost(0, 30.0) == 0.0
