"""Heuristic token counting.

Token counts are estimated from text length (about four characters per
token) instead of running a byte-pair-encoding tokenizer over every message
of an archive.  The numbers are an approximation and are reported as such.
"""

from __future__ import annotations

import math

CHARS_PER_TOKEN = 4


def count_tokens(text: str | None) -> int:
    """Estimate the number of tokens in *text*.

    Args:
        text: Text span to measure.  ``None`` and empty strings are allowed.

    Returns:
        ``ceil(len(text) / 4)``, or 0 for empty input.
    """
    if not text:
        return 0
    return max(0, math.ceil(len(text) / CHARS_PER_TOKEN))


class HeuristicTokenCounter:
    """Stateless counter object, injectable into the monthly aggregator."""

    def count_tokens(self, text: str | None) -> int:
        return count_tokens(text)
