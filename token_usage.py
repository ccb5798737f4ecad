"""Monthly, per-model token usage and cost estimates.

Token counts come from the length heuristic in ``tokens`` and are therefore
approximate.  Prices are applied per million tokens: user tokens are billed
as input, assistant tokens as output.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

import pandas as pd

from models import ConversationNode, ConversationRecord, Message, to_local_datetime
from pricing import ModelPricing, calculate_cost, get_pricing
from tokens import HeuristicTokenCounter

logger = logging.getLogger(__name__)

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

FRAME_COLUMNS = [
    "month",
    "model",
    "user_tokens",
    "assistant_tokens",
    "input_cost",
    "output_cost",
    "total_cost",
]


class TokenCounter(Protocol):
    def count_tokens(self, text: str | None) -> int: ...


def _model_slug(message: Message, node: ConversationNode, conversation: ConversationRecord) -> str:
    """Resolve the model a message belongs to.

    User turns carry no model tag, so they borrow the slug of their first
    child (the reply).
    """
    if message.metadata.model_slug is not None:
        return message.metadata.model_slug
    if message.role == "user":
        reply = conversation.first_child_message(node)
        if reply is not None and reply.metadata.model_slug is not None:
            return reply.metadata.model_slug
    return "unknown"


def monthly_model_token_usage(
    conversations: Iterable[ConversationRecord],
    counter: TokenCounter | None = None,
) -> dict[str, dict[str, dict[str, int]]]:
    """Bucket estimated token counts by local calendar month and model.

    Args:
        conversations: Validated conversation records.
        counter: Token counter to use.  Defaults to the length heuristic.

    Returns:
        ``{"Jan-24": {"gpt-4o": {"user_tokens": n, "assistant_tokens": n}}}``.
        Months appear in order of first occurrence.  Only user and assistant
        messages with a timestamp and non-empty text are counted.
    """
    counter = counter or HeuristicTokenCounter()
    usage: dict[str, dict[str, dict[str, int]]] = {}

    for conversation in conversations:
        for node, message in conversation.iter_messages():
            if not message.create_time or not message.parts:
                continue
            role = message.role
            if role not in ("user", "assistant"):
                continue

            tokens = counter.count_tokens(message.text)
            if tokens == 0:
                continue

            when = to_local_datetime(message.create_time)
            if when is None:
                continue

            month = f"{MONTH_ABBR[when.month - 1]}-{str(when.year)[-2:]}"
            model = _model_slug(message, node, conversation)
            bucket = usage.setdefault(month, {}).setdefault(
                model, {"user_tokens": 0, "assistant_tokens": 0}
            )
            bucket["user_tokens" if role == "user" else "assistant_tokens"] += tokens

    pruned = _prune_empty(usage)
    logger.debug("Token usage spans %d months", len(pruned))
    return pruned


def _prune_empty(
    usage: dict[str, dict[str, dict[str, int]]],
) -> dict[str, dict[str, dict[str, int]]]:
    pruned: dict[str, dict[str, dict[str, int]]] = {}
    for month, models in usage.items():
        kept = {
            model: counts
            for model, counts in models.items()
            if counts["user_tokens"] or counts["assistant_tokens"]
        }
        if kept:
            pruned[month] = kept
    return pruned


def usage_to_frame(
    usage: Mapping[str, Mapping[str, Mapping[str, int]]],
    pricing: Mapping[str, ModelPricing],
) -> pd.DataFrame:
    """Flatten monthly usage into one priced row per month and model.

    Args:
        usage: Output of ``monthly_model_token_usage``.
        pricing: Pricing table, usually ``pricing.MODEL_PRICING``.

    Returns:
        DataFrame with columns month, model, user_tokens, assistant_tokens,
        input_cost, output_cost and total_cost.  Row order follows *usage*.
    """
    rows = []
    for month, models in usage.items():
        for model, counts in models.items():
            price = get_pricing(model, pricing)
            rows.append(
                {
                    "month": month,
                    "model": model,
                    "user_tokens": counts["user_tokens"],
                    "assistant_tokens": counts["assistant_tokens"],
                    "input_cost": calculate_cost(counts["user_tokens"], price.input_cost),
                    "output_cost": calculate_cost(counts["assistant_tokens"], price.output_cost),
                }
            )
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS[:-1])
    df["total_cost"] = df["input_cost"] + df["output_cost"]
    return df


def compute_token_totals(
    usage: Mapping[str, Mapping[str, Mapping[str, int]]],
    pricing: Mapping[str, ModelPricing],
) -> dict[str, dict[str, Any]]:
    """Sum tokens and estimated cost over every month and model.

    Returns:
        ``{"tokens": {"input", "output", "total"}, "cost": {"input",
        "output", "total"}}`` with costs in USD rounded to 4 decimals.
    """
    df = usage_to_frame(usage, pricing)
    input_tokens = int(df["user_tokens"].sum())
    output_tokens = int(df["assistant_tokens"].sum())
    input_cost = float(df["input_cost"].sum())
    output_cost = float(df["output_cost"].sum())
    return {
        "tokens": {
            "input": input_tokens,
            "output": output_tokens,
            "total": input_tokens + output_tokens,
        },
        "cost": {
            "input": round(input_cost, 4),
            "output": round(output_cost, 4),
            "total": round(input_cost + output_cost, 4),
        },
    }


def monthly_cost_series(
    usage: Mapping[str, Mapping[str, Mapping[str, int]]],
    pricing: Mapping[str, ModelPricing],
) -> dict[str, list]:
    """Per-month cost totals, in month order of first appearance.

    Returns:
        Dict with parallel lists: months, input_cost, output_cost,
        total_cost (USD, rounded to 4 decimals).
    """
    df = usage_to_frame(usage, pricing)
    if df.empty:
        return {"months": [], "input_cost": [], "output_cost": [], "total_cost": []}

    monthly = df.groupby("month", sort=False)[["input_cost", "output_cost", "total_cost"]].sum()
    return {
        "months": monthly.index.tolist(),
        "input_cost": [round(float(v), 4) for v in monthly["input_cost"]],
        "output_cost": [round(float(v), 4) for v in monthly["output_cost"]],
        "total_cost": [round(float(v), 4) for v in monthly["total_cost"]],
    }
