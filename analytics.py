"""Core aggregation engine for ChatGPT export statistics.

Extracts usage statistics from an OpenAI ``conversations.json`` export.
Used by the CLI (chat_gpt_summary.py) and the web service (app.py).

Every statistic is an independent pass over the validated conversation
records.  Nodes without a message never count, and missing or malformed
fields contribute nothing instead of raising, so one broken record cannot
abort the statistics for the rest of an archive.
"""

from __future__ import annotations

import csv
import json
import logging
import os
import re
from collections.abc import Iterator, Mapping
from datetime import datetime
from typing import Any

from canvas_stats import (
    compute_canvas_code_block_count,
    compute_code_canvas_stats,
    compute_document_canvas_stats,
)
from models import ConversationRecord, Message, parse_conversations, to_local_datetime
from pricing import ModelPricing
from token_usage import (
    TokenCounter,
    compute_token_totals,
    monthly_cost_series,
    monthly_model_token_usage,
    usage_to_frame,
)

logger = logging.getLogger(__name__)

DALLE_GIZMO_ID = "g-2fkFE8rbu"
DALLE_TOOL = "dalle.text2im"
PICTURE_V2_TOOL = "t2uay3k.sj1i4kz"

MAX_GAP_SECONDS = 1800  # longer pauses are idle time, not engagement
COMPOSE_CREDIT_SECONDS = 30
READ_CREDIT_SECONDS = 45

LOCATION_CODE_LENGTH = 3
WEBPAGE_REFERENCE_TYPES = frozenset({"webpage", "grouped_webpages", "webpage_extended"})

_CODE_FENCE_RE = re.compile(r"```(\w+)")


def load_conversations(path: str = "conversations.json") -> list[Any]:
    """Load conversations from an OpenAI export JSON file.

    Args:
        path: Filesystem path to the OpenAI conversations.json export.
            Defaults to "conversations.json" in the current directory.

    Returns:
        List of raw conversation dicts as exported by OpenAI.

    Raises:
        FileNotFoundError: If the file at *path* does not exist.
        json.JSONDecodeError: If the file contains invalid JSON.
        ValueError: If the top-level JSON value is not a list.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of conversations")
    return data


def _increment(counter: dict[str, int], key: str) -> None:
    counter[key] = counter.get(key, 0) + 1


def _local_date(timestamp: Any) -> str | None:
    """Return the local calendar date of *timestamp* as YYYY-MM-DD, or None."""
    when = to_local_datetime(timestamp)
    return when.date().isoformat() if when is not None else None


def _shift_for_hour(hour: int) -> str:
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def _update_time_range(
    start: datetime | None,
    end: datetime | None,
    new_time: datetime,
) -> tuple[datetime, datetime]:
    """Update a start/end time range with a new timestamp.

    Expands the range so that *start* is the earliest and *end* is
    the latest time seen so far.

    Args:
        start: Current earliest datetime, or None if no times seen yet.
        end: Current latest datetime, or None if no times seen yet.
        new_time: The new datetime to incorporate into the range.

    Returns:
        A (start, end) tuple with the updated range.
    """
    if start is None or new_time < start:
        start = new_time
    if end is None or new_time > end:
        end = new_time
    return start, end


def _part_metadata(part: Any) -> dict:
    """Return the ``metadata`` object of a structured content part, or {}."""
    if not isinstance(part, dict):
        return {}
    metadata = part.get("metadata")
    return metadata if isinstance(metadata, dict) else {}


def _is_dalle_part(part: Any) -> bool:
    dalle = _part_metadata(part).get("dalle")
    return isinstance(dalle, dict) and bool(dalle.get("gen_id")) and bool(dalle.get("prompt"))


def _is_generated_image_part(part: Any) -> bool:
    if not isinstance(part, dict) or part.get("content_type") != "image_asset_pointer":
        return False
    metadata = _part_metadata(part)
    return bool(metadata.get("dalle") or metadata.get("generation"))


class ConversationAnalysis:
    """Read-only statistics over one export archive.

    Constructed once per analysis session.  No method mutates the records
    or depends on call order, so methods may be called in any order and
    from several threads.  Mapping traversal is unordered (dict order of
    each conversation's ``mapping``).
    """

    def __init__(self, conversations: list[Any]) -> None:
        self._conversations: tuple[ConversationRecord, ...] = tuple(
            parse_conversations(conversations)
        )
        if self._conversations and next(self._messages(), None) is None:
            logger.warning(
                "Loaded %d conversations but none contain messages. "
                "The OpenAI export format may have changed.",
                len(self._conversations),
            )

    @property
    def conversations(self) -> tuple[ConversationRecord, ...]:
        return self._conversations

    def _messages(self, gpts_only: bool = False) -> Iterator[Message]:
        for conversation in self._conversations:
            if gpts_only and not conversation.is_custom_agent:
                continue
            for _, message in conversation.iter_messages():
                yield message

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def total_conversations(self) -> int:
        return len(self._conversations)

    def total_gpts_conversations(self) -> int:
        """Conversations bound to a custom GPT (``g-`` template or gizmo id)."""
        return sum(1 for c in self._conversations if c.is_custom_agent)

    def total_messages(self) -> int:
        return sum(1 for _ in self._messages())

    def total_gpts_messages(self) -> int:
        return sum(1 for _ in self._messages(gpts_only=True))

    def total_archived_conversations(self) -> int:
        return sum(1 for c in self._conversations if c.is_archived)

    def total_voice_messages(self) -> int:
        return sum(1 for m in self._messages() if m.metadata.voice_mode_message)

    # ------------------------------------------------------------------
    # Role breakdowns
    # ------------------------------------------------------------------

    def _role_counts(self, messages: Iterator[Message]) -> dict[str, int]:
        counts: dict[str, int] = {}
        for message in messages:
            _increment(counts, message.role or "unknown")
        return counts

    def role_based_message_count(self) -> dict[str, int]:
        return self._role_counts(self._messages())

    def role_based_gpts_message_count(self) -> dict[str, int]:
        return self._role_counts(self._messages(gpts_only=True))

    def role_based_voice_message_count(self) -> dict[str, int]:
        counts = {"user": 0, "assistant": 0}
        for message in self._messages():
            if message.metadata.voice_mode_message and message.role in counts:
                counts[message.role] += 1
        return counts

    # ------------------------------------------------------------------
    # Time patterns
    # ------------------------------------------------------------------

    def _messages_per_day(self) -> dict[str, int]:
        day_count: dict[str, int] = {}
        for message in self._messages():
            day = _local_date(message.create_time)
            if day is not None:
                _increment(day_count, day)
        return day_count

    def most_chatty_day(self) -> dict[str, Any]:
        """Return the local date with the most messages.

        Returns:
            Dict with keys date (YYYY-MM-DD, or None for an archive without
            timestamps) and count.  Ties go to the first date encountered.
        """
        best_day: str | None = None
        best_count = 0
        for day, count in self._messages_per_day().items():
            if count > best_count:
                best_day, best_count = day, count
        return {"date": best_day, "count": best_count}

    def shift_wise_message_count(self) -> dict[str, Any]:
        """Bucket messages into time-of-day shifts.

        Morning is [06:00, 12:00), afternoon [12:00, 17:00), evening
        [17:00, 21:00) and night everything else, in local time.  Messages
        without a usable timestamp are counted as ``unspecified`` and left
        out of ``total_shift_messages``.

        Returns:
            Dict with keys shifts (counter per shift) and
            total_shift_messages.
        """
        shifts = {"morning": 0, "afternoon": 0, "evening": 0, "night": 0, "unspecified": 0}
        total = 0
        for message in self._messages():
            when = to_local_datetime(message.create_time)
            if when is None:
                shifts["unspecified"] += 1
                continue
            shifts[_shift_for_hour(when.hour)] += 1
            total += 1
        return {"shifts": shifts, "total_shift_messages": total}

    def time_spent(self) -> dict[str, float]:
        """Estimate time spent chatting.

        Per conversation, non-system messages with a timestamp and content
        are put in chronological order.  The first message earns a fixed
        composing credit, every assistant-to-user gap of at most 30 minutes
        is added as engagement time, and a conversation that ends on an
        assistant reply earns a fixed reading credit.

        Returns:
            Dict with keys hours, days and seconds, rounded to 2 decimals.
        """
        total = 0.0
        for conversation in self._conversations:
            turns = sorted(
                (
                    (message.create_time, message.role)
                    for _, message in conversation.iter_messages()
                    if message.create_time
                    and message.role != "system"
                    and message.parts
                    and to_local_datetime(message.create_time) is not None
                ),
                key=lambda turn: turn[0],
            )
            if not turns:
                continue

            total += COMPOSE_CREDIT_SECONDS
            for (prev_time, prev_role), (next_time, next_role) in zip(turns, turns[1:]):
                if prev_role == "assistant" and next_role == "user":
                    gap = next_time - prev_time
                    if 0 < gap <= MAX_GAP_SECONDS:
                        total += gap
            if turns[-1][1] == "assistant":
                total += READ_CREDIT_SECONDS

        return {
            "hours": round(total / 3600, 2),
            "days": round(total / 86400, 2),
            "seconds": round(total, 2),
        }

    def average_daily_message_count(self) -> float:
        """Messages per active day (days with at least one message)."""
        day_count = self._messages_per_day()
        if not day_count:
            return 0.0
        return sum(day_count.values()) / len(day_count)

    def first_and_last_used_date(self) -> dict[str, str]:
        """Earliest and latest message timestamps as ISO strings.

        Uses a running min/max so very large archives do not build an
        intermediate list.  Both values are "now" when no message has a
        usable timestamp.
        """
        first: datetime | None = None
        last: datetime | None = None
        for message in self._messages():
            when = to_local_datetime(message.create_time)
            if when is not None:
                first, last = _update_time_range(first, last, when)

        if first is None or last is None:
            now = datetime.now()
            first = last = now
        return {"first_used": first.isoformat(), "last_used": last.isoformat()}

    def date_wise_activity(self) -> dict[str, dict[str, int]]:
        """Per local date: conversations started and messages sent.

        Returns:
            ``{"YYYY-MM-DD": {"total_messages": n, "total_conversations": n}}``
            for a contribution-calendar style view.
        """
        activity: dict[str, dict[str, int]] = {}

        def bucket(day: str) -> dict[str, int]:
            return activity.setdefault(day, {"total_messages": 0, "total_conversations": 0})

        for conversation in self._conversations:
            day = _local_date(conversation.create_time)
            if day is not None:
                bucket(day)["total_conversations"] += 1
            for _, message in conversation.iter_messages():
                day = _local_date(message.create_time)
                if day is not None:
                    bucket(day)["total_messages"] += 1
        return activity

    # ------------------------------------------------------------------
    # Models
    # ------------------------------------------------------------------

    def model_wise_message_count(self) -> dict[str, int]:
        """Assistant and tool messages with content, keyed by model slug."""
        counts: dict[str, int] = {}
        for message in self._messages():
            if message.role in ("assistant", "tool") and message.parts:
                _increment(counts, message.metadata.model_slug or "unknown")
        return counts

    def default_model_slug_count(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for conversation in self._conversations:
            _increment(counts, conversation.default_model_slug or "unknown")
        return counts

    def requested_model_count(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for message in self._messages():
            requested = message.metadata.requested_model_slug
            if message.role == "assistant" and requested:
                _increment(counts, requested)
        return counts

    def model_adjustments_count(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for message in self._messages():
            if message.role != "assistant":
                continue
            for adjustment in message.metadata.model_adjustments:
                if isinstance(adjustment, str):
                    _increment(counts, adjustment)
        return counts

    def default_and_specific_model_message_count(self) -> dict[str, int]:
        """Split messages that record a default model into "auto" and pinned."""
        result = {"default_model_count": 0, "specific_model_count": 0}
        for message in self._messages():
            metadata = message.metadata
            if "default_model_slug" not in metadata.model_fields_set:
                continue
            if metadata.default_model_slug == "auto":
                result["default_model_count"] += 1
            else:
                result["specific_model_count"] += 1
        return result

    # ------------------------------------------------------------------
    # Message metadata
    # ------------------------------------------------------------------

    def status_count(self) -> dict[str, dict[str, int]]:
        counts: dict[str, dict[str, int]] = {"user": {}, "assistant": {}}
        for message in self._messages():
            if message.status and message.role in counts:
                _increment(counts[message.role], message.status)
        return counts

    def finish_details_type_count(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for message in self._messages():
            details = message.metadata.finish_details
            if details is not None and details.type is not None:
                _increment(counts, details.type)
        return counts

    def recipient_count(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for message in self._messages():
            recipient = message.recipient
            _increment(counts, str(recipient) if recipient is not None else "unknown")
        return counts

    def channel_count(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for message in self._messages():
            channel = message.channel
            _increment(counts, str(channel) if channel is not None else "unknown")
        return counts

    def location_codes(self) -> dict[str, dict[str, int]]:
        """Edge location codes parsed from ``request_id`` metadata.

        The code is the text after the last hyphen and is only accepted when
        it is exactly three characters long.

        Returns:
            ``{"user": {code: n}, "assistant": {code: n}}``.
        """
        counts: dict[str, dict[str, int]] = {"user": {}, "assistant": {}}
        for message in self._messages():
            request_id = message.metadata.request_id
            if request_id is None or message.role not in counts:
                continue
            code = request_id.split("-")[-1]
            if len(code) == LOCATION_CODE_LENGTH:
                _increment(counts[message.role], code)
        return counts

    def custom_instruction_message_count(self) -> int:
        return sum(
            1
            for m in self._messages()
            if m.role == "user" and m.metadata.is_user_system_message
        )

    def targeted_reply_count(self) -> int:
        return sum(
            1 for m in self._messages() if m.role == "user" and m.metadata.targeted_reply
        )

    def user_system_hints_count(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for message in self._messages():
            if message.role != "user":
                continue
            for hint in message.metadata.system_hints:
                if isinstance(hint, str):
                    _increment(counts, hint)
        return counts

    # ------------------------------------------------------------------
    # Tools, attachments and generated artifacts
    # ------------------------------------------------------------------

    def tool_name_count(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for message in self._messages():
            if message.role == "tool" and message.author.name is not None:
                _increment(counts, message.author.name)
        return counts

    def user_attachment_mime_type_count(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for message in self._messages():
            if message.role != "user":
                continue
            for attachment in message.metadata.attachments:
                if attachment.mime_type:
                    _increment(counts, attachment.mime_type)
        return counts

    def dalle_image_count(self) -> int:
        """Images generated through the DALL-E GPT (assistant messages)."""
        count = 0
        for message in self._messages():
            if message.role != "assistant" or message.metadata.gizmo_id != DALLE_GIZMO_ID:
                continue
            if any(isinstance(p, str) and "prompt" in p.lower() for p in message.parts):
                count += 1
        return count

    def dalle_image_count_without_gizmo(self) -> int:
        """Images generated through the ``dalle.text2im`` tool (tool messages)."""
        count = 0
        for message in self._messages():
            if message.role != "tool" or message.author.name != DALLE_TOOL:
                continue
            if any(_is_dalle_part(p) for p in message.parts):
                count += 1
        return count

    def total_images_generated(self) -> int:
        # assistant-only and tool-only predicates, so nothing is counted twice
        return self.dalle_image_count() + self.dalle_image_count_without_gizmo()

    def picture_v2_image_count(self) -> int:
        count = 0
        for message in self._messages():
            if message.role == "tool" and message.author.name == PICTURE_V2_TOOL:
                count += sum(1 for p in message.parts if _is_generated_image_part(p))
        return count

    def assistant_code_block_count(self) -> dict[str, int]:
        """Fenced code blocks in assistant replies, per language tag."""
        counts: dict[str, int] = {}
        for message in self._messages():
            if message.role != "assistant":
                continue
            for part in message.parts:
                if isinstance(part, str):
                    for lang in _CODE_FENCE_RE.findall(part):
                        _increment(counts, lang)
        return counts

    def webpage_count(self) -> int:
        """Web pages cited, across both citation schema generations.

        Older exports list citations in ``_cite_metadata.metadata_list`` on
        tool messages; newer ones use ``content_references`` on any message.
        Both are checked for every message.
        """
        count = 0
        for message in self._messages():
            metadata = message.metadata
            if message.role == "tool" and metadata.cite_metadata is not None:
                count += sum(
                    1 for item in metadata.cite_metadata.metadata_list if item.type == "webpage"
                )
            count += sum(
                1 for ref in metadata.content_references if ref.type in WEBPAGE_REFERENCE_TYPES
            )
        return count

    # ------------------------------------------------------------------
    # Canvas
    # ------------------------------------------------------------------

    def document_canvas_stats(self) -> dict[str, Any]:
        return compute_document_canvas_stats(self._messages())

    def code_canvas_stats(self) -> dict[str, Any]:
        return compute_code_canvas_stats(self._messages())

    def canvas_code_block_count(self) -> dict[str, int]:
        return compute_canvas_code_block_count(self._messages())

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    def longest_conversation(self) -> dict[str, Any] | None:
        """Find the conversation with the most messages.

        Only conversations with at least one usable create or update
        timestamp qualify.  Ties go to the first conversation encountered.

        Returns:
            Dict with keys id, title, message_count, role_distribution,
            first_used and last_used (ISO strings), or None.
        """
        longest: dict[str, Any] | None = None
        for conversation in self._conversations:
            message_count = 0
            roles: dict[str, int] = {}
            first: datetime | None = None
            last: datetime | None = None

            for _, message in conversation.iter_messages():
                message_count += 1
                _increment(roles, message.role or "unknown")
                for timestamp in (message.create_time, message.update_time):
                    when = to_local_datetime(timestamp)
                    if when is not None:
                        first, last = _update_time_range(first, last, when)

            if message_count == 0 or first is None or last is None:
                continue
            if longest is None or message_count > longest["message_count"]:
                longest = {
                    "id": conversation.id or "unknown",
                    "title": conversation.title or "Untitled",
                    "message_count": message_count,
                    "role_distribution": roles,
                    "first_used": first.isoformat(),
                    "last_used": last.isoformat(),
                }
        return longest

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def monthly_model_token_usage(
        self, counter: TokenCounter | None = None
    ) -> dict[str, dict[str, dict[str, int]]]:
        """Estimated tokens per month and model; see ``token_usage``."""
        return monthly_model_token_usage(self._conversations, counter)

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def dashboard_data(self) -> dict[str, Any]:
        """Every statistic except token usage, in one JSON-serializable dict.

        Token usage is comparatively expensive and is computed separately
        (``build_token_usage_payload``).
        """
        data = {
            "total_conversations": self.total_conversations(),
            "total_gpts_conversations": self.total_gpts_conversations(),
            "total_messages": self.total_messages(),
            "total_gpts_messages": self.total_gpts_messages(),
            "most_chatty_day": self.most_chatty_day(),
            "time_spent": self.time_spent(),
            "average_daily_message_count": round(self.average_daily_message_count(), 2),
            "total_archived_conversations": self.total_archived_conversations(),
            "total_voice_messages": self.total_voice_messages(),
            "total_images_generated": self.total_images_generated(),
            "picture_v2_image_count": self.picture_v2_image_count(),
            "role_based_message_data": {
                "overall": self.role_based_message_count(),
                "gpts": self.role_based_gpts_message_count(),
                "voice": self.role_based_voice_message_count(),
            },
            "shift_wise_message_data": self.shift_wise_message_count(),
            "model_wise_message_data": self.model_wise_message_count(),
            "usage_timeline": self.first_and_last_used_date(),
            "date_wise_activity": self.date_wise_activity(),
            "default_model_slug_data": self.default_model_slug_count(),
            "default_and_specific_model_data": self.default_and_specific_model_message_count(),
            "requested_model_data": self.requested_model_count(),
            "model_adjustments_count": self.model_adjustments_count(),
            "ai_message_status_data": self.status_count(),
            "finish_detail_data": self.finish_details_type_count(),
            "user_attachment_mime_type_count": self.user_attachment_mime_type_count(),
            "tool_usage_data": self.tool_name_count(),
            "recipient_data": self.recipient_count(),
            "channel_data": self.channel_count(),
            "location_data": self.location_codes(),
            "code_block_count": self.assistant_code_block_count(),
            "custom_instruction_count": self.custom_instruction_message_count(),
            "targeted_reply_count": self.targeted_reply_count(),
            "system_hints_count": self.user_system_hints_count(),
            "webpage_count": self.webpage_count(),
            "canvas": {
                "document": self.document_canvas_stats(),
                "code": self.code_canvas_stats(),
                "code_blocks": self.canvas_code_block_count(),
            },
            "longest_conversation": self.longest_conversation(),
        }
        logger.debug("Computed %d dashboard sections", len(data))
        return data


def build_dashboard_payload(path: str = "conversations.json") -> dict[str, Any]:
    """One-call entry point: load the export and compute every statistic.

    Args:
        path: Filesystem path to the OpenAI conversations.json export.

    Returns:
        ``ConversationAnalysis.dashboard_data()`` plus a generated_at ISO
        timestamp.

    Raises:
        FileNotFoundError: If the conversations file does not exist.
        json.JSONDecodeError: If the file contains invalid JSON.
        ValueError: If the file does not hold a list of conversations.
    """
    analysis = ConversationAnalysis(load_conversations(path))
    payload: dict[str, Any] = {"generated_at": datetime.now().isoformat()}
    payload.update(analysis.dashboard_data())
    return payload


def build_token_usage_payload(
    path: str,
    pricing: Mapping[str, ModelPricing],
) -> dict[str, Any]:
    """Load the export and compute monthly token usage with cost estimates.

    Args:
        path: Filesystem path to the OpenAI conversations.json export.
        pricing: Pricing table used for the cost estimates.

    Returns:
        Dict with keys generated_at, usage (month -> model -> tokens),
        totals (tokens and cost) and monthly_cost (parallel lists).

    Raises:
        FileNotFoundError: If the conversations file does not exist.
        json.JSONDecodeError: If the file contains invalid JSON.
        ValueError: If the file does not hold a list of conversations.
    """
    analysis = ConversationAnalysis(load_conversations(path))
    usage = analysis.monthly_model_token_usage()
    return {
        "generated_at": datetime.now().isoformat(),
        "usage": usage,
        "totals": compute_token_totals(usage, pricing),
        "monthly_cost": monthly_cost_series(usage, pricing),
    }


# ---------------------------------------------------------------------------
# CLI helpers (used by chat_gpt_summary.py)
# ---------------------------------------------------------------------------

def save_analytics_files(
    dashboard: dict[str, Any],
    usage: dict[str, dict[str, dict[str, int]]],
    pricing: Mapping[str, ModelPricing],
    output_dir: str = "chat_analytics",
) -> None:
    """Write JSON/CSV analytics files to output_dir.

    Creates the output directory if it doesn't exist and writes:
    dashboard.json, date_activity.csv, token_usage.json and
    token_usage.csv.

    Args:
        dashboard: Output of ``ConversationAnalysis.dashboard_data``.
        usage: Output of ``monthly_model_token_usage``.
        pricing: Pricing table for the cost columns of token_usage.csv.
        output_dir: Directory path for output files.  Created if it
            doesn't exist.  Defaults to "chat_analytics".
    """
    os.makedirs(output_dir, exist_ok=True)

    with open(f"{output_dir}/dashboard.json", "w", encoding="utf-8") as f:
        json.dump(dashboard, f, indent=2)

    activity = dashboard.get("date_wise_activity", {})
    with open(f"{output_dir}/date_activity.csv", "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["date", "total_messages", "total_conversations"])
        writer.writeheader()
        for day in sorted(activity):
            writer.writerow({"date": day, **activity[day]})

    with open(f"{output_dir}/token_usage.json", "w", encoding="utf-8") as f:
        json.dump(usage, f, indent=2)

    usage_to_frame(usage, pricing).to_csv(f"{output_dir}/token_usage.csv", index=False)
    logger.info("Analytics files written to %s", output_dir)


def print_summary_report(
    dashboard: dict[str, Any],
    token_totals: dict[str, dict[str, Any]] | None = None,
) -> None:
    """Print the CLI summary report to stdout.

    Args:
        dashboard: Output of ``ConversationAnalysis.dashboard_data``.
        token_totals: Optional output of ``compute_token_totals``; the token
            section is skipped when omitted.
    """
    print(f"\n{'=' * 60}")
    print("ChatGPT Usage Summary")
    print(f"{'=' * 60}")
    print(f"Total Conversations: {dashboard['total_conversations']:,}")
    print(f"Total Messages: {dashboard['total_messages']:,}")
    print(f"Custom GPT Conversations: {dashboard['total_gpts_conversations']:,}")
    print(f"Custom GPT Messages: {dashboard['total_gpts_messages']:,}")
    print(f"Archived Conversations: {dashboard['total_archived_conversations']:,}")

    timeline = dashboard["usage_timeline"]
    print(f"First Used: {timeline['first_used'][:10]}")
    print(f"Last Used: {timeline['last_used'][:10]}")

    chatty = dashboard["most_chatty_day"]
    if chatty["date"]:
        print(f"Most Chatty Day: {chatty['date']} ({chatty['count']:,} messages)")
    print(f"Average Messages per Active Day: {dashboard['average_daily_message_count']:.2f}")

    spent = dashboard["time_spent"]
    print(f"Estimated Time Spent: {spent['hours']:.2f} hours ({spent['days']:.2f} days)")
    print(f"Images Generated: {dashboard['total_images_generated']:,}")
    print(f"Voice Messages: {dashboard['total_voice_messages']:,}")

    roles = dashboard["role_based_message_data"]["overall"]
    if roles:
        print("\nMessages by Role:")
        for role, count in sorted(roles.items(), key=lambda kv: kv[1], reverse=True):
            print(f"  {role}: {count:,}")

    shifts = dashboard["shift_wise_message_data"]
    total_shift = shifts["total_shift_messages"]
    if total_shift:
        print("\nMessages by Time of Day:")
        for shift in ("morning", "afternoon", "evening", "night"):
            count = shifts["shifts"][shift]
            print(f"  {shift.title():<10} {count:>8,} ({count / total_shift * 100:.1f}%)")

    models = dashboard["model_wise_message_data"]
    if models:
        print("\nTop Models:")
        for model, count in sorted(models.items(), key=lambda kv: kv[1], reverse=True)[:5]:
            print(f"  {model}: {count:,}")

    longest = dashboard.get("longest_conversation")
    if longest:
        print(f"\nLongest Conversation: {longest['title']} ({longest['message_count']:,} messages)")

    if token_totals:
        tokens = token_totals["tokens"]
        cost = token_totals["cost"]
        print(f"\n{'=' * 60}")
        print("Estimated Token Usage (approximate, ~4 characters per token)")
        print(f"{'=' * 60}")
        print(f"Input Tokens: {tokens['input']:,}  (${cost['input']:,.2f})")
        print(f"Output Tokens: {tokens['output']:,}  (${cost['output']:,.2f})")
        print(f"Total: {tokens['total']:,}  (${cost['total']:,.2f})")

    print(f"{'=' * 60}")
