"""Shared test helpers for chatgpt_stats tests.

Regular functions (not fixtures) that can be imported by any test module.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any


def local_ts(
    year: int, month: int, day: int, hour: int = 12, minute: int = 0, second: int = 0
) -> float:
    """Unix timestamp of a local wall-clock time."""
    return datetime(year, month, day, hour, minute, second).timestamp()


def make_message(
    role: str,
    text: str = "hello",
    create_time: float | None = None,
    *,
    parts: list[Any] | None = None,
    metadata: dict | None = None,
    author_name: str | None = None,
    **fields: Any,
) -> dict:
    """Build a message dict in the ChatGPT export shape.

    Args:
        role: Author role (user, assistant, tool, system).
        text: Single string part, ignored when *parts* is given.
        create_time: Unix timestamp or None.
        parts: Explicit content parts.
        metadata: Message metadata dict.
        author_name: Tool name for tool messages.
        **fields: Extra top-level message keys (status, recipient, ...).
    """
    author: dict[str, Any] = {"role": role}
    if author_name is not None:
        author["name"] = author_name
    message = {
        "author": author,
        "create_time": create_time,
        "content": {"content_type": "text", "parts": [text] if parts is None else parts},
        "metadata": metadata or {},
    }
    message.update(fields)
    return message


def make_conversation(messages: list[dict], **fields: Any) -> dict:
    """Build a conversation whose messages form a single chain.

    A structural root node without a message comes first, as in real
    exports.  Each message node's only child is the next message.

    Args:
        messages: Message dicts (see ``make_message``), in chain order.
        **fields: Extra conversation keys (title, gizmo_id, is_archived, ...).
    """
    ids = [f"msg-{i}" for i in range(len(messages))]
    mapping: dict[str, dict] = {
        "root": {"id": "root", "message": None, "parent": None, "children": ids[:1]}
    }
    parent = "root"
    for i, message in enumerate(messages):
        mapping[ids[i]] = {
            "id": ids[i],
            "message": message,
            "parent": parent,
            "children": ids[i + 1:i + 2],
        }
        parent = ids[i]

    conversation: dict[str, Any] = {"id": "conv-1", "title": "Test Chat", "mapping": mapping}
    conversation.update(fields)
    return conversation


def make_exchange(start: float, gaps: list[float], roles: list[str] | None = None) -> dict:
    """Build a conversation of alternating user/assistant messages.

    Args:
        start: Timestamp of the first message.
        gaps: Seconds between consecutive messages; one message more than
            there are gaps is created.
        roles: Explicit roles; defaults to user, assistant, user, ...
    """
    count = len(gaps) + 1
    if roles is None:
        roles = ["user" if i % 2 == 0 else "assistant" for i in range(count)]
    times = [start]
    for gap in gaps:
        times.append(times[-1] + gap)
    return make_conversation(
        [make_message(role, f"message {i}", t) for i, (role, t) in enumerate(zip(roles, times))]
    )
