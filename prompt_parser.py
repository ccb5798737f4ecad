"""Extract prompt strings from the file shapes users feed the prompt analyzer.

Accepted inputs, tried in order:

- a JSON array of strings;
- a JSON array of objects, each with a ``messages`` list or one of the flat
  text keys (``content``, ``text``, ``message``, ``prompt``);
- a JSON object with a ``conversations`` list of ``{"messages": [...]}``;
- a ChatGPT ``conversations.json`` export (user turns only, see
  ``load_prompts``);
- anything else: one prompt per non-blank line.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from models import parse_conversations

logger = logging.getLogger(__name__)

FLAT_TEXT_KEYS = ("content", "text", "message", "prompt")


def _message_text(message: Any) -> str | None:
    """Text of a ``{"content": str}`` or ``{"content": {"parts": [...]}}`` message."""
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, dict) and isinstance(content.get("parts"), list):
        return " ".join(str(part) for part in content["parts"])
    return None


def _messages_text(messages: list[Any]) -> list[str]:
    texts = []
    for message in messages:
        text = _message_text(message)
        if text is not None:
            texts.append(text)
    return texts


def _split_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def parse_text_to_prompts(text: str | None) -> list[str]:
    """Split a prompt corpus into individual prompts.

    Args:
        text: Raw file contents.

    Returns:
        Prompt strings in input order.  Text that is not JSON, or JSON of an
        unrecognized shape, is split into trimmed non-empty lines.
    """
    if not text:
        return []
    try:
        parsed = json.loads(text)
    except ValueError:
        logger.debug("Prompt corpus is not JSON, splitting on newlines")
        return _split_lines(text)

    if isinstance(parsed, list):
        if all(isinstance(item, str) for item in parsed):
            return parsed
        prompts: list[str] = []
        for item in parsed:
            if not item:
                continue
            if isinstance(item, str):
                prompts.append(item)
            elif isinstance(item, dict):
                if isinstance(item.get("messages"), list):
                    prompts.extend(_messages_text(item["messages"]))
                else:
                    prompts.extend(
                        item[key] for key in FLAT_TEXT_KEYS if isinstance(item.get(key), str)
                    )
        return prompts

    if isinstance(parsed, dict) and isinstance(parsed.get("conversations"), list):
        prompts = []
        for conversation in parsed["conversations"]:
            if isinstance(conversation, dict) and isinstance(conversation.get("messages"), list):
                prompts.extend(_messages_text(conversation["messages"]))
        return prompts

    return _split_lines(text)


def extract_user_prompts(conversations: list[Any]) -> list[str]:
    """Return the text of every user message in an export archive.

    Args:
        conversations: Raw conversation dicts from ``conversations.json``.

    Returns:
        String parts of each user message joined with spaces.  Messages
        without text (uploads only) are skipped.
    """
    prompts = []
    for conversation in parse_conversations(conversations):
        for _, message in conversation.iter_messages():
            if message.role == "user":
                text = message.text
                if text:
                    prompts.append(text)
    return prompts


def _is_export_archive(data: Any) -> bool:
    return (
        isinstance(data, list)
        and bool(data)
        and any(isinstance(item, dict) and "mapping" in item for item in data)
    )


def load_prompts(path: str) -> list[str]:
    """Read prompts from a corpus file or a ChatGPT export.

    Args:
        path: Path to a text or JSON file.

    Returns:
        Extracted prompt strings.

    Raises:
        FileNotFoundError: If *path* does not exist.
    """
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()

    try:
        data = json.loads(text)
    except ValueError:
        data = None

    if _is_export_archive(data):
        prompts = extract_user_prompts(data)
        logger.info("Extracted %d user prompts from export archive %s", len(prompts), path)
        return prompts

    prompts = parse_text_to_prompts(text)
    logger.info("Loaded %d prompts from %s", len(prompts), path)
    return prompts
