"""Canvas (document / code editor) accelerator statistics.

Accelerator sub-categories are recognised by exact prompt text.  The prompt
templates live in lookup tables so a reworded template only needs a table
update.  A prompt that matches no template still counts toward its
category's ``total``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from models import CanvasMetadata, Message

COMMENT_TOOL = "canmore.comment_textdoc"

# Aggregate key in every per-language counter; a language of that name is not
# given its own entry.
TOTAL_KEY = "total"

EMOJI_PROMPTS: Mapping[str, str] = MappingProxyType(
    {
        "Replace as many words as possible with emojis.": "words",
        "Add three emojis at the start or end of every major section or paragraph "
        "to give subtle decoration. Do not change the structure of the original "
        "text. Do not add emojis to lists.": "sections",
        "Add emojis to lists for visual flair. Do not change the structure of the "
        "original text.": "lists",
        "Remove emojis": "remove",
    }
)

READING_LEVEL_PROMPTS: Mapping[str, str] = MappingProxyType(
    {
        "Rewrite this text at the reading level of a doctoral writer in this "
        "subject. You may reply that you adjusted the text to reflect a graduate "
        "school reading level, but do not mention the prompt.": "graduate",
        "Rewrite this text at the reading level of a college student majoring in "
        "this subject": "college",
        "Rewrite this text at the reading level of a high school student who has "
        "taken a couple of classes in this subject.": "high_school",
        "Rewrite this text at the reading level of a middle schooler.": "middle_school",
        "Rewrite this text at the reading level of a kindergartener.": "kindergarten",
    }
)

LENGTH_PROMPTS: Mapping[str, str] = MappingProxyType(
    {
        "Make this text 75% longer.": "longest",
        "Make this text 50% longer.": "longer",
        "Make this text 50% shorter.": "shorter",
        "Make this text 75% shorter.": "shortest",
    }
)

PORT_PROMPTS: Mapping[str, str] = MappingProxyType(
    {
        "Create a new document that rewrites the code in PHP": "php",
        "Create a new document that rewrites the code in C++": "cpp",
        "Create a new document that rewrites the code in Python": "python",
        "Create a new document that rewrites the code in JavaScript": "javascript",
        "Create a new document that rewrites the code in TypeScript": "typescript",
        "Create a new document that rewrites the code in Java": "java",
    }
)

# accelerator id -> output key for per-language code canvas counters
CODE_ACCELERATORS: Mapping[str, str] = MappingProxyType(
    {"comments": "comments", "logs": "logs", "bugs": "fix_bugs"}
)


def _category_counter(templates: Mapping[str, str]) -> dict[str, int]:
    counter = {TOTAL_KEY: 0}
    for tag in templates.values():
        counter[tag] = 0
    return counter


def _classify(counter: dict[str, int], templates: Mapping[str, str], prompt: str) -> None:
    counter[TOTAL_KEY] += 1
    tag = templates.get(prompt)
    if tag is not None:
        counter[tag] += 1


def _is_comment_tool(message: Message) -> bool:
    return message.role == "tool" and message.author.name == COMMENT_TOOL


def _canvas_messages(messages: Iterable[Message]) -> Iterable[tuple[Message, CanvasMetadata]]:
    for message in messages:
        canvas = message.metadata.canvas
        if canvas is not None:
            yield message, canvas


def compute_document_canvas_stats(messages: Iterable[Message]) -> dict[str, Any]:
    """Count accelerator usage on ``document`` canvases.

    Args:
        messages: Every message of the archive.

    Returns:
        Dict with keys emoji, suggest_edits, polish, reading_level and
        length.  emoji, reading_level and length hold a ``total`` plus one
        counter per known prompt template.
    """
    emoji = _category_counter(EMOJI_PROMPTS)
    reading_level = _category_counter(READING_LEVEL_PROMPTS)
    length = _category_counter(LENGTH_PROMPTS)
    suggest_edits = {"total_suggest_edits": 0, "total_comments_added": 0}
    polish = 0

    for message, canvas in _canvas_messages(messages):
        if canvas.textdoc_type != "document":
            continue

        if _is_comment_tool(message) and canvas.comment_ids is not None:
            suggest_edits["total_comments_added"] += len(canvas.comment_ids)

        if message.role != "user":
            continue

        accelerator = canvas.accelerator_id
        prompt = canvas.accelerator_prompt
        if accelerator == "suggest":
            suggest_edits["total_suggest_edits"] += 1
        elif accelerator == "polish":
            polish += 1
        elif prompt is None:
            continue
        elif accelerator == "emoji":
            _classify(emoji, EMOJI_PROMPTS, prompt)
        elif accelerator == "reading-level":
            _classify(reading_level, READING_LEVEL_PROMPTS, prompt)
        elif accelerator == "length":
            _classify(length, LENGTH_PROMPTS, prompt)

    return {
        "emoji": emoji,
        "suggest_edits": suggest_edits,
        "polish": polish,
        "reading_level": reading_level,
        "length": length,
    }


def compute_code_canvas_stats(messages: Iterable[Message]) -> dict[str, Any]:
    """Count accelerator usage on ``code/<language>`` canvases.

    Args:
        messages: Every message of the archive.

    Returns:
        Dict with keys comments, logs, fix_bugs (each ``{"total": n,
        <language>: n}``), review (``{"total": {"reviews", "comments"},
        <language>: {"reviews", "comments"}}``) and port (total plus one
        counter per target language template).
    """
    per_language: dict[str, dict[str, int]] = {
        key: {TOTAL_KEY: 0} for key in CODE_ACCELERATORS.values()
    }
    review: dict[str, dict[str, int]] = {TOTAL_KEY: {"reviews": 0, "comments": 0}}
    port = _category_counter(PORT_PROMPTS)

    for message, canvas in _canvas_messages(messages):
        lang = canvas.code_language
        if lang is None:
            continue

        if _is_comment_tool(message) and canvas.comment_ids is not None:
            added = len(canvas.comment_ids)
            review[TOTAL_KEY]["comments"] += added
            if lang != TOTAL_KEY:
                review.setdefault(lang, {"reviews": 0, "comments": 0})["comments"] += added

        if message.role != "user":
            continue

        accelerator = canvas.accelerator_id
        key = CODE_ACCELERATORS.get(accelerator) if accelerator else None
        if key is not None:
            counts = per_language[key]
            counts[TOTAL_KEY] += 1
            if lang != TOTAL_KEY:
                counts[lang] = counts.get(lang, 0) + 1
        elif accelerator == "review":
            review[TOTAL_KEY]["reviews"] += 1
            if lang != TOTAL_KEY:
                review.setdefault(lang, {"reviews": 0, "comments": 0})["reviews"] += 1
        elif accelerator == "port" and canvas.accelerator_prompt is not None:
            _classify(port, PORT_PROMPTS, canvas.accelerator_prompt)

    return {**per_language, "review": review, "port": port}


def compute_canvas_code_block_count(messages: Iterable[Message]) -> dict[str, int]:
    """Count tool-written code canvases, in total and per language."""
    counts = {TOTAL_KEY: 0}
    for message, canvas in _canvas_messages(messages):
        if message.role != "tool" or not canvas.is_code:
            continue
        counts[TOTAL_KEY] += 1
        lang = canvas.code_language
        if lang is not None and lang != TOTAL_KEY:
            counts[lang] = counts.get(lang, 0) + 1
    return counts
