"""Recurring-phrase analysis over a corpus of prompts.

Prompts are normalized (code, URLs and e-mail addresses removed, case and
punctuation folded), split into word tokens and counted both as whole
prompts ("canonical" phrases) and as word n-grams of each requested order.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from typing import TypedDict

logger = logging.getLogger(__name__)

DEFAULT_MIN_N = 1
DEFAULT_MAX_N = 3
DEFAULT_MIN_COUNT = 2
RESULT_LIMIT = 500
MAX_EXAMPLES = 3

DEFAULT_STOPWORDS = frozenset(
    {"och", "i", "att", "det", "en", "är", "som", "på", "för", "med", "av", "till"}
)

_FENCED_CODE_RE = re.compile(r"```.*?```", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"`[^`]*`")
_URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)
_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
_WHITESPACE_RE = re.compile(r"\s+")
# Latin letters including U+00C0-U+024F, digits, whitespace, hyphen and plus
_DISALLOWED_RE = re.compile(r"[^0-9A-Za-z\u00C0-\u024F\s\-+]")


class PhraseEntry(TypedDict):
    phrase: str
    count: int
    examples: list[str]
    ngram: int


class AnalyzeResult(TypedDict):
    total_prompts: int
    canonical: list[PhraseEntry]
    ngrams: dict[int, list[PhraseEntry]]


def normalize_text(raw: str | None) -> str:
    """Fold a prompt into a comparable form.

    Removes fenced and inline code, URLs and e-mail-like strings, lowercases,
    strips every character outside the accepted set and collapses
    whitespace.  The result is stable under a second application.

    Args:
        raw: Prompt text.  Falsy input yields "".

    Returns:
        The normalized string, possibly empty.
    """
    if not raw:
        return ""
    text = _FENCED_CODE_RE.sub(" ", raw)
    text = _INLINE_CODE_RE.sub(" ", text)
    text = _URL_RE.sub(" ", text)
    text = _EMAIL_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text).strip().lower()
    text = _DISALLOWED_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def tokenize(text: str | None) -> list[str]:
    if not text:
        return []
    return text.split()


def extract_ngrams(
    tokens: Sequence[str],
    n: int,
    remove_stopwords: bool = False,
    stopwords: frozenset[str] | set[str] = DEFAULT_STOPWORDS,
) -> list[str]:
    """Return every contiguous window of *n* tokens joined by single spaces.

    Args:
        tokens: Word tokens of one prompt.
        n: Window size.  Values below 1 yield no n-grams.
        remove_stopwords: Drop windows made up entirely of stop-words.
            Windows with at least one content word are kept.
        stopwords: Stop-word set used with *remove_stopwords*.

    Returns:
        The n-grams in order of appearance, ``len(tokens) - n + 1`` of them
        unless stop-word windows were dropped.
    """
    if n < 1 or len(tokens) < n:
        return []
    ngrams = []
    for i in range(len(tokens) - n + 1):
        window = tokens[i:i + n]
        if remove_stopwords and all(token in stopwords for token in window):
            continue
        ngrams.append(" ".join(window))
    return ngrams


class _PhraseTally:
    """Occurrence count plus up to three distinct example prompts."""

    __slots__ = ("count", "examples")

    def __init__(self) -> None:
        self.count = 0
        self.examples: dict[str, None] = {}

    def add(self, example: str) -> None:
        self.count += 1
        if len(self.examples) < MAX_EXAMPLES:
            self.examples.setdefault(example, None)


def top_n_from_map(
    tallies: dict[str, _PhraseTally],
    ngram: int,
    min_count: int = 1,
    limit: int = RESULT_LIMIT,
) -> list[PhraseEntry]:
    """Rank phrases by descending count.

    Ties keep first-seen order (``sorted`` is stable).  Entries below
    *min_count* are dropped before the list is capped to *limit*.
    """
    ranked = sorted(tallies.items(), key=lambda item: item[1].count, reverse=True)
    return [
        PhraseEntry(
            phrase=phrase,
            count=tally.count,
            examples=list(tally.examples)[:MAX_EXAMPLES],
            ngram=ngram,
        )
        for phrase, tally in ranked
        if tally.count >= min_count
    ][:limit]


def analyze_prompts(
    prompts: Iterable[str],
    min_n: int = DEFAULT_MIN_N,
    max_n: int = DEFAULT_MAX_N,
    min_count: int = DEFAULT_MIN_COUNT,
    remove_stopwords: bool = False,
    limit: int = RESULT_LIMIT,
) -> AnalyzeResult:
    """Count whole-prompt and n-gram phrase frequencies.

    Args:
        prompts: Raw prompt strings.
        min_n: Smallest n-gram order.  Values below 1 are raised to 1.
        max_n: Largest n-gram order.  No n-gram maps are built when
            ``max_n < min_n``.
        min_count: Minimum occurrences for a phrase to be reported.
        remove_stopwords: Drop n-grams made up entirely of stop-words.
        limit: Maximum number of entries per ranked list.

    Returns:
        Dict with keys total_prompts (number of raw prompts received),
        canonical (ranked normalized whole prompts, ``ngram == 0``) and
        ngrams (order -> ranked phrases).
    """
    if min_n < 1:
        logger.warning("min_n=%d is below 1, using 1", min_n)
        min_n = 1

    orders = range(min_n, max_n + 1)
    canonical: dict[str, _PhraseTally] = {}
    per_order: dict[int, dict[str, _PhraseTally]] = {n: {} for n in orders}

    total = 0
    for raw in prompts:
        total += 1
        normalized = normalize_text(raw)
        if not normalized:
            continue
        canonical.setdefault(normalized, _PhraseTally()).add(raw)

        tokens = tokenize(normalized)
        for n in orders:
            if len(tokens) < n:
                continue
            tallies = per_order[n]
            for gram in extract_ngrams(tokens, n, remove_stopwords):
                tallies.setdefault(gram, _PhraseTally()).add(raw)

    logger.debug(
        "Analyzed %d prompts: %d distinct normalized prompts", total, len(canonical)
    )
    return AnalyzeResult(
        total_prompts=total,
        canonical=top_n_from_map(canonical, 0, min_count, limit),
        ngrams={n: top_n_from_map(per_order[n], n, min_count, limit) for n in orders},
    )
