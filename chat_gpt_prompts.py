"""chat_gpt_prompts.py

Find recurring phrases in your prompts.

The input is either a ChatGPT ``conversations.json`` export (user turns are
analyzed) or a prompt corpus: a JSON list of strings or message objects, or
a plain text file with one prompt per line.  Ranked phrases are printed;
use ``--output FILE`` to also save the full result as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging

from prompt_analyzer import (
    DEFAULT_MAX_N,
    DEFAULT_MIN_COUNT,
    DEFAULT_MIN_N,
    AnalyzeResult,
    PhraseEntry,
    analyze_prompts,
)
from prompt_parser import load_prompts

logger = logging.getLogger(__name__)

DEFAULT_TOP = 10


def _print_entries(heading: str, entries: list[PhraseEntry], top: int) -> None:
    if not entries:
        return
    print(f"\n{heading}:")
    for entry in entries[:top]:
        print(f"  {entry['count']:>5,}  {entry['phrase']}")


def print_phrase_report(result: AnalyzeResult, top: int = DEFAULT_TOP) -> None:
    """Print the most frequent whole prompts and n-grams to stdout."""
    print(f"\n{'=' * 60}")
    print("Recurring Prompt Phrases")
    print(f"{'=' * 60}")
    print(f"Prompts Analyzed: {result['total_prompts']:,}")

    _print_entries("Repeated Prompts", result["canonical"], top)
    for n, entries in result["ngrams"].items():
        _print_entries(f"Top {n}-grams", entries, top)
    print(f"{'=' * 60}")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for recurring-phrase analysis."""
    parser = argparse.ArgumentParser(description="Find recurring phrases in ChatGPT prompts")
    parser.add_argument("input_file", nargs="?", default="conversations.json",
                        help="Export archive or prompt corpus (default: conversations.json)")
    parser.add_argument("--min-n", type=int, default=DEFAULT_MIN_N,
                        help=f"Smallest n-gram size (default: {DEFAULT_MIN_N})")
    parser.add_argument("--max-n", type=int, default=DEFAULT_MAX_N,
                        help=f"Largest n-gram size (default: {DEFAULT_MAX_N})")
    parser.add_argument("--min-count", type=int, default=DEFAULT_MIN_COUNT,
                        help=f"Minimum occurrences to report (default: {DEFAULT_MIN_COUNT})")
    parser.add_argument("--remove-stopwords", action="store_true",
                        help="Skip n-grams made up only of stop-words")
    parser.add_argument("--top", type=int, default=DEFAULT_TOP,
                        help=f"Entries to print per list (default: {DEFAULT_TOP})")
    parser.add_argument("--output", "-o", help="Write the full result as JSON to a file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        prompts = load_prompts(args.input_file)
    except FileNotFoundError:
        parser.exit(1, f"File not found: {args.input_file}\n")

    result = analyze_prompts(
        prompts,
        min_n=args.min_n,
        max_n=args.max_n,
        min_count=args.min_count,
        remove_stopwords=args.remove_stopwords,
    )

    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as out:
                json.dump(result, out, indent=2, ensure_ascii=False)
        except OSError as e:
            parser.error(f"Failed to write output file: {e}")
        logger.info("Phrase analysis written to %s", args.output)

    print_phrase_report(result, top=args.top)


if __name__ == "__main__":
    main()
