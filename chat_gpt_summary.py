"""chat_gpt_summary.py

Print a usage report for a ChatGPT ``conversations.json`` export and save
the statistics to JSON/CSV files.

Output files (in --output-dir, default ``chat_analytics``):
  dashboard.json       every dashboard statistic
  date_activity.csv    messages and conversations per local date
  token_usage.json     estimated tokens per month and model
  token_usage.csv      the same, one priced row per month and model
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from analytics import (
    ConversationAnalysis,
    load_conversations,
    print_summary_report,
    save_analytics_files,
)
from pricing import MODEL_PRICING
from token_usage import compute_token_totals

logger = logging.getLogger(__name__)


def main(path: str = "conversations.json", output_dir: str = "chat_analytics") -> None:
    """Load the export, print the report and write the analytics files.

    Args:
        path: Filesystem path to the OpenAI conversations.json export.
        output_dir: Directory for the output files.

    Raises:
        SystemExit: With code 1 if the file is missing, is not valid JSON
            or does not hold a list of conversations.
    """
    try:
        conversations = load_conversations(path)
    except FileNotFoundError:
        logger.error("File not found: %s", path)
        sys.exit(1)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", path, e)
        sys.exit(1)
    except ValueError as e:
        logger.error("%s", e)
        sys.exit(1)

    analysis = ConversationAnalysis(conversations)
    dashboard = analysis.dashboard_data()
    usage = analysis.monthly_model_token_usage()

    save_analytics_files(dashboard, usage, MODEL_PRICING, output_dir)
    print_summary_report(dashboard, compute_token_totals(usage, MODEL_PRICING))

    print(f"\nAnalytics data has been saved to the '{output_dir}' directory:")
    print("1. dashboard.json - Every dashboard statistic")
    print("2. date_activity.csv - Messages and conversations per day")
    print("3. token_usage.json/csv - Estimated tokens and cost per month and model")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="ChatGPT usage summary")
    parser.add_argument(
        "json_file",
        nargs="?",
        default="conversations.json",
        help="Path to the conversations JSON file (default: conversations.json)",
    )
    parser.add_argument(
        "--output-dir",
        default="chat_analytics",
        help="Directory for JSON/CSV output (default: chat_analytics)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    main(args.json_file, args.output_dir)
