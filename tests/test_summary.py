"""Tests for chat_gpt_summary.py::main()."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from helpers import local_ts, make_exchange


MODULE = "chat_gpt_summary"


class TestMainErrorHandling:
    """Verify main() exits with code 1 on file-related errors."""

    def test_missing_file_exits_1(self):
        with patch(
            f"{MODULE}.load_conversations",
            side_effect=FileNotFoundError("not found"),
        ):
            with pytest.raises(SystemExit) as exc_info:
                from chat_gpt_summary import main

                main("nonexistent.json")
            assert exc_info.value.code == 1

    def test_invalid_json_exits_1(self):
        err = json.JSONDecodeError("bad value", "", 0)
        with patch(
            f"{MODULE}.load_conversations",
            side_effect=err,
        ):
            with pytest.raises(SystemExit) as exc_info:
                from chat_gpt_summary import main

                main("corrupt.json")
            assert exc_info.value.code == 1

    def test_not_a_list_exits_1(self, tmp_path):
        path = tmp_path / "conversations.json"
        path.write_text(json.dumps({"conversations": []}), encoding="utf-8")
        from chat_gpt_summary import main

        with pytest.raises(SystemExit) as exc_info:
            main(str(path), str(tmp_path / "out"))
        assert exc_info.value.code == 1


class TestMainSuccessfulRun:
    """Verify main() completes and writes its output files."""

    def test_successful_run_with_mocks(self):
        with (
            patch(f"{MODULE}.load_conversations", return_value=[]),
            patch(f"{MODULE}.save_analytics_files") as mock_save,
            patch(f"{MODULE}.print_summary_report") as mock_print,
        ):
            from chat_gpt_summary import main

            main("conversations.json")
            assert mock_save.call_count == 1
            assert mock_print.call_count == 1

    def test_end_to_end(self, tmp_path, capsys):
        path = tmp_path / "conversations.json"
        path.write_text(
            json.dumps([make_exchange(local_ts(2024, 1, 15, 10), [10, 60, 10])]),
            encoding="utf-8",
        )
        out = tmp_path / "out"
        from chat_gpt_summary import main

        main(str(path), str(out))

        for name in ("dashboard.json", "date_activity.csv", "token_usage.json", "token_usage.csv"):
            assert (out / name).exists(), name
        report = capsys.readouterr().out
        assert "Total Messages: 4" in report
        assert "Estimated Token Usage" in report
