"""Shared fixtures for chatgpt_stats tests."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


# ── Minimal payloads for app.py tests ──


def _minimal_dashboard_payload() -> dict:
    """Return a minimal payload matching build_dashboard_payload() shape.

    Only the top-level keys the routes and tests rely on are filled in;
    the service passes the payload through unchanged.
    """
    return {
        "generated_at": "2024-01-15T12:00:00",
        "total_conversations": 10,
        "total_gpts_conversations": 2,
        "total_messages": 50,
        "total_gpts_messages": 8,
        "most_chatty_day": {"date": "2024-01-10", "count": 12},
        "time_spent": {"hours": 1.5, "days": 0.06, "seconds": 5400.0},
        "average_daily_message_count": 3.33,
        "total_archived_conversations": 1,
        "total_voice_messages": 0,
        "total_images_generated": 0,
        "role_based_message_data": {
            "overall": {"user": 25, "assistant": 25},
            "gpts": {"user": 4, "assistant": 4},
            "voice": {"user": 0, "assistant": 0},
        },
        "shift_wise_message_data": {
            "shifts": {
                "morning": 20, "afternoon": 20, "evening": 5, "night": 5, "unspecified": 0,
            },
            "total_shift_messages": 50,
        },
        "model_wise_message_data": {"gpt-4o": 25},
        "usage_timeline": {
            "first_used": "2024-01-01T09:00:00",
            "last_used": "2024-01-15T18:00:00",
        },
        "longest_conversation": None,
    }


def _minimal_token_payload() -> dict:
    """Return a minimal payload matching build_token_usage_payload() shape."""
    return {
        "generated_at": "2024-01-15T12:00:00",
        "usage": {"Jan-24": {"gpt-4o": {"user_tokens": 1000, "assistant_tokens": 3000}}},
        "totals": {
            "tokens": {"input": 1000, "output": 3000, "total": 4000},
            "cost": {"input": 0.0025, "output": 0.03, "total": 0.0325},
        },
        "monthly_cost": {
            "months": ["Jan-24"],
            "input_cost": [0.0025],
            "output_cost": [0.03],
            "total_cost": [0.0325],
        },
    }


def _empty_cache() -> dict:
    return {"data": None, "tokens": None, "built_at": 0.0, "tokens_built_at": 0.0}


@pytest.fixture()
def mock_payload():
    """Return the minimal dashboard payload dict."""
    return _minimal_dashboard_payload()


@pytest.fixture()
def mock_token_payload():
    """Return the minimal token usage payload dict."""
    return _minimal_token_payload()


@pytest.fixture()
def client(mock_payload, mock_token_payload):
    """TestClient for app.py with mocked analytics data.

    Patches both payload builders so no conversations.json is needed.
    Resets the module-level cache between tests.
    """
    import app as app_module

    with patch.object(app_module, "_cache", _empty_cache()):
        with patch("app.build_dashboard_payload", return_value=mock_payload):
            with patch("app.build_token_usage_payload", return_value=mock_token_payload):
                with TestClient(app_module.app) as tc:
                    yield tc
