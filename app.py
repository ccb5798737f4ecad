"""FastAPI service for ChatGPT usage statistics.

Serves cached dashboard statistics and token usage estimates as JSON
(1-hour TTL since data only changes on new OpenAI export), plus an
on-demand recurring-phrase analysis for prompt corpora.

Deployment: uvicorn app:app --host 127.0.0.1 --port 8203
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from analytics import build_dashboard_payload, build_token_usage_payload
from pricing import MODEL_PRICING
from prompt_analyzer import (
    DEFAULT_MAX_N,
    DEFAULT_MIN_COUNT,
    DEFAULT_MIN_N,
    analyze_prompts,
)
from prompt_parser import parse_text_to_prompts

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
CONVERSATIONS_PATH = Path(
    os.environ.get(
        "CHATGPT_STATS_CONVERSATIONS",
        str(Path(__file__).parent / "conversations.json"),
    )
)
CACHE_TTL_SECONDS = 3600  # 1 hour

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(
    title="ChatGPT Usage Statistics",
    root_path="/chatgpt_stats",
)

# ---------------------------------------------------------------------------
# Thread-safe cache
# ---------------------------------------------------------------------------
_cache_lock = threading.Lock()
_cache: dict[str, Any] = {
    "data": None,
    "tokens": None,
    "built_at": 0.0,
    "tokens_built_at": 0.0,
}


def _build_or_raise(builder: Callable[[], dict[str, Any]]) -> dict[str, Any]:
    """Run a payload builder, mapping unreadable archives to HTTP errors."""
    try:
        return builder()
    except FileNotFoundError:
        logger.error("Conversations file not found: %s", CONVERSATIONS_PATH)
        raise HTTPException(status_code=503, detail="Conversations file not found")
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", CONVERSATIONS_PATH, e)
        raise HTTPException(status_code=500, detail="Conversations file is not valid JSON")
    except ValueError as e:
        logger.error("Unusable conversations file %s: %s", CONVERSATIONS_PATH, e)
        raise HTTPException(status_code=500, detail=str(e))


def _get_cached(
    slot: str,
    stamp: str,
    builder: Callable[[], dict[str, Any]],
    force_refresh: bool = False,
) -> dict[str, Any]:
    now = time.monotonic()
    with _cache_lock:
        if (
            not force_refresh
            and _cache[slot] is not None
            and (now - _cache[stamp]) < CACHE_TTL_SECONDS
        ):
            return _cache[slot]

    data = _build_or_raise(builder)

    with _cache_lock:
        _cache[slot] = data
        _cache[stamp] = time.monotonic()

    return data


def _get_cached_data(force_refresh: bool = False) -> dict[str, Any]:
    """Return cached dashboard data, rebuilding if stale or forced."""
    return _get_cached(
        "data",
        "built_at",
        lambda: build_dashboard_payload(str(CONVERSATIONS_PATH)),
        force_refresh,
    )


def _get_cached_tokens(force_refresh: bool = False) -> dict[str, Any]:
    """Return cached token usage, rebuilt separately from the dashboard data."""
    return _get_cached(
        "tokens",
        "tokens_built_at",
        lambda: build_token_usage_payload(str(CONVERSATIONS_PATH), MODEL_PRICING),
        force_refresh,
    )


class PromptAnalysisRequest(BaseModel):
    """Body of ``POST /api/prompts/analyze``.

    Either ``prompts`` (a list of strings) or ``text`` (raw corpus text in
    any shape ``prompt_parser`` accepts) must be given.
    """

    prompts: list[str] | None = None
    text: str | None = None
    min_n: int = Field(default=DEFAULT_MIN_N, ge=1)
    max_n: int = Field(default=DEFAULT_MAX_N, ge=1)
    min_count: int = Field(default=DEFAULT_MIN_COUNT, ge=1)
    remove_stopwords: bool = False


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health")
@app.get("/healthz")
def healthz():
    return {"status": "ok"}


@app.get("/api/data")
def api_data():
    """Return the full dashboard JSON payload."""
    return _get_cached_data()


@app.get("/api/refresh")
def api_refresh():
    """Force a cache rebuild and return the new build time."""
    data = _get_cached_data(force_refresh=True)
    with _cache_lock:
        _cache["tokens"] = None
    return {
        "status": "refreshed",
        "generated_at": data["generated_at"],
    }


@app.get("/api/token-usage")
def api_token_usage():
    """Return monthly per-model token usage with cost estimates."""
    return _get_cached_tokens()


@app.post("/api/prompts/analyze")
def api_analyze_prompts(request: PromptAnalysisRequest):
    """Rank recurring phrases in the submitted prompts."""
    if request.prompts is not None:
        prompts = request.prompts
    elif request.text is not None:
        prompts = parse_text_to_prompts(request.text)
    else:
        raise HTTPException(status_code=422, detail="Provide either 'prompts' or 'text'")

    return analyze_prompts(
        prompts,
        min_n=request.min_n,
        max_n=request.max_n,
        min_count=request.min_count,
        remove_stopwords=request.remove_stopwords,
    )
