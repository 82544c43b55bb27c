# This project was developed with assistance from AI tools.
"""Thin OpenAI-compatible LLM client.

Wraps the openai Python SDK with a configurable base_url so it works
against any OpenAI-compatible endpoint.
"""

import json
import logging
import re
from typing import Any

from openai import AsyncOpenAI

from .config import get_model_config

logger = logging.getLogger(__name__)

# Per-tier client cache (avoids re-creating HTTP connections)
_clients: dict[str, AsyncOpenAI] = {}

# Matches ```json ... ``` fences some models wrap around JSON.
_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def _get_client(tier: str) -> AsyncOpenAI:
    """Return a cached AsyncOpenAI client for the given model tier."""
    if tier not in _clients:
        model_cfg = get_model_config(tier)
        _clients[tier] = AsyncOpenAI(
            base_url=model_cfg["endpoint"],
            api_key=model_cfg.get("api_key") or "not-needed",
        )
    return _clients[tier]


def clear_client_cache() -> None:
    """Clear cached clients (useful after config reload)."""
    _clients.clear()


def strip_json_fences(text: str) -> str:
    stripped = text.strip()
    m = _FENCE_RE.match(stripped)
    return m.group(1).strip() if m else stripped


async def get_completion(
    messages: list[dict[str, str]],
    tier: str = "rate_estimator",
    **kwargs: Any,
) -> str:
    """Get a non-streaming completion from the specified model tier."""
    client = _get_client(tier)
    model_cfg = get_model_config(tier)
    if "temperature" in model_cfg:
        kwargs.setdefault("temperature", model_cfg["temperature"])

    response = await client.chat.completions.create(
        model=model_cfg["model_name"],
        messages=messages,
        **kwargs,
    )
    return response.choices[0].message.content or ""


async def get_json_completion(
    messages: list[dict[str, str]],
    tier: str = "rate_estimator",
    **kwargs: Any,
) -> dict[str, Any]:
    """Request a JSON object response and parse it.

    Raises:
        ValueError: the model returned something that is not a JSON object.
    """
    raw = await get_completion(
        messages, tier=tier, response_format={"type": "json_object"}, **kwargs
    )
    data = json.loads(strip_json_fences(raw))
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object from the model")
    return data
