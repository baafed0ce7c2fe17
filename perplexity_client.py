"""Perplexity Sonar client for web-grounded paper search."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

PERPLEXITY_API_URL = "https://api.perplexity.ai/chat/completions"
DEFAULT_PERPLEXITY_MODEL = "sonar-pro"
DEFAULT_PERPLEXITY_TEMPERATURE = "0.1"
REQUEST_TIMEOUT_SECONDS = 120

LOGGER = logging.getLogger(__name__)


def generate(prompt: str, *, model: str | None = None, grounded: bool = True) -> str:
    """Send one prompt to Perplexity and return the assistant message text.

    Sonar models search the web by default; ``grounded=False`` turns that off.
    """
    api_key = os.getenv("PERPLEXITY_API_KEY")
    if not api_key:
        raise RuntimeError("PERPLEXITY_API_KEY environment variable is required")

    payload: dict[str, Any] = {
        "model": model or os.getenv("PERPLEXITY_MODEL", DEFAULT_PERPLEXITY_MODEL),
        "temperature": float(os.getenv("PERPLEXITY_TEMPERATURE", DEFAULT_PERPLEXITY_TEMPERATURE)),
        "messages": [{"role": "user", "content": prompt}],
    }
    if not grounded:
        payload["disable_search"] = True
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    LOGGER.debug("Calling Perplexity model=%s grounded=%s", payload["model"], grounded)
    response = requests.post(
        PERPLEXITY_API_URL,
        headers=headers,
        json=payload,
        timeout=REQUEST_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    body = response.json()

    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise RuntimeError(f"Unexpected Perplexity response shape: {body}") from exc
    return content or ""
