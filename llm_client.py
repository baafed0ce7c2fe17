"""OpenAI client for web-grounded paper search via the Responses API."""

from __future__ import annotations

import logging
import os
from typing import Any

from openai import OpenAI

DEFAULT_OPENAI_MODEL = "gpt-5.2"

LOGGER = logging.getLogger(__name__)


def generate(prompt: str, *, model: str | None = None, grounded: bool = True) -> str:
    """Send one prompt to OpenAI and return the aggregated output text."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is required")

    client = OpenAI(api_key=api_key)
    kwargs: dict[str, Any] = {
        "model": model or os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
        "input": prompt,
    }
    if grounded:
        kwargs["tools"] = [{"type": "web_search"}]

    LOGGER.debug("Calling OpenAI model=%s grounded=%s", kwargs["model"], grounded)
    response = client.responses.create(**kwargs)
    return response.output_text or ""
