"""Gemini completion with Google Search grounding."""

from __future__ import annotations

import logging
import os

from google import genai
from google.genai import types

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

LOGGER = logging.getLogger(__name__)


def generate(prompt: str, *, model: str | None = None, grounded: bool = True) -> str:
    """Send one prompt to Gemini and return the reply text.

    With ``grounded`` set, the call carries the Google Search tool so the
    answer is based on live search results.
    """
    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    if not api_key:
        raise RuntimeError("GEMINI_API_KEY environment variable is required")

    model_name = model or os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL)
    client = genai.Client(api_key=api_key)

    tools = [types.Tool(google_search=types.GoogleSearch())] if grounded else None
    config = types.GenerateContentConfig(tools=tools)

    LOGGER.debug("Calling Gemini model=%s grounded=%s", model_name, grounded)
    response = client.models.generate_content(model=model_name, contents=prompt, config=config)
    return response.text or ""
