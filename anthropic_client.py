"""Thin wrapper around the Anthropic Messages API with server-side web search."""

from __future__ import annotations

import logging
import os
from typing import Any

import anthropic

DEFAULT_CLAUDE_MODEL = "claude-opus-4-6"
MAX_TOKENS = 8192
WEB_SEARCH_MAX_USES = 5

LOGGER = logging.getLogger(__name__)


def generate(prompt: str, *, model: str | None = None, grounded: bool = True) -> str:
    """Call Claude and return the concatenated text blocks of the reply.

    Grounded replies interleave search tool blocks with text; only the text
    blocks are kept.
    """
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError("ANTHROPIC_API_KEY environment variable is required")

    client = anthropic.Anthropic(api_key=api_key)
    kwargs: dict[str, Any] = {
        "model": model or os.getenv("CLAUDE_MODEL", DEFAULT_CLAUDE_MODEL),
        "max_tokens": MAX_TOKENS,
        "messages": [{"role": "user", "content": prompt}],
    }
    if grounded:
        kwargs["tools"] = [
            {
                "type": "web_search_20250305",
                "name": "web_search",
                "max_uses": WEB_SEARCH_MAX_USES,
            }
        ]

    LOGGER.debug("Calling Claude model=%s grounded=%s", kwargs["model"], grounded)
    response = client.messages.create(**kwargs)
    return "".join(block.text for block in response.content if block.type == "text")
