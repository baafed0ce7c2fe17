"""Build the paper-search prompt and send it to a web-grounded AI provider."""

from __future__ import annotations

import logging
import os
from types import ModuleType

import anthropic_client
import gemini_client
import llm_client
import perplexity_client

DEFAULT_SEARCH_PROVIDER = "gemini"

LOGGER = logging.getLogger(__name__)

PROVIDERS: dict[str, ModuleType] = {
    "gemini": gemini_client,
    "perplexity": perplexity_client,
    "openai": llm_client,
    "anthropic": anthropic_client,
}

PROMPT_TEMPLATE = """TASK: You are a Research Paper Link Extractor.
OBJECTIVE: Search for and list directly downloadable academic papers for the topic: "{query}".

SEARCH CONSTRAINTS:
- Date Range: {year_start} to {year_end}. Only include papers published in this window.
- Target Format: PDF files preferred (use 'filetype:pdf').
- Sources: Google Scholar, PubMed, arXiv, ResearchGate, University Repositories.
- Quantity: Find as many DISTINCT papers as possible, at most {max_results}.

SEARCH QUERIES TO EXECUTE INTERNALLY:
1. "{query}" filetype:pdf {year_start}..{year_end}
2. "{query}" site:nih.gov {year_start}..{year_end}
3. "{query}" site:arxiv.org {year_start}..{year_end}

OUTPUT REQUIREMENTS:
- Return a raw JSON array.
- DO NOT generate fake papers. Only return papers found in the search grounding.
- For the URL: Prioritize the direct PDF link. If not found, use the landing page.
- Citations: Estimate if not strictly visible, or set to 0.

JSON STRUCTURE:
[
  {{
    "title": "Paper Title",
    "authors": ["Author Name"],
    "year": 2023,
    "citations": 12,
    "publisher": "Source/Journal",
    "url": "https://example.com/paper.pdf"
  }}
]
"""


class DispatchError(RuntimeError):
    """The search call failed; no partial result exists."""


def build_search_prompt(query: str, year_start: int, year_end: int, max_results: int) -> str:
    return PROMPT_TEMPLATE.format(
        query=query.strip(),
        year_start=year_start,
        year_end=year_end,
        max_results=max_results,
    )


def resolve_provider(name: str | None = None) -> ModuleType:
    provider_name = (name or os.getenv("SEARCH_PROVIDER") or DEFAULT_SEARCH_PROVIDER).strip().lower()
    try:
        return PROVIDERS[provider_name]
    except KeyError:
        choices = ", ".join(sorted(PROVIDERS))
        raise ValueError(f"Unknown search provider {provider_name!r}; expected one of: {choices}") from None


def dispatch(
    query: str,
    year_start: int,
    year_end: int,
    min_citations: int,
    max_results: int,
    provider: str | None = None,
    model: str | None = None,
) -> str:
    """Run one grounded search and return the provider's raw reply text.

    Raises DispatchError for any provider failure (unknown provider,
    credentials, transport, auth, quota, unexpected payload). There are no
    retries.
    """
    if not query or not query.strip():
        raise ValueError("query must be non-empty")

    try:
        client = resolve_provider(provider)
    except ValueError as exc:
        LOGGER.error("Paper search not dispatched: %s", exc)
        raise DispatchError(f"Paper search failed: {exc}") from exc

    prompt = build_search_prompt(query, year_start, year_end, max_results)
    LOGGER.info(
        "Dispatching paper search via %s: query=%r years=%s-%s max_results=%s",
        client.__name__,
        query,
        year_start,
        year_end,
        max_results,
    )
    LOGGER.debug("min_citations=%s accepted but not sent to the provider", min_citations)

    try:
        text = client.generate(prompt, model=model, grounded=True)
    except Exception as exc:  # any provider failure is a terminal dispatch failure
        LOGGER.error("Paper search failed via %s: %s", client.__name__, exc)
        raise DispatchError(f"Paper search failed: {exc}") from exc

    LOGGER.info("Received search reply (%s chars)", len(text))
    return text
