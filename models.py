"""Shared typed models for the search flow."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


@dataclass(slots=True)
class PaperRecord:
    """Normalized paper record recovered from a grounded search reply.

    Only ``selected`` changes after creation; the session layer owns it.
    """

    paper_id: str
    title: str
    authors: list[str]
    year: int
    citation_count: int
    publisher: str
    url: str
    selected: bool = True

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.paper_id,
            "title": self.title,
            "authors": list(self.authors),
            "year": self.year,
            "citations": self.citation_count,
            "publisher": self.publisher,
            "url": self.url,
            "selected": self.selected,
        }


def _current_year() -> int:
    return datetime.now(UTC).year


@dataclass(frozen=True, slots=True)
class SearchFilters:
    """User-owned search configuration."""

    query: str = ""
    year_start: int = 2015
    year_end: int = field(default_factory=_current_year)
    # Accepted but not applied by the normalizer.
    min_citations: int = 0
    max_results: int = 50
    download_path: str = "Scholar_Downloads"


class SearchStatus(str, Enum):
    IDLE = "IDLE"
    SEARCHING = "SEARCHING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"
