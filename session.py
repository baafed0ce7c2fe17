"""Search session state: status, busy flag and the current result set."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import urlencode

from dispatcher import DispatchError, dispatch
from models import PaperRecord, SearchFilters, SearchStatus
from normalizer import normalize
from script_generator import selected_papers

SCHOLAR_SEARCH_URL = "https://scholar.google.com/scholar"

LOGGER = logging.getLogger(__name__)


def scholar_search_url(query: str, year_start: int, year_end: int) -> str:
    """Google Scholar results URL for the same topic and year window."""
    params = {"q": query.strip(), "as_ylo": year_start, "as_yhi": year_end}
    return f"{SCHOLAR_SEARCH_URL}?{urlencode(params)}"


@dataclass
class SearchSession:
    """Holds one user's filters and current results across search actions.

    ``search`` is single-flight: a second call while one is outstanding is
    refused rather than queued.
    """

    filters: SearchFilters = field(default_factory=SearchFilters)
    dispatch_fn: Callable[..., str] = dispatch
    provider: str | None = None
    status: SearchStatus = SearchStatus.IDLE
    papers: list[PaperRecord] = field(default_factory=list)
    last_error: Exception | None = None
    _busy: bool = field(default=False, init=False, repr=False)

    @property
    def busy(self) -> bool:
        return self._busy

    def search(self) -> list[PaperRecord]:
        """Dispatch, normalize and store the results for the current filters.

        A blank query is a no-op. On DispatchError the status becomes ERROR
        and the result set stays empty; any other exception also sets ERROR
        before it propagates.
        """
        filters = self.filters
        if not filters.query.strip():
            LOGGER.info("Search skipped: empty query")
            return self.papers
        if self._busy:
            raise RuntimeError("A search is already in progress")

        self._busy = True
        self.status = SearchStatus.SEARCHING
        self.papers = []
        self.last_error = None
        try:
            raw_text = self.dispatch_fn(
                filters.query,
                filters.year_start,
                filters.year_end,
                filters.min_citations,
                filters.max_results,
                provider=self.provider,
            )
        except DispatchError as exc:
            self.status = SearchStatus.ERROR
            self.last_error = exc
            LOGGER.warning("Search failed for query=%r: %s", filters.query, exc)
            return self.papers
        except Exception as exc:
            self.status = SearchStatus.ERROR
            self.last_error = exc
            raise
        finally:
            self._busy = False

        self.papers = normalize(raw_text, filters.year_start, filters.year_end)
        self.status = SearchStatus.COMPLETED
        LOGGER.info("Search completed for query=%r: %s papers", filters.query, len(self.papers))
        return self.papers

    def toggle(self, paper_id: str) -> None:
        for paper in self.papers:
            if paper.paper_id == paper_id:
                paper.selected = not paper.selected
                return
        raise KeyError(paper_id)

    def select_all(self) -> None:
        for paper in self.papers:
            paper.selected = True

    def deselect_all(self) -> None:
        for paper in self.papers:
            paper.selected = False

    def clear(self) -> None:
        self.papers = []
        self.status = SearchStatus.IDLE
        self.last_error = None

    def selected(self) -> list[PaperRecord]:
        return selected_papers(self.papers)

    def scholar_url(self) -> str:
        return scholar_search_url(self.filters.query, self.filters.year_start, self.filters.year_end)
