"""CLI entrypoint: grounded paper search -> selection -> batch-download script."""

from __future__ import annotations

import argparse
import json
import logging
import os
import webbrowser

from dotenv import find_dotenv, load_dotenv

from dispatcher import PROVIDERS, build_search_prompt
from models import PaperRecord, SearchFilters, SearchStatus
from script_generator import write_download_script
from session import SearchSession, scholar_search_url


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    defaults = SearchFilters()
    parser = argparse.ArgumentParser(
        description="Find downloadable papers with a web-grounded AI search and emit a batch-download script",
    )
    parser.add_argument("query", help="Research topic or keywords")
    parser.add_argument("--year-start", type=int, default=defaults.year_start, help="First publication year (inclusive)")
    parser.add_argument("--year-end", type=int, default=defaults.year_end, help="Last publication year (inclusive)")
    parser.add_argument(
        "--min-citations",
        type=int,
        default=defaults.min_citations,
        help="Minimum citation count (recorded, not currently applied)",
    )
    parser.add_argument("--max-results", type=int, default=defaults.max_results, help="Result budget passed to the model")
    parser.add_argument(
        "--download-path",
        default=os.getenv("DOWNLOAD_PATH", defaults.download_path),
        help="Destination folder written into the generated script",
    )
    parser.add_argument(
        "--provider",
        choices=sorted(PROVIDERS),
        default=None,
        help="AI search provider (defaults to SEARCH_PROVIDER or 'gemini')",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Where to write the download script (defaults to DOWNLOAD_SCRIPT_NAME or start_download.py)",
    )
    parser.add_argument(
        "--exclude",
        type=int,
        nargs="*",
        default=[],
        metavar="N",
        help="1-based result numbers to leave out of the download script",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON instead of a table")
    parser.add_argument("--open-scholar", action="store_true", help="Open the same search on Google Scholar and exit")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print the prompt that would be sent, without API calls or writes",
    )
    return parser.parse_args(argv)


def _format_paper(index: int, paper: PaperRecord) -> str:
    marker = "x" if paper.selected else " "
    authors = ", ".join(paper.authors[:3])
    if len(paper.authors) > 3:
        authors += " et al."
    return (
        f"[{marker}] {index:>3}. ({paper.year}) {paper.title}\n"
        f"         {authors} | {paper.publisher} | citations={paper.citation_count}\n"
        f"         {paper.url}"
    )


def run(args: argparse.Namespace) -> int:
    """Run one search action and return the process exit code."""
    filters = SearchFilters(
        query=args.query,
        year_start=args.year_start,
        year_end=args.year_end,
        min_citations=args.min_citations,
        max_results=args.max_results,
        download_path=args.download_path,
    )

    if args.open_scholar:
        url = scholar_search_url(filters.query, filters.year_start, filters.year_end)
        logging.info("Opening Google Scholar: %s", url)
        webbrowser.open(url)
        return 0

    if args.dry_run:
        print(build_search_prompt(filters.query, filters.year_start, filters.year_end, filters.max_results))
        logging.info("[dry-run] No API call made")
        return 0

    session = SearchSession(filters=filters, provider=args.provider)
    papers = session.search()

    if session.status is SearchStatus.ERROR:
        logging.error("Extraction failed: %s", session.last_error)
        return 1
    if session.status is SearchStatus.IDLE:
        logging.warning("Nothing to search: query is empty")
        return 1
    if not papers:
        logging.warning("No direct PDF links found matching criteria. Try a broader year range or simpler keywords.")
        return 0

    for number in args.exclude:
        if 1 <= number <= len(papers):
            session.toggle(papers[number - 1].paper_id)
        else:
            logging.warning("Ignoring --exclude %s: only %s results", number, len(papers))

    if args.json:
        print(json.dumps([paper.to_dict() for paper in papers], indent=2, ensure_ascii=False))
    else:
        print(f"Found Papers ({len(papers)})")
        for index, paper in enumerate(papers, start=1):
            print(_format_paper(index, paper))

    if not session.selected():
        logging.warning("No papers selected; download script not written")
        return 0

    path = write_download_script(session.papers, filters.download_path, args.output)
    logging.info("%s papers selected. Run `python %s` to start downloading.", len(session.selected()), path)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute one search."""
    load_dotenv(find_dotenv(usecwd=True))
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
