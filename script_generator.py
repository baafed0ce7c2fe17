"""Render the selected papers into a standalone batch-download script."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from string import Template

from models import PaperRecord

DEFAULT_DOWNLOAD_DIR = "Scholar_Downloads"
DEFAULT_SCRIPT_NAME = "start_download.py"

LOGGER = logging.getLogger(__name__)

_SCRIPT_TEMPLATE = Template(r'''"""ScholarSync batch downloader (generated)."""

import os
import random
import re
import time

import requests

# --- CONFIGURATION ---
DOWNLOAD_DIR = $download_dir
PAPERS = $papers
# ---------------------


def sanitize_filename(name):
    return re.sub(r'[\\/*?:"<>|]', "", name)


def download_file(url, filepath, retries=2):
    headers = {
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
        )
    }

    for attempt in range(retries + 1):
        try:
            response = requests.get(url, headers=headers, timeout=15, stream=True, verify=False)
            if response.status_code == 200:
                with open(filepath, "wb") as fh:
                    for chunk in response.iter_content(chunk_size=1024):
                        fh.write(chunk)
                return True
            if response.status_code == 403:
                print("    [!] 403 Forbidden (Anti-bot). Skipping.")
                return False
        except requests.RequestException as exc:
            if attempt < retries:
                time.sleep(1)
                continue
            print(f"    [!] Error: {exc}")
    return False


def main():
    print("===========================================")
    print("      ScholarSync Batch Downloader         ")
    print("===========================================")

    os.makedirs(DOWNLOAD_DIR, exist_ok=True)

    print(f"Target Folder: {os.path.abspath(DOWNLOAD_DIR)}")
    print(f"Queue: {len(PAPERS)} papers")
    print("-" * 40)

    success = 0

    # Legacy university sites often serve broken certificates.
    requests.packages.urllib3.disable_warnings()

    for i, paper in enumerate(PAPERS):
        title = paper["title"]
        url = paper["url"]
        year = paper["year"]

        safe_title = sanitize_filename(title)[:120]
        filename = f"{year} - {safe_title}.pdf"
        filepath = os.path.join(DOWNLOAD_DIR, filename)

        print(f"[{i + 1}/{len(PAPERS)}] Processing: {title[:40]}...")

        if os.path.exists(filepath):
            print("    -> Exists. Skipping.")
            success += 1
            continue

        if download_file(url, filepath):
            print("    -> Downloaded.")
            success += 1
        else:
            print("    -> Failed or Protected. Manual download needed.")

        time.sleep(random.uniform(0.5, 1.5))

    print("-" * 40)
    print(f"Done. {success}/{len(PAPERS)} saved.")
    input("Press Enter to close...")


if __name__ == "__main__":
    main()
''')


def selected_papers(papers: Iterable[PaperRecord]) -> list[PaperRecord]:
    return [paper for paper in papers if paper.selected]


def generate_download_script(papers: Iterable[PaperRecord], download_path: str) -> str:
    """Return the source of a self-contained script that downloads ``papers``.

    Only ``title``, ``url`` and ``year`` are embedded. Backslashes in the
    destination are normalized to forward slashes; a blank destination
    falls back to DEFAULT_DOWNLOAD_DIR.
    """
    directory = (download_path or "").strip().replace("\\", "/") or DEFAULT_DOWNLOAD_DIR
    entries = [{"title": paper.title, "url": paper.url, "year": paper.year} for paper in papers]
    return _SCRIPT_TEMPLATE.substitute(
        download_dir=repr(directory),
        papers=json.dumps(entries, indent=4, ensure_ascii=False),
    )


def write_download_script(
    papers: Iterable[PaperRecord],
    download_path: str,
    output_path: str | Path | None = None,
) -> Path:
    """Write the download script for the selected papers and return its path."""
    chosen = selected_papers(papers)
    if not chosen:
        raise ValueError("No papers selected; nothing to download")

    path = Path(output_path or os.getenv("DOWNLOAD_SCRIPT_NAME", DEFAULT_SCRIPT_NAME))
    path.write_text(generate_download_script(chosen, download_path), encoding="utf-8")
    LOGGER.info("Wrote download script for %s papers to %s", len(chosen), path)
    return path
