from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from main import main, parse_args, run

_REPLY = (
    "Sure! Here are the papers:\n"
    "```json\n"
    "[\n"
    '  {"title": "Paper A", "authors": ["Ada"], "year": 2022, "citations": 5,'
    ' "publisher": "arXiv", "url": "https://arxiv.org/pdf/a.pdf"},\n'
    '  {"title": "Paper B", "year": "2024", "url": "https://example.org/b.pdf"}\n'
    "]\n"
    "```"
)


def _args(tmp_path: Path, *extra: str):
    return parse_args(["battery chemistry", "--provider", "gemini", "--output", str(tmp_path / "dl.py"), *extra])


def test_run_writes_script_for_selected_results(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with patch("gemini_client.generate", return_value=_REPLY):
        code = run(_args(tmp_path, "--year-start", "2020", "--year-end", "2025", "--exclude", "2"))

    assert code == 0
    out = capsys.readouterr().out
    assert "Found Papers (2)" in out
    assert out.index("Paper B") < out.index("Paper A")

    script = (tmp_path / "dl.py").read_text(encoding="utf-8")
    assert "Paper B" in script
    assert "Paper A" not in script


def test_run_prints_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with patch("gemini_client.generate", return_value=_REPLY):
        code = run(_args(tmp_path, "--year-start", "2020", "--year-end", "2025", "--json"))

    assert code == 0
    printed = json.loads(capsys.readouterr().out)
    assert [p["title"] for p in printed] == ["Paper B", "Paper A"]
    assert printed[1]["citations"] == 5


def test_run_returns_failure_on_dispatch_error(tmp_path: Path) -> None:
    with patch("gemini_client.generate", side_effect=RuntimeError("quota exceeded")):
        code = run(_args(tmp_path))

    assert code == 1
    assert not (tmp_path / "dl.py").exists()


def test_run_with_no_results_writes_nothing(tmp_path: Path) -> None:
    with patch("gemini_client.generate", return_value="Nothing found."):
        code = run(_args(tmp_path))

    assert code == 0
    assert not (tmp_path / "dl.py").exists()


def test_dry_run_prints_prompt_without_calling_provider(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with patch("gemini_client.generate") as mock_generate:
        code = run(_args(tmp_path, "--dry-run", "--max-results", "12"))

    assert code == 0
    mock_generate.assert_not_called()
    assert "at most 12" in capsys.readouterr().out


def test_open_scholar_opens_browser(tmp_path: Path) -> None:
    with patch("main.webbrowser.open") as mock_open:
        code = run(_args(tmp_path, "--open-scholar", "--year-start", "2019", "--year-end", "2021"))

    assert code == 0
    mock_open.assert_called_once_with(
        "https://scholar.google.com/scholar?q=battery+chemistry&as_ylo=2019&as_yhi=2021"
    )


def test_main_applies_settings_from_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings in .env are honoured even though modules are imported before it loads."""
    (tmp_path / ".env").write_text(
        "SEARCH_PROVIDER=perplexity\nDOWNLOAD_SCRIPT_NAME=from_env.py\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SEARCH_PROVIDER", raising=False)
    monkeypatch.delenv("DOWNLOAD_SCRIPT_NAME", raising=False)

    with patch.dict("os.environ"), \
         patch("perplexity_client.generate", return_value=_REPLY) as mock_perplexity, \
         patch("gemini_client.generate") as mock_gemini:
        code = main(["battery chemistry", "--year-start", "2020", "--year-end", "2025"])

    assert code == 0
    mock_perplexity.assert_called_once()
    mock_gemini.assert_not_called()
    assert (tmp_path / "from_env.py").exists()


def test_run_returns_failure_for_unknown_configured_provider(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SEARCH_PROVIDER", "bing")

    code = run(parse_args(["battery chemistry", "--output", str(tmp_path / "dl.py")]))

    assert code == 1
    assert not (tmp_path / "dl.py").exists()
