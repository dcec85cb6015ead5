from __future__ import annotations

import sys
import zipfile
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pagesmith.main import main


@pytest.fixture(autouse=True)
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    target = tmp_path / "data"
    monkeypatch.setenv("PAGESMITH_DATA_DIR", str(target))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return target


def _run(capsys: pytest.CaptureFixture[str], *argv: str) -> str:
    assert main(list(argv)) == 0
    return capsys.readouterr().out


def test_blocks_lists_the_library(capsys: pytest.CaptureFixture[str]) -> None:
    out = _run(capsys, "blocks")
    assert "hero-simple" in out and "footer-simple" in out
    out = _run(capsys, "blocks", "--category", "form")
    assert "contact-form" in out
    assert "hero-simple" not in out


def test_edit_and_export_round_trip(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    hero = _run(capsys, "add", "hero-simple").strip()
    form = _run(capsys, "add", "contact-form").strip()
    _run(capsys, "edit", hero, "h1", "Grand Opening")
    _run(capsys, "move", form, "up")
    _run(capsys, "title", "Opening Day")

    out = _run(capsys, "show")
    assert out.index(form) < out.index(hero)
    assert "Title: Opening Day" in out

    target = tmp_path / "site.zip"
    _run(capsys, "export", str(target))
    with zipfile.ZipFile(target) as zf:
        document = zf.read("index.html").decode("utf-8")
        script = zf.read("script.js").decode("utf-8")
    assert "Grand Opening" in document
    assert "<title>Opening Day</title>" in document
    assert "addEventListener('submit'" in script


def test_export_folder(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    _run(capsys, "add", "footer-simple")
    _run(capsys, "export", str(tmp_path / "site.zip"), "--folder")
    assert (tmp_path / "site" / "index.html").is_file()
    assert (tmp_path / "site" / "assets").is_dir()


def test_unknown_ids_exit_with_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["add", "no-such-template"]) == 1
    assert main(["delete", "block-missing"]) == 1
    assert "block-missing" in capsys.readouterr().err


def test_write_uses_local_copy_without_key(capsys: pytest.CaptureFixture[str]) -> None:
    block = _run(capsys, "add", "cta-section").strip()
    out = _run(capsys, "write", "buy the pro plan", "--type", "cta", "--block", block, "--field", "button")
    assert out.strip() == "Buy Now"
    assert "button: Buy Now" in _run(capsys, "show")


def test_reset_clears_the_page(capsys: pytest.CaptureFixture[str]) -> None:
    _run(capsys, "add", "hero-simple")
    _run(capsys, "reset")
    assert "(no blocks)" in _run(capsys, "show")
