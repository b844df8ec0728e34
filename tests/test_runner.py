# tests/test_runner.py
"""
CLI: single photo and batch mode with the Pillow engine and sidecar metadata.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import face, write_photo
from facelabel.core.error_codes import METADATA_FAILED, USER_MESSAGES
from facelabel.core.runner import main


def _args(tmp_path: Path, *extra: str) -> list[str]:
    return ["--engine", "pillow", "--metadata", "sidecar", "--repo-root", str(tmp_path), *extra]


def test_single_photo(tmp_path: Path, capsys) -> None:
    write_photo(tmp_path / "p.png", 320, 240, [face("Alice", 0.5, 0.4, 0.2, 0.2)])
    main(_args(tmp_path, "p.png", "--run-name", "one", "--no-debug", "--draw-face-outlines"))
    report_dir = (tmp_path / "reports").resolve() / "one"
    printed = capsys.readouterr().out.strip().splitlines()
    assert printed == [
        str(report_dir / "p.png"),
        str(report_dir / "layout.json"),
        str(report_dir / "run_metadata.json"),
    ]
    assert (report_dir / "p.png").exists()
    meta = json.loads((report_dir / "run_metadata.json").read_text(encoding="utf-8"))
    assert meta["engine"] == "pillow"
    assert meta["settings"]["export"]["draw_face_outlines"] is True


def test_fixed_font_size_and_debug(tmp_path: Path, capsys) -> None:
    write_photo(tmp_path / "p.png", 320, 240, [face("Alice", 0.5, 0.4, 0.2, 0.2)])
    main(_args(tmp_path, "p.png", "--font-size", "12", "--no-optimise", "--output", "labelled/p.png"))
    out = capsys.readouterr().out
    assert str((tmp_path / "labelled" / "p.png").resolve()) in out
    report_dir = (tmp_path / "reports").resolve() / "run"
    assert (report_dir / "debug.png").exists()
    layout = json.loads((report_dir / "layout.json").read_text(encoding="utf-8"))
    assert layout["font_size"] == 12
    assert layout["labels"][0]["position"] == "below"


def test_failure_exits_with_message(tmp_path: Path) -> None:
    write_photo(tmp_path / "p.png", 100, 100, [])
    (tmp_path / "p.png.json").unlink()
    with pytest.raises(SystemExit) as exc:
        main(_args(tmp_path, "p.png", "--no-debug"))
    assert USER_MESSAGES[METADATA_FAILED] in str(exc.value.code)


def test_missing_photo(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        main(_args(tmp_path, "nope.png"))


def test_batch_mode(tmp_path: Path, capsys) -> None:
    photos = tmp_path / "photos"
    photos.mkdir()
    write_photo(photos / "a.png", 200, 150, [face("Bo", 0.5, 0.5, 0.2, 0.2)])
    main(_args(tmp_path, "--batch-dir", "photos", "--run-name", "b", "--no-debug"))
    index = (tmp_path / "reports").resolve() / "batch_b" / "index.csv"
    assert capsys.readouterr().out.strip() == str(index)
    assert index.exists()
