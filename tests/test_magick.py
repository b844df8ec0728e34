# tests/test_magick.py
"""
ImageMagick engine: script lines, text escaping, size parsing, and the
subprocess seam (monkeypatched; ImageMagick is not needed).
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from facelabel.core.directives import CropImage, DrawCaption, DrawRectangles, LoadImage, WriteImage
from facelabel.core.error_codes import MeasurementError, RenderError
from facelabel.core.magick import MagickEngine, escape_text, parse_size, to_script_lines
from facelabel.core.types import Box, TextAlign

CAPTION = DrawCaption(
    text="Mary\nAnn",
    box=Box(10, 20, 120, 80),
    font_family="Courier",
    font_size=40,
    font_colour="white",
    stroke_width=1,
    undercolour="#00000080",
    align=TextAlign.RIGHT,
)


def test_script_lines() -> None:
    lines = to_script_lines([
        LoadImage("/photos/a b.jpg", obfuscate=True, strip=True),
        DrawRectangles((Box(1, 2, 10, 20),), "blue", 2, "Person face outlines"),
        CAPTION,
        CropImage(Box(5, 6, 70, 80)),
        WriteImage("/out/a b.jpg"),
    ])
    assert lines == [
        "# Input file",
        '"/photos/a b.jpg" -fill white -colorize 95% -strip',
        "# Person face outlines",
        '-strokewidth 2 -stroke blue -fill "rgba( 255, 255, 255, 0.0)"',
        '-draw "rectangle 1,2 11,22"',
        "# Face label: Mary",
        '-font "Courier" -pointsize 40 -stroke white -strokewidth 1 -fill white -undercolor "#00000080"',
        '-background none -size 120x -gravity East caption:"Mary\\nAnn"',
        "-gravity NorthWest -geometry +10+20 -composite",
        "-crop 70x80+5+6",
        '-write "/out/a b.jpg"',
    ]


def test_font_family_with_spaces_is_one_token() -> None:
    caption = DrawCaption("Ann", Box(0, 0, 60, 40), "Courier New", 20, "white", 1, "none", TextAlign.CENTER)
    font_line = to_script_lines([caption])[1]
    assert font_line.startswith('-font "Courier New" -pointsize 20 ')


def test_plain_load_line() -> None:
    assert to_script_lines([LoadImage("x.jpg")]) == ["# Input file", '"x.jpg"']


def test_escape_text() -> None:
    assert escape_text('Say "hi"') == 'Say \\"hi\\"'
    assert escape_text("100%") == "100%%"
    assert escape_text("a\\b") == "a\\\\b"
    assert escape_text("a\nb") == "a\\nb"
    assert escape_text('"q"', quoted=False) == '"q"'


def test_parse_size() -> None:
    assert parse_size("123x45") == (123, 45)
    assert parse_size("  88x20\n") == (88, 20)
    with pytest.raises(MeasurementError):
        parse_size("magick: unable to read font")
    with pytest.raises(MeasurementError):
        parse_size("0x0")


def _completed(cmd, returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)


def test_measure_runs_label_query(monkeypatch) -> None:
    seen = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        return _completed(cmd, stdout="210x47")

    monkeypatch.setattr(subprocess, "run", fake_run)
    size = MagickEngine(app="magick").measure("Ann\nLee", "Courier", 40, 1)
    assert size == (210, 47)
    assert seen["cmd"] == [
        "magick", "-font", "Courier", "-pointsize", "40", "-strokewidth", "1",
        "label:Ann\\nLee", "-format", "%wx%h", "info:",
    ]


def test_measure_failures_raise_measurement_error(monkeypatch) -> None:
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: _completed(cmd, returncode=1, stderr="no font"))
    with pytest.raises(MeasurementError):
        MagickEngine().measure("x", "Courier", 10, 1)

    def missing(cmd, **kw):
        raise FileNotFoundError("magick")

    monkeypatch.setattr(subprocess, "run", missing)
    with pytest.raises(MeasurementError):
        MagickEngine().measure("x", "Courier", 10, 1)


def test_render_writes_and_removes_script(monkeypatch) -> None:
    seen = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen["script"] = Path(cmd[2]).read_text(encoding="utf-8")
        return _completed(cmd)

    monkeypatch.setattr(subprocess, "run", fake_run)
    MagickEngine(app="magick").render([LoadImage("in.jpg"), WriteImage("out.jpg")])
    assert seen["cmd"][:2] == ["magick", "-script"]
    assert seen["script"] == '# Input file\n"in.jpg"\n-write "out.jpg"\n'
    assert not Path(seen["cmd"][2]).exists()


def test_render_failure_raises_render_error(monkeypatch) -> None:
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kw: _completed(cmd, returncode=1, stderr="bad"))
    with pytest.raises(RenderError):
        MagickEngine().render([LoadImage("in.jpg"), WriteImage("out.jpg")])
