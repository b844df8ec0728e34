# facelabel/core/magick.py
"""
ImageMagick rendering engine: directive sequences become a `magick -script`
file; text is measured with `label:` + `-format "%wx%h" info:`.
One blocking subprocess call per script or measurement.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
import tempfile
from typing import Sequence

from facelabel.core.config import MAGICK_APP, TOOL_TIMEOUT_S
from facelabel.core.directives import CropImage, Directive, DrawCaption, DrawRectangles, LoadImage, WriteImage
from facelabel.core.error_codes import MeasurementError, RenderError

logger = logging.getLogger(__name__)

_SIZE_RE = re.compile(r"(\d+)x(\d+)")
TRANSPARENT_FILL = '"rgba( 255, 255, 255, 0.0)"'


def escape_text(text: str, quoted: bool = True) -> str:
    """Escape text for ImageMagick label/caption input; newlines become the \\n escape."""
    text = text.replace("\\", "\\\\")
    if quoted:
        text = text.replace('"', '\\"')
    return text.replace("%", "%%").replace("\r\n", "\n").replace("\n", "\\n")


def _quote(value: str) -> str:
    return '"' + value.replace('"', '\\"') + '"'


def directive_lines(d: Directive) -> list[str]:
    """Script lines for one directive (comments included)."""
    if isinstance(d, LoadImage):
        line = _quote(d.path)
        if d.obfuscate:
            line += f" -fill white -colorize {d.colorize_percent}%"
        if d.strip:
            line += " -strip"
        return ["# Input file", line]
    if isinstance(d, DrawRectangles):
        lines = [f"# {d.comment}"] if d.comment else []
        lines.append(f"-strokewidth {d.width} -stroke {d.colour} -fill {TRANSPARENT_FILL}")
        for b in d.boxes:
            lines.append(f'-draw "rectangle {b.left},{b.top} {b.right},{b.bottom}"')
        return lines
    if isinstance(d, DrawCaption):
        return [
            f"# Face label: {d.text.splitlines()[0] if d.text else ''}",
            (
                f"-font {_quote(d.font_family)} -pointsize {d.font_size} -stroke {d.font_colour} "
                f'-strokewidth {d.stroke_width} -fill {d.font_colour} -undercolor "{d.undercolour}"'
            ),
            f'-background none -size {d.box.w}x -gravity {d.align.gravity} caption:"{escape_text(d.text)}"',
            f"-gravity NorthWest -geometry +{d.box.x}+{d.box.y} -composite",
        ]
    if isinstance(d, CropImage):
        b = d.box
        return [f"-crop {b.w}x{b.h}+{b.x}+{b.y}"]
    if isinstance(d, WriteImage):
        return [f"-write {_quote(d.path)}"]
    raise RenderError(f"Unsupported directive: {d!r}")


def to_script_lines(directives: Sequence[Directive]) -> list[str]:
    """Full `-script` file content, one command per line, in directive order."""
    lines: list[str] = []
    for d in directives:
        lines.extend(directive_lines(d))
    return lines


def parse_size(output: str) -> tuple[int, int]:
    """Parse 'WxH' from `info:` output. Raises MeasurementError if absent or zero."""
    m = _SIZE_RE.search(output or "")
    if not m:
        raise MeasurementError(f"Unparsable size output: {output!r}")
    w, h = int(m.group(1)), int(m.group(2))
    if w <= 0 or h <= 0:
        raise MeasurementError(f"Empty text size: {output!r}")
    return w, h


class MagickEngine:
    """Rendering engine and text measurer backed by the ImageMagick executable."""

    def __init__(self, app: str = MAGICK_APP, timeout: float = TOOL_TIMEOUT_S, keep_scripts: bool = False) -> None:
        self.app = app
        self.timeout = timeout
        self.keep_scripts = keep_scripts

    def measure(self, text: str, font_family: str, font_size: int, stroke_width: int) -> tuple[int, int]:
        label_text = escape_text(text, quoted=False)
        if label_text.startswith("@"):
            # '@' would make ImageMagick read the text from a file
            label_text = "\\" + label_text
        cmd = [
            self.app,
            "-font", font_family,
            "-pointsize", str(font_size),
            "-strokewidth", str(stroke_width),
            f"label:{label_text}",
            "-format", "%wx%h",
            "info:",
        ]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout, check=False)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise MeasurementError(f"{self.app} not reachable: {e}") from e
        if proc.returncode != 0:
            raise MeasurementError(f"{self.app} exited {proc.returncode}: {proc.stderr.strip()}")
        size = parse_size(proc.stdout)
        logger.debug("Measured %r at %d pt: %dx%d", text, font_size, size[0], size[1])
        return size

    def render(self, directives: Sequence[Directive]) -> None:
        """Write the directives to a script file and run `magick -script`. Raises RenderError."""
        lines = to_script_lines(directives)
        fd, script_path = tempfile.mkstemp(prefix="facelabel-", suffix=".mgk", text=True)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write("\n".join(lines) + "\n")
            logger.debug("ImageMagick script %s:\n%s", script_path, "\n".join(lines))
            try:
                proc = subprocess.run(
                    [self.app, "-script", script_path],
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except (OSError, subprocess.TimeoutExpired) as e:
                raise RenderError(f"{self.app} not reachable: {e}") from e
            if proc.returncode != 0:
                raise RenderError(f"{self.app} -script exited {proc.returncode}: {proc.stderr.strip()}")
            logger.info("ImageMagick script executed (%d lines)", len(lines))
        finally:
            if self.keep_scripts:
                logger.info("ImageMagick script kept for inspection: %s", script_path)
            else:
                try:
                    os.unlink(script_path)
                except OSError:
                    logger.debug("Could not remove %s", script_path)
