# facelabel/core/text_metrics.py
"""
Text measurement port: pixel width/height of (possibly multi-line) text
for a font family, point size and stroke width.
The layout engine only sees TextMeasurer; ImageMagick and Pillow implement it.
"""

from __future__ import annotations

import math
import warnings
from typing import Protocol

from facelabel.core.error_codes import MeasurementError

_font_warning_emitted: set[str] = set()


class TextMeasurer(Protocol):
    def measure(self, text: str, font_family: str, font_size: int, stroke_width: int) -> tuple[int, int]:
        """Return (width_px, height_px). Raises MeasurementError on failure."""
        ...


def load_font(font_family: str, font_size: int):
    """Load PIL ImageFont; fallback with warning if font not found."""
    from PIL import ImageFont

    size = max(1, int(font_size))
    candidates = [
        font_family,
        font_family + ".ttf",
        font_family.replace(" ", "") + ".ttf",
        font_family.replace(" ", "-") + ".ttf",
        "DejaVuSansMono.ttf",
        "DejaVuSans.ttf",
        "cour.ttf",
        "arial.ttf",
        "Arial.ttf",
    ]
    for name in candidates:
        try:
            return ImageFont.truetype(name, size=size)
        except (OSError, IOError):
            continue
    if font_family not in _font_warning_emitted:
        _font_warning_emitted.add(font_family)
        warnings.warn(f"Font not found: {font_family!r}; using default.", UserWarning)
    return ImageFont.load_default(size=size)


class PillowTextMeasurer:
    """Measure text with Pillow. 1 pt is taken as 1 px (72 dpi)."""

    def measure(self, text: str, font_family: str, font_size: int, stroke_width: int) -> tuple[int, int]:
        from PIL import Image, ImageDraw

        if font_size <= 0:
            raise MeasurementError(f"Invalid font size: {font_size}")
        try:
            font = load_font(font_family, font_size)
            draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))
            bbox = draw.multiline_textbbox((0, 0), text or " ", font=font, stroke_width=max(0, stroke_width))
        except (OSError, ValueError) as e:
            raise MeasurementError(f"Pillow could not measure {text!r}: {e}") from e
        w = int(math.ceil(bbox[2] - min(0, bbox[0])))
        h = int(math.ceil(bbox[3] - min(0, bbox[1])))
        return (w, h)


class CachingMeasurer:
    """
    Memoise another measurer per (text, font, size, stroke).
    The optimizer re-measures the same wrapped text for every position it tries.
    Failures are not cached.
    """

    def __init__(self, inner: TextMeasurer) -> None:
        self.inner = inner
        self._cache: dict[tuple[str, str, int, int], tuple[int, int]] = {}
        self.calls = 0

    def measure(self, text: str, font_family: str, font_size: int, stroke_width: int) -> tuple[int, int]:
        key = (text, font_family, int(font_size), int(stroke_width))
        hit = self._cache.get(key)
        if hit is not None:
            return hit
        self.calls += 1
        size = self.inner.measure(text, font_family, font_size, stroke_width)
        self._cache[key] = size
        return size
