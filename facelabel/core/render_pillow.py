# facelabel/core/render_pillow.py
"""
Pillow rendering engine: executes the same directive sequence as the
ImageMagick engine, in-process. Used when ImageMagick is not installed
and by the test suite.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from PIL import Image, ImageColor, ImageDraw

from facelabel.core.directives import CropImage, Directive, DrawCaption, DrawRectangles, LoadImage, WriteImage
from facelabel.core.error_codes import RenderError
from facelabel.core.text_metrics import PillowTextMeasurer, TextMeasurer, load_font
from facelabel.core.types import TextAlign

logger = logging.getLogger(__name__)

_JPEG_SUFFIXES = (".jpg", ".jpeg")


def _colour(value: str) -> tuple[int, ...]:
    try:
        return ImageColor.getrgb(value)
    except ValueError as e:
        raise RenderError(f"Unknown colour {value!r}") from e


def _load(d: LoadImage) -> tuple[Image.Image, bytes | None]:
    try:
        with Image.open(d.path) as src:
            exif = None if d.strip else src.info.get("exif")
            image = src.convert("RGBA")
    except OSError as e:
        raise RenderError(f"Cannot open {d.path}: {e}") from e
    if d.obfuscate:
        white = Image.new("RGBA", image.size, (255, 255, 255, 255))
        image = Image.blend(image, white, d.colorize_percent / 100.0)
    return image, exif


def _draw_rectangles(image: Image.Image, d: DrawRectangles) -> None:
    draw = ImageDraw.Draw(image)
    colour = _colour(d.colour)
    for b in d.boxes:
        draw.rectangle([b.left, b.top, b.right, b.bottom], outline=colour, width=max(1, d.width))


def _draw_caption(image: Image.Image, d: DrawCaption) -> Image.Image:
    font = load_font(d.font_family, d.font_size)
    overlay = Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    text = d.text or " "
    left, top, right, bottom = draw.multiline_textbbox((0, 0), text, font=font, stroke_width=d.stroke_width)
    tw = right - left
    if d.align == TextAlign.LEFT:
        x = d.box.x
    elif d.align == TextAlign.RIGHT:
        x = d.box.right - tw
    else:
        x = d.box.x + (d.box.w - tw) / 2
    y = d.box.y
    undercolour = _colour(d.undercolour)
    draw.rectangle([x, y, x + tw, y + (bottom - top)], fill=undercolour)
    fill = _colour(d.font_colour)
    draw.multiline_text(
        (x - left, y - top),
        text,
        font=font,
        fill=fill,
        align=d.align.value,
        stroke_width=d.stroke_width,
        stroke_fill=fill,
    )
    return Image.alpha_composite(image, overlay)


def _write(image: Image.Image, path: str, exif: bytes | None) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    to_save = image.convert("RGB") if out.suffix.lower() in _JPEG_SUFFIXES else image
    kwargs = {"exif": exif} if exif else {}
    try:
        to_save.save(out, **kwargs)
    except (OSError, ValueError) as e:
        raise RenderError(f"Cannot write {out}: {e}") from e


class PillowEngine:
    """Rendering engine and text measurer backed by Pillow."""

    def __init__(self, measurer: TextMeasurer | None = None) -> None:
        self.measurer = measurer or PillowTextMeasurer()

    def measure(self, text: str, font_family: str, font_size: int, stroke_width: int) -> tuple[int, int]:
        return self.measurer.measure(text, font_family, font_size, stroke_width)

    def render(self, directives: Sequence[Directive]) -> None:
        """Apply directives in order. Raises RenderError."""
        image: Image.Image | None = None
        exif: bytes | None = None
        for d in directives:
            if isinstance(d, LoadImage):
                image, exif = _load(d)
                continue
            if image is None:
                raise RenderError(f"{type(d).__name__} before any image was loaded")
            if isinstance(d, DrawRectangles):
                _draw_rectangles(image, d)
            elif isinstance(d, DrawCaption):
                image = _draw_caption(image, d)
            elif isinstance(d, CropImage):
                b = d.box
                image = image.crop((b.left, b.top, b.right, b.bottom))
            elif isinstance(d, WriteImage):
                _write(image, d.path, exif)
                logger.info("Wrote %s", d.path)
            else:
                raise RenderError(f"Unsupported directive: {d!r}")
