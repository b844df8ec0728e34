# facelabel/core/directives.py
"""
Draw directives handed to a rendering engine, applied strictly in order.
A labelled photo is: load (optionally dimmed / stripped) -> face outlines ->
label outlines -> one caption per label -> optional crop -> write.
A thumbnail is: load -> crop to the person box -> write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union

from facelabel.core.config import OBFUSCATE_COLORIZE_PERCENT, Settings
from facelabel.core.text_wrap import wrap_text
from facelabel.core.types import Box, Person, PhotoLayout, TextAlign

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadImage:
    path: str
    obfuscate: bool = False
    colorize_percent: int = OBFUSCATE_COLORIZE_PERCENT
    strip: bool = False


@dataclass(frozen=True)
class DrawRectangles:
    """Unfilled rectangle outlines."""
    boxes: tuple[Box, ...]
    colour: str
    width: int
    comment: str = ""


@dataclass(frozen=True)
class DrawCaption:
    """Wrapped label text composited with its top-left corner at box.x, box.y."""
    text: str
    box: Box
    font_family: str
    font_size: int
    font_colour: str
    stroke_width: int
    undercolour: str
    align: TextAlign


@dataclass(frozen=True)
class CropImage:
    box: Box


@dataclass(frozen=True)
class WriteImage:
    path: str


Directive = Union[LoadImage, DrawRectangles, DrawCaption, CropImage, WriteImage]


def build_label_directives(
    source: str | Path,
    output: str | Path,
    layout: PhotoLayout,
    settings: Settings,
) -> tuple[Directive, ...]:
    """Directive sequence producing the labelled photo at output."""
    export = settings.export
    photo = settings.photo
    label_cfg = settings.label
    out: list[Directive] = [
        LoadImage(
            path=str(source),
            obfuscate=export.obfuscate_image,
            strip=export.remove_exif,
        )
    ]
    if export.label_image:
        if export.draw_face_outlines and layout.people:
            out.append(DrawRectangles(
                boxes=tuple(p.box for p in layout.people),
                colour=photo.face_outline_colour,
                width=photo.face_outline_width,
                comment="Person face outlines",
            ))
        if export.draw_label_boxes and layout.labels:
            out.append(DrawRectangles(
                boxes=tuple(label.box for label in layout.labels),
                colour=photo.label_outline_colour,
                width=photo.label_outline_width,
                comment="Label box outlines",
            ))
        if export.draw_label_text:
            for label in layout.labels:
                out.append(DrawCaption(
                    text=wrap_text(label.text, label.num_rows),
                    box=label.box,
                    font_family=label_cfg.font_family,
                    font_size=label.font_size,
                    font_colour=label_cfg.font_colour,
                    stroke_width=label_cfg.stroke_width,
                    undercolour=label_cfg.undercolour,
                    align=label.text_align,
                ))
    if export.crop_image and layout.dimension.has_crop:
        crop = layout.dimension.crop_box()
        logger.debug("Crop image to %s", crop)
        out.append(CropImage(crop))
    out.append(WriteImage(str(output)))
    return tuple(out)


def _safe_filename(name: str) -> str:
    cleaned = "".join("_" if ch in '/\\:*?"<>|' else ch for ch in name).strip()
    return cleaned or "region"


def unique_path(path: Path, taken: set[Path] | None = None) -> Path:
    """path, or path with -1, -2, ... appended to the stem, unused on disk and in taken."""
    taken = taken if taken is not None else set()
    candidate = path
    n = 0
    while candidate.exists() or candidate in taken:
        n += 1
        candidate = path.with_name(f"{path.stem}-{n}{path.suffix}")
    return candidate


def thumbnail_path(
    photo_path: str | Path,
    person: Person,
    index: int,
    filename_option: str,
    folder_option: str,
    taken: set[Path] | None = None,
) -> Path:
    """
    Output path of one person's thumbnail. index is 1-based.
    region_number: <stem>_NN<ext>; region_name: <name><ext>; file_unique: <stem><ext>.
    """
    photo_path = Path(photo_path)
    folder = photo_path.parent / "thumb" if folder_option == "thumb" else photo_path.parent
    if filename_option == "region_name":
        stem = _safe_filename(person.name)
    elif filename_option == "file_unique":
        stem = photo_path.stem
    else:
        stem = f"{photo_path.stem}_{index:02d}"
    return unique_path(folder / f"{stem}{photo_path.suffix}", taken)


def build_thumbnail_directives(
    source: str | Path,
    output: str | Path,
    people: Iterable[Person],
    settings: Settings,
) -> list[tuple[Directive, ...]]:
    """
    One (load, crop, write) sequence per person, cropped from source.
    File names are derived from output so thumbnails land beside the labelled photo.
    """
    export = settings.export
    taken: set[Path] = set()
    sequences: list[tuple[Directive, ...]] = []
    for i, person in enumerate(people, start=1):
        path = thumbnail_path(
            output,
            person,
            i,
            export.thumbnails_filename_option,
            export.thumbnails_folder_option,
            taken,
        )
        taken.add(path)
        sequences.append((LoadImage(str(source)), CropImage(person.box), WriteImage(str(path))))
        logger.debug("Thumbnail %r -> %s", person.name, path)
    return sequences
