# facelabel/core/config.py
"""
Central configuration for face label layout and export.
All tunable values live here; no magic numbers in other modules.
Settings are explicit per-photo values (LabelConfig, PhotoConfig, ExportOptions)
passed into every operation; nothing here is mutated at runtime.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from facelabel.core.error_codes import UNKNOWN_VARIANT
from facelabel.core.types import Experiment, Position, TextAlign

logger = logging.getLogger(__name__)

# ----- Paths -----
REPORTS_DIR: str = "reports"
SIDECAR_SUFFIX: str = ".json"
"""Metadata sidecar next to a photo: <photo><SIDECAR_SUFFIX> (exiftool -j shape)."""

IMAGE_SUFFIXES: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".tif", ".tiff")
"""Photo file types picked up by batch mode."""

# ----- External tools -----
EXIFTOOL_APP: str = os.environ.get("FACELABEL_EXIFTOOL", "exiftool")
MAGICK_APP: str = os.environ.get("FACELABEL_MAGICK", "magick")
TOOL_TIMEOUT_S: float = 30.0
"""Timeout (s) for one exiftool or ImageMagick invocation."""

# ----- Label typography -----
DEFAULT_FONT_FAMILY: str = "Courier"
DEFAULT_FONT_COLOUR: str = "white"
DEFAULT_STROKE_WIDTH: int = 1
DEFAULT_UNDERCOLOUR: str = "#00000080"
"""Semi-transparent box drawn behind label text."""

DEFAULT_FONT_SIZE: int = 40
"""Starting point (pt) for the font size search; kept when there are no people."""

FONT_SIZE_STEP: int = 2
"""Step (pt) of the font size search. First crossing of the target width is accepted."""

MIN_FONT_SIZE: int = 1
MAX_FONT_SIZE_ITERATIONS: int = 500
"""Loop guard for the font size search."""

UNKNOWN_NAME: str = "Unknown"
"""Label text for a face region without a name."""

# ----- Label format defaults and experiments -----
DEFAULT_POSITION: Position = Position.BELOW
DEFAULT_ALIGN: TextAlign = TextAlign.CENTER
DEFAULT_NUM_ROWS: int = 3

FORMAT_EXPERIMENTS: tuple[Experiment, ...] = (
    Experiment.POSITION,
    Experiment.NUM_ROWS,
    Experiment.REVERT_TO_DEFAULT,
)
"""Knobs tried by the optimizer. Consumed from the end: the last one is the outermost loop."""

POSITION_CANDIDATES: tuple[Position, ...] = (
    Position.BELOW,
    Position.ABOVE,
    Position.LEFT,
    Position.RIGHT,
)
NUM_ROWS_CANDIDATES: tuple[int, ...] = (1, 2, 3, 4, 5)

MAX_OPTIMISE_ATTEMPTS: int = 2
"""Global sweeps: insertion order first, reversed order second."""

# ----- Photo -----
IMAGE_MARGIN: int = 5
"""Labels never come closer than this (px) to the image edge."""

LABEL_OUTLINE_COLOUR: str = "red"
LABEL_OUTLINE_WIDTH: int = 1
FACE_OUTLINE_COLOUR: str = "blue"
FACE_OUTLINE_WIDTH: int = 2

IMAGE_WIDTH_TO_REGION_RATIO_SMALL: float = 20.0
"""Regions narrower than image_width / this are 'small'."""

IMAGE_WIDTH_TO_REGION_RATIO_LARGE: float = 5.0
"""Regions wider than image_width / this are 'large'."""

LABEL_WIDTH_TO_REGION_RATIO_SMALL: float = 2.0
"""Target test-label width as a multiple of region size, small regions."""

LABEL_WIDTH_TO_REGION_RATIO_LARGE: float = 0.5
"""Target test-label width as a multiple of region size, large regions."""

TEST_LABEL: str = "Test Label"
"""String measured by the font size search."""

# ----- Image export -----
OBFUSCATE_COLORIZE_PERCENT: int = 95
THUMBNAIL_FILENAME_OPTIONS: tuple[str, ...] = ("region_number", "region_name", "file_unique")
THUMBNAIL_FOLDER_OPTIONS: tuple[str, ...] = ("thumb", "same")

# ----- Debug rendering -----
RENDER_WIDTH_PX: int = 800
RENDER_HEIGHT_PX: int = 600


@dataclass(frozen=True)
class LabelConfig:
    """Typography, label defaults and optimizer experiment lists."""
    font_family: str = DEFAULT_FONT_FAMILY
    font_colour: str = DEFAULT_FONT_COLOUR
    stroke_width: int = DEFAULT_STROKE_WIDTH
    undercolour: str = DEFAULT_UNDERCOLOUR
    font_size: int = DEFAULT_FONT_SIZE
    font_size_step: int = FONT_SIZE_STEP
    fixed_font_size: int | None = None
    default_position: Position = DEFAULT_POSITION
    default_align: TextAlign = DEFAULT_ALIGN
    default_num_rows: int = DEFAULT_NUM_ROWS
    format_experiments: tuple[Experiment, ...] = FORMAT_EXPERIMENTS
    position_candidates: tuple[Position, ...] = POSITION_CANDIDATES
    num_rows_candidates: tuple[int, ...] = NUM_ROWS_CANDIDATES
    auto_optimise: bool = True
    max_optimise_attempts: int = MAX_OPTIMISE_ATTEMPTS


@dataclass(frozen=True)
class PhotoConfig:
    """Margin, debug outline styling and font-size ratio thresholds."""
    image_margin: int = IMAGE_MARGIN
    label_outline_colour: str = LABEL_OUTLINE_COLOUR
    label_outline_width: int = LABEL_OUTLINE_WIDTH
    face_outline_colour: str = FACE_OUTLINE_COLOUR
    face_outline_width: int = FACE_OUTLINE_WIDTH
    image_width_to_region_ratio_small: float = IMAGE_WIDTH_TO_REGION_RATIO_SMALL
    image_width_to_region_ratio_large: float = IMAGE_WIDTH_TO_REGION_RATIO_LARGE
    label_width_to_region_ratio_small: float = LABEL_WIDTH_TO_REGION_RATIO_SMALL
    label_width_to_region_ratio_large: float = LABEL_WIDTH_TO_REGION_RATIO_LARGE
    test_label: str = TEST_LABEL


@dataclass(frozen=True)
class ExportOptions:
    """What gets drawn onto / written alongside the exported photo."""
    label_image: bool = True
    draw_label_text: bool = True
    draw_face_outlines: bool = False
    draw_label_boxes: bool = False
    obfuscate_labels: bool = False
    obfuscate_image: bool = False
    remove_exif: bool = False
    crop_image: bool = False
    export_thumbnails: bool = False
    thumbnails_filename_option: str = "region_number"
    thumbnails_folder_option: str = "thumb"


@dataclass(frozen=True)
class Settings:
    """One bundle of per-photo configuration, owned by the caller."""
    label: LabelConfig = field(default_factory=LabelConfig)
    photo: PhotoConfig = field(default_factory=PhotoConfig)
    export: ExportOptions = field(default_factory=ExportOptions)


def parse_position(value: Any, default: Position = DEFAULT_POSITION) -> Position:
    """Map external input to a Position; unrecognised values fall back to default."""
    try:
        return Position(str(value).strip().lower())
    except ValueError:
        logger.warning("%s: unknown label position %r; using %s", UNKNOWN_VARIANT, value, default.value)
        return default


def parse_align(value: Any, default: TextAlign = DEFAULT_ALIGN) -> TextAlign:
    """Map external input to a TextAlign; unrecognised values fall back to default."""
    try:
        return TextAlign(str(value).strip().lower())
    except ValueError:
        logger.warning("%s: unknown text alignment %r; using %s", UNKNOWN_VARIANT, value, default.value)
        return default


def parse_experiments(values: Any) -> tuple[Experiment, ...]:
    """Parse the experiment order list, dropping unknown entries."""
    out: list[Experiment] = []
    for v in values or []:
        try:
            out.append(Experiment(str(v).strip().lower()))
        except ValueError:
            logger.warning("%s: unknown experiment %r; skipped", UNKNOWN_VARIANT, v)
    return tuple(out) if out else FORMAT_EXPERIMENTS


def _coerce(cls: type, data: dict[str, Any], section: str) -> dict[str, Any]:
    """Keep only fields known to cls; warn on the rest."""
    known = {f.name for f in fields(cls)}
    out: dict[str, Any] = {}
    for key, value in (data or {}).items():
        if key not in known:
            logger.warning("Ignoring unknown %s setting %r", section, key)
            continue
        out[key] = value
    return out


def settings_from_dict(data: dict[str, Any]) -> Settings:
    """Build Settings from a dict with optional 'label', 'photo' and 'export' sections."""
    label_kw = _coerce(LabelConfig, data.get("label", {}), "label")
    if "default_position" in label_kw:
        label_kw["default_position"] = parse_position(label_kw["default_position"])
    if "default_align" in label_kw:
        label_kw["default_align"] = parse_align(label_kw["default_align"])
    if "format_experiments" in label_kw:
        label_kw["format_experiments"] = parse_experiments(label_kw["format_experiments"])
    if "position_candidates" in label_kw:
        parsed = [parse_position(p) for p in label_kw["position_candidates"]]
        label_kw["position_candidates"] = tuple(dict.fromkeys(parsed)) or POSITION_CANDIDATES
    if "num_rows_candidates" in label_kw:
        rows = tuple(int(n) for n in label_kw["num_rows_candidates"] if int(n) > 0)
        label_kw["num_rows_candidates"] = rows or NUM_ROWS_CANDIDATES

    photo_kw = _coerce(PhotoConfig, data.get("photo", {}), "photo")
    export_kw = _coerce(ExportOptions, data.get("export", {}), "export")
    if export_kw.get("thumbnails_filename_option", "region_number") not in THUMBNAIL_FILENAME_OPTIONS:
        logger.warning("%s: unknown thumbnail filename option; using region_number", UNKNOWN_VARIANT)
        export_kw["thumbnails_filename_option"] = "region_number"
    if export_kw.get("thumbnails_folder_option", "thumb") not in THUMBNAIL_FOLDER_OPTIONS:
        logger.warning("%s: unknown thumbnail folder option; using thumb", UNKNOWN_VARIANT)
        export_kw["thumbnails_folder_option"] = "thumb"

    return Settings(
        label=LabelConfig(**label_kw),
        photo=PhotoConfig(**photo_kw),
        export=ExportOptions(**export_kw),
    )


def load_settings(path: str | Path | None) -> Settings:
    """Read settings JSON; defaults when path is None."""
    if path is None:
        return Settings()
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Settings file not found: {p}")
    return settings_from_dict(json.loads(p.read_text(encoding="utf-8")))


def with_export(settings: Settings, **changes: Any) -> Settings:
    """Copy of settings with some ExportOptions fields replaced (CLI overrides)."""
    return replace(settings, export=replace(settings.export, **changes))


def with_label(settings: Settings, **changes: Any) -> Settings:
    """Copy of settings with some LabelConfig fields replaced (CLI overrides)."""
    return replace(settings, label=replace(settings.label, **changes))
