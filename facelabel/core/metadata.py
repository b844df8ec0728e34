# facelabel/core/metadata.py
"""
Read photo dimensions, orientation, crop and MWG face regions.
Source is ExifTool's `-struct -j` JSON, either by running exiftool or from a
<photo>.json sidecar of the same shape.
Missing dimensions raise MetadataError; a missing region list is zero regions.
"""

from __future__ import annotations

import json
import logging
import math
import subprocess
from pathlib import Path
from typing import Any, Protocol

from facelabel.core.config import EXIFTOOL_APP, SIDECAR_SUFFIX, TOOL_TIMEOUT_S
from facelabel.core.error_codes import MISSING_DATA, UNKNOWN_VARIANT, MetadataError
from facelabel.core.types import FaceRegion, PhotoDimension, PhotoMetadata

logger = logging.getLogger(__name__)

EXIFTOOL_TAGS: tuple[str, ...] = (
    "-ImageWidth",
    "-ImageHeight",
    "-Orientation",
    "-HasCrop",
    "-CropTop",
    "-CropLeft",
    "-CropBottom",
    "-CropRight",
    "-CropAngle",
    "-Description",
    "-XMP-mwg-rs:RegionInfo",
)

# EXIF numeric orientation codes (mirrored variants map to their rotation)
_ORIENTATION_CODES = {1: 0, 2: 0, 3: 180, 4: 180, 5: 270, 6: 90, 7: 90, 8: 270}

# Region rotation (radians) implied by each orientation class
_ORIENTATION_RADIANS = {0: 0.0, 90: math.radians(-90), 180: math.radians(180), 270: math.radians(90)}


class MetadataReader(Protocol):
    def read(self, photo_path: str | Path) -> PhotoMetadata:
        ...


def parse_orientation(value: Any) -> int:
    """Map ExifTool orientation text or an EXIF code to 0/90/180/270."""
    if value is None or value == "":
        return 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _ORIENTATION_CODES.get(int(value), 0)
    text = str(value).strip()
    if text.isdigit():
        return _ORIENTATION_CODES.get(int(text), 0)
    if "Horizontal" in text:
        return 0
    if "90" in text:
        return 90
    if "180" in text:
        return 180
    if "270" in text:
        return 270
    logger.warning("%s: unknown orientation %r; assuming horizontal", UNKNOWN_VARIANT, value)
    return 0


def _as_float(value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _as_int(value: Any) -> int | None:
    try:
        n = int(float(value))
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def parse_dimension(record: dict[str, Any]) -> PhotoDimension:
    """PhotoDimension from one record; falls back to RegionInfo.AppliedToDimensions for size."""
    width = _as_int(record.get("ImageWidth"))
    height = _as_int(record.get("ImageHeight"))
    if width is None or height is None:
        applied = (record.get("RegionInfo") or {}).get("AppliedToDimensions") or {}
        width = width or _as_int(applied.get("W"))
        height = height or _as_int(applied.get("H"))
    if width is None or height is None:
        raise MetadataError(f"No image dimensions in metadata for {record.get('SourceFile', '?')}")
    return PhotoDimension(
        width=width,
        height=height,
        orientation=parse_orientation(record.get("Orientation")),
        crop_top=_as_float(record.get("CropTop"), 0.0),
        crop_left=_as_float(record.get("CropLeft"), 0.0),
        crop_bottom=_as_float(record.get("CropBottom"), 1.0),
        crop_right=_as_float(record.get("CropRight"), 1.0),
        crop_angle=_as_float(record.get("CropAngle"), 0.0),
        has_crop=_as_bool(record.get("HasCrop", False)),
    )


def parse_regions(record: dict[str, Any], dimension: PhotoDimension) -> tuple[FaceRegion, ...]:
    """Face regions (Type 'Face' or untyped) from RegionInfo.RegionList, in list order."""
    region_list = (record.get("RegionInfo") or {}).get("RegionList") or []
    rotation = _ORIENTATION_RADIANS.get(dimension.orientation, 0.0) + math.radians(dimension.crop_angle)
    regions = []
    for i, entry in enumerate(region_list):
        kind = entry.get("Type")
        if kind and kind != "Face":
            continue
        area = entry.get("Area") or {}
        try:
            x, y, w, h = (float(area[k]) for k in ("X", "Y", "W", "H"))
        except (KeyError, TypeError, ValueError):
            logger.warning("%s: region %d has no usable Area; skipped", MISSING_DATA, i)
            continue
        regions.append(FaceRegion(
            x_centre=x,
            y_centre=y,
            w=w,
            h=h,
            rotation=rotation,
            trotation=_as_float(entry.get("Rotation"), 0.0),
            name=entry.get("Name") or None,
        ))
    return tuple(regions)


def parse_exiftool_record(record: dict[str, Any]) -> PhotoMetadata:
    """PhotoMetadata from one ExifTool `-struct -j` record."""
    if not isinstance(record, dict):
        raise MetadataError(f"Unexpected metadata record: {type(record).__name__}")
    dimension = parse_dimension(record)
    regions = parse_regions(record, dimension)
    logger.info("%d face region(s) in %s", len(regions), record.get("SourceFile", "photo"))
    return PhotoMetadata(
        dimension=dimension,
        regions=regions,
        description=str(record.get("Description") or ""),
    )


def _first_record(data: Any, source: str) -> dict[str, Any]:
    if isinstance(data, list):
        if not data:
            raise MetadataError(f"No metadata records from {source}")
        data = data[0]
    if not isinstance(data, dict):
        raise MetadataError(f"Unexpected metadata from {source}")
    return data


class ExifToolReader:
    """One blocking `exiftool -struct -j` call per photo."""

    def __init__(self, app: str = EXIFTOOL_APP, timeout: float = TOOL_TIMEOUT_S) -> None:
        self.app = app
        self.timeout = timeout

    def command(self, photo_path: str | Path) -> list[str]:
        return [self.app, "-struct", "-j", *EXIFTOOL_TAGS, str(photo_path)]

    def read(self, photo_path: str | Path) -> PhotoMetadata:
        cmd = self.command(photo_path)
        logger.debug("exiftool: %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout, check=False)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise MetadataError(f"{self.app} not reachable: {e}") from e
        if proc.returncode != 0:
            raise MetadataError(f"{self.app} exited {proc.returncode}: {proc.stderr.strip()}")
        try:
            data = json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            raise MetadataError(f"{self.app} returned invalid JSON: {e}") from e
        return parse_exiftool_record(_first_record(data, str(photo_path)))


def sidecar_path(photo_path: str | Path) -> Path:
    p = Path(photo_path)
    return p.with_name(p.name + SIDECAR_SUFFIX)


class SidecarMetadataReader:
    """Reads <photo>.json (ExifTool -j shape: a record or a list of records)."""

    def read(self, photo_path: str | Path) -> PhotoMetadata:
        path = sidecar_path(photo_path)
        if not path.exists():
            raise MetadataError(f"Metadata sidecar not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise MetadataError(f"Cannot read {path}: {e}") from e
        return parse_exiftool_record(_first_record(data, str(path)))
