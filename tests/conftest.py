# tests/conftest.py
"""
Shared fixtures: deterministic text measurer and small photo builders.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from facelabel.core.config import LabelConfig, PhotoConfig
from facelabel.core.label_builder import LayoutContext
from facelabel.core.regions import regions_to_people
from facelabel.core.types import FaceRegion, PhotoDimension


class StubMeasurer:
    """Each character is half the font size wide; each line is font size tall."""

    def __init__(self) -> None:
        self.calls = 0

    def measure(self, text: str, font_family: str, font_size: int, stroke_width: int) -> tuple[int, int]:
        self.calls += 1
        lines = text.split("\n")
        return max(len(line) for line in lines) * font_size // 2, len(lines) * font_size


@pytest.fixture
def measurer() -> StubMeasurer:
    return StubMeasurer()


@pytest.fixture
def make_ctx(measurer):
    """Build a LayoutContext for a photo of the given size and regions."""
    def _make(width: int, height: int, regions: list[FaceRegion], label_config: LabelConfig | None = None) -> LayoutContext:
        dim = PhotoDimension(width, height)
        return LayoutContext(
            bounds=dim.full_box(),
            people=regions_to_people(regions, dim),
            label_config=label_config or LabelConfig(),
            photo_config=PhotoConfig(),
            measurer=measurer,
        )
    return _make


def exiftool_record(width: int, height: int, regions: list[dict], **extra) -> dict:
    """One record in `exiftool -struct -j` shape."""
    record = {
        "SourceFile": "photo.jpg",
        "ImageWidth": width,
        "ImageHeight": height,
        "Orientation": "Horizontal (normal)",
        "RegionInfo": {
            "AppliedToDimensions": {"W": width, "H": height, "Unit": "pixel"},
            "RegionList": regions,
        },
    }
    record.update(extra)
    return record


def face(name: str | None, x: float, y: float, w: float, h: float) -> dict:
    entry = {"Area": {"X": x, "Y": y, "W": w, "H": h, "Unit": "normalized"}, "Type": "Face"}
    if name is not None:
        entry["Name"] = name
    return entry


def write_photo(path: Path, width: int, height: int, regions: list[dict]) -> Path:
    """Plain grey PNG/JPEG plus its <photo>.json sidecar."""
    from PIL import Image

    Image.new("RGB", (width, height), (120, 120, 120)).save(path)
    sidecar = path.with_name(path.name + ".json")
    sidecar.write_text(json.dumps([exiftool_record(width, height, regions)]), encoding="utf-8")
    return path
