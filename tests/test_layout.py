# tests/test_layout.py
"""
Per-photo layout: end-to-end from metadata to an optimised label set,
crop bounds, auto-optimise toggle and missing regions.
"""

from __future__ import annotations

import random

import pytest

from facelabel.core.config import Settings, with_export, with_label
from facelabel.core.error_codes import MISSING_DATA
from facelabel.core.layout import layout_bounds, layout_photo
from facelabel.core.types import Box, FaceRegion, PhotoDimension, PhotoMetadata, Position

NEIGHBOURS = (
    FaceRegion(0.35, 0.4375, 0.1, 0.125, name="Alexander Hamilton"),
    FaceRegion(0.46, 0.4375, 0.1, 0.125, name="Benjamin Franklin"),
)


def test_layout_resolves_neighbours(measurer) -> None:
    meta = PhotoMetadata(PhotoDimension(1000, 800), NEIGHBOURS)
    settings = with_label(Settings(), fixed_font_size=40)
    layout = layout_photo(meta, settings, measurer)
    assert layout.font_size == 40
    assert len(layout.labels) == 2
    assert layout.clashes_initial == 2
    assert layout.clashes_final == 0
    assert layout.resolved
    assert layout.overlap_area_px == 0.0
    assert layout.warnings == []


def test_layout_chooses_font_size(measurer) -> None:
    meta = PhotoMetadata(PhotoDimension(1000, 800), (FaceRegion(0.5, 0.5, 0.2, 0.3, name="Alice"),))
    layout = layout_photo(meta, Settings(), measurer)
    # average region 220 px on a 1000 px photo -> target 110 -> 22 pt
    assert layout.font_size == 22
    assert all(label.font_size == 22 for label in layout.labels)


def test_no_regions_gives_empty_layout(measurer) -> None:
    layout = layout_photo(PhotoMetadata(PhotoDimension(640, 480)), Settings(), measurer)
    assert layout.people == () and layout.labels == ()
    assert layout.font_size == Settings().label.font_size
    assert any(w.startswith(MISSING_DATA) for w in layout.warnings)


def test_auto_optimise_off_keeps_defaults_but_flags_clashes(measurer) -> None:
    meta = PhotoMetadata(PhotoDimension(1000, 800), NEIGHBOURS)
    settings = with_label(Settings(), fixed_font_size=40, auto_optimise=False)
    layout = layout_photo(meta, settings, measurer)
    assert all(label.position == Position.BELOW for label in layout.labels)
    assert layout.optimise_attempts == 0
    # labels overlap by 60 x 80 px and are reported as clashing
    assert [label.clash for label in layout.labels] == [True, True]
    assert layout.clashes_initial == layout.clashes_final == 2
    assert not layout.resolved
    assert layout.overlap_area_px == pytest.approx(4800.0)


def test_crop_bounds_used_when_cropping(measurer) -> None:
    dim = PhotoDimension(1000, 800, crop_top=0.25, crop_left=0.1, crop_bottom=0.75, crop_right=0.9, has_crop=True)
    assert layout_bounds(dim, crop_image=True) == Box(100, 200, 800, 400)
    assert layout_bounds(dim, crop_image=False) == Box(0, 0, 1000, 800)

    meta = PhotoMetadata(dim, (FaceRegion(0.5, 0.7, 0.1, 0.1, name="Dora"),))
    layout = layout_photo(meta, with_export(with_label(Settings(), fixed_font_size=40), crop_image=True), measurer)
    (label,) = layout.labels
    assert layout.bounds == Box(100, 200, 800, 400)
    assert label.box.bottom <= 600 - 5


def test_obfuscated_names(measurer) -> None:
    meta = PhotoMetadata(PhotoDimension(1000, 800), (FaceRegion(0.5, 0.5, 0.2, 0.3, name="Alice Smith"),))
    layout = layout_photo(meta, with_export(Settings(), obfuscate_labels=True), measurer, random.Random(0))
    (label,) = layout.labels
    assert label.text != "Alice Smith"
    assert len(label.text) == len("Alice Smith") and label.text[5] == " "
