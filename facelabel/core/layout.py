# facelabel/core/layout.py
"""
Per-photo layout orchestration: regions -> people -> font size -> labels
-> clash detection -> placement optimizer.
Each call owns its people, labels and context; nothing is shared between photos.
"""

from __future__ import annotations

import logging
import random

from facelabel.core.clash import count_clashes, detect_clashes, total_overlap_area
from facelabel.core.config import Settings
from facelabel.core.font_size import select_font_size
from facelabel.core.label_builder import LayoutContext, build_labels
from facelabel.core.optimizer import optimise_labels
from facelabel.core.regions import obfuscate_people, regions_to_people
from facelabel.core.text_metrics import TextMeasurer
from facelabel.core.types import Box, PhotoDimension, PhotoLayout, PhotoMetadata

logger = logging.getLogger(__name__)


def layout_bounds(dimension: PhotoDimension, crop_image: bool) -> Box:
    """Rectangle labels are clamped into: the crop box when exporting cropped, else the full image."""
    if crop_image and dimension.has_crop:
        return dimension.crop_box()
    return dimension.full_box()


def layout_photo(
    metadata: PhotoMetadata,
    settings: Settings,
    measurer: TextMeasurer,
    rng: random.Random | None = None,
) -> PhotoLayout:
    """
    Lay out one label per face region of a photo.
    Degradations (no regions, measurement failure during sizing, unresolved clashes)
    are logged and recorded in PhotoLayout.warnings. A MeasurementError while
    building labels propagates: the photo cannot be labelled.
    """
    warnings: list[str] = []
    dimension = metadata.dimension
    people = regions_to_people(metadata.regions, dimension, warnings)
    if settings.export.obfuscate_labels:
        people = obfuscate_people(people, rng)
    logger.info("%d people on %dx%d photo", len(people), dimension.width, dimension.height)

    bounds = layout_bounds(dimension, settings.export.crop_image)
    font_size = select_font_size(
        people,
        bounds.w,
        settings.label,
        settings.photo,
        measurer,
        warnings,
    )

    ctx = LayoutContext(
        bounds=bounds,
        people=people,
        label_config=settings.label,
        photo_config=settings.photo,
        measurer=measurer,
    )
    labels = build_labels(ctx, font_size)

    layout = PhotoLayout(
        dimension=dimension,
        bounds=bounds,
        people=people,
        labels=labels,
        font_size=font_size,
        warnings=warnings,
    )
    if not settings.label.auto_optimise:
        layout.labels = detect_clashes(labels, people)
        layout.clashes_initial = layout.clashes_final = count_clashes(layout.labels)
        logger.info("Auto optimise off: labels left at default format, %d clash(es)", layout.clashes_final)
    elif labels:
        result = optimise_labels(labels, ctx, warnings)
        layout.labels = result.labels
        layout.clashes_initial = result.clashes_before
        layout.clashes_final = result.clashes_after
        layout.optimise_attempts = result.attempts
    layout.overlap_area_px = total_overlap_area(layout.labels, people)
    return layout

