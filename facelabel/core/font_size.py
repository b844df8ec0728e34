"""
Font size selector: one size per photo, chosen so a fixed test string
measures close to a target width derived from the average face size.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from facelabel.core.config import MAX_FONT_SIZE_ITERATIONS, MIN_FONT_SIZE, LabelConfig, PhotoConfig
from facelabel.core.error_codes import MEASUREMENT_FAILURE, MeasurementError
from facelabel.core.text_metrics import TextMeasurer
from facelabel.core.types import Person

logger = logging.getLogger(__name__)


def average_region_size(people: Sequence[Person]) -> float | None:
    """Mean of width and height over all people: sum(w + h) / (2 * count). None without people."""
    if not people:
        return None
    sizes = np.array([[p.box.w, p.box.h] for p in people], dtype=float)
    return float(sizes.mean())


def target_label_width(average_size: float, image_width: int, photo_config: PhotoConfig) -> float:
    """
    Target test-label width. Small regions (relative to the image) get a wider
    label than the region, large regions a narrower one, others match the region.
    """
    if average_size < image_width / photo_config.image_width_to_region_ratio_small:
        return average_size * photo_config.label_width_to_region_ratio_small
    if average_size > image_width / photo_config.image_width_to_region_ratio_large:
        return average_size * photo_config.label_width_to_region_ratio_large
    return average_size


def select_font_size(
    people: Sequence[Person],
    image_width: int,
    label_config: LabelConfig,
    photo_config: PhotoConfig,
    measurer: TextMeasurer,
    warnings: list[str] | None = None,
) -> int:
    """
    Step the font size by label_config.font_size_step from label_config.font_size
    until the test label's width first crosses the target; no refinement after the
    crossing. Without people (or with a fixed size configured) no search is run.
    A measurement failure stops the search and keeps the last size that measured.
    """
    if label_config.fixed_font_size:
        logger.debug("Fixed font size %d", label_config.fixed_font_size)
        return int(label_config.fixed_font_size)

    font_size = int(label_config.font_size)
    average_size = average_region_size(people)
    if not average_size or average_size <= 0:
        return font_size

    target = target_label_width(average_size, image_width, photo_config)
    step = max(1, int(label_config.font_size_step))
    logger.debug("Font size search: average region %.1f px, target width %.1f px", average_size, target)

    def width_at(size: int) -> int:
        w, _ = measurer.measure(photo_config.test_label, label_config.font_family, size, label_config.stroke_width)
        return w

    try:
        width = width_at(font_size)
        iterations = 0
        if width < target:
            while width < target and iterations < MAX_FONT_SIZE_ITERATIONS:
                candidate = font_size + step
                width = width_at(candidate)
                font_size = candidate
                iterations += 1
        else:
            while width > target and font_size - step >= MIN_FONT_SIZE and iterations < MAX_FONT_SIZE_ITERATIONS:
                candidate = font_size - step
                width = width_at(candidate)
                font_size = candidate
                iterations += 1
    except MeasurementError as e:
        logger.warning("%s: font size search stopped at %d pt: %s", MEASUREMENT_FAILURE, font_size, e)
        if warnings is not None:
            warnings.append(f"{MEASUREMENT_FAILURE}: font size search stopped at {font_size} pt")

    logger.info("Chosen font size: %d", font_size)
    return font_size
