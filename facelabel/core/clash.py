"""
Clash detector: flag every label that overlaps another label or any face box.
O(n²) per pass; photos carry tens of faces, not thousands.
"""

from __future__ import annotations

import logging
from typing import Sequence

from facelabel.core.geometry import boxes_clash, overlap_area
from facelabel.core.types import Label, Person

logger = logging.getLogger(__name__)


def label_clashes(index: int, labels: Sequence[Label], people: Sequence[Person]) -> bool:
    """True if labels[index] overlaps another label (never itself) or any person box."""
    label = labels[index]
    clash = False
    for j, other in enumerate(labels):
        if j != index and boxes_clash(label.box, other.box):
            logger.debug("Label %r clashes with label %r", label.text, other.text)
            clash = True
    for person in people:
        if boxes_clash(label.box, person.box):
            logger.debug("Label %r clashes with person %r", label.text, person.name)
            clash = True
    return clash


def detect_clashes(labels: Sequence[Label], people: Sequence[Person]) -> tuple[Label, ...]:
    """Labels with clash flags recomputed against the full set."""
    return tuple(
        label.with_clash(label_clashes(i, labels, people))
        for i, label in enumerate(labels)
    )


def count_clashes(labels: Sequence[Label]) -> int:
    """Number of labels currently flagged as clashing."""
    return sum(1 for label in labels if label.clash)


def total_overlap_area(labels: Sequence[Label], people: Sequence[Person]) -> float:
    """Summed pairwise overlap (px²) of label/label and label/person pairs."""
    area = 0.0
    for i, label in enumerate(labels):
        for other in labels[i + 1:]:
            area += overlap_area(label.box, other.box)
        for person in people:
            area += overlap_area(label.box, person.box)
    return area
