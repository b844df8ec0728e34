# facelabel/core/geometry.py
"""
Geometry helpers: rectangle overlap, clamping into image bounds,
shapely conversion for overlap area metrics and debug drawing.
"""

from __future__ import annotations

from shapely.geometry import Polygon, box as shapely_box

from facelabel.core.types import Box


def boxes_clash(a: Box, b: Box) -> bool:
    """
    True if a and b overlap. Edge-touching boxes do not clash.
    Symmetric; self-pairs must be excluded by the caller.
    """
    separate = (
        a.right <= b.left
        or a.left >= b.right
        or a.bottom <= b.top
        or a.top >= b.bottom
    )
    return not separate


def keep_within_image(x: int, y: int, w: int, h: int, bounds: Box, margin: int) -> tuple[int, int]:
    """
    Shift (x, y) so a w x h box lies within bounds inset by margin.
    Size is never shrunk: boxes larger than the inset bounds end up pinned past the near edge.
    """
    if x < bounds.left + margin:
        x = bounds.left + margin
    if y < bounds.top + margin:
        y = bounds.top + margin
    if x + w > bounds.right - margin:
        x = bounds.right - margin - w
    if y + h > bounds.bottom - margin:
        y = bounds.bottom - margin - h
    return x, y


def fits_within(w: int, h: int, bounds: Box, margin: int) -> bool:
    """True if a w x h box fits inside bounds inset by margin on every side."""
    return w <= bounds.w - 2 * margin and h <= bounds.h - 2 * margin


def box_to_polygon(b: Box) -> Polygon:
    """Shapely polygon for a pixel box."""
    return shapely_box(b.left, b.top, b.right, b.bottom)


def overlap_area(a: Box, b: Box) -> float:
    """Intersection area (px²) of two boxes; 0 for touching or disjoint boxes."""
    if not boxes_clash(a, b):
        return 0.0
    return float(box_to_polygon(a).intersection(box_to_polygon(b)).area)

