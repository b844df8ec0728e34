# facelabel/core/types.py
"""
Dataclasses and enumerations for photo dimensions, face regions, people and labels.
Person and label boxes are pixel-space, axis-aligned, integer rectangles.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class Position(str, Enum):
    """Where a label sits relative to the face it names."""
    BELOW = "below"
    ABOVE = "above"
    LEFT = "left"
    RIGHT = "right"


class TextAlign(str, Enum):
    """Horizontal alignment of wrapped label lines."""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"

    @property
    def gravity(self) -> str:
        """ImageMagick gravity keyword for this alignment."""
        return {"left": "West", "center": "Center", "right": "East"}[self.value]


class Experiment(str, Enum):
    """Label format knob tried by the placement optimizer."""
    POSITION = "position"
    NUM_ROWS = "num_rows"
    REVERT_TO_DEFAULT = "revert_to_default_position"


@dataclass(frozen=True)
class Box:
    """Axis-aligned pixel rectangle; (x, y) is the top-left corner."""
    x: int
    y: int
    w: int
    h: int

    @property
    def left(self) -> int:
        return self.x

    @property
    def top(self) -> int:
        return self.y

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.w, self.h)


@dataclass(frozen=True)
class PhotoDimension:
    """
    Pixel size, orientation class and crop of one photo.
    Crop edges are normalized (0..1) fractions of width/height; crop_angle is degrees.
    """
    width: int
    height: int
    orientation: int = 0
    crop_top: float = 0.0
    crop_left: float = 0.0
    crop_bottom: float = 1.0
    crop_right: float = 1.0
    crop_angle: float = 0.0
    has_crop: bool = False

    def full_box(self) -> Box:
        return Box(0, 0, self.width, self.height)

    def crop_box(self) -> Box:
        """Crop rectangle in pixels; the full image when the photo has no crop."""
        if not self.has_crop:
            return self.full_box()
        x = int(round(self.width * self.crop_left))
        y = int(round(self.height * self.crop_top))
        w = int(round(self.width * (self.crop_right - self.crop_left)))
        h = int(round(self.height * (self.crop_bottom - self.crop_top)))
        return Box(x, y, max(0, w), max(0, h))


@dataclass(frozen=True)
class FaceRegion:
    """Normalized face region as supplied by the metadata service."""
    x_centre: float
    y_centre: float
    w: float
    h: float
    rotation: float = 0.0
    trotation: float = 0.0
    name: str | None = None


@dataclass(frozen=True)
class Person:
    """Named pixel-space face box derived from a FaceRegion."""
    name: str
    box: Box


@dataclass(frozen=True)
class Label:
    """
    Name annotation bound to a Person. Optimisation produces new Label values
    (dataclasses.replace) rather than mutating in place.
    """
    text: str
    person: Person
    position: Position
    text_align: TextAlign
    num_rows: int
    font_size: int
    box: Box = Box(0, 0, 0, 0)
    clash: bool = False

    def with_clash(self, clash: bool) -> "Label":
        return self if clash == self.clash else replace(self, clash=clash)


@dataclass(frozen=True)
class PhotoMetadata:
    """Everything the metadata service reports for one photo."""
    dimension: PhotoDimension
    regions: tuple[FaceRegion, ...] = ()
    description: str = ""


@dataclass
class PhotoLayout:
    """Result of laying out labels for one photo."""
    dimension: PhotoDimension
    bounds: Box
    people: tuple[Person, ...]
    labels: tuple[Label, ...]
    font_size: int
    clashes_initial: int = 0
    clashes_final: int = 0
    optimise_attempts: int = 0
    overlap_area_px: float = 0.0
    warnings: list[str] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.clashes_final == 0
