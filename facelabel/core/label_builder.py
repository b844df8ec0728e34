"""
Label builder: derive each person's label box from its position variant,
row count and font size, clamped into the image bounds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from facelabel.core.config import LabelConfig, PhotoConfig
from facelabel.core.error_codes import UNKNOWN_VARIANT
from facelabel.core.geometry import keep_within_image
from facelabel.core.text_metrics import TextMeasurer
from facelabel.core.text_wrap import wrap_text
from facelabel.core.types import Box, Label, Person, Position, TextAlign

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutContext:
    """Per-photo working context: owned by one photo's processing, never shared."""
    bounds: Box
    people: tuple[Person, ...]
    label_config: LabelConfig
    photo_config: PhotoConfig
    measurer: TextMeasurer

    @property
    def margin(self) -> int:
        return self.photo_config.image_margin


def anchor_label(person_box: Box, w: int, h: int, position: Position) -> tuple[int, int, TextAlign]:
    """Top-left corner and text alignment of a w x h label next to person_box."""
    p = person_box
    if position == Position.BELOW:
        return p.x + p.w // 2 - w // 2, p.bottom, TextAlign.CENTER
    if position == Position.ABOVE:
        return p.x + p.w // 2 - w // 2, p.top - h, TextAlign.CENTER
    if position == Position.LEFT:
        return p.left - w, p.y + p.h // 2 - h // 2, TextAlign.RIGHT
    if position == Position.RIGHT:
        return p.right, p.y + p.h // 2 - h // 2, TextAlign.LEFT
    logger.warning("%s: unknown label position %r; using the face box", UNKNOWN_VARIANT, position)
    return p.x, p.y, TextAlign.CENTER


def measure_label(label: Label, ctx: LayoutContext) -> tuple[int, int]:
    """Pixel size of the label's wrapped text."""
    cfg = ctx.label_config
    return ctx.measurer.measure(
        wrap_text(label.text, label.num_rows),
        cfg.font_family,
        label.font_size,
        cfg.stroke_width,
    )


def place_label(label: Label, ctx: LayoutContext) -> Label:
    """Label with box and alignment recomputed from its position, rows and font size."""
    w, h = measure_label(label, ctx)
    x, y, align = anchor_label(label.person.box, w, h, label.position)
    x, y = keep_within_image(x, y, w, h, ctx.bounds, ctx.margin)
    return replace(label, box=Box(x, y, w, h), text_align=align)


def set_label_format(
    label: Label,
    ctx: LayoutContext,
    position: Position | None = None,
    num_rows: int | None = None,
    font_size: int | None = None,
) -> Label:
    """Change any of position / rows / font size and re-place the label."""
    changes = {}
    if position is not None:
        changes["position"] = position
    if num_rows is not None:
        changes["num_rows"] = num_rows
    if font_size is not None:
        changes["font_size"] = font_size
    return place_label(replace(label, **changes), ctx)


def build_labels(ctx: LayoutContext, font_size: int) -> tuple[Label, ...]:
    """One label per person at the configured default format, in person order."""
    cfg = ctx.label_config
    labels = []
    for person in ctx.people:
        label = Label(
            text=person.name,
            person=person,
            position=cfg.default_position,
            text_align=cfg.default_align,
            num_rows=cfg.default_num_rows,
            font_size=font_size,
        )
        labels.append(place_label(label, ctx))
        logger.debug("Label %r at %s", person.name, labels[-1].box)
    if not labels:
        logger.debug("No people, no labels")
    return tuple(labels)
