# tests/test_label_builder.py
"""
Label builder: anchoring per position, alignment, clamping into the image
and re-placement when the format changes.
"""

from __future__ import annotations

import pytest

from facelabel.core.config import LabelConfig
from facelabel.core.label_builder import anchor_label, build_labels, set_label_format
from facelabel.core.types import Box, FaceRegion, Position, TextAlign

PERSON = Box(400, 280, 200, 240)


def test_scenario_below_label(make_ctx) -> None:
    ctx = make_ctx(1000, 800, [FaceRegion(0.5, 0.5, 0.2, 0.3, name="Alice")])
    assert ctx.people[0].box == PERSON
    (label,) = build_labels(ctx, 40)
    # "Alice" -> 5 chars * 20 px, one line of 40 px
    assert label.box.top == 520
    assert label.box.x + label.box.w / 2 == pytest.approx(500)
    assert 5 <= label.box.left and label.box.right <= 995
    assert 5 <= label.box.top and label.box.bottom <= 795
    assert label.position == Position.BELOW
    assert label.text_align == TextAlign.CENTER
    assert label.num_rows == 3
    assert label.font_size == 40


@pytest.mark.parametrize(
    "position,expected",
    [
        (Position.BELOW, (450, 520, TextAlign.CENTER)),
        (Position.ABOVE, (450, 240, TextAlign.CENTER)),
        (Position.LEFT, (300, 380, TextAlign.RIGHT)),
        (Position.RIGHT, (600, 380, TextAlign.LEFT)),
    ],
)
def test_anchor_positions(position: Position, expected: tuple) -> None:
    assert anchor_label(PERSON, 100, 40, position) == expected


def test_unknown_position_falls_back_to_person_box() -> None:
    assert anchor_label(PERSON, 100, 40, "sideways") == (400, 280, TextAlign.CENTER)


def test_label_clamped_at_bottom_edge(make_ctx) -> None:
    # face touching the bottom: a label below would leave the image
    ctx = make_ctx(1000, 800, [FaceRegion(0.5, 0.9, 0.1, 0.2, name="Bob")])
    (label,) = build_labels(ctx, 40)
    assert label.box.bottom == 800 - 5


def test_label_clamped_at_left_edge(make_ctx) -> None:
    ctx = make_ctx(1000, 800, [FaceRegion(0.02, 0.5, 0.04, 0.1, name="Christopher")])
    (label,) = build_labels(ctx, 40)
    assert label.box.left == 5


def test_set_label_format_repositions(make_ctx) -> None:
    ctx = make_ctx(1000, 800, [FaceRegion(0.5, 0.5, 0.2, 0.3, name="Mary Ann Smith")])
    (label,) = build_labels(ctx, 40)
    # three rows: "Mary" / "Ann" / "Smith"
    assert label.box.w == 5 * 20 and label.box.h == 3 * 40
    right = set_label_format(label, ctx, position=Position.RIGHT, num_rows=1)
    assert right.position == Position.RIGHT
    assert right.text_align == TextAlign.LEFT
    assert right.box.left == PERSON.right
    assert right.box.w == len("Mary Ann Smith") * 20 and right.box.h == 40
    # original value untouched
    assert label.position == Position.BELOW


def test_set_label_format_font_size(make_ctx) -> None:
    ctx = make_ctx(1000, 800, [FaceRegion(0.5, 0.5, 0.2, 0.3, name="Alice")])
    (label,) = build_labels(ctx, 40)
    bigger = set_label_format(label, ctx, font_size=60)
    assert bigger.font_size == 60 and bigger.box.w == 5 * 30


def test_default_format_from_config(make_ctx) -> None:
    cfg = LabelConfig(default_position=Position.ABOVE, default_num_rows=1)
    ctx = make_ctx(1000, 800, [FaceRegion(0.5, 0.5, 0.2, 0.3, name="Alice")], cfg)
    (label,) = build_labels(ctx, 40)
    assert label.position == Position.ABOVE
    assert label.box.bottom == PERSON.top


def test_no_people_no_labels(make_ctx) -> None:
    assert build_labels(make_ctx(100, 100, []), 40) == ()
