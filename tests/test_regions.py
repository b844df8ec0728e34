# tests/test_regions.py
"""
Region normalizer: normalized centre/size regions to pixel person boxes,
placeholder names, empty region lists and name obfuscation.
"""

from __future__ import annotations

import random

from facelabel.core.config import UNKNOWN_NAME
from facelabel.core.error_codes import MISSING_DATA
from facelabel.core.regions import obfuscate_people, randomise_string, region_to_person, regions_to_people
from facelabel.core.types import Box, FaceRegion, PhotoDimension


def test_centred_region_scenario() -> None:
    person = region_to_person(FaceRegion(0.5, 0.5, 0.2, 0.3, name="Alice"), PhotoDimension(1000, 800))
    assert person.name == "Alice"
    assert person.box == Box(400, 280, 200, 240)


def test_rounds_half_up() -> None:
    person = region_to_person(FaceRegion(0.5, 0.5, 0.5, 0.5), PhotoDimension(1001, 101))
    # 500.5 -> 501 and 50.5 -> 51
    assert person.box.w == 501
    assert person.box.h == 51


def test_region_near_edge_is_not_clamped() -> None:
    person = region_to_person(FaceRegion(0.0, 0.0, 0.2, 0.2), PhotoDimension(100, 100))
    assert person.box == Box(-10, -10, 20, 20)


def test_missing_name_uses_placeholder() -> None:
    assert region_to_person(FaceRegion(0.5, 0.5, 0.1, 0.1), PhotoDimension(100, 100)).name == UNKNOWN_NAME
    assert region_to_person(FaceRegion(0.5, 0.5, 0.1, 0.1, name=""), PhotoDimension(100, 100)).name == UNKNOWN_NAME


def test_people_keep_region_order() -> None:
    regions = [FaceRegion(0.2, 0.5, 0.1, 0.1, name="A"), FaceRegion(0.8, 0.5, 0.1, 0.1, name="B")]
    people = regions_to_people(regions, PhotoDimension(1000, 500))
    assert [p.name for p in people] == ["A", "B"]


def test_empty_regions_warn_but_do_not_fail() -> None:
    warnings: list[str] = []
    assert regions_to_people([], PhotoDimension(100, 100), warnings) == ()
    assert regions_to_people(None, PhotoDimension(100, 100)) == ()
    assert len(warnings) == 1 and warnings[0].startswith(MISSING_DATA)


def test_randomise_string_keeps_shape() -> None:
    out = randomise_string("Anna Maria 2nd", random.Random(1))
    assert len(out) == len("Anna Maria 2nd")
    assert out[4] == " " and out[10] == " "
    assert out[11].isdigit()
    assert all(ch.isalpha() for ch in out[:4])


def test_randomise_string_seeded_is_deterministic() -> None:
    assert randomise_string("Bob Smith", random.Random(7)) == randomise_string("Bob Smith", random.Random(7))


def test_obfuscate_people_keeps_boxes() -> None:
    people = regions_to_people([FaceRegion(0.5, 0.5, 0.2, 0.2, name="Carol")], PhotoDimension(100, 100))
    hidden = obfuscate_people(people, random.Random(3))
    assert hidden[0].box == people[0].box
    assert len(hidden[0].name) == len("Carol")
