"""
Region normalizer: normalized face regions + photo dimension -> pixel-space people.
No clamping here; keeping labels inside the image is a placement concern.
"""

from __future__ import annotations

import logging
import random
import string
from typing import Iterable

from facelabel.core.config import UNKNOWN_NAME
from facelabel.core.error_codes import MISSING_DATA
from facelabel.core.types import Box, FaceRegion, Person, PhotoDimension

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    # floor(v + 0.5): Python's round() is banker's rounding
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def region_to_person(region: FaceRegion, dimension: PhotoDimension) -> Person:
    """Scale a normalized centre/size region to a pixel box, rounding to the nearest pixel."""
    name = region.name if region.name else UNKNOWN_NAME
    w = _round_half_up(dimension.width * region.w)
    h = _round_half_up(dimension.height * region.h)
    x_centre = dimension.width * region.x_centre
    y_centre = dimension.height * region.y_centre
    x = _round_half_up(x_centre - w / 2)
    y = _round_half_up(y_centre - h / 2)
    logger.debug("Person %r: x=%d y=%d w=%d h=%d", name, x, y, w, h)
    return Person(name=name, box=Box(x, y, w, h))


def regions_to_people(
    regions: Iterable[FaceRegion] | None,
    dimension: PhotoDimension,
    warnings: list[str] | None = None,
) -> tuple[Person, ...]:
    """
    One Person per region, in region order. A missing or empty region list
    yields no people and a logged missing-data warning.
    """
    people = tuple(region_to_person(r, dimension) for r in (regions or ()))
    if not people:
        logger.warning("%s: no face regions for photo", MISSING_DATA)
        if warnings is not None:
            warnings.append(f"{MISSING_DATA}: no face regions")
    return people


def randomise_string(s: str, rng: random.Random | None = None) -> str:
    """
    Obfuscate s keeping its shape: spaces stay spaces, digits become random digits,
    everything else becomes a random letter.
    """
    rng = rng or random.Random()
    out = []
    for ch in s:
        if ch == " ":
            out.append(" ")
        elif ch.isdigit():
            out.append(rng.choice(string.digits))
        else:
            out.append(rng.choice(string.ascii_letters))
    return "".join(out)


def obfuscate_people(people: tuple[Person, ...], rng: random.Random | None = None) -> tuple[Person, ...]:
    """Copy of people with names replaced by random strings of the same shape."""
    rng = rng or random.Random()
    return tuple(Person(name=randomise_string(p.name, rng), box=p.box) for p in people)
