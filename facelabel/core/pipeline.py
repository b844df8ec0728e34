# facelabel/core/pipeline.py
"""
Single-photo pipeline: metadata -> layout -> thumbnails -> labelled photo.
Photo-level failures come back as a PhotoResult with status "error";
degradations only add warnings.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence

from facelabel.core.config import Settings
from facelabel.core.directives import Directive, build_label_directives, build_thumbnail_directives
from facelabel.core.error_codes import FaceLabelError
from facelabel.core.layout import layout_photo
from facelabel.core.metadata import MetadataReader
from facelabel.core.text_metrics import CachingMeasurer
from facelabel.core.types import PhotoLayout

logger = logging.getLogger(__name__)


class RenderingEngine(Protocol):
    def measure(self, text: str, font_family: str, font_size: int, stroke_width: int) -> tuple[int, int]:
        ...

    def render(self, directives: Sequence[Directive]) -> None:
        ...


@dataclass
class PhotoResult:
    """Outcome of labelling one photo."""
    photo: str
    output: str
    status: str = "ok"
    layout: PhotoLayout | None = None
    outputs: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error_key: str | None = None
    error: str | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def label_photo(
    photo: str | Path,
    output: str | Path,
    reader: MetadataReader,
    engine: RenderingEngine,
    settings: Settings,
    rng: random.Random | None = None,
) -> PhotoResult:
    """
    Label one photo and write it to output (plus thumbnails when enabled).
    Thumbnails are cut from the unlabelled source before labelling.
    """
    t0 = time.perf_counter()
    result = PhotoResult(photo=str(photo), output=str(output))
    try:
        metadata = reader.read(photo)
        layout = layout_photo(metadata, settings, CachingMeasurer(engine), rng)
        result.layout = layout
        result.warnings.extend(layout.warnings)

        if settings.export.export_thumbnails:
            for sequence in build_thumbnail_directives(photo, output, layout.people, settings):
                engine.render(sequence)
                result.outputs.append(sequence[-1].path)
            logger.info("%d thumbnail(s) written", len(layout.people))

        engine.render(build_label_directives(photo, output, layout, settings))
        result.outputs.append(str(output))
    except FaceLabelError as e:
        result.status = "error"
        result.error_key = e.error_key
        result.error = str(e)
        logger.error("%s: %s (%s)", photo, e, e.error_key)
    result.duration_ms = int((time.perf_counter() - t0) * 1000)
    if result.ok:
        logger.info("Labelled %s -> %s in %d ms", photo, output, result.duration_ms)
    return result
