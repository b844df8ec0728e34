# facelabel/core/reporting.py
"""
Create reports/<run_name>/ and write layout.json and run_metadata.json.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from facelabel.core.config import REPORTS_DIR, Settings
from facelabel.core.types import Box, Label, PhotoLayout

LAYOUT_SCHEMA_VERSION = 1


def _box_dict(b: Box) -> dict:
    return {"x": b.x, "y": b.y, "w": b.w, "h": b.h}


def _label_dict(label: Label) -> dict:
    return {
        "text": label.text,
        "person": label.person.name,
        "position": label.position.value,
        "text_align": label.text_align.value,
        "num_rows": label.num_rows,
        "font_size": label.font_size,
        "box": _box_dict(label.box),
        "clash": label.clash,
    }


def layout_to_dict(layout: PhotoLayout, photo: str = "") -> dict:
    """Exact structure for layout.json."""
    dim = layout.dimension
    return {
        "schema_version": LAYOUT_SCHEMA_VERSION,
        "photo": {
            "path": photo,
            "width": dim.width,
            "height": dim.height,
            "orientation": dim.orientation,
            "has_crop": dim.has_crop,
            "bounds": _box_dict(layout.bounds),
        },
        "font_size": layout.font_size,
        "people": [{"name": p.name, "box": _box_dict(p.box)} for p in layout.people],
        "labels": [_label_dict(label) for label in layout.labels],
        "summary": {
            "n_people": len(layout.people),
            "n_labels": len(layout.labels),
            "clashes_initial": layout.clashes_initial,
            "clashes_final": layout.clashes_final,
            "optimise_attempts": layout.optimise_attempts,
            "overlap_area_px": round(layout.overlap_area_px, 2),
            "resolved": layout.resolved,
        },
        "warnings": list(layout.warnings),
    }


def _jsonable(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def settings_to_dict(settings: Settings) -> dict:
    """Settings snapshot with enums as their string values."""
    return _jsonable(asdict(settings))


def run_metadata_dict(run_name: str, photo: str, settings: Settings, engine: str) -> dict:
    """Timestamp and config snapshot for run_metadata.json."""
    return {
        "run_name": run_name,
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "photo": photo,
        "engine": engine,
        "settings": settings_to_dict(settings),
    }


def ensure_report_dir(
    repo_root: Path,
    run_name: str,
    output_dir: str | None = None,
) -> Path:
    """Create output_dir/<run_name>/ under repo_root; return path. Default output_dir from config."""
    base = output_dir if output_dir is not None else REPORTS_DIR
    out = (repo_root / base).resolve() / run_name
    out.mkdir(parents=True, exist_ok=True)
    return out


def write_layout_json(report_dir: Path, layout: PhotoLayout, photo: str = "") -> Path:
    """Write layout.json to report_dir. Returns path to file."""
    path = report_dir / "layout.json"
    path.write_text(json.dumps(layout_to_dict(layout, photo), indent=2), encoding="utf-8")
    return path


def write_run_metadata_json(
    report_dir: Path,
    run_name: str,
    photo: str,
    settings: Settings,
    engine: str,
) -> Path:
    """Write run_metadata.json to report_dir."""
    path = report_dir / "run_metadata.json"
    data = run_metadata_dict(run_name, photo, settings, engine)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
