# facelabel/core/batch.py
"""
Batch mode: label a directory of photos or a CSV manifest.
Output: reports/batch_<run_name>/index.csv and cases/<case_id>/ with the
labelled photo, layout.json, run_metadata.json and debug.png.
One failing photo becomes an error row; the batch continues.
"""

from __future__ import annotations

import csv
import logging
import random
from pathlib import Path

from facelabel.core.config import IMAGE_SUFFIXES, REPORTS_DIR, Settings
from facelabel.core.error_codes import PHOTO_FAILED
from facelabel.core.metadata import MetadataReader
from facelabel.core.pipeline import PhotoResult, RenderingEngine, label_photo
from facelabel.core.render import render_debug
from facelabel.core.reporting import ensure_report_dir, write_layout_json, write_run_metadata_json

logger = logging.getLogger(__name__)

INDEX_FIELDS: tuple[str, ...] = (
    "case_id",
    "photo",
    "status",
    "n_people",
    "font_size",
    "clashes_initial",
    "clashes_final",
    "overlap_area_px",
    "duration_ms",
    "warnings_count",
    "error_key",
)


def list_photos(photo_dir: Path, limit: int | None = None) -> list[Path]:
    """Photos in photo_dir (non-recursive), sorted by name."""
    photos = sorted(p for p in photo_dir.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES)
    return photos[:limit] if limit else photos


def read_manifest(manifest_path: Path, repo_root: Path, limit: int | None = None) -> list[Path]:
    """Photo paths from a CSV manifest with a 'path' (or 'photo' / 'file') column."""
    photos: list[Path] = []
    with open(manifest_path, newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            if limit and len(photos) >= limit:
                break
            value = (row.get("path") or row.get("photo") or row.get("file") or "").strip()
            if not value:
                continue
            p = Path(value)
            if not p.is_absolute():
                p = manifest_path.parent / value
                if not p.exists():
                    p = repo_root / value
            photos.append(p)
    return photos


def _index_row(case_id: str, result: PhotoResult) -> dict:
    layout = result.layout
    return {
        "case_id": case_id,
        "photo": result.photo,
        "status": result.status,
        "n_people": len(layout.people) if layout else "",
        "font_size": layout.font_size if layout else "",
        "clashes_initial": layout.clashes_initial if layout else "",
        "clashes_final": layout.clashes_final if layout else "",
        "overlap_area_px": round(layout.overlap_area_px, 2) if layout else "",
        "duration_ms": result.duration_ms,
        "warnings_count": len(result.warnings),
        "error_key": result.error_key or "",
    }


def _run_case(
    photo: Path,
    case_dir: Path,
    run_name: str,
    reader: MetadataReader,
    engine: RenderingEngine,
    engine_name: str,
    settings: Settings,
    debug: bool,
    rng: random.Random | None,
) -> PhotoResult:
    output = case_dir / photo.name
    try:
        result = label_photo(photo, output, reader, engine, settings, rng)
    except (OSError, ValueError) as e:
        logger.exception("Photo %s failed", photo)
        return PhotoResult(photo=str(photo), output=str(output), status="error", error_key=PHOTO_FAILED, error=str(e))
    if result.layout is not None:
        write_layout_json(case_dir, result.layout, str(photo))
        if debug:
            render_debug(result.layout, case_dir / "debug.png")
    write_run_metadata_json(case_dir, run_name, str(photo), settings, engine_name)
    return result


def run_batch(
    run_name: str,
    reader: MetadataReader,
    engine: RenderingEngine,
    settings: Settings,
    batch_dir: Path | None = None,
    manifest_path: Path | None = None,
    limit: int | None = None,
    repo_root: Path | None = None,
    output_dir: str = REPORTS_DIR,
    engine_name: str = "pillow",
    debug: bool = True,
    rng: random.Random | None = None,
) -> Path:
    """
    Run batch: from batch_dir (directory of photos) or manifest (CSV with paths).
    Returns report directory containing index.csv and cases/<case_id>/.
    """
    root = repo_root or Path.cwd().resolve()
    if batch_dir is not None and batch_dir.is_dir():
        photos = list_photos(batch_dir, limit)
    elif manifest_path is not None and manifest_path.exists():
        photos = read_manifest(manifest_path, root, limit)
    else:
        raise ValueError("Provide batch_dir or manifest_path")

    report_dir = ensure_report_dir(root, f"batch_{run_name}", output_dir=output_dir)
    cases_dir = report_dir / "cases"
    cases_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Batch %s: %d photo(s)", run_name, len(photos))

    rows: list[dict] = []
    for i, photo in enumerate(photos):
        case_id = f"case_{i:04d}_{photo.stem}"
        case_dir = cases_dir / case_id
        case_dir.mkdir(parents=True, exist_ok=True)
        result = _run_case(photo, case_dir, run_name, reader, engine, engine_name, settings, debug, rng)
        rows.append(_index_row(case_id, result))

    index_path = report_dir / "index.csv"
    with open(index_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(INDEX_FIELDS))
        w.writeheader()
        w.writerows(rows)
    failed = sum(1 for r in rows if r["status"] != "ok")
    logger.info("Batch %s done: %d ok, %d failed", run_name, len(rows) - failed, failed)
    return report_dir
