# facelabel/core/runner.py
"""
CLI entrypoint: label one photo (or a batch) with face-region names.
Single mode: read metadata, lay out labels, render, write layout.json / debug.png.
"""

from __future__ import annotations

import argparse
import logging
import os
import random
from pathlib import Path

from facelabel.core.config import (
    REPORTS_DIR,
    THUMBNAIL_FILENAME_OPTIONS,
    THUMBNAIL_FOLDER_OPTIONS,
    load_settings,
    with_export,
    with_label,
)
from facelabel.core.error_codes import user_message
from facelabel.core.magick import MagickEngine
from facelabel.core.metadata import ExifToolReader, SidecarMetadataReader
from facelabel.core.pipeline import label_photo
from facelabel.core.render import render_debug
from facelabel.core.render_pillow import PillowEngine
from facelabel.core.reporting import ensure_report_dir, write_layout_json, write_run_metadata_json

logger = logging.getLogger(__name__)

EXPORT_FLAGS: tuple[str, ...] = (
    "label_image",
    "draw_label_text",
    "draw_face_outlines",
    "draw_label_boxes",
    "obfuscate_labels",
    "obfuscate_image",
    "remove_exif",
    "crop_image",
    "export_thumbnails",
)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Label faces in photos from face-region metadata.")
    p.add_argument("photo", nargs="?", default=None, help="Photo to label (single mode)")
    p.add_argument("--output", type=str, default=None, help="Labelled photo path (default: <report dir>/<photo name>)")
    p.add_argument("--settings", type=str, default=None, help="Settings JSON (label / photo / export sections)")
    p.add_argument("--engine", choices=("magick", "pillow"), default="magick", help="Rendering engine")
    p.add_argument("--metadata", choices=("exiftool", "sidecar"), default="exiftool", help="Face region source")
    p.add_argument("--font-size", type=int, default=None, dest="font_size", help="Fixed font size (pt); skips the search")
    p.add_argument("--no-optimise", action="store_true", dest="no_optimise", help="Keep labels at the default position")
    for name in EXPORT_FLAGS:
        p.add_argument(
            "--" + name.replace("_", "-"),
            action=argparse.BooleanOptionalAction,
            default=None,
            dest=name,
        )
    p.add_argument("--thumbnails-filename", choices=THUMBNAIL_FILENAME_OPTIONS, default=None, dest="thumbnails_filename_option")
    p.add_argument("--thumbnails-folder", choices=THUMBNAIL_FOLDER_OPTIONS, default=None, dest="thumbnails_folder_option")
    p.add_argument("--seed", type=int, default=None, help="Random seed for label obfuscation")
    p.add_argument("--run-name", type=str, default="run", dest="run_name", help="Reports subdir name")
    p.add_argument("--output-dir", type=str, default=REPORTS_DIR, dest="output_dir", help="Output directory (repo-relative)")
    p.add_argument("--repo-root", type=str, default=None, dest="repo_root", help="Repo root (default: cwd)")
    p.add_argument("--no-debug", action="store_true", dest="no_debug", help="Skip debug.png")
    p.add_argument("--batch-dir", type=str, default=None, dest="batch_dir", help="Batch mode: directory of photos")
    p.add_argument("--batch-manifest", type=str, default=None, dest="batch_manifest", help="Batch mode: CSV manifest path")
    p.add_argument("--batch-limit", type=int, default=None, dest="batch_limit", help="Max photos in batch")
    p.add_argument("--keep-scripts", action="store_true", dest="keep_scripts", help="Keep ImageMagick script files")
    p.add_argument(
        "--log-level",
        type=str,
        default=os.environ.get("LOG_LEVEL", "INFO"),
        dest="log_level",
        help="Logging level (default: $LOG_LEVEL or INFO)",
    )
    return p.parse_args(argv)


def _build_settings(args: argparse.Namespace):
    settings = load_settings(args.settings)
    export_changes = {name: getattr(args, name) for name in EXPORT_FLAGS if getattr(args, name) is not None}
    for name in ("thumbnails_filename_option", "thumbnails_folder_option"):
        if getattr(args, name) is not None:
            export_changes[name] = getattr(args, name)
    if export_changes:
        settings = with_export(settings, **export_changes)
    label_changes = {}
    if args.font_size is not None:
        label_changes["fixed_font_size"] = args.font_size
    if args.no_optimise:
        label_changes["auto_optimise"] = False
    if label_changes:
        settings = with_label(settings, **label_changes)
    return settings


def _resolve(repo_root: Path, path_arg: str) -> Path:
    """Resolve path: if relative, from repo root; else as-is then resolve."""
    p = Path(path_arg)
    if not p.is_absolute():
        p = repo_root / p
    return p.resolve()


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    repo_root = Path(args.repo_root).resolve() if args.repo_root else Path.cwd().resolve()
    settings = _build_settings(args)
    reader = ExifToolReader() if args.metadata == "exiftool" else SidecarMetadataReader()
    engine = MagickEngine(keep_scripts=args.keep_scripts) if args.engine == "magick" else PillowEngine()
    rng = random.Random(args.seed) if args.seed is not None else None

    if args.batch_dir or args.batch_manifest:
        from facelabel.core.batch import run_batch
        out = run_batch(
            run_name=args.run_name,
            reader=reader,
            engine=engine,
            settings=settings,
            batch_dir=_resolve(repo_root, args.batch_dir) if args.batch_dir else None,
            manifest_path=_resolve(repo_root, args.batch_manifest) if args.batch_manifest else None,
            limit=args.batch_limit,
            repo_root=repo_root,
            output_dir=args.output_dir,
            engine_name=args.engine,
            debug=not args.no_debug,
            rng=rng,
        )
        print(out / "index.csv")
        return

    if not args.photo:
        raise SystemExit("Provide a photo, --batch-dir or --batch-manifest")
    photo = _resolve(repo_root, args.photo)
    if not photo.exists():
        raise FileNotFoundError(f"Photo not found: {photo}")

    report_dir = ensure_report_dir(repo_root, args.run_name, output_dir=args.output_dir)
    output = _resolve(repo_root, args.output) if args.output else report_dir / photo.name
    result = label_photo(photo, output, reader, engine, settings, rng)
    if not result.ok:
        raise SystemExit(f"{user_message(result.error_key)} ({result.error})")

    paths = list(result.outputs)
    paths.append(write_layout_json(report_dir, result.layout, str(photo)))
    paths.append(write_run_metadata_json(report_dir, args.run_name, str(photo), settings, args.engine))
    if not args.no_debug:
        debug_path = report_dir / "debug.png"
        render_debug(result.layout, debug_path)
        paths.append(debug_path)
    for p in paths:
        print(p)
    for w in result.warnings:
        print("Warning:", w)


if __name__ == "__main__":
    main()
