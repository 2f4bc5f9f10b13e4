#!/usr/bin/env python3
# =============================================================================
# scripts/import_label_images.py - Bulk label image import
# =============================================================================
# Attaches label photos to existing wines. Each file in the source directory
# is named after a wine id ("<wine id>.jpg", ".jpeg", ".png" or ".webp") and
# goes through the same validate -> transcode -> store pipeline as an upload.
#
# Usage:
#   python scripts/import_label_images.py assets/wine-labels
#   python scripts/import_label_images.py assets/wine-labels --dry-run
#
# Prerequisites:
#   - DATABASE_URL / UPLOAD_DIR set (or .env file) to the target cellar
# =============================================================================

import argparse
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from loguru import logger
from sqlalchemy.orm import Session

from cellar.config import settings
from cellar.db import SessionLocal, init_db
from cellar.exceptions import CellarError, WineNotFoundError
from cellar.services import wines as wine_service
from cellar.services.uploads import ImageUploadService

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}


@dataclass
class ImportSummary:
    found: int = 0
    updated: list[str] = field(default_factory=list)
    matched: list[str] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)


def find_label_images(source_dir: Path) -> list[Path]:
    return sorted(p for p in source_dir.iterdir() if p.is_file() and p.suffix.lower() in CONTENT_TYPES)


def import_label_images(
    source_dir: Path,
    session: Session,
    uploads: ImageUploadService,
    dry_run: bool = False,
) -> ImportSummary:
    summary = ImportSummary()
    images = find_label_images(source_dir)
    summary.found = len(images)
    logger.info("Label import started source_dir={} images={} dry_run={}", str(source_dir), len(images), dry_run)

    for image_path in images:
        wine_id = image_path.stem
        try:
            if dry_run:
                wine_service.get_wine(session, wine_id)
                summary.matched.append(image_path.name)
                continue
            wine_service.attach_image(
                session,
                wine_id,
                image_path.read_bytes(),
                CONTENT_TYPES[image_path.suffix.lower()],
                uploads,
            )
        except WineNotFoundError:
            summary.not_found.append(image_path.name)
            continue
        except (CellarError, OSError) as exc:
            session.rollback()
            logger.error("Label import failed file={} error={}", image_path.name, str(exc))
            summary.errors[image_path.name] = str(exc)
            continue
        summary.updated.append(image_path.name)
        logger.info("Label imported wine_id={} file={}", wine_id, image_path.name)

    return summary


def print_summary(summary: ImportSummary) -> None:
    for name in summary.not_found:
        print(f"Wine not found for image: {name}")
    for name, error in summary.errors.items():
        print(f"Error processing {name}: {error}")

    print()
    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print(f"Total images found:     {summary.found}")
    if summary.matched:
        print(f"Matched (dry run):      {len(summary.matched)}")
    print(f"Successfully updated:   {len(summary.updated)}")
    print(f"Wine not found:         {len(summary.not_found)}")
    print(f"Errors:                 {len(summary.errors)}")
    print("=" * 60)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Attach label images named by wine id to their wines.")
    parser.add_argument("source_dir", type=Path, help="directory of <wine id>.<jpg|jpeg|png|webp> files")
    parser.add_argument("--dry-run", action="store_true", help="only report which files match a wine")
    args = parser.parse_args(argv)

    if not args.source_dir.is_dir():
        print(f"Directory not found: {args.source_dir}", file=sys.stderr)
        return 1

    init_db()
    uploads = ImageUploadService(settings.upload_config())
    uploads.initialize()

    with SessionLocal() as session:
        summary = import_label_images(args.source_dir, session, uploads, dry_run=args.dry_run)

    print_summary(summary)
    return 1 if summary.errors else 0


if __name__ == "__main__":
    sys.exit(main())
