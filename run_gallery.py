#!/usr/bin/env python3
"""Generate a static photo gallery from a directory of dated photo folders.

Usage:
    python run_gallery.py --input photos/ --output site/ --page_title "My photos"
    python run_gallery.py ... --dry_run          # only log what would be written
    python run_gallery.py ... --order oldest_first

Options not given on the command line fall back to GALLERY_* environment
variables (or a .env file), see settings.py.
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from pydantic import ValidationError

from pipeline import stage1_scan, stage4_write
from settings import Settings
from utils.errors import GalleryError

logger = logging.getLogger("run_gallery")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Static site generator for photo galleries.")
    parser.add_argument("--input", type=Path, dest="input_dir",
                        help="The source directory.")
    parser.add_argument("--output", type=Path, dest="output_dir",
                        help="The output directory.")
    parser.add_argument("--page_title", dest="page_title",
                        help="The top-level page title.")
    parser.add_argument("--footer", dest="page_footer",
                        help="An HTML snippet for the page footer.")
    parser.add_argument("--dry_run", action="store_true",
                        help="If set, then don't write any files; only report what would be "
                             "written (shown whatever the log level).")
    parser.add_argument("--order", choices=["most_recent_first", "oldest_first"],
                        help="Order of the image groups on the overview page.")
    parser.add_argument("--jobs", type=int, dest="max_workers",
                        help="Maximum number of files written in parallel.")
    parser.add_argument("--convert", dest="convert_command",
                        help="ImageMagick command used to create thumbnails.")
    return parser.parse_args(argv)


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        key: value
        for key, value in vars(args).items()
        if key != "dry_run" and value is not None
    }
    if args.dry_run:
        overrides["run_mode"] = "dry_run"
    return Settings(**overrides)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        settings = _settings_from_args(args)
    except ValidationError as exc:
        logging.basicConfig(level=logging.INFO)
        logger.error("Error: invalid settings\n%s", exc)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )
    stage4_write.report_logger.setLevel(logging.INFO)

    try:
        logger.info("=== Stage 1: Scan ===")
        gallery = stage1_scan.run(settings)

        logger.info("=== Stages 2-4: Plan, render and write ===")
        overview_path = stage4_write.run(settings, gallery)
    except (GalleryError, ValidationError) as exc:
        logger.error("Error: %s", exc)
        logger.debug("Traceback:", exc_info=True)
        return 1

    logger.info("=== Done → %s ===", overview_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
