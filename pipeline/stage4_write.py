"""Stage 4: Write — materialize all work items to the output directory.

Runs in two phases:
  1. every group page, image copy and thumbnail, concurrently on a thread
     pool; the first failure stops the run
  2. the overview page, only after phase 1 succeeded

Image copies and thumbnails are skipped when the output file is at least as
new as its source. In dry-run mode nothing is written: pages and image
copies are reported with an ``HTML:`` / ``Image:`` prefix on
``report_logger``, thumbnails are silent.

Thumbnails are made by ImageMagick (``settings.convert_command``).
"""
import logging
import shutil
import subprocess
from collections import Counter
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from jinja2 import Environment

from models.gallery import Gallery
from models.work_items import HtmlFile, ImageFile, ThumbnailFile, WorkItem
from pipeline import stage2_plan, stage3_render
from settings import Settings
from utils.errors import ArtifactWriteError, ThumbnailError

logger = logging.getLogger(__name__)
# Dry-run report lines; the CLI keeps this at INFO whatever the log level is.
report_logger = logging.getLogger(f"{__name__}.dry_run")

# Thumbnail kind → (width, height) after resizing and center-cropping
THUMBNAIL_GEOMETRY = {
    "small": (400, 267),
    "large": (2000, 1335),
}
THUMBNAIL_QUALITY = 80


def run(
    settings: Settings,
    gallery: Gallery,
    templates: Environment | None = None,
) -> Path:
    """Write the whole gallery and return the path of the overview page."""
    if templates is None:
        templates = stage3_render.make_templates()

    items: list[WorkItem] = []
    items.extend(stage3_render.run(settings, gallery, templates))
    items.extend(stage2_plan.run(settings, gallery))
    execute(items, settings)

    # The overview links to thumbnails, so it goes last.
    overview = stage3_render.render_overview(gallery, settings, templates)
    materialize(overview, settings)

    counts = Counter(item.kind for item in items)
    logger.info("Stage 4 complete → %s", overview.output_path)
    logger.info("  Mode:          %s", settings.run_mode)
    logger.info("  Group pages:   %d", counts["html"])
    logger.info("  Images:        %d", counts["image"])
    logger.info("  Thumbnails:    %d", counts["thumbnail"])
    return overview.output_path


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------

def execute(items: Sequence[WorkItem], settings: Settings) -> None:
    """Materialize ``items`` concurrently; raise the first error encountered.

    After a failure no further items are started. Items already running are
    allowed to finish before the error propagates.
    """
    if not items:
        return
    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        futures = [executor.submit(materialize, item, settings) for item in items]
        try:
            for future in as_completed(futures):
                future.result()
        except BaseException:
            cancelled = sum(1 for f in futures if f.cancel())
            logger.debug("Aborting: %d queued item(s) cancelled", cancelled)
            raise


# ---------------------------------------------------------------------------
# Materializing
# ---------------------------------------------------------------------------

def materialize(item: WorkItem, settings: Settings) -> None:
    """Write a single work item, or log what would be written in dry-run mode."""
    if isinstance(item, HtmlFile):
        _write_html(item, settings)
    elif isinstance(item, ImageFile):
        _write_image(item, settings)
    elif isinstance(item, ThumbnailFile):
        _write_thumbnail(item, settings)
    else:
        raise TypeError(f"Unknown work item: {item!r}")


def _write_html(item: HtmlFile, settings: Settings) -> None:
    if settings.dry_run:
        report_logger.info('HTML:  "%s"', item.output_path)
        return
    create_parent_directories(item.output_path)
    try:
        item.output_path.write_text(item.content, encoding="utf-8")
    except OSError as exc:
        raise ArtifactWriteError("Failed to write HTML file", item.output_path) from exc


def _write_image(item: ImageFile, settings: Settings) -> None:
    if not is_stale(item.source_path, item.output_path):
        return
    if settings.dry_run:
        report_logger.info('Image: "%s"', item.output_path)
        return
    create_parent_directories(item.output_path)
    try:
        shutil.copy(item.source_path, item.output_path)
    except OSError as exc:
        raise ArtifactWriteError(
            f'Failed to copy image "{item.source_path}" to', item.output_path
        ) from exc


def _write_thumbnail(item: ThumbnailFile, settings: Settings) -> None:
    if settings.dry_run:
        return
    if not is_stale(item.source_path, item.output_path):
        return
    create_parent_directories(item.output_path)
    command = thumbnail_command(item, settings)
    logger.debug("Running: %s", " ".join(command))
    try:
        result = subprocess.run(command, capture_output=True, text=True, errors="replace")
    except OSError as exc:
        raise ThumbnailError(
            f"Failed to run image conversion tool '{settings.convert_command}'",
            item.source_path,
        ) from exc
    if result.returncode != 0:
        raise ThumbnailError(
            f"Failed to create thumbnail (exit status {result.returncode})",
            item.source_path,
            stdout=result.stdout,
            stderr=result.stderr,
        )


def thumbnail_command(item: ThumbnailFile, settings: Settings) -> list[str]:
    width, height = THUMBNAIL_GEOMETRY[item.thumbnail_kind]
    return [
        settings.convert_command,
        str(item.source_path),
        "-resize", f"{width}x",
        "-gravity", "center",
        "-crop", f"{width}x{height}+0+0",
        "+repage",
        "-quality", str(THUMBNAIL_QUALITY),
        str(item.output_path),
    ]


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------

def is_stale(source_path: Path, output_path: Path) -> bool:
    """True if ``output_path`` is missing or older than ``source_path``."""
    try:
        output_mtime = output_path.stat().st_mtime_ns
    except FileNotFoundError:
        return True
    except OSError as exc:
        raise ArtifactWriteError("Failed to read metadata", output_path) from exc
    try:
        source_mtime = source_path.stat().st_mtime_ns
    except OSError as exc:
        raise ArtifactWriteError("Failed to read metadata", source_path) from exc
    return output_mtime < source_mtime


def create_parent_directories(path: Path) -> None:
    """Create all parent directories of the file ``path``.

    Safe to call concurrently for the same directory.
    """
    directory = path.parent
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ArtifactWriteError("Failed to create directory", directory) from exc
