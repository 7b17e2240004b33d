"""Stage 1: Scan — read the input directory into a Gallery.

Reads:  <input_dir>/<YYYY-MM-DD title>/*.webp|*.jpeg
        <input_dir>/<YYYY-MM-DD title>/index.md   (optional description)
Writes: nothing

Only direct sub-directories whose names start with a date become image
groups; anything else in the input directory is ignored.
"""
import datetime
import logging
import re
from pathlib import Path

from models.gallery import IMAGE_EXTENSIONS, Gallery, Image, ImageGroup
from settings import Settings
from utils.errors import GalleryError

logger = logging.getLogger(__name__)

_GROUP_NAME_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2}).")
_DESCRIPTION_FILE = "index.md"


def run(settings: Settings) -> Gallery:
    """Scan ``settings.input_dir`` and return the gallery it describes."""
    gallery = gallery_from_dir(settings.input_dir)

    image_count = sum(len(g.images) for g in gallery.image_groups)
    described = sum(1 for g in gallery.image_groups if g.markdown_file)
    logger.info("Stage 1 complete → %s", settings.input_dir)
    logger.info("  Groups:        %d", len(gallery.image_groups))
    logger.info("  Images:        %d", image_count)
    logger.info("  Descriptions:  %d", described)
    logger.debug("Gallery:\n%s", gallery)

    return gallery


def gallery_from_dir(input_dir: Path) -> Gallery:
    groups: list[ImageGroup] = []
    for entry in _read_dir(input_dir):
        if not entry.is_dir():
            continue
        group = _read_group(entry)
        if group is not None:
            groups.append(group)

    groups.sort(key=lambda g: g.title)
    groups.sort(key=lambda g: g.date, reverse=True)
    return Gallery(image_groups=groups)


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

def _read_group(group_dir: Path) -> ImageGroup | None:
    name = _decoded_name(group_dir)
    parsed = _parse_group_name(name)
    if parsed is None:
        logger.debug("Skipping directory without date prefix: %s", group_dir)
        return None
    title, group_date = parsed
    if not title.strip():
        logger.warning("Skipping directory without title: %s", group_dir)
        return None

    images: list[Image] = []
    markdown_file: Path | None = None
    for entry in _read_dir(group_dir):
        if not entry.is_file():
            continue
        file_name = _decoded_name(entry)
        if file_name == _DESCRIPTION_FILE:
            markdown_file = entry
        elif entry.suffix in IMAGE_EXTENSIONS:
            images.append(Image(name=entry.stem, path=entry, file_name=file_name))

    images.sort(key=lambda i: i.name)
    return ImageGroup(
        path=Path(name),
        title=title,
        date=group_date,
        images=images,
        markdown_file=markdown_file,
    )


def _parse_group_name(name: str) -> tuple[str, datetime.date] | None:
    """Split ``"2021-01-01 Fuji, Japan"`` into ``("Fuji, Japan", date(2021, 1, 1))``.

    The character right after the date is a separator and is dropped.
    Returns None if the name has no date prefix or the date does not exist.
    """
    match = _GROUP_NAME_PATTERN.match(name)
    if match is None:
        return None
    year, month, day = (int(g) for g in match.groups())
    try:
        group_date = datetime.date(year, month, day)
    except ValueError:
        logger.warning("Skipping directory with invalid date: %s", name)
        return None
    return name[match.end():], group_date


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_dir(directory: Path) -> list[Path]:
    """List a directory non-recursively, sorted by name."""
    try:
        return sorted(directory.iterdir())
    except OSError as exc:
        raise GalleryError(f'Failed to open directory: "{directory}"') from exc


def _decoded_name(path: Path) -> str:
    # Undecodable bytes come back from the OS as lone surrogates
    try:
        path.name.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise GalleryError(f'Failed to decode UTF-8: "{path}"') from exc
    return path.name
