"""Stage 2: Plan — decide which image files each group needs.

Per source image:
  - one full-size copy:      <output>/<group>/<image>
  - one small thumbnail:     <output>/thumbnails/small/<group>/<image>.webp
  - one large thumbnail:     <output>/thumbnails/large/<group>/<image>.webp
    only for groups with a description document; only their pages use it.

Planning never touches the filesystem. Whether an item is already up to
date is decided by Stage 4 when it is materialized.
"""
import logging
from pathlib import Path

from models.gallery import Gallery, Image, ImageGroup, ThumbnailKind
from models.work_items import ImageFile, ThumbnailFile, WorkItem
from settings import Settings

logger = logging.getLogger(__name__)


def run(settings: Settings, gallery: Gallery) -> list[WorkItem]:
    """Plan the image copies and thumbnails of every group."""
    items: list[WorkItem] = []
    for group in gallery.image_groups:
        items.extend(plan_image_group(group, settings))
    logger.debug("Planned %d image file(s)", len(items))
    return items


def plan_image_group(group: ImageGroup, settings: Settings) -> list[WorkItem]:
    """Return one ImageFile and one or two ThumbnailFiles per image of ``group``."""
    kinds: list[ThumbnailKind] = ["small"]
    if group.markdown_file is not None:
        kinds.append("large")

    items: list[WorkItem] = []
    for image in group.images:
        items.append(ImageFile(
            source_path=image.path,
            output_path=image_output_path(group, image, settings),
        ))
        for kind in kinds:
            items.append(ThumbnailFile(
                source_path=image.path,
                output_path=thumbnail_output_path(group, image, kind, settings),
                thumbnail_kind=kind,
            ))
    return items


def image_output_path(group: ImageGroup, image: Image, settings: Settings) -> Path:
    return settings.output_dir.joinpath(*group.image_url(image).split("/"))


def thumbnail_output_path(
    group: ImageGroup, image: Image, kind: ThumbnailKind, settings: Settings
) -> Path:
    return settings.output_dir.joinpath(*group.thumbnail_url(image, kind).split("/"))
