"""Stage 3: Render — turn the gallery into HTML pages via Jinja2.

Produces:
  - <output>/index.html          overview of all groups (small thumbnails)
  - <output>/<group>/index.html  one page per group with an index.md
                                 (large thumbnails, woven description)

The template environment is built once per run with ``make_templates`` and
passed into every render call.
"""
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

from models.gallery import Gallery, Image, ImageGroup, ThumbnailKind
from models.views import GroupView, ImageView
from models.work_items import HtmlFile
from settings import Settings
from utils.errors import ArtifactWriteError
from utils.markdown_weaver import weave
from utils.slug import slugify

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


def make_templates() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "html.j2"]),
        undefined=StrictUndefined,
    )
    return env


def run(settings: Settings, gallery: Gallery, templates: Environment) -> list[HtmlFile]:
    """Render the pages of all groups that have a description document.

    Raises on the first description that does not match its images.
    """
    pages: list[HtmlFile] = []
    for group in gallery.image_groups:
        page = render_image_group(group, settings, templates)
        if page is not None:
            pages.append(page)
    return pages


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------

def render_overview(gallery: Gallery, settings: Settings, templates: Environment) -> HtmlFile:
    groups = [_group_view(group, "small") for group in sort_groups(gallery.image_groups, settings)]
    content = templates.get_template("overview.html.j2").render(
        title=settings.page_title,
        footer=_footer(settings),
        groups=groups,
        root="",
    )
    return HtmlFile(content=content, output_path=settings.overview_path)


def sort_groups(groups: list[ImageGroup], settings: Settings) -> list[ImageGroup]:
    """Order by date as configured; groups on the same date by title."""
    by_title = sorted(groups, key=lambda g: g.title)
    return sorted(
        by_title,
        key=lambda g: g.date,
        reverse=settings.order == "most_recent_first",
    )


# ---------------------------------------------------------------------------
# Image group pages
# ---------------------------------------------------------------------------

def render_image_group(
    group: ImageGroup, settings: Settings, templates: Environment
) -> HtmlFile | None:
    """Render the page of ``group``, or return None if it has no description."""
    if group.markdown_file is None:
        return None

    view = _group_view(group, "large")
    text = _read_description(group.markdown_file)
    woven = weave(text, view.images, source=group.markdown_file, root="../")
    view = view.model_copy(update={
        "images": woven.images,
        "markdown_content": woven.html,
    })

    content = templates.get_template("image_group.html.j2").render(
        site_title=settings.page_title,
        footer=_footer(settings),
        group=view,
        root="../",
    )
    output_path = settings.output_dir / group.url / "index.html"
    logger.debug("Rendered page for %s → %s", group.title, output_path)
    return HtmlFile(content=content, output_path=output_path)


# ---------------------------------------------------------------------------
# View records
# ---------------------------------------------------------------------------

def _group_view(group: ImageGroup, kind: ThumbnailKind) -> GroupView:
    return GroupView(
        title=_visible_title(group),
        date=group.date.isoformat(),
        url=group.url,
        has_page=group.markdown_file is not None,
        images=[_image_view(group, image, kind) for image in group.images],
    )


def _image_view(group: ImageGroup, image: Image, kind: ThumbnailKind) -> ImageView:
    return ImageView(
        name=image.name,
        url=group.image_url(image),
        thumbnail=group.thumbnail_url(image, kind),
        anchor=slugify(image.name),
    )


def _visible_title(group: ImageGroup) -> str | None:
    # A lone image named like its group would repeat the heading
    if len(group.images) == 1 and group.images[0].name == group.title:
        return None
    return group.title


def _footer(settings: Settings) -> Markup | None:
    # The footer is a trusted HTML snippet from the command line
    return Markup(settings.page_footer) if settings.page_footer else None


def _read_description(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ArtifactWriteError("Failed to open image group markdown file", path) from exc
