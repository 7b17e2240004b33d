"""Markdown with image references.

A description document refers to the group's images by name. To show an
image named "My image" (file ``My image.webp``), put the tag on its own line:

    Some text.

    !image My image

    Some more text.

Every image of the group must be referenced at least once and every
reference must name an existing image. The images are returned in the order
the document shows them.
"""
import logging
import xml.etree.ElementTree as etree
from pathlib import Path

import markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor
from markdown.treeprocessors import Treeprocessor

from models.views import ImageView, WovenDocument
from utils.errors import MissingImagesError, UnknownImagesError

logger = logging.getLogger(__name__)

IMAGE_TAG_PREFIX = "!image "

# A tag starts a line of text and runs to its end; trailing blanks are dropped.
_IMAGE_TAG_PATTERN = r"(?:^|(?<=\n))" + IMAGE_TAG_PREFIX + r"(?P<name>[^\n]+?)[ \t]*(?=\n|$)"

# Runs after code spans (190) and backslash escapes (180), before links.
_IMAGE_TAG_PRIORITY = 175
# Runs after the inline treeprocessor (20).
_UNWRAP_PRIORITY = 15

_CARD_CLASS = "card shadow-sm mb-3"


def weave(
    text: str,
    images: list[ImageView],
    source: Path | None = None,
    root: str = "../",
) -> WovenDocument:
    """Convert ``text`` to HTML, replacing image tags with image cards.

    ``root`` is prepended to image and thumbnail URLs (which are relative to
    the output root) so they resolve from the page the HTML ends up in.

    Raises UnknownImagesError if a tag names no image of the group, then
    MissingImagesError if an image of the group is never referenced.
    """
    extension = ImageTagExtension(images=images, root=root)
    html = markdown.markdown(text, extensions=["extra", extension])

    if extension.unknown:
        raise UnknownImagesError(extension.unknown, source)

    referenced = set(extension.seen)
    missing = [image.name for image in images if image.name not in referenced]
    if missing:
        raise MissingImagesError(missing, source)

    logger.debug("Wove %d image reference(s) from %s", len(extension.seen), source or "<text>")
    return WovenDocument(html=html, images=reorder_images(images, extension.seen))


def reorder_images(images: list[ImageView], seen: list[str]) -> list[ImageView]:
    """Sort ``images`` to match the order of ``seen``.

    An image referenced more than once sorts by its LAST reference.
    """
    position = {name: index for index, name in enumerate(seen)}
    return sorted(images, key=lambda image: position[image.name])


class ImageTagExtension(Extension):
    """Collects image references while Python-Markdown converts a document.

    One instance per conversion: ``seen`` and ``unknown`` hold that
    document's references afterwards.
    """

    def __init__(self, images: list[ImageView], root: str = "../", **kwargs):
        self.images: dict[str, ImageView] = {}
        for image in images:
            self.images.setdefault(image.name, image)
        self.root = root
        self.seen: list[str] = []     # every resolved reference, duplicates included
        self.unknown: list[str] = []  # distinct unresolved names
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        md.inlinePatterns.register(
            _ImageTagProcessor(_IMAGE_TAG_PATTERN, md, self),
            "gallery_image_tag",
            _IMAGE_TAG_PRIORITY,
        )
        md.treeprocessors.register(
            _UnwrapCardsProcessor(md), "gallery_unwrap_cards", _UNWRAP_PRIORITY
        )


class _ImageTagProcessor(InlineProcessor):
    def __init__(self, pattern: str, md, extension: ImageTagExtension):
        super().__init__(pattern, md)
        self.extension = extension

    def handleMatch(self, m, data):
        name = m.group("name")
        image = self.extension.images.get(name)
        if image is None:
            if name not in self.extension.unknown:
                self.extension.unknown.append(name)
            # Leave the tag visible as plain text
            return None, None, None
        self.extension.seen.append(name)
        return _image_card(image, self.extension.root), m.start(0), m.end(0)


class _UnwrapCardsProcessor(Treeprocessor):
    """Lift paragraphs made only of image cards out of their ``<p>``."""

    def run(self, root):
        for parent in list(root.iter()):
            index = 0
            while index < len(parent):
                child = parent[index]
                if child.tag == "p" and _only_cards(child):
                    cards = list(child)
                    cards[-1].tail = child.tail
                    parent[index:index + 1] = cards
                    index += len(cards)
                else:
                    index += 1


def _only_cards(paragraph: etree.Element) -> bool:
    if len(paragraph) == 0 or (paragraph.text or "").strip():
        return False
    return all(
        child.tag == "div"
        and child.get("class") == _CARD_CLASS
        and not (child.tail or "").strip()
        for child in paragraph
    )


def _image_card(image: ImageView, root: str) -> etree.Element:
    card = etree.Element("div", {"class": _CARD_CLASS, "id": image.anchor})
    link = etree.SubElement(card, "a", {"href": root + image.url})
    etree.SubElement(
        link, "img", {"class": "card-img-top", "src": root + image.thumbnail, "alt": image.name}
    )
    return card
