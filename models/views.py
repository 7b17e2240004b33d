"""Template context records for the overview and image group pages.

All URLs are relative to the output root; templates prefix them with
``root`` (``""`` on the overview, ``"../"`` on group pages).
"""
from pydantic import BaseModel, Field


class ImageView(BaseModel):
    name: str
    url: str
    thumbnail: str
    anchor: str  # element id on the group page, e.g. "summit"


class GroupView(BaseModel):
    title: str | None  # None when it would only repeat the single image's name
    date: str          # ISO format, e.g. "2021-01-01"
    url: str
    has_page: bool
    images: list[ImageView] = Field(default_factory=list)
    markdown_content: str | None = None


class WovenDocument(BaseModel):
    """A description document converted to HTML, plus its images in document order."""

    html: str
    images: list[ImageView] = Field(default_factory=list)
