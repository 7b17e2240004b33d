"""In-memory representation of a gallery.

Built once per run by Stage 1 and read (never modified) by every later stage.
"""
import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.slug import thumbnail_name, to_web_path, to_web_segment

IMAGE_EXTENSIONS = frozenset({".webp", ".jpeg"})

ThumbnailKind = Literal["small", "large"]


class Image(BaseModel):
    """A source image inside a group directory."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)  # user-visible name: the file stem
    path: Path                       # full path to the source image
    file_name: str                   # relative to the group directory, e.g. "Summit.webp"

    @field_validator("file_name")
    @classmethod
    def must_be_image_file(cls, v: str) -> str:
        if Path(v).suffix not in IMAGE_EXTENSIONS:
            raise ValueError(
                f"unsupported image extension in {v!r}; expected one of "
                f"{', '.join(sorted(IMAGE_EXTENSIONS))}"
            )
        return v


class ImageGroup(BaseModel):
    """One dated folder of images.

    ``path`` is relative to the input directory and identifies the group,
    e.g. ``2021-01-01 Fuji, Japan``.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    title: str = Field(min_length=1)
    date: datetime.date
    images: list[Image] = Field(default_factory=list)  # sorted by name
    markdown_file: Path | None = None

    @field_validator("path")
    @classmethod
    def must_not_be_empty(cls, v: Path) -> Path:
        # Path() already drops trailing slashes; "." is what an empty string becomes
        if str(v) in ("", "."):
            raise ValueError("image group path must not be empty")
        return v

    @property
    def url(self) -> str:
        """URL of the group directory relative to the output root."""
        return to_web_segment(str(self.path))

    def image_url(self, image: Image) -> str:
        return to_web_path(str(self.path), image.file_name)

    def thumbnail_url(self, image: Image, kind: ThumbnailKind) -> str:
        return "/".join(
            ("thumbnails", kind, to_web_segment(str(self.path)), thumbnail_name(image.file_name))
        )

    def __str__(self) -> str:
        names = ", ".join(i.name for i in self.images)
        markdown = str(self.markdown_file) if self.markdown_file else ""
        return f'"{self.title} ({self.date})" -> [{names}] [{markdown}]'


class Gallery(BaseModel):
    """All image groups, most recent first (ties broken by title)."""

    model_config = ConfigDict(frozen=True)

    image_groups: list[ImageGroup] = Field(default_factory=list)

    def __str__(self) -> str:
        return "".join(f"{g}\n" for g in self.image_groups)
