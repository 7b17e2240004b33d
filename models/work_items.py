"""Units of output produced by the planner and renderer.

Every item is one file to write. The set of variants is closed: Stage 4
dispatches over exactly these three ``kind`` values.
"""
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from models.gallery import ThumbnailKind


class HtmlFile(BaseModel):
    """A rendered page. Always rewritten; HTML has no source file to compare against."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["html"] = "html"
    content: str
    output_path: Path


class ImageFile(BaseModel):
    """A full-size copy of a source image."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    source_path: Path
    output_path: Path


class ThumbnailFile(BaseModel):
    """A resized, cropped and re-encoded copy of a source image."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["thumbnail"] = "thumbnail"
    source_path: Path
    output_path: Path
    thumbnail_kind: ThumbnailKind


WorkItem = Annotated[HtmlFile | ImageFile | ThumbnailFile, Field(discriminator="kind")]
