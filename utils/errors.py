"""Exceptions raised while building a gallery.

Every error aborts the run. Messages carry the offending file path or the
validation context so the CLI can print them as-is.
"""
from pathlib import Path


class GalleryError(Exception):
    """Base class for all gallery generation failures."""


class SlugError(GalleryError, ValueError):
    """A value could not be turned into a URL-safe path segment."""


class WeaveError(GalleryError):
    """A description document does not match its group's images."""

    label = "Invalid images"

    def __init__(self, names: list[str], source: Path | None = None):
        self.names = list(names)
        self.source = source
        message = f"{self.label}: {', '.join(self.names)}"
        if source is not None:
            message = f'Error in markdown file: "{source}": {message}'
        super().__init__(message)


class UnknownImagesError(WeaveError):
    label = "Unknown images"


class MissingImagesError(WeaveError):
    label = "Missing images"


class ArtifactWriteError(GalleryError):
    """A file or directory could not be read or written."""

    def __init__(self, message: str, path: Path):
        self.path = path
        super().__init__(f'{message}: "{path}"')


class ThumbnailError(GalleryError):
    """The external image conversion tool failed."""

    def __init__(self, message: str, source_path: Path, stdout: str = "", stderr: str = ""):
        self.source_path = source_path
        self.stdout = stdout
        self.stderr = stderr
        details = "\n".join(
            f"{label}:\n{text.rstrip()}"
            for label, text in (("stdout", stdout), ("stderr", stderr))
            if text and text.strip()
        )
        full = f'{message}: "{source_path}"'
        if details:
            full = f"{full}\n{details}"
        super().__init__(full)
