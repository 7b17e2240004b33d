"""ASCII-safe URL path segments.

Every output URL is built one path component at a time: each component goes
through ``to_web_segment`` and the results are joined with ``/``. A joined
path is never slugified as a whole.
"""
import os
import re
import unicodedata

from utils.errors import SlugError

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_EXTENSION = re.compile(r"[A-Za-z0-9]+")

# Letters that NFKD does not decompose into an ASCII base letter
_TRANSLITERATIONS = (
    ("ß", "ss"), ("æ", "ae"), ("œ", "oe"), ("ø", "o"),
    ("đ", "d"), ("ł", "l"), ("þ", "th"), ("ð", "d"),
)

# Thumbnails are always re-encoded to this format, whatever the source was.
THUMBNAIL_EXTENSION = "webp"


def slugify(text: str) -> str:
    """Strip diacritics, lower-case and collapse everything else to hyphens."""
    text = text.lower()
    for letter, replacement in _TRANSLITERATIONS:
        text = text.replace(letter, replacement)
    ascii_text = (
        unicodedata.normalize("NFKD", text)
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    return _NON_ALNUM.sub("-", ascii_text).strip("-")


def to_web_segment(segment: str) -> str:
    """Convert a single path component into something suitable for a URL.

    A trailing alphanumeric ``.ext`` is kept (lower-cased) and only the base
    name is slugified. Any other dot is ordinary text, so the whole segment
    is slugified.

    >>> to_web_segment("Fuji, Japan.webp")
    'fuji-japan.webp'
    >>> to_web_segment("2021-01-01 St. Moritz")
    '2021-01-01-st-moritz'
    """
    _check_single_segment(segment)
    base, dot, ext = segment.rpartition(".")
    if dot and base and _EXTENSION.fullmatch(ext):
        return f"{_slug_or_raise(base, segment)}.{ext.lower()}"
    return _slug_or_raise(segment, segment)


def to_web_path(*segments: str) -> str:
    """Slug each segment separately, then join them with slashes."""
    return "/".join(to_web_segment(s) for s in segments)


def thumbnail_name(file_name: str) -> str:
    """Web name of a thumbnail: slugged stem with the thumbnail extension."""
    _check_single_segment(file_name)
    stem = file_name.rpartition(".")[0] or file_name
    return f"{_slug_or_raise(stem, file_name)}.{THUMBNAIL_EXTENSION}"


def _check_single_segment(segment: str) -> None:
    if not segment:
        raise SlugError("Cannot convert an empty path segment to a URL")
    if "/" in segment or os.sep in segment or (os.altsep and os.altsep in segment):
        raise SlugError(f'Expected a single path component, got: "{segment}"')
    if segment in (".", ".."):
        raise SlugError(f'Not a valid path component: "{segment}"')


def _slug_or_raise(text: str, original: str) -> str:
    slug = slugify(text)
    if not slug:
        raise SlugError(f'Path segment has no URL-safe characters: "{original}"')
    return slug
