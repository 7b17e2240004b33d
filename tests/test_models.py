from datetime import date
from pathlib import Path

import pytest
from pydantic import TypeAdapter, ValidationError

from models.gallery import Gallery, Image, ImageGroup
from models.views import GroupView, ImageView
from models.work_items import HtmlFile, ImageFile, ThumbnailFile, WorkItem


def _image(name="Summit", ext=".webp") -> Image:
    return Image(name=name, path=Path(f"/in/g/{name}{ext}"), file_name=f"{name}{ext}")


def _group(**kwargs) -> ImageGroup:
    defaults = dict(
        path=Path("2021-01-01 Fuji, Japan"),
        title="Fuji, Japan",
        date=date(2021, 1, 1),
        images=[_image("Summit"), _image("Valley")],
    )
    defaults.update(kwargs)
    return ImageGroup(**defaults)


# ---------------------------------------------------------------------------
# Image
# ---------------------------------------------------------------------------

class TestImage:
    @pytest.mark.parametrize("ext", [".webp", ".jpeg"])
    def test_recognised_extensions(self, ext):
        assert _image(ext=ext).file_name == f"Summit{ext}"

    @pytest.mark.parametrize("ext", [".jpg", ".png", ".WEBP", ""])
    def test_other_extensions_rejected(self, ext):
        with pytest.raises(ValidationError):
            _image(ext=ext)

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Image(name="", path=Path("/in/g/.webp"), file_name="x.webp")

    def test_frozen(self):
        img = _image()
        with pytest.raises(ValidationError):
            img.name = "Other"


# ---------------------------------------------------------------------------
# ImageGroup
# ---------------------------------------------------------------------------

class TestImageGroup:
    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError):
            _group(title="")

    def test_empty_path_rejected(self):
        with pytest.raises(ValidationError):
            _group(path=Path(""))

    def test_trailing_slash_dropped(self):
        assert str(_group(path=Path("2021-01-01 Fuji, Japan/")).path) == "2021-01-01 Fuji, Japan"

    def test_url(self):
        assert _group().url == "2021-01-01-fuji-japan"

    def test_url_with_dotted_group_name(self):
        g = _group(path=Path("2021-01-01 St. Moritz"), title="St. Moritz", images=[_image("Mt. Fuji")])
        assert g.url == "2021-01-01-st-moritz"
        assert g.image_url(g.images[0]) == "2021-01-01-st-moritz/mt-fuji.webp"
        assert g.thumbnail_url(g.images[0], "small") == "thumbnails/small/2021-01-01-st-moritz/mt-fuji.webp"

    def test_image_url(self):
        g = _group()
        assert g.image_url(g.images[0]) == "2021-01-01-fuji-japan/summit.webp"

    def test_thumbnail_url_small(self):
        g = _group()
        assert g.thumbnail_url(g.images[1], "small") == "thumbnails/small/2021-01-01-fuji-japan/valley.webp"

    def test_thumbnail_url_jpeg_becomes_webp(self):
        g = _group(images=[_image("Summit", ".jpeg")])
        assert g.thumbnail_url(g.images[0], "large") == "thumbnails/large/2021-01-01-fuji-japan/summit.webp"

    def test_str(self):
        text = str(_group(markdown_file=Path("/in/g/index.md")))
        assert text == '"Fuji, Japan (2021-01-01)" -> [Summit, Valley] [/in/g/index.md]'


class TestGallery:
    def test_str_one_line_per_group(self):
        gallery = Gallery(image_groups=[_group(), _group(title="Other")])
        assert len(str(gallery).splitlines()) == 2

    def test_empty(self):
        assert Gallery().image_groups == []


# ---------------------------------------------------------------------------
# Work items
# ---------------------------------------------------------------------------

class TestWorkItems:
    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(WorkItem)
        item = adapter.validate_python({
            "kind": "thumbnail",
            "source_path": "/in/a.webp",
            "output_path": "/out/a.webp",
            "thumbnail_kind": "large",
        })
        assert isinstance(item, ThumbnailFile)
        assert item.thumbnail_kind == "large"

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            TypeAdapter(WorkItem).validate_python({"kind": "video", "output_path": "/out/a"})

    def test_unknown_thumbnail_kind_rejected(self):
        with pytest.raises(ValidationError):
            ThumbnailFile(source_path=Path("a"), output_path=Path("b"), thumbnail_kind="medium")

    def test_items_are_frozen(self):
        item = ImageFile(source_path=Path("a"), output_path=Path("b"))
        with pytest.raises(ValidationError):
            item.output_path = Path("c")

    def test_html_kind_default(self):
        assert HtmlFile(content="<p>", output_path=Path("index.html")).kind == "html"


class TestViews:
    def test_group_view_defaults(self):
        view = GroupView(title=None, date="2021-01-01", url="g", has_page=False)
        assert view.images == []
        assert view.markdown_content is None

    def test_image_view_fields(self):
        view = ImageView(name="Summit", url="g/summit.webp", thumbnail="t.webp", anchor="summit")
        assert view.anchor == "summit"
