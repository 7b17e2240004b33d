import subprocess
from datetime import date
from pathlib import Path
from unittest.mock import patch

import pytest

from models.gallery import Image, ImageGroup
from settings import Settings


@pytest.fixture
def tmp_settings(tmp_path: Path) -> Settings:
    """Settings instance pointing at fresh temp directories.

    Directory layout:
        tmp_path/input/    source photo folders
        tmp_path/output/   generated site (not created up front)
    """
    (tmp_path / "input").mkdir()
    return Settings(
        input_dir=tmp_path / "input",
        output_dir=tmp_path / "output",
        page_title="Test Gallery",
        page_footer="Some footer <a>link</a>",
    )


@pytest.fixture
def dry_settings(tmp_settings: Settings) -> Settings:
    return tmp_settings.model_copy(update={"run_mode": "dry_run"})


@pytest.fixture
def fake_convert():
    """Replace the ImageMagick call with one that writes a placeholder file.

    Yields the mock so tests can inspect the commands that were run.
    """
    def _run(command, **kwargs):
        Path(command[-1]).write_bytes(b"THUMBNAIL")
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    with patch("pipeline.stage4_write.subprocess.run", side_effect=_run) as mock_run:
        yield mock_run


def make_group(
    base: Path,
    name: str = "2021-01-01 Fuji, Japan",
    image_names: tuple[str, ...] = ("Summit", "Valley"),
    markdown: str | None = None,
    extension: str = ".webp",
) -> ImageGroup:
    """Create a group directory with placeholder image files and return its model."""
    group_dir = base / name
    group_dir.mkdir(parents=True, exist_ok=True)
    images = []
    for image_name in sorted(image_names):
        path = group_dir / f"{image_name}{extension}"
        path.write_bytes(b"FAKEIMAGE")
        images.append(Image(name=image_name, path=path, file_name=path.name))
    markdown_file = None
    if markdown is not None:
        markdown_file = group_dir / "index.md"
        markdown_file.write_text(markdown, encoding="utf-8")
    return ImageGroup(
        path=Path(name),
        title=name[11:],
        date=date.fromisoformat(name[:10]),
        images=images,
        markdown_file=markdown_file,
    )
