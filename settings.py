from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

RunMode = Literal["normal", "dry_run"]
GalleryOrder = Literal["most_recent_first", "oldest_first"]


class Settings(BaseSettings):
    input_dir: Path = Path("./source")
    output_dir: Path = Path("./output")
    page_title: str = "Gallery"
    page_footer: str | None = None  # HTML snippet, e.g. a copyright notice
    run_mode: RunMode = "normal"
    order: GalleryOrder = "most_recent_first"
    max_workers: int | None = None  # None: let ThreadPoolExecutor decide
    convert_command: str = "convert"  # ImageMagick; "magick" on IM7-only installs
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GALLERY_",
        env_file_encoding="utf-8",
    )

    @field_validator("page_title")
    @classmethod
    def title_must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("page_title must not be empty")
        return v

    @field_validator("max_workers")
    @classmethod
    def workers_must_be_positive(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("max_workers must be at least 1")
        return v

    @property
    def dry_run(self) -> bool:
        return self.run_mode == "dry_run"

    @property
    def thumbnails_dir(self) -> Path:
        return self.output_dir / "thumbnails"

    @property
    def overview_path(self) -> Path:
        return self.output_dir / "index.html"
