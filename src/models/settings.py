"""Settings and configuration management."""

import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Application Settings
    debug: bool = Field(False, description="Debug mode")
    log_level: str = Field("INFO", description="Log level")

    # Image Resolution Timeout Settings (in seconds)
    redirect_timeout: float = Field(
        5.0, ge=1.0, le=15.0, description="Aggregator redirect resolution timeout"
    )
    page_timeout: float = Field(
        8.0, ge=2.0, le=30.0, description="Article page fetch timeout in seconds"
    )
    image_timeout: float = Field(
        5.0, ge=1.0, le=30.0, description="Image download timeout in seconds"
    )
    article_timeout: float = Field(
        15.0,
        ge=3.0,
        le=60.0,
        description="Overall image resolution budget per article in seconds",
    )
    min_image_bytes: int = Field(
        500, ge=0, description="Smallest image payload accepted as a real image"
    )
    resolve_images: bool = Field(
        True, description="Fetch article images before assembling the bulletin"
    )
    default_user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        min_length=5,
        max_length=200,
        description="User-Agent for article and image requests",
    )

    # Table of Contents
    toc_strategy: Literal["measured", "estimate"] = Field(
        "measured",
        description="measured: lay the TOC out virtually before reserving pages; "
        "estimate: reserve ceil(n / toc_rows_per_page) pages",
    )
    toc_rows_per_page: int = Field(
        25, ge=5, le=60, description="Estimated TOC rows per page"
    )

    # Embedded Assets
    fonts_dir: Optional[Path] = Field(None, description="Directory with TTF fonts")
    font_family: str = Field(
        "Cambria",
        description="Font file prefix: <family>-Regular.ttf, -Bold, -Italic, -BoldItalic",
    )
    logo_path: Optional[Path] = Field(None, description="Cover logo image")

    # Bulletin Branding
    bulletin_title: str = Field(
        "Weekly Bulletin of IT News\nand Articles", description="Cover title"
    )
    organization: str = Field(
        "Department of Strategy and Analysis", description="Cover organisation line"
    )
    city: str = Field("Tashkent", description="City shown on the cover")
    author: str = Field("IT Park", description="PDF author metadata")
    report_filename: str = Field(
        "IT-Park-Bulletin.pdf", description="Attachment filename for downloads"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def logging_level(self) -> int:
        """Numeric level for logging.basicConfig; debug mode forces DEBUG."""
        if self.debug:
            return logging.DEBUG
        return getattr(logging, self.log_level)

    @model_validator(mode="after")
    def check_asset_paths(self) -> "Settings":
        """Warn about configured asset paths that do not exist."""
        if self.fonts_dir is not None and not self.fonts_dir.is_dir():
            logger.warning(
                f"Fonts directory {self.fonts_dir} not found - using built-in fonts"
            )
        if self.logo_path is not None and not self.logo_path.is_file():
            logger.warning(f"Logo {self.logo_path} not found - cover without logo")
        return self
