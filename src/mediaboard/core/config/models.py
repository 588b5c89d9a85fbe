"""
Configuration Models

Pydantic models for type-safe configuration management with validation,
defaults, and field documentation.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


DEFAULT_DATABASE = "mediaboard.db"
MEMORY_DATABASE = ":memory:"


class ThumbnailConfig(BaseModel):
    """Configuration for thumbnail generation."""

    engine: str = Field(
        default="gd",
        description="Thumbnail engine (gd, convert, epeg); unknown names fall back to gd"
    )
    width: int = Field(default=192, ge=16, le=2048, description="Maximum thumbnail width")
    height: int = Field(default=192, ge=16, le=2048, description="Maximum thumbnail height")
    quality: int = Field(
        default=75,
        ge=1,
        le=100,
        description="JPEG quality for thumbnails (1-100)"
    )
    upscale: bool = Field(
        default=False,
        description="Scale images smaller than the thumbnail box up to fill it"
    )
    optimize: bool = Field(
        default=False,
        description="Run jpegoptim over thumbnails produced by the convert engine"
    )

    # External binaries
    convert_path: str = Field(default="convert", description="Path to ImageMagick convert")
    epeg_path: str = Field(default="epeg", description="Path to epeg")
    jpegoptim_path: str = Field(default="jpegoptim", description="Path to jpegoptim")

    # Resource limits
    memory_limit: int = Field(
        default=128 * 1024 * 1024,
        ge=1,
        description="Estimated decode memory (bytes) above which the gd engine emits a placeholder"
    )
    process_timeout: Optional[float] = Field(
        default=60.0,
        gt=0,
        description="Seconds to wait for an external engine; null waits indefinitely"
    )

    @field_validator('engine')
    @classmethod
    def normalise_engine(cls, v: str) -> str:
        return v.strip().lower()


class PdfConfig(BaseModel):
    """Configuration for the PDF handler."""

    thumb_engine: Optional[Literal["static", "pdftoppm"]] = Field(
        default=None,
        description="PDF thumbnail engine; null picks pdftoppm when it is installed"
    )
    pdftoppm_path: str = Field(default="pdftoppm", description="Path to pdftoppm")


class StorageConfig(BaseModel):
    """Configuration for the content-addressed warehouse and image records."""

    data_dir: Path = Field(default=Path("data"), description="Root directory for images and thumbnails")
    database: Optional[str] = Field(
        default=None,
        description="SQLite database file for image records; null keeps mediaboard.db in data_dir (:memory: for a throwaway store)"
    )

    @property
    def database_path(self) -> str:
        """The database that is actually opened."""
        if self.database:
            return self.database
        return str(self.data_dir / DEFAULT_DATABASE)


class AppConfig(BaseModel):
    """Root application configuration model."""

    version: str = Field(default="0.3.0", description="Configuration version")
    created: datetime = Field(default_factory=datetime.now, description="Configuration creation time")

    thumbnails: ThumbnailConfig = Field(default_factory=ThumbnailConfig, description="Thumbnail configuration")
    pdf: PdfConfig = Field(default_factory=PdfConfig, description="PDF handler configuration")
    storage: StorageConfig = Field(default_factory=StorageConfig, description="Storage configuration")

    verbose: bool = Field(default=False, description="Enable verbose logging output")
    debug: bool = Field(default=False, description="Enable debug mode with detailed logging")

    # Extension settings
    enable_plugins: bool = Field(
        default=True,
        description="Load third-party extensions from installed entry points"
    )
    disabled_extensions: List[str] = Field(
        default_factory=list,
        description="Extension names that are registered but not instantiated"
    )
