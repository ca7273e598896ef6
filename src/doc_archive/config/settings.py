"""Application settings management using Pydantic Settings."""

from pathlib import Path
from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Manifest versions the container codec can write and read
SUPPORTED_ARCHIVE_VERSIONS = ("1.0",)


def _get_default_data_dir() -> str:
    """Get default application data directory."""
    return str(Path.cwd() / "data")


def _get_default_db_path() -> str:
    """Get default database path in the application data directory."""
    return str(Path.cwd() / "data" / "doc_archive.db")


class Settings(BaseSettings):
    """Application configuration settings.

    All settings can be configured via environment variables with the
    prefix `DOC_ARCHIVE_`. For example, `DOC_ARCHIVE_DATA_DIR`.
    """

    # Database
    database_path: str = Field(
        default_factory=_get_default_db_path,
        description="SQLite database file path",
    )

    # Filesystem
    data_dir: str = Field(
        default_factory=_get_default_data_dir,
        description="Application data directory (attachments and work files)",
    )
    attachments_dir_name: str = Field(
        default="attachments",
        min_length=1,
        description="Attachment store directory name under data_dir",
    )
    work_dir_name: str = Field(
        default="tmp",
        min_length=1,
        description="Temporary work directory name under data_dir",
    )

    # Archive format
    archive_version: str = Field(
        default="1.0", description="Manifest version written on export"
    )
    app_version: str = Field(
        default="0.1.0", description="Application version recorded in manifests"
    )
    compression_level: int = Field(
        default=6,
        ge=0,
        le=9,
        description="Deflate compression level for archive containers",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_prefix="DOC_ARCHIVE_", env_file=".env", env_file_encoding="utf-8"
    )

    @model_validator(mode="after")
    def validate_archive_config(self) -> Self:
        """Validate filesystem layout and archive format settings."""
        if self.attachments_dir_name == self.work_dir_name:
            raise ValueError(
                "attachments_dir_name and work_dir_name must differ "
                f"(both are '{self.work_dir_name}')"
            )
        if self.archive_version not in SUPPORTED_ARCHIVE_VERSIONS:
            raise ValueError(
                f"Unsupported archive_version: {self.archive_version}. "
                f"Supported: {', '.join(SUPPORTED_ARCHIVE_VERSIONS)}"
            )
        return self

    @property
    def attachments_dir(self) -> Path:
        """Live attachment store root."""
        return Path(self.data_dir) / self.attachments_dir_name

    @property
    def work_dir(self) -> Path:
        """Root for per-operation temporary directories."""
        return Path(self.data_dir) / self.work_dir_name
