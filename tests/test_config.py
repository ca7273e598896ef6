"""Tests for configuration management."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from doc_archive.config import get_settings, reset_settings, set_settings
from doc_archive.config.settings import Settings


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self):
        """Test default configuration values."""
        settings = Settings()

        assert settings.database_path == str(Path.cwd() / "data" / "doc_archive.db")
        assert settings.data_dir == str(Path.cwd() / "data")
        assert settings.attachments_dir_name == "attachments"
        assert settings.work_dir_name == "tmp"
        assert settings.archive_version == "1.0"
        assert settings.app_version == "0.1.0"
        assert settings.compression_level == 6
        assert settings.log_level == "INFO"

    def test_custom_settings(self, tmp_path):
        """Test creating settings with custom values."""
        settings = Settings(
            database_path="/custom/path.db",
            data_dir=str(tmp_path),
            compression_level=9,
        )

        assert settings.database_path == "/custom/path.db"
        assert settings.data_dir == str(tmp_path)
        assert settings.compression_level == 9

    def test_env_variable_override(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("DOC_ARCHIVE_DATABASE_PATH", "/env/path.db")
        monkeypatch.setenv("DOC_ARCHIVE_COMPRESSION_LEVEL", "1")
        monkeypatch.setenv("DOC_ARCHIVE_LOG_LEVEL", "DEBUG")

        settings = Settings()

        assert settings.database_path == "/env/path.db"
        assert settings.compression_level == 1
        assert settings.log_level == "DEBUG"

    def test_derived_directories(self, tmp_path):
        """Test attachment and work directories live under data_dir."""
        settings = Settings(data_dir=str(tmp_path), work_dir_name="work")

        assert settings.attachments_dir == tmp_path / "attachments"
        assert settings.work_dir == tmp_path / "work"

    @pytest.mark.parametrize("level", [-1, 10])
    def test_compression_level_bounds(self, level):
        """Test compression level must be a valid deflate level."""
        with pytest.raises(ValidationError):
            Settings(compression_level=level)

    def test_same_attachment_and_work_dir_rejected(self):
        """Test the work directory cannot share the attachment store."""
        with pytest.raises(ValidationError, match="must differ"):
            Settings(attachments_dir_name="files", work_dir_name="files")

    def test_unsupported_archive_version_rejected(self):
        """Test archive_version must be writable by the codec."""
        with pytest.raises(ValidationError, match="Unsupported archive_version"):
            Settings(archive_version="2.0")


class TestSettingsSingleton:
    """Test the global settings accessors."""

    def test_set_and_reset(self, tmp_path):
        custom = Settings(data_dir=str(tmp_path))
        set_settings(custom)
        try:
            assert get_settings() is custom
        finally:
            reset_settings()

        assert get_settings() is not custom
        reset_settings()

    def test_get_settings_reads_environment(self, tmp_path, monkeypatch):
        # Given: a data directory configured through the environment
        monkeypatch.setenv("DOC_ARCHIVE_DATA_DIR", str(tmp_path / "env-data"))
        reset_settings()
        try:
            # When / Then: the first access builds settings from it
            assert get_settings().data_dir == str(tmp_path / "env-data")
        finally:
            reset_settings()
