"""Configuration module for doc-archive.

The server entry point and the tests share one process-wide Settings
object through the accessors below.
"""

from doc_archive.config.settings import Settings

_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide archive settings.

    Built on first call from DOC_ARCHIVE_* variables and the optional
    .env file.

    Returns:
        Settings used by the server and the engines it creates
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Install settings built elsewhere, e.g. by a test fixture.

    Args:
        settings: Settings to hand out from get_settings()
    """
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Drop the cached settings so the environment is read again."""
    global _settings
    _settings = None


__all__ = ["Settings", "get_settings", "set_settings", "reset_settings"]
