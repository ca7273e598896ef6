"""Custom exceptions for doc-archive."""


class ArchiveError(Exception):
    """Base class for archive import/export errors."""

    pass


class NotFoundError(ArchiveError):
    """Raised when a requested category or document does not exist."""

    pass


class ValidationError(ArchiveError, ValueError):
    """Raised when request arguments fail validation."""

    pass


class CorruptArchiveError(ArchiveError):
    """Raised when an archive container is structurally invalid."""

    pass


class UnsupportedVersionError(ArchiveError):
    """Raised when an archive manifest declares a version this codec cannot read."""

    pass


class MappingMissingError(ArchiveError, KeyError):
    """Raised when an old id has no counterpart in an id mapping."""

    def __init__(self, kind: str, old_id: int) -> None:
        self.kind = kind
        self.old_id = old_id
        super().__init__(f"No {kind} mapping for source id {old_id}")

    def __str__(self) -> str:
        return self.args[0]
