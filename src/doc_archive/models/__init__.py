"""Data models for doc-archive."""

from doc_archive.models.export_import import (
    ArchiveContents,
    ArchiveManifest,
    ConflictResolution,
    ConflictType,
    ExportOptions,
    ExportPhase,
    ExportProgress,
    ExportResult,
    ExportSelection,
    ExportStats,
    ExportType,
    ImportAttachmentRecord,
    ImportConflict,
    ImportPhase,
    ImportPreview,
    ImportProgress,
    ImportResult,
    ImportSummary,
    ItemWarning,
    ResolutionPolicy,
)
from doc_archive.models.records import Attachment, Category, Document, FileType

__all__ = [
    # Records
    "Category",
    "Document",
    "Attachment",
    "FileType",
    # Archive container
    "ArchiveManifest",
    "ArchiveContents",
    "ImportAttachmentRecord",
    # Export
    "ExportType",
    "ExportOptions",
    "ExportSelection",
    "ExportStats",
    "ExportPhase",
    "ExportProgress",
    "ExportResult",
    # Import
    "ImportPhase",
    "ImportProgress",
    "ImportConflict",
    "ImportPreview",
    "ImportSummary",
    "ImportResult",
    "ConflictType",
    "ConflictResolution",
    "ResolutionPolicy",
    "ItemWarning",
]
