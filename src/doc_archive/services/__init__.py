"""Archive export/import services."""

from doc_archive.services.conflict_analyzer import ConflictAnalyzer
from doc_archive.services.container_codec import ContainerCodec, ExtractedArchive
from doc_archive.services.export_engine import ExportEngine
from doc_archive.services.import_engine import ImportEngine
from doc_archive.services.selection_resolver import SelectionResolver

__all__ = [
    "SelectionResolver",
    "ContainerCodec",
    "ExtractedArchive",
    "ConflictAnalyzer",
    "ExportEngine",
    "ImportEngine",
]
