"""Export engine: write a selection of the store into an archive container."""

import logging
from collections.abc import Callable
from pathlib import Path

import aiofiles.os

from doc_archive.config.settings import Settings
from doc_archive.db.base import ArchiveStore
from doc_archive.models.export_import import (
    ExportOptions,
    ExportPhase,
    ExportProgress,
    ExportResult,
    ExportStats,
    ExportType,
    ImportAttachmentRecord,
    ItemWarning,
)
from doc_archive.services.container_codec import ContainerCodec, build_export_path
from doc_archive.services.progress import ProgressReporter
from doc_archive.services.selection_resolver import SelectionResolver
from doc_archive.storage.attachment_storage import AttachmentStorage

logger = logging.getLogger(__name__)

_SCOPE_LABELS = {
    ExportType.COMPLETE: ("Database data", "Archive"),
    ExportType.CATEGORY: ("Category data", "Category"),
    ExportType.DOCUMENT: ("Document data", "Document"),
}


class ExportEngine:
    """Export categories, documents and attachment files to a container.

    One engine instance serves one export operation.
    """

    def __init__(
        self,
        store: ArchiveStore,
        storage: AttachmentStorage,
        settings: Settings,
        on_progress: Callable[[ExportProgress], None] | None = None,
    ) -> None:
        """Initialize export engine.

        Args:
            store: Record store to export from
            storage: Filesystem collaborator
            settings: Application settings
            on_progress: Optional progress callback
        """
        self.store = store
        self.storage = storage
        self.resolver = SelectionResolver(store)
        self.codec = ContainerCodec(storage, settings)
        self.progress: ProgressReporter[ExportPhase, ExportProgress] = ProgressReporter(
            ExportProgress, ExportPhase.IDLE, on_progress
        )
        self.warnings: list[ItemWarning] = []

    async def export_archive(
        self, destination: str | Path, options: ExportOptions | None = None
    ) -> ExportResult:
        """Export a selection to a container file.

        Nothing is left at `destination` unless the whole container was
        written successfully.

        Args:
            destination: Container file path
            options: Selection (default: complete archive)

        Returns:
            ExportResult with counts, manifest and warnings

        Raises:
            NotFoundError: If the selected category or document does not exist
            OSError: If the container cannot be written
        """
        options = options or ExportOptions()
        destination = Path(destination)
        collected_label, done_label = _SCOPE_LABELS[options.type]

        logger.info("Exporting %s archive to %s", options.type.value, destination)
        try:
            self.progress.report(ExportPhase.COLLECTING, 5, "Collecting data...")
            selection = await self.resolver.resolve(options)
            self.progress.report(
                ExportPhase.COLLECTING, 10, f"Selected {selection.selection_info}"
            )

            total = len(selection.categories)
            for index, category in enumerate(selection.categories, 1):
                self.progress.step(
                    ExportPhase.COLLECTING, 10, 15, index, total,
                    f"Collecting categories ({index}/{total})...", category.name,
                )

            total = len(selection.documents)
            for index, document in enumerate(selection.documents, 1):
                self.progress.step(
                    ExportPhase.COLLECTING, 25, 15, index, total,
                    f"Collecting documents ({index}/{total})...", document.title,
                )
            self.progress.report(
                ExportPhase.COLLECTING, 40, f"{collected_label} collected successfully"
            )

            async with self.codec.create(destination) as writer:
                self.progress.report(
                    ExportPhase.COPYING_ATTACHMENTS, 40, "Copying attachment files..."
                )
                records: list[ImportAttachmentRecord] = []
                used_paths: set[str] = set()
                total = len(selection.attachments)
                for index, attachment in enumerate(selection.attachments, 1):
                    if await self.storage.exists(attachment.filepath):
                        export_path = build_export_path(attachment, used_paths)
                        await writer.add_file(attachment.filepath, export_path)
                        records.append(
                            ImportAttachmentRecord(
                                id=attachment.id,
                                document_id=attachment.document_id,
                                filename=attachment.filename,
                                filetype=attachment.filetype,
                                filesize=attachment.filesize,
                                export_path=export_path,
                                original_path=attachment.filepath,
                                created_at=attachment.created_at,
                            )
                        )
                    else:
                        self._warn(
                            attachment.filename,
                            f"Attachment file not found: {attachment.filepath}",
                        )
                    self.progress.step(
                        ExportPhase.COPYING_ATTACHMENTS, 40, 40, index, total,
                        f"Copying attachments ({index}/{total})...", attachment.filename,
                    )

                self.progress.report(
                    ExportPhase.CREATING_ARCHIVE, 85, "Creating archive file..."
                )
                manifest = self.codec.build_manifest(
                    selection,
                    total_categories=len(selection.categories),
                    total_documents=len(selection.documents),
                    total_attachments=len(records),
                )
                await self.codec.write_records(
                    writer, manifest, selection.categories, selection.documents, records
                )

            file_size = await aiofiles.os.path.getsize(destination)
            self.progress.report(ExportPhase.CREATING_ARCHIVE, 95, "Archive file created")
        except Exception:
            logger.exception("Export to %s failed", destination)
            raise

        self.progress.report(
            ExportPhase.COMPLETE, 100, f"{done_label} exported successfully!"
        )
        logger.info(
            "Exported %d categories, %d documents, %d attachments to %s (%d warnings)",
            manifest.total_categories,
            manifest.total_documents,
            manifest.total_attachments,
            destination,
            len(self.warnings),
        )

        return ExportResult(
            exported_at=manifest.export_date,
            manifest=manifest,
            counts={
                "categories": manifest.total_categories,
                "documents": manifest.total_documents,
                "attachments": manifest.total_attachments,
            },
            file_path=str(destination),
            file_size_bytes=file_size,
            warnings=list(self.warnings),
        )

    async def get_selective_export_stats(self, options: ExportOptions) -> ExportStats:
        """Preview what an export would include. Writes nothing.

        Raises:
            NotFoundError: If the selected category or document does not exist
        """
        return await self.resolver.stats(options)

    async def get_export_stats(self) -> ExportStats:
        """Preview a complete export. Writes nothing."""
        return await self.resolver.stats(ExportOptions(type=ExportType.COMPLETE))

    def _warn(self, name: str, message: str) -> None:
        self.warnings.append(ItemWarning(entity="attachment", name=name, message=message))
        logger.warning("Attachment '%s': %s", name, message)
