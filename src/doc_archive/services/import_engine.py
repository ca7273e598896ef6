"""Import engine: merge an archive container into the live store.

Records are imported in dependency order (categories, documents,
attachments), each phase remapping source ids through the mapping built by
the previous one. There is no transaction spanning the whole import: rows
written before a fatal error stay written. Problems with a single record or
payload file become ItemWarnings and the batch continues.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from doc_archive.config.settings import Settings
from doc_archive.db.base import ArchiveStore
from doc_archive.exceptions import MappingMissingError, ValidationError
from doc_archive.models.export_import import (
    ConflictResolution,
    ImportAttachmentRecord,
    ImportPhase,
    ImportPreview,
    ImportProgress,
    ImportResult,
    ItemWarning,
    ResolutionPolicy,
)
from doc_archive.models.records import Category, Document
from doc_archive.services.conflict_analyzer import (
    ConflictAnalyzer,
    find_category_by_name,
    find_document_by_title,
)
from doc_archive.services.container_codec import ContainerCodec, ExtractedArchive
from doc_archive.services.progress import ProgressReporter
from doc_archive.storage.attachment_storage import AttachmentStorage
from doc_archive.utils.id_mapping import IdMapping

logger = logging.getLogger(__name__)


class ImportEngine:
    """Preview and perform archive imports.

    One engine instance serves one import operation.
    """

    def __init__(
        self,
        store: ArchiveStore,
        storage: AttachmentStorage,
        settings: Settings,
        on_progress: Callable[[ImportProgress], None] | None = None,
    ) -> None:
        """Initialize import engine.

        Args:
            store: Record store to import into
            storage: Filesystem collaborator
            settings: Application settings
            on_progress: Optional progress callback
        """
        self.store = store
        self.storage = storage
        self.codec = ContainerCodec(storage, settings)
        self.analyzer = ConflictAnalyzer(store)
        self.progress: ProgressReporter[ImportPhase, ImportProgress] = ProgressReporter(
            ImportProgress, ImportPhase.IDLE, on_progress
        )
        self.warnings: list[ItemWarning] = []
        self.counts: dict[str, int] = {
            "categories_created": 0,
            "categories_updated": 0,
            "categories_reused": 0,
            "documents_created": 0,
            "documents_updated": 0,
            "documents_reused": 0,
            "documents_skipped": 0,
            "attachments_imported": 0,
            "attachments_skipped": 0,
        }

    async def preview_import(self, archive_path: str | Path) -> ImportPreview:
        """Analyze an archive without changing the store.

        The temporary extraction directory is removed before returning.

        Args:
            archive_path: Container file path

        Returns:
            ImportPreview with manifest, summary and conflicts

        Raises:
            FileNotFoundError: If the archive does not exist
            CorruptArchiveError: If the archive is structurally invalid
            UnsupportedVersionError: If the manifest version is not supported
        """
        self.progress.report(ImportPhase.READING, 10, "Reading archive file...")
        try:
            async with self.codec.extract(archive_path) as archive:
                self.progress.report(ImportPhase.ANALYZING, 30, "Analyzing import data...")
                self.progress.report(ImportPhase.ANALYZING, 60, "Checking for conflicts...")
                analysis = await self.analyzer.analyze(archive.contents)
                metadata = archive.contents.manifest
        except Exception:
            logger.exception("Preview of %s failed", archive_path)
            raise

        self.progress.report(ImportPhase.ANALYZING, 100, "Analysis complete")
        return ImportPreview(
            metadata=metadata,
            summary=analysis.summary,
            conflicts=analysis.conflicts,
            can_proceed=True,
        )

    async def import_archive(
        self,
        archive_path: str | Path,
        resolution: ConflictResolution | dict[str, Any],
    ) -> ImportResult:
        """Import an archive, resolving conflicts with the given policies.

        Args:
            archive_path: Container file path
            resolution: Policy for categories and for documents (both required)

        Returns:
            ImportResult with counts, id mappings and warnings

        Raises:
            ValidationError: If a resolution policy is missing or invalid
            FileNotFoundError: If the archive does not exist
            CorruptArchiveError: If the archive is structurally invalid
            UnsupportedVersionError: If the manifest version is not supported
            OSError: If the attachment store cannot be written
        """
        try:
            resolution = ConflictResolution.model_validate(resolution)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid conflict resolution: {e}") from e

        logger.info(
            "Importing %s (categories=%s, documents=%s)",
            archive_path,
            resolution.categories.value,
            resolution.documents.value,
        )
        self.progress.report(ImportPhase.READING, 5, "Preparing import...")
        try:
            async with self.codec.extract(archive_path) as archive:
                contents = archive.contents
                self.progress.report(ImportPhase.READING, 15, "Reading import data...")

                self.progress.report(
                    ImportPhase.IMPORTING_CATEGORIES, 25, "Importing categories..."
                )
                category_mapping = await self._import_categories(
                    contents.categories, resolution.categories
                )

                self.progress.report(
                    ImportPhase.IMPORTING_DOCUMENTS, 50, "Importing documents..."
                )
                document_mapping = await self._import_documents(
                    contents.documents, category_mapping, resolution.documents
                )

                self.progress.report(
                    ImportPhase.COPYING_ATTACHMENTS, 75, "Copying attachment files..."
                )
                await self._import_attachments(
                    contents.attachments, document_mapping, archive
                )
        except Exception:
            logger.exception("Import of %s failed", archive_path)
            raise

        self.progress.report(ImportPhase.COMPLETE, 100, "Import completed successfully!")
        logger.info("Imported %s: %s (%d warnings)", archive_path, self.counts, len(self.warnings))

        return ImportResult(
            imported_at=datetime.now(timezone.utc),
            schema_version=contents.manifest.version,
            resolution=resolution,
            counts=dict(self.counts),
            warnings=list(self.warnings),
            category_mapping=category_mapping.as_dict(),
            document_mapping=document_mapping.as_dict(),
        )

    async def _import_categories(
        self, categories: list[Category], policy: ResolutionPolicy
    ) -> IdMapping:
        """Import categories in archive order and map their ids."""
        mapping = IdMapping("category")
        batch_ids = {category.id for category in categories}
        existing = await self.store.list_categories()

        total = len(categories)
        for index, category in enumerate(categories, 1):
            if category.id in mapping:
                self._warn("category", category.name, f"Duplicate category id {category.id}")
            else:
                match = find_category_by_name(existing, category.name)
                if match is not None:
                    if policy == ResolutionPolicy.SKIP:
                        self.counts["categories_reused"] += 1
                    else:
                        await self.store.update_category(
                            match.id, category.name, category.icon, category.color
                        )
                        self.counts["categories_updated"] += 1
                    mapping.set(category.id, match.id)
                else:
                    parent_id = mapping.get(category.parent_id)
                    if parent_id is None and category.parent_id in batch_ids:
                        self._warn(
                            "category",
                            category.name,
                            f"Parent category {category.parent_id} not imported yet; "
                            "created as a root category",
                        )
                    new_id = await self.store.create_category(
                        category.name,
                        category.icon,
                        category.color,
                        parent_id=parent_id,
                        description=category.description,
                    )
                    existing.append(
                        category.model_copy(update={"id": new_id, "parent_id": parent_id})
                    )
                    mapping.set(category.id, new_id)
                    self.counts["categories_created"] += 1

            self.progress.step(
                ImportPhase.IMPORTING_CATEGORIES, 25, 25, index, total,
                f"Importing categories ({index}/{total})...", category.name,
            )

        return mapping

    async def _import_documents(
        self,
        documents: list[Document],
        category_mapping: IdMapping,
        policy: ResolutionPolicy,
    ) -> IdMapping:
        """Import documents into their remapped categories and map their ids."""
        mapping = IdMapping("document")

        total = len(documents)
        for index, document in enumerate(documents, 1):
            try:
                category_id = category_mapping.require(document.category_id)
            except MappingMissingError as e:
                self._warn("document", document.title, f"{e}; document skipped")
                self.counts["documents_skipped"] += 1
            else:
                if document.id in mapping:
                    self._warn("document", document.title, f"Duplicate document id {document.id}")
                    self.counts["documents_skipped"] += 1
                else:
                    mapping.set(
                        document.id,
                        await self._import_document(document, category_id, policy),
                    )

            self.progress.step(
                ImportPhase.IMPORTING_DOCUMENTS, 50, 25, index, total,
                f"Importing documents ({index}/{total})...", document.title,
            )

        return mapping

    async def _import_document(
        self, document: Document, category_id: int, policy: ResolutionPolicy
    ) -> int:
        """Create or resolve one document; returns its id in the store."""
        siblings = await self.store.list_documents_by_category(category_id)
        match = find_document_by_title(siblings, document.title)

        if match is None:
            self.counts["documents_created"] += 1
            return await self.store.create_document(
                document.title, document.description, document.text_content, category_id
            )

        if policy == ResolutionPolicy.SKIP:
            self.counts["documents_reused"] += 1
        else:
            await self.store.update_document(
                match.id, document.title, document.description, document.text_content
            )
            self.counts["documents_updated"] += 1
        return match.id

    async def _import_attachments(
        self,
        records: list[ImportAttachmentRecord],
        document_mapping: IdMapping,
        archive: ExtractedArchive,
    ) -> None:
        """Copy payloads into the attachment store and register them.

        Every copied payload becomes a new attachment row; existing
        attachments of merged or reused documents are left alone.
        """
        total = len(records)
        for index, record in enumerate(records, 1):
            if await self._import_attachment(record, document_mapping, archive):
                self.counts["attachments_imported"] += 1
            else:
                self.counts["attachments_skipped"] += 1

            self.progress.step(
                ImportPhase.COPYING_ATTACHMENTS, 75, 20, index, total,
                f"Copying attachments ({index}/{total})...", record.filename,
            )

    async def _import_attachment(
        self,
        record: ImportAttachmentRecord,
        document_mapping: IdMapping,
        archive: ExtractedArchive,
    ) -> bool:
        document_id = document_mapping.get(record.document_id)
        if document_id is None:
            self._warn(
                "attachment",
                record.filename,
                f"No document mapping for source id {record.document_id}; attachment skipped",
            )
            return False

        source = archive.payload_path(record.export_path)
        if source is None or not await self.storage.exists(source):
            self._warn(
                "attachment",
                record.filename,
                f"Attachment file not found in archive: {record.export_path}",
            )
            return False

        # Directory creation failure aborts the import
        target_dir = await self.storage.ensure_document_dir(document_id)
        target = target_dir / self.storage.generate_filename(record.filename)
        try:
            filesize = await self.storage.copy_file(source, target)
        except OSError as e:
            await self._discard_copy(target)
            self._warn("attachment", record.filename, f"Failed to copy attachment: {e}")
            return False

        try:
            await self.store.add_attachment(
                document_id, record.filename, str(target), record.filetype, filesize
            )
        except Exception:
            await self._discard_copy(target)
            raise
        return True

    async def _discard_copy(self, target: Path) -> None:
        """Remove a payload copy that has no attachment row."""
        try:
            await self.storage.remove_file(target)
        except OSError as e:
            logger.warning("Failed to remove unregistered attachment %s: %s", target, e)

    def _warn(self, entity: str, name: str, message: str) -> None:
        self.warnings.append(ItemWarning(entity=entity, name=name, message=message))
        logger.warning("Skipping %s '%s': %s", entity, name, message)
