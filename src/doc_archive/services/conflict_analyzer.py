"""Classify incoming categories and documents as new or colliding.

Matching policy:

* Categories are identified by name alone, compared case-insensitively
  across the whole tree. Parent and level are not part of the key, so two
  differently nested categories with the same name are the same category.
* Documents are identified by title, compared case-insensitively, among the
  documents of the category they will land in after category remapping.
  A document whose category is not in the archive is flagged in the summary
  because the import will skip it.
"""

from doc_archive.db.base import ArchiveStore
from doc_archive.models.export_import import (
    ArchiveContents,
    CategorySummary,
    ConflictType,
    DocumentSummary,
    ImportAnalysis,
    ImportConflict,
    ImportSummary,
)
from doc_archive.models.records import Category, Document

CATEGORY_CONFLICT_REASON = "Category with same name already exists"
DOCUMENT_CONFLICT_REASON = "Document with same title already exists in category"
MISSING_CATEGORY_REASON = "Category missing from archive"
UNKNOWN_CATEGORY_NAME = "Unknown Category"


def normalize_name(name: str) -> str:
    """Key used for case-insensitive name matching."""
    return name.casefold()


def find_category_by_name(categories: list[Category], name: str) -> Category | None:
    """First category whose name matches case-insensitively."""
    key = normalize_name(name)
    for category in categories:
        if normalize_name(category.name) == key:
            return category
    return None


def find_document_by_title(documents: list[Document], title: str) -> Document | None:
    """First document whose title matches case-insensitively."""
    key = normalize_name(title)
    for document in documents:
        if normalize_name(document.title) == key:
            return document
    return None


class ConflictAnalyzer:
    """Compare archive contents against the live store without mutating it."""

    def __init__(self, store: ArchiveStore) -> None:
        """Initialize analyzer.

        Args:
            store: Record store to compare against
        """
        self.store = store

    async def analyze(self, contents: ArchiveContents) -> ImportAnalysis:
        """Enumerate conflicts and build the preview summary.

        Args:
            contents: Parsed archive contents

        Returns:
            Conflicts and per-record summary
        """
        existing_categories = await self.store.list_categories()
        imported_categories = {category.id: category for category in contents.categories}
        documents_by_category: dict[int, list[Document]] = {}

        conflicts: list[ImportConflict] = []
        category_summaries: list[CategorySummary] = []
        for category in contents.categories:
            existing = find_category_by_name(existing_categories, category.name)
            reasons: list[str] = []
            if existing is not None:
                reasons.append(CATEGORY_CONFLICT_REASON)
                conflicts.append(
                    ImportConflict(
                        type=ConflictType.CATEGORY,
                        existing_item=existing,
                        import_item=category,
                        conflict_reason=CATEGORY_CONFLICT_REASON,
                    )
                )
            category_summaries.append(
                CategorySummary(name=category.name, is_new=existing is None, conflicts=reasons)
            )

        document_summaries: list[DocumentSummary] = []
        for document in contents.documents:
            source_category = imported_categories.get(document.category_id)
            target_id = self._target_category_id(source_category, existing_categories)

            existing_document = None
            if target_id is not None:
                if target_id not in documents_by_category:
                    documents_by_category[target_id] = (
                        await self.store.list_documents_by_category(target_id)
                    )
                existing_document = find_document_by_title(
                    documents_by_category[target_id], document.title
                )

            reasons = []
            if source_category is None:
                reasons.append(MISSING_CATEGORY_REASON)
            if existing_document is not None:
                reasons.append(DOCUMENT_CONFLICT_REASON)
                conflicts.append(
                    ImportConflict(
                        type=ConflictType.DOCUMENT,
                        existing_item=existing_document,
                        import_item=document,
                        conflict_reason=DOCUMENT_CONFLICT_REASON,
                    )
                )
            document_summaries.append(
                DocumentSummary(
                    title=document.title,
                    category_name=(
                        source_category.name if source_category else UNKNOWN_CATEGORY_NAME
                    ),
                    is_new=existing_document is None,
                    conflicts=reasons,
                )
            )

        summary = ImportSummary(
            categories=category_summaries,
            documents=document_summaries,
            attachments=len(contents.attachments),
            estimated_size=sum(record.filesize for record in contents.attachments),
        )
        return ImportAnalysis(conflicts=conflicts, summary=summary)

    @staticmethod
    def _target_category_id(
        source_category: Category | None,
        existing_categories: list[Category],
    ) -> int | None:
        """Existing category a document would land in, or None.

        None means the document's category will be created by the import
        (or is missing from the archive), so it cannot collide.
        """
        if source_category is None:
            return None
        existing = find_category_by_name(existing_categories, source_category.name)
        return existing.id if existing is not None else None
