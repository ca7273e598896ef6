"""Tests for ConflictAnalyzer."""

import pytest

from doc_archive.db.store import SqliteArchiveStore
from doc_archive.models.export_import import (
    ArchiveContents,
    ArchiveManifest,
    ConflictType,
    ExportType,
    ImportAttachmentRecord,
)
from doc_archive.models.records import Category, Document
from doc_archive.services.conflict_analyzer import (
    CATEGORY_CONFLICT_REASON,
    DOCUMENT_CONFLICT_REASON,
    MISSING_CATEGORY_REASON,
    UNKNOWN_CATEGORY_NAME,
    ConflictAnalyzer,
    find_category_by_name,
    find_document_by_title,
)


def _contents(
    categories: list[Category],
    documents: list[Document],
    attachments: list[ImportAttachmentRecord] | None = None,
) -> ArchiveContents:
    attachments = attachments or []
    return ArchiveContents(
        manifest=ArchiveManifest(
            version="1.0",
            app_version="0.1.0",
            export_type=ExportType.COMPLETE,
            total_categories=len(categories),
            total_documents=len(documents),
            total_attachments=len(attachments),
        ),
        categories=categories,
        documents=documents,
        attachments=attachments,
    )


class TestMatchingHelpers:
    """Test case-insensitive lookups."""

    def test_find_category_by_name(self):
        categories = [Category(id=1, name="Work"), Category(id=2, name="Recipes")]

        assert find_category_by_name(categories, "RECIPES").id == 2
        assert find_category_by_name(categories, "Travel") is None

    def test_find_document_by_title(self):
        documents = [Document(id=1, title="Straße")]

        assert find_document_by_title(documents, "STRASSE").id == 1
        assert find_document_by_title(documents, "Strasse 2") is None


class TestConflictAnalyzer:
    """Test conflict detection and preview summary."""

    @pytest.mark.asyncio
    async def test_category_conflict_is_case_insensitive(self, store: SqliteArchiveStore) -> None:
        # Given: "Recipes" exists in the store
        existing_id = await store.create_category("Recipes", "book", "#111111")
        contents = _contents([Category(id=7, name="recipes")], [])

        # When: analyzing an archive holding "recipes"
        analysis = await ConflictAnalyzer(store).analyze(contents)

        # Then: it is a conflict, not a new category
        assert len(analysis.conflicts) == 1
        conflict = analysis.conflicts[0]
        assert conflict.type == ConflictType.CATEGORY
        assert conflict.existing_item.id == existing_id
        assert conflict.import_item.name == "recipes"
        assert conflict.conflict_reason == CATEGORY_CONFLICT_REASON
        assert analysis.summary.categories[0].is_new is False
        assert analysis.summary.categories[0].conflicts == [CATEGORY_CONFLICT_REASON]

    @pytest.mark.asyncio
    async def test_category_identity_ignores_hierarchy(self, store: SqliteArchiveStore) -> None:
        root = await store.create_category("Work", "folder", "#000000")
        await store.create_category("Drafts", "folder", "#000000", parent_id=root)
        contents = _contents([Category(id=3, name="Drafts", parent_id=None)], [])

        analysis = await ConflictAnalyzer(store).analyze(contents)

        assert [c.type for c in analysis.conflicts] == [ConflictType.CATEGORY]

    @pytest.mark.asyncio
    async def test_new_category(self, store: SqliteArchiveStore) -> None:
        await store.create_category("Work", "folder", "#000000")
        contents = _contents([Category(id=1, name="Travel")], [])

        analysis = await ConflictAnalyzer(store).analyze(contents)

        assert analysis.conflicts == []
        assert analysis.summary.categories[0].name == "Travel"
        assert analysis.summary.categories[0].is_new is True

    @pytest.mark.asyncio
    async def test_document_conflict_scoped_to_target_category(
        self, store: SqliteArchiveStore
    ) -> None:
        # Given: "Recipes" with "Soup", and "Work" with "Soup"
        recipes = await store.create_category("Recipes", "book", "#111111")
        work = await store.create_category("Work", "folder", "#000000")
        soup_id = await store.create_document("Soup", None, None, recipes)
        await store.create_document("Soup", None, None, work)

        # When: the archive's "RECIPES" (source id 42) holds "SOUP"
        contents = _contents(
            [Category(id=42, name="RECIPES")],
            [Document(id=9, title="SOUP", category_id=42)],
        )
        analysis = await ConflictAnalyzer(store).analyze(contents)

        # Then: the document collides with the Recipes document
        document_conflicts = [c for c in analysis.conflicts if c.type == ConflictType.DOCUMENT]
        assert len(document_conflicts) == 1
        assert document_conflicts[0].existing_item.id == soup_id
        assert document_conflicts[0].conflict_reason == DOCUMENT_CONFLICT_REASON
        summary = analysis.summary.documents[0]
        assert summary.category_name == "RECIPES"
        assert summary.is_new is False

    @pytest.mark.asyncio
    async def test_document_in_new_category_never_conflicts(
        self, store: SqliteArchiveStore
    ) -> None:
        # Given: store category 1 "Work" holds "Plan"
        work = await store.create_category("Work", "folder", "#000000")
        await store.create_document("Plan", None, None, work)

        # When: the archive's new category reuses source id 1 for another name
        contents = _contents(
            [Category(id=work, name="Travel")],
            [Document(id=5, title="Plan", category_id=work)],
        )
        analysis = await ConflictAnalyzer(store).analyze(contents)

        # Then: no conflict, the document lands in a category that does not exist yet
        assert analysis.conflicts == []
        assert analysis.summary.documents[0].is_new is True

    @pytest.mark.asyncio
    async def test_document_with_unknown_category(self, store: SqliteArchiveStore) -> None:
        contents = _contents([], [Document(id=5, title="Loose", category_id=77)])

        analysis = await ConflictAnalyzer(store).analyze(contents)

        assert analysis.summary.documents[0].category_name == UNKNOWN_CATEGORY_NAME
        assert analysis.summary.documents[0].is_new is True
        assert analysis.summary.documents[0].conflicts == [MISSING_CATEGORY_REASON]
        assert analysis.conflicts == []

    @pytest.mark.asyncio
    async def test_summary_counts_attachments(self, store: SqliteArchiveStore) -> None:
        attachments = [
            ImportAttachmentRecord(
                document_id=5, filename="a.png", filesize=10, export_path="attachments/doc-5/a.png"
            ),
            ImportAttachmentRecord(
                document_id=5, filename="b.pdf", filesize=32, export_path="attachments/doc-5/b.pdf"
            ),
        ]
        contents = _contents(
            [Category(id=1, name="Work")],
            [Document(id=5, title="Plan", category_id=1)],
            attachments,
        )

        analysis = await ConflictAnalyzer(store).analyze(contents)

        assert analysis.summary.attachments == 2
        assert analysis.summary.estimated_size == 42

    @pytest.mark.asyncio
    async def test_analysis_does_not_mutate_store(
        self, store: SqliteArchiveStore, sample_data: dict
    ) -> None:
        before_categories = await store.list_categories()
        contents = _contents(
            [Category(id=1, name="work"), Category(id=2, name="New One")],
            [Document(id=1, title="plan", category_id=1)],
        )

        await ConflictAnalyzer(store).analyze(contents)

        assert await store.list_categories() == before_categories
        documents = await store.list_documents_by_category(sample_data["categories"]["work"])
        assert [d.title for d in documents] == ["Plan"]
