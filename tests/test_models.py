"""Tests for record and export/import models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from doc_archive.models import (
    ArchiveManifest,
    Attachment,
    Category,
    ConflictResolution,
    ExportOptions,
    ExportSelection,
    ExportType,
    FileType,
    ImportAttachmentRecord,
    ResolutionPolicy,
)


class TestRecords:
    """Test Category, Document and Attachment validation."""

    def test_category_defaults(self):
        category = Category(id=1, name="Work")

        assert category.icon == "folder"
        assert category.color == "#6B7280"
        assert category.parent_id is None
        assert category.level == 0

    def test_category_name_required(self):
        with pytest.raises(ValidationError):
            Category(id=1, name="")

    def test_attachment_filesize_non_negative(self):
        with pytest.raises(ValidationError):
            Attachment(id=1, document_id=1, filename="a.png", filepath="/a.png", filesize=-1)

    def test_attachment_filetype_from_string(self):
        attachment = Attachment(
            id=1, document_id=1, filename="a.pdf", filepath="/a.pdf", filetype="pdf"
        )

        assert attachment.filetype == FileType.PDF


class TestArchiveManifest:
    """Test metadata.json serialization."""

    def test_parse_camel_case(self):
        manifest = ArchiveManifest.model_validate(
            {
                "version": "1.0",
                "exportDate": "2024-05-01T12:00:00Z",
                "appVersion": "0.1.0",
                "exportType": "category",
                "categoryId": 3,
                "totalCategories": 1,
                "totalDocuments": 2,
                "totalAttachments": 2,
            }
        )

        assert manifest.export_type == ExportType.CATEGORY
        assert manifest.category_id == 3
        assert manifest.total_documents == 2
        assert isinstance(manifest.export_date, datetime)

    def test_dump_camel_case(self):
        manifest = ArchiveManifest(
            version="1.0", app_version="0.1.0", export_type=ExportType.COMPLETE
        )

        data = manifest.model_dump(mode="json", by_alias=True, exclude_none=True)

        assert set(data) == {
            "version",
            "exportDate",
            "appVersion",
            "exportType",
            "totalCategories",
            "totalDocuments",
            "totalAttachments",
        }
        assert data["exportType"] == "complete"

    def test_negative_totals_rejected(self):
        with pytest.raises(ValidationError):
            ArchiveManifest(
                version="1.0",
                app_version="0.1.0",
                export_type=ExportType.COMPLETE,
                total_documents=-1,
            )


class TestImportAttachmentRecord:
    """Test attachments.json entries."""

    def test_id_optional(self):
        record = ImportAttachmentRecord.model_validate(
            {"document_id": 4, "filename": "a.png", "exportPath": "attachments/doc-4/a.png"}
        )

        assert record.id is None
        assert record.export_path == "attachments/doc-4/a.png"
        assert record.filetype == FileType.OTHER

    def test_export_path_required(self):
        with pytest.raises(ValidationError):
            ImportAttachmentRecord.model_validate({"document_id": 4, "filename": "a.png"})


class TestExportRequests:
    """Test ExportOptions, ExportSelection and ConflictResolution."""

    def test_default_options_are_complete(self):
        assert ExportOptions().type == ExportType.COMPLETE

    def test_selection_estimated_size(self):
        selection = ExportSelection(
            options=ExportOptions(),
            attachments=[
                Attachment(id=1, document_id=1, filename="a", filepath="/a", filesize=5),
                Attachment(id=2, document_id=1, filename="b", filepath="/b", filesize=7),
            ],
        )

        assert selection.estimated_size == 12

    def test_resolution_requires_both_policies(self):
        with pytest.raises(ValidationError):
            ConflictResolution(categories=ResolutionPolicy.SKIP)

    def test_resolution_from_strings(self):
        resolution = ConflictResolution.model_validate(
            {"categories": "merge", "documents": "replace"}
        )

        assert resolution.categories == ResolutionPolicy.MERGE
        assert resolution.documents == ResolutionPolicy.REPLACE
