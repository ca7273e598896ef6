"""Export/Import models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from doc_archive.models.records import Attachment, Category, Document, FileType


class ExportType(str, Enum):
    """Scope of an export."""

    COMPLETE = "complete"
    CATEGORY = "category"
    DOCUMENT = "document"


class ExportPhase(str, Enum):
    """Export engine phases."""

    IDLE = "idle"
    COLLECTING = "collecting"
    COPYING_ATTACHMENTS = "copying-attachments"
    CREATING_ARCHIVE = "creating-archive"
    COMPLETE = "complete"


class ImportPhase(str, Enum):
    """Import engine phases."""

    IDLE = "idle"
    READING = "reading"
    ANALYZING = "analyzing"
    IMPORTING_CATEGORIES = "importing-categories"
    IMPORTING_DOCUMENTS = "importing-documents"
    COPYING_ATTACHMENTS = "copying-attachments"
    COMPLETE = "complete"


class ResolutionPolicy(str, Enum):
    """How an incoming record that collides with an existing one is handled."""

    SKIP = "skip"
    MERGE = "merge"
    REPLACE = "replace"


class ConflictType(str, Enum):
    """Kind of entity involved in an import conflict."""

    CATEGORY = "category"
    DOCUMENT = "document"


class ExportOptions(BaseModel):
    """Export selection request."""

    type: ExportType = ExportType.COMPLETE
    category_id: int | None = None
    document_id: int | None = None

    @model_validator(mode="after")
    def validate_selection_root(self) -> Self:
        """Require the id matching the export type."""
        if self.type == ExportType.CATEGORY and self.category_id is None:
            raise ValueError("category_id is required for category export")
        if self.type == ExportType.DOCUMENT and self.document_id is None:
            raise ValueError("document_id is required for document export")
        return self


class ArchiveManifest(BaseModel):
    """Contents of metadata.json."""

    model_config = ConfigDict(populate_by_name=True)

    version: str
    export_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="exportDate"
    )
    app_version: str = Field(alias="appVersion")
    export_type: ExportType = Field(alias="exportType")
    category_id: int | None = Field(default=None, alias="categoryId")
    document_id: int | None = Field(default=None, alias="documentId")
    total_categories: int = Field(default=0, ge=0, alias="totalCategories")
    total_documents: int = Field(default=0, ge=0, alias="totalDocuments")
    total_attachments: int = Field(default=0, ge=0, alias="totalAttachments")


class ImportAttachmentRecord(BaseModel):
    """Attachment entry of attachments.json."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    document_id: int
    filename: str = Field(min_length=1)
    filetype: FileType = FileType.OTHER
    filesize: int = Field(default=0, ge=0)
    export_path: str = Field(min_length=1, alias="exportPath")
    original_path: str | None = Field(default=None, alias="originalPath")
    created_at: datetime | None = None

    @field_validator("filesize", mode="before")
    @classmethod
    def default_missing_filesize(cls, value: object) -> object:
        """Treat a null filesize as 0."""
        return 0 if value is None else value


class ArchiveContents(BaseModel):
    """Parsed records of an archive container."""

    manifest: ArchiveManifest
    categories: list[Category] = Field(default_factory=list)
    documents: list[Document] = Field(default_factory=list)
    attachments: list[ImportAttachmentRecord] = Field(default_factory=list)


class ExportSelection(BaseModel):
    """Records chosen for an export."""

    options: ExportOptions
    categories: list[Category] = Field(default_factory=list)
    documents: list[Document] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)
    selection_info: str = ""

    @property
    def estimated_size(self) -> int:
        """Sum of included attachment sizes in bytes."""
        return sum(attachment.filesize for attachment in self.attachments)


class ExportStats(BaseModel):
    """Preview statistics for an export selection."""

    categories: int
    documents: int
    attachments: int
    estimated_size: int
    selection_info: str | None = None


class ItemWarning(BaseModel):
    """Non-fatal problem with a single record or file."""

    entity: str
    name: str
    message: str


class ExportProgress(BaseModel):
    """Export progress update."""

    phase: ExportPhase
    progress: int = Field(ge=0, le=100)
    message: str
    current_item: str | None = None


class ImportProgress(BaseModel):
    """Import progress update."""

    phase: ImportPhase
    progress: int = Field(ge=0, le=100)
    message: str
    current_item: str | None = None


class ConflictResolution(BaseModel):
    """Resolution policy per entity type. Both fields are required."""

    categories: ResolutionPolicy
    documents: ResolutionPolicy


class ImportConflict(BaseModel):
    """Incoming record colliding with an existing one."""

    type: ConflictType
    existing_item: Category | Document
    import_item: Category | Document
    conflict_reason: str


class CategorySummary(BaseModel):
    """Preview line for an incoming category."""

    name: str
    is_new: bool
    conflicts: list[str] = Field(default_factory=list)


class DocumentSummary(BaseModel):
    """Preview line for an incoming document."""

    title: str
    category_name: str
    is_new: bool
    conflicts: list[str] = Field(default_factory=list)


class ImportSummary(BaseModel):
    """Preview summary of an archive."""

    categories: list[CategorySummary] = Field(default_factory=list)
    documents: list[DocumentSummary] = Field(default_factory=list)
    attachments: int = 0
    estimated_size: int = 0


class ImportAnalysis(BaseModel):
    """Conflicts and summary produced by the conflict analyzer."""

    conflicts: list[ImportConflict] = Field(default_factory=list)
    summary: ImportSummary


class ImportPreview(BaseModel):
    """Non-destructive preview of an import."""

    metadata: ArchiveManifest
    summary: ImportSummary
    conflicts: list[ImportConflict] = Field(default_factory=list)
    can_proceed: bool = True


class ExportResult(BaseModel):
    """Result of export operation."""

    exported_at: datetime
    manifest: ArchiveManifest
    counts: dict[str, int]
    file_path: str
    file_size_bytes: int
    warnings: list[ItemWarning] = Field(default_factory=list)


class ImportResult(BaseModel):
    """Result of import operation."""

    imported_at: datetime
    schema_version: str
    resolution: ConflictResolution
    counts: dict[str, int]
    warnings: list[ItemWarning] = Field(default_factory=list)
    category_mapping: dict[int, int] = Field(default_factory=dict)
    document_mapping: dict[int, int] = Field(default_factory=dict)
