"""Category, document and attachment records."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class FileType(str, Enum):
    """Attachment file type classification."""

    IMAGE = "image"
    PDF = "pdf"
    VIDEO = "video"
    OTHER = "other"


class Category(BaseModel):
    """Category node in the category tree."""

    id: int
    name: str = Field(min_length=1)
    icon: str = "folder"
    color: str = "#6B7280"
    parent_id: int | None = None
    description: str | None = None
    level: int = Field(default=0, ge=0)
    sort_order: int = 0
    created_at: datetime | None = None


class Document(BaseModel):
    """Rich-text document owned by a category."""

    id: int
    title: str = Field(min_length=1)
    description: str | None = None
    # Serialized editor markup, opaque to the archive engine
    text_content: str | None = None
    category_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Attachment(BaseModel):
    """File attached to a document."""

    id: int
    document_id: int
    filename: str = Field(min_length=1)
    filepath: str
    filetype: FileType = FileType.OTHER
    filesize: int = Field(default=0, ge=0)
    created_at: datetime | None = None
