"""Repository modules for data access."""

from doc_archive.db.repositories.attachment_repository import AttachmentRepository
from doc_archive.db.repositories.category_repository import CategoryRepository
from doc_archive.db.repositories.document_repository import DocumentRepository

__all__ = ["CategoryRepository", "DocumentRepository", "AttachmentRepository"]
