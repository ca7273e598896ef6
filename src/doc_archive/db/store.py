"""SQLite-backed ArchiveStore."""

from doc_archive.db.base import ArchiveStore
from doc_archive.db.database import Database
from doc_archive.db.repositories.attachment_repository import AttachmentRepository
from doc_archive.db.repositories.category_repository import CategoryRepository
from doc_archive.db.repositories.document_repository import DocumentRepository
from doc_archive.models.records import Attachment, Category, Document, FileType


class SqliteArchiveStore(ArchiveStore):
    """ArchiveStore over the category, document and attachment repositories."""

    def __init__(self, db: Database) -> None:
        """Initialize store.

        Args:
            db: Connected and migrated database
        """
        self.categories = CategoryRepository(db)
        self.documents = DocumentRepository(db)
        self.attachments = AttachmentRepository(db)

    async def list_categories(self) -> list[Category]:
        return await self.categories.find_all()

    async def get_category_by_id(self, category_id: int) -> Category | None:
        return await self.categories.find_by_id(category_id)

    async def create_category(
        self,
        name: str,
        icon: str,
        color: str,
        parent_id: int | None = None,
        description: str | None = None,
    ) -> int:
        category = await self.categories.create(
            name=name,
            icon=icon,
            color=color,
            parent_id=parent_id,
            description=description,
        )
        return category.id

    async def update_category(
        self, category_id: int, name: str, icon: str, color: str
    ) -> None:
        await self.categories.update(category_id, name, icon, color)

    async def list_documents_by_category(self, category_id: int) -> list[Document]:
        return await self.documents.find_by_category(category_id)

    async def list_documents_by_category_tree(self, root_id: int) -> list[Document]:
        category_ids = await self.categories.find_subtree_ids(root_id)
        return await self.documents.find_by_categories(category_ids)

    async def get_document_by_id(self, document_id: int) -> Document | None:
        return await self.documents.find_by_id(document_id)

    async def create_document(
        self,
        title: str,
        description: str | None,
        content: str | None,
        category_id: int,
    ) -> int:
        document = await self.documents.create(title, description, content, category_id)
        return document.id

    async def update_document(
        self,
        document_id: int,
        title: str,
        description: str | None,
        content: str | None,
    ) -> None:
        await self.documents.update(document_id, title, description, content)

    async def list_attachments(self, document_id: int) -> list[Attachment]:
        return await self.attachments.find_by_document(document_id)

    async def add_attachment(
        self,
        document_id: int,
        filename: str,
        filepath: str,
        filetype: FileType,
        filesize: int,
    ) -> int:
        attachment = await self.attachments.create(
            document_id, filename, filepath, filetype, filesize
        )
        return attachment.id
