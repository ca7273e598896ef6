"""Abstract record store consumed by the archive engines."""

from abc import ABC, abstractmethod

from doc_archive.models.records import Attachment, Category, Document, FileType


class ArchiveStore(ABC):
    """Record access interface for categories, documents and attachments.

    Ids are store-assigned surrogate keys. Implementations persist each call
    independently; no transaction spans several calls.
    """

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    @abstractmethod
    async def get_category_by_id(self, category_id: int) -> Category | None:
        """Get a category by id, or None if it does not exist."""
        pass

    @abstractmethod
    async def create_category(
        self,
        name: str,
        icon: str,
        color: str,
        parent_id: int | None = None,
        description: str | None = None,
    ) -> int:
        """Create a category.

        Args:
            name: Category name
            icon: Icon identifier
            color: Display color
            parent_id: Parent category id (None for a root category)
            description: Optional description

        Returns:
            Id of the new category
        """
        pass

    @abstractmethod
    async def update_category(
        self, category_id: int, name: str, icon: str, color: str
    ) -> None:
        """Update a category's name, icon and color."""
        pass

    @abstractmethod
    async def list_documents_by_category(self, category_id: int) -> list[Document]:
        """List documents directly owned by a category."""
        pass

    @abstractmethod
    async def list_documents_by_category_tree(self, root_id: int) -> list[Document]:
        """List documents owned by a category or any of its descendants."""
        pass

    @abstractmethod
    async def get_document_by_id(self, document_id: int) -> Document | None:
        """Get a document by id, or None if it does not exist."""
        pass

    @abstractmethod
    async def create_document(
        self,
        title: str,
        description: str | None,
        content: str | None,
        category_id: int,
    ) -> int:
        """Create a document and return its id."""
        pass

    @abstractmethod
    async def update_document(
        self,
        document_id: int,
        title: str,
        description: str | None,
        content: str | None,
    ) -> None:
        """Update a document's title, description and content."""
        pass

    @abstractmethod
    async def list_attachments(self, document_id: int) -> list[Attachment]:
        """List attachments of a document."""
        pass

    @abstractmethod
    async def add_attachment(
        self,
        document_id: int,
        filename: str,
        filepath: str,
        filetype: FileType,
        filesize: int,
    ) -> int:
        """Register an attachment file and return its id."""
        pass
