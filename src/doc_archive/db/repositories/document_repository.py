"""Document repository for database operations."""

from datetime import datetime, timezone
from typing import Any

from doc_archive.db.database import Database
from doc_archive.models.records import Document


class DocumentRepository:
    """Repository for document operations."""

    def __init__(self, db: Database) -> None:
        """Initialize repository.

        Args:
            db: Database instance
        """
        self.db = db

    async def create(
        self,
        title: str,
        description: str | None,
        text_content: str | None,
        category_id: int,
    ) -> Document:
        """Create a new document.

        Args:
            title: Document title
            description: Document description
            text_content: Serialized editor content
            category_id: Owning category ID

        Returns:
            Created document
        """
        now = datetime.now(timezone.utc)
        cursor = await self.db.execute(
            """
            INSERT INTO documents (
                title, description, text_content, category_id, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (title, description, text_content, category_id, now.isoformat(), now.isoformat()),
        )
        await self.db.commit()

        return Document(
            id=cursor.lastrowid,
            title=title,
            description=description,
            text_content=text_content,
            category_id=category_id,
            created_at=now,
            updated_at=now,
        )

    async def find_by_id(self, document_id: int) -> Document | None:
        """Find document by ID.

        Args:
            document_id: Document ID

        Returns:
            Document or None if not found
        """
        cursor = await self.db.execute(
            "SELECT * FROM documents WHERE id = ?", (document_id,)
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return self._row_to_document(row)

    async def find_by_category(self, category_id: int) -> list[Document]:
        """List documents of a category."""
        cursor = await self.db.execute(
            "SELECT * FROM documents WHERE category_id = ? ORDER BY id",
            (category_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_document(row) for row in rows]

    async def find_by_categories(self, category_ids: list[int]) -> list[Document]:
        """List documents owned by any of the given categories.

        Args:
            category_ids: Category IDs

        Returns:
            Documents ordered by category order of the input, then id
        """
        documents: list[Document] = []
        for category_id in category_ids:
            cursor = await self.db.execute(
                "SELECT * FROM documents WHERE category_id = ? ORDER BY id",
                (category_id,),
            )
            rows = await cursor.fetchall()
            documents.extend(self._row_to_document(row) for row in rows)
        return documents

    async def update(
        self,
        document_id: int,
        title: str,
        description: str | None,
        text_content: str | None,
    ) -> None:
        """Update document title, description and content.

        Args:
            document_id: Document ID
            title: New title
            description: New description
            text_content: New content
        """
        await self.db.execute(
            """
            UPDATE documents
            SET title = ?, description = ?, text_content = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                title,
                description,
                text_content,
                datetime.now(timezone.utc).isoformat(),
                document_id,
            ),
        )
        await self.db.commit()

    def _row_to_document(self, row: Any) -> Document:
        """Convert database row to Document."""
        return Document(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            text_content=row["text_content"],
            category_id=row["category_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
