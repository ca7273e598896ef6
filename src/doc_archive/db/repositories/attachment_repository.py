"""Attachment repository for database operations."""

from datetime import datetime, timezone
from typing import Any

from doc_archive.db.database import Database
from doc_archive.models.records import Attachment, FileType


class AttachmentRepository:
    """Repository for attachment operations."""

    def __init__(self, db: Database) -> None:
        """Initialize repository.

        Args:
            db: Database instance
        """
        self.db = db

    async def create(
        self,
        document_id: int,
        filename: str,
        filepath: str,
        filetype: FileType,
        filesize: int,
    ) -> Attachment:
        """Register an attachment file.

        Args:
            document_id: Owning document ID
            filename: Display name
            filepath: Location in the attachment store
            filetype: File type classification
            filesize: Size in bytes

        Returns:
            Created attachment
        """
        created_at = datetime.now(timezone.utc)
        cursor = await self.db.execute(
            """
            INSERT INTO attachments (
                document_id, filename, filepath, filetype, filesize, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                document_id,
                filename,
                filepath,
                filetype.value,
                filesize,
                created_at.isoformat(),
            ),
        )
        await self.db.commit()

        return Attachment(
            id=cursor.lastrowid,
            document_id=document_id,
            filename=filename,
            filepath=filepath,
            filetype=filetype,
            filesize=filesize,
            created_at=created_at,
        )

    async def find_by_document(self, document_id: int) -> list[Attachment]:
        """List attachments of a document in creation order."""
        cursor = await self.db.execute(
            "SELECT * FROM attachments WHERE document_id = ? ORDER BY id",
            (document_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_attachment(row) for row in rows]

    def _row_to_attachment(self, row: Any) -> Attachment:
        """Convert database row to Attachment."""
        return Attachment(
            id=row["id"],
            document_id=row["document_id"],
            filename=row["filename"],
            filepath=row["filepath"],
            filetype=FileType(row["filetype"]),
            filesize=row["filesize"] or 0,
            created_at=row["created_at"],
        )
