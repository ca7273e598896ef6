"""Database connection and migration management."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite


class Database:
    """Database connection and operations manager."""

    def __init__(self, database_path: str) -> None:
        """Initialize database manager.

        Args:
            database_path: Path to SQLite database file (or ":memory:")
        """
        self.database_path = database_path
        self.conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()
        self._in_transaction = False

    async def connect(self) -> None:
        """Connect to database."""
        if self.database_path != ":memory:":
            Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)

        self.conn = await aiosqlite.connect(self.database_path)
        self.conn.row_factory = aiosqlite.Row

        await self.conn.execute("PRAGMA foreign_keys = ON")

    async def close(self) -> None:
        """Close database connection."""
        if self.conn:
            await self.conn.close()
            self.conn = None

    async def execute(
        self, sql: str, parameters: tuple[Any, ...] | dict[str, Any] = ()
    ) -> aiosqlite.Cursor:
        """Execute a SQL statement.

        Args:
            sql: SQL statement
            parameters: Query parameters

        Returns:
            Database cursor
        """
        if not self.conn:
            raise RuntimeError("Database not connected")
        return await self.conn.execute(sql, parameters)

    async def commit(self) -> None:
        """Commit current transaction."""
        if not self.conn:
            raise RuntimeError("Database not connected")
        await self.conn.commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Context manager for database transactions.

        If already in a transaction, yields without starting a new one.

        Example:
            async with db.transaction():
                await db.execute(...)
        """
        if not self.conn:
            raise RuntimeError("Database not connected")

        if self._in_transaction:
            yield
            return

        async with self._write_lock:
            self._in_transaction = True
            await self.conn.execute("BEGIN")
            try:
                yield
                await self.conn.commit()
            except Exception:
                await self.conn.rollback()
                raise
            finally:
                self._in_transaction = False

    async def migrate(self) -> None:
        """Run database migrations."""
        try:
            cursor = await self.execute(
                "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
            )
            row = await cursor.fetchone()
            current_version = row[0] if row else 0
        except aiosqlite.OperationalError:
            current_version = 0

        if current_version < 1:
            await self._migrate_v1()

    async def _migrate_v1(self) -> None:
        """Initial database schema migration."""
        async with self.transaction():
            await self.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at DATETIME NOT NULL
                )
            """)

            await self.execute("""
                CREATE TABLE IF NOT EXISTS categories (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    icon TEXT DEFAULT 'folder',
                    color TEXT DEFAULT '#6B7280',
                    parent_id INTEGER DEFAULT NULL,
                    description TEXT DEFAULT NULL,
                    level INTEGER DEFAULT 0,
                    sort_order INTEGER DEFAULT 0,
                    created_at DATETIME NOT NULL,
                    FOREIGN KEY (parent_id) REFERENCES categories(id) ON DELETE CASCADE
                )
            """)

            await self.execute("""
                CREATE TABLE IF NOT EXISTS documents (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT,
                    text_content TEXT,
                    category_id INTEGER,
                    created_at DATETIME NOT NULL,
                    updated_at DATETIME NOT NULL,
                    FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE CASCADE
                )
            """)

            await self.execute("""
                CREATE TABLE IF NOT EXISTS attachments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    document_id INTEGER NOT NULL,
                    filename TEXT NOT NULL,
                    filepath TEXT NOT NULL,
                    filetype TEXT NOT NULL,
                    filesize INTEGER DEFAULT 0,
                    created_at DATETIME NOT NULL,
                    FOREIGN KEY (document_id) REFERENCES documents(id) ON DELETE CASCADE
                )
            """)

            await self.execute(
                "CREATE INDEX IF NOT EXISTS idx_categories_parent ON categories(parent_id)"
            )
            await self.execute(
                "CREATE INDEX IF NOT EXISTS idx_documents_category ON documents(category_id)"
            )
            await self.execute(
                "CREATE INDEX IF NOT EXISTS idx_attachments_document ON attachments(document_id)"
            )

            await self.execute(
                "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                (1, datetime.now(timezone.utc).isoformat()),
            )
