"""MCP server implementation for doc-archive."""

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from doc_archive.config.settings import Settings
from doc_archive.db.database import Database
from doc_archive.db.store import SqliteArchiveStore
from doc_archive.services.export_engine import ExportEngine
from doc_archive.services.import_engine import ImportEngine
from doc_archive.storage.attachment_storage import AttachmentStorage
from doc_archive.tools import archive_tools

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("doc-archive")

# Global collaborators (initialized in main); engines are built per call
settings: Settings | None = None
db: Database | None = None
store: SqliteArchiveStore | None = None
storage: AttachmentStorage | None = None


async def initialize_services(app_settings: Settings) -> None:
    """Connect the database and build the store and attachment storage.

    Args:
        app_settings: Application settings
    """
    global settings, db, store, storage

    settings = app_settings

    db = Database(settings.database_path)
    await db.connect()
    await db.migrate()

    store = SqliteArchiveStore(db)
    storage = AttachmentStorage(settings)
    await storage.mkdir(storage.attachments_root)
    await storage.mkdir(storage.work_root)
    logger.info("doc-archive ready (data_dir=%s)", settings.data_dir)


async def shutdown_services() -> None:
    """Close database."""
    global db
    if db:
        await db.close()
        db = None


def _export_engine() -> ExportEngine:
    if not (store and storage and settings):
        raise RuntimeError("Services not initialized")
    return ExportEngine(store, storage, settings)


def _import_engine() -> ImportEngine:
    if not (store and storage and settings):
        raise RuntimeError("Services not initialized")
    return ImportEngine(store, storage, settings)


# Export Tools
@mcp.tool()
async def archive_export(
    output_path: str,
    export_type: str = "complete",
    category_id: int | None = None,
    document_id: int | None = None,
) -> dict[str, Any]:
    """Export categories, documents and attachments to an archive file.

    Args:
        output_path: Destination archive path
        export_type: Scope of the export (complete/category/document)
        category_id: Category to export with its subtree (export_type=category)
        document_id: Document to export (export_type=document)

    Returns:
        Export counts, file size and per-item warnings
    """
    return await archive_tools.archive_export(
        _export_engine(), output_path, export_type, category_id, document_id
    )


@mcp.tool()
async def archive_export_stats(
    export_type: str = "complete",
    category_id: int | None = None,
    document_id: int | None = None,
) -> dict[str, Any]:
    """Show what an export would contain without writing anything.

    Args:
        export_type: Scope of the export (complete/category/document)
        category_id: Category to export with its subtree (export_type=category)
        document_id: Document to export (export_type=document)

    Returns:
        Category, document and attachment counts with estimated size
    """
    return await archive_tools.archive_export_stats(
        _export_engine(), export_type, category_id, document_id
    )


# Import Tools
@mcp.tool()
async def archive_import_preview(input_path: str) -> dict[str, Any]:
    """Analyze an archive and list conflicts with existing data.

    Args:
        input_path: Archive file path

    Returns:
        Archive metadata, per-record summary and conflicts
    """
    return await archive_tools.archive_import_preview(_import_engine(), input_path)


@mcp.tool()
async def archive_import(
    input_path: str,
    categories: str,
    documents: str,
) -> dict[str, Any]:
    """Import an archive into the store.

    Conflicting records are handled by the given policies: skip keeps the
    existing record, merge and replace overwrite it with the imported values.

    Args:
        input_path: Archive file path
        categories: Policy for conflicting categories (skip/merge/replace)
        documents: Policy for conflicting documents (skip/merge/replace)

    Returns:
        Import counts, id mappings and per-item warnings
    """
    return await archive_tools.archive_import(
        _import_engine(), input_path, categories, documents
    )


def create_server() -> FastMCP:
    """Create and return MCP server instance.

    Returns:
        FastMCP server instance
    """
    return mcp
