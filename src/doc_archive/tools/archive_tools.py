"""Archive export/import MCP tools."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from doc_archive.exceptions import ArchiveError
from doc_archive.models.export_import import (
    ConflictResolution,
    ExportOptions,
    ExportType,
    ResolutionPolicy,
)
from doc_archive.services.export_engine import ExportEngine
from doc_archive.services.import_engine import ImportEngine
from doc_archive.tools import create_error_response, error_response_from_exception

_EXPORT_TYPES = [export_type.value for export_type in ExportType]
_POLICIES = [policy.value for policy in ResolutionPolicy]


def _parse_export_options(
    export_type: str,
    category_id: int | None,
    document_id: int | None,
) -> ExportOptions | dict[str, Any]:
    """Build ExportOptions, or an error response if the arguments are invalid."""
    if export_type not in _EXPORT_TYPES:
        return create_error_response(
            message=f"export_type must be one of: {', '.join(_EXPORT_TYPES)}",
            error_type="ValidationError",
        )
    try:
        return ExportOptions(
            type=ExportType(export_type),
            category_id=category_id,
            document_id=document_id,
        )
    except PydanticValidationError as e:
        return create_error_response(
            message=f"Invalid export options: {e.errors()[0]['msg']}",
            error_type="ValidationError",
        )


def _format_warnings(warnings: list) -> list[dict[str, str]]:
    return [warning.model_dump() for warning in warnings]


async def archive_export(
    engine: ExportEngine,
    output_path: str,
    export_type: str = "complete",
    category_id: int | None = None,
    document_id: int | None = None,
) -> dict[str, Any]:
    """Export an archive container.

    Args:
        engine: Export engine instance
        output_path: Destination file path (required)
        export_type: Scope (complete/category/document)
        category_id: Root category for category exports
        document_id: Document for document exports

    Returns:
        Export results and statistics
    """
    if not output_path:
        return create_error_response(
            message="output_path is required",
            error_type="ValidationError",
        )

    options = _parse_export_options(export_type, category_id, document_id)
    if isinstance(options, dict):
        return options

    try:
        result = await engine.export_archive(output_path, options)
    except (ArchiveError, OSError) as e:
        return error_response_from_exception(e)

    return {
        "exported_at": result.exported_at.isoformat(),
        "export_type": result.manifest.export_type.value,
        "counts": result.counts,
        "file_path": result.file_path,
        "file_size_bytes": result.file_size_bytes,
        "warnings": _format_warnings(result.warnings),
    }


async def archive_export_stats(
    engine: ExportEngine,
    export_type: str = "complete",
    category_id: int | None = None,
    document_id: int | None = None,
) -> dict[str, Any]:
    """Preview what an export would contain.

    Args:
        engine: Export engine instance
        export_type: Scope (complete/category/document)
        category_id: Root category for category exports
        document_id: Document for document exports

    Returns:
        Counts, estimated size and selection description
    """
    options = _parse_export_options(export_type, category_id, document_id)
    if isinstance(options, dict):
        return options

    try:
        stats = await engine.get_selective_export_stats(options)
    except ArchiveError as e:
        return error_response_from_exception(e)

    return stats.model_dump()


async def archive_import_preview(
    engine: ImportEngine,
    input_path: str,
) -> dict[str, Any]:
    """Analyze an archive without importing it.

    Args:
        engine: Import engine instance
        input_path: Archive file path

    Returns:
        Manifest, per-record summary and conflicts
    """
    if not input_path:
        return create_error_response(
            message="input_path is required",
            error_type="ValidationError",
        )

    try:
        preview = await engine.preview_import(input_path)
    except (ArchiveError, OSError) as e:
        return error_response_from_exception(e)

    return {
        "metadata": preview.metadata.model_dump(mode="json", by_alias=True, exclude_none=True),
        "summary": preview.summary.model_dump(),
        "conflicts": [
            {
                "type": conflict.type.value,
                "existing_id": conflict.existing_item.id,
                "import_id": conflict.import_item.id,
                "conflict_reason": conflict.conflict_reason,
            }
            for conflict in preview.conflicts
        ],
        "can_proceed": preview.can_proceed,
    }


async def archive_import(
    engine: ImportEngine,
    input_path: str,
    categories: str,
    documents: str,
) -> dict[str, Any]:
    """Import an archive with explicit conflict resolution.

    Args:
        engine: Import engine instance
        input_path: Archive file path
        categories: Policy for conflicting categories (skip/merge/replace)
        documents: Policy for conflicting documents (skip/merge/replace)

    Returns:
        Import results, id mappings and warnings
    """
    if not input_path:
        return create_error_response(
            message="input_path is required",
            error_type="ValidationError",
        )

    for name, value in (("categories", categories), ("documents", documents)):
        if value not in _POLICIES:
            return create_error_response(
                message=f"{name} must be one of: {', '.join(_POLICIES)}",
                error_type="ValidationError",
            )

    resolution = ConflictResolution(
        categories=ResolutionPolicy(categories),
        documents=ResolutionPolicy(documents),
    )
    try:
        result = await engine.import_archive(input_path, resolution)
    except (ArchiveError, OSError) as e:
        return error_response_from_exception(e)

    return {
        "imported_at": result.imported_at.isoformat(),
        "schema_version": result.schema_version,
        "resolution": result.resolution.model_dump(mode="json"),
        "counts": result.counts,
        "warnings": _format_warnings(result.warnings),
        "category_mapping": result.category_mapping,
        "document_mapping": result.document_mapping,
    }
