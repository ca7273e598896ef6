"""Archive container format: a zip holding JSON records and attachment payloads.

Layout::

    metadata.json       ArchiveManifest (camelCase keys)
    categories.json     list of Category records
    documents.json      list of Document records
    attachments.json    list of ImportAttachmentRecord entries
    attachments/doc-<document_id>/<filename>   payload files

Ids inside the container are source-store ids; they are remapped on import.
"""

import asyncio
import json
import logging
import os
import tempfile
import zipfile
import zlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path, PurePosixPath
from typing import Any

import aiofiles.os
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from doc_archive.config.settings import SUPPORTED_ARCHIVE_VERSIONS, Settings
from doc_archive.exceptions import CorruptArchiveError, UnsupportedVersionError
from doc_archive.models.export_import import (
    ArchiveContents,
    ArchiveManifest,
    ExportSelection,
    ImportAttachmentRecord,
)
from doc_archive.models.records import Attachment, Category, Document
from doc_archive.storage.attachment_storage import AttachmentStorage

logger = logging.getLogger(__name__)

MANIFEST_ENTRY = "metadata.json"
CATEGORIES_ENTRY = "categories.json"
DOCUMENTS_ENTRY = "documents.json"
ATTACHMENTS_ENTRY = "attachments.json"
REQUIRED_ENTRIES = (MANIFEST_ENTRY, CATEGORIES_ENTRY, DOCUMENTS_ENTRY, ATTACHMENTS_ENTRY)
PAYLOAD_PREFIX = "attachments"

_categories_adapter = TypeAdapter(list[Category])
_documents_adapter = TypeAdapter(list[Document])
_attachments_adapter = TypeAdapter(list[ImportAttachmentRecord])


def build_export_path(attachment: Attachment, used: set[str]) -> str:
    """Generate a container path for an attachment payload, unique within `used`.

    Args:
        attachment: Attachment being exported
        used: Paths already taken in this container (updated in place)

    Returns:
        Container-relative POSIX path
    """
    filename = PurePosixPath(attachment.filename.replace("\\", "/")).name
    if not filename or filename in (".", ".."):
        filename = f"attachment-{attachment.id}"

    directory = f"{PAYLOAD_PREFIX}/doc-{attachment.document_id}"
    path = f"{directory}/{filename}"
    counter = 0
    while path in used:
        counter += 1
        prefix = f"{attachment.id}-" if counter == 1 else f"{attachment.id}-{counter}-"
        path = f"{directory}/{prefix}{filename}"
    used.add(path)
    return path


def _safe_member_parts(name: str) -> tuple[str, ...] | None:
    """Split a zip member name into path parts, or None if it escapes the root."""
    path = PurePosixPath(name.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts:
        return None
    if path.parts and ":" in path.parts[0]:
        return None
    return tuple(part for part in path.parts if part != ".")


class ContainerWriter:
    """Zip being written to a temporary sibling of its destination."""

    def __init__(self, destination: Path, compression_level: int) -> None:
        self.destination = destination
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{destination.name}.", suffix=".partial", dir=destination.parent
        )
        os.close(fd)
        self.temp_path = Path(temp_name)
        self._zip = zipfile.ZipFile(
            self.temp_path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compression_level,
        )
        self._closed = False

    async def add_json(self, name: str, data: Any) -> None:
        """Write a pretty-printed JSON entry."""
        text = json.dumps(data, indent=2, ensure_ascii=False)
        await asyncio.to_thread(self._zip.writestr, name, text.encode("utf-8"))

    async def add_file(self, source: str | Path, name: str) -> None:
        """Copy a file from disk into the container."""
        await asyncio.to_thread(self._zip.write, source, name)

    async def commit(self) -> None:
        """Finalize the zip and move it to the destination."""
        await asyncio.to_thread(self._zip.close)
        self._closed = True
        await aiofiles.os.replace(self.temp_path, self.destination)

    async def discard(self) -> None:
        """Drop the partial container."""
        if not self._closed:
            try:
                await asyncio.to_thread(self._zip.close)
            except (OSError, ValueError) as e:
                logger.warning("Failed to close partial archive %s: %s", self.temp_path, e)
            self._closed = True
        try:
            await aiofiles.os.remove(self.temp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to remove partial archive %s: %s", self.temp_path, e)


class ExtractedArchive:
    """Archive extracted into a temporary work directory."""

    def __init__(self, work_dir: Path, contents: ArchiveContents) -> None:
        self.work_dir = work_dir
        self.contents = contents

    def payload_path(self, export_path: str) -> Path | None:
        """Location of a payload inside the work directory.

        Returns:
            Path, or None if export_path would escape the work directory
        """
        parts = _safe_member_parts(export_path)
        if not parts:
            return None
        return self.work_dir.joinpath(*parts)


class ContainerCodec:
    """Read and write archive containers."""

    def __init__(self, storage: AttachmentStorage, settings: Settings) -> None:
        """Initialize codec.

        Args:
            storage: Filesystem collaborator (work directories, file I/O)
            settings: Application settings (version, compression)
        """
        self.storage = storage
        self.version = settings.archive_version
        self.app_version = settings.app_version
        self.compression_level = settings.compression_level

    def build_manifest(
        self,
        selection: ExportSelection,
        total_categories: int,
        total_documents: int,
        total_attachments: int,
    ) -> ArchiveManifest:
        """Manifest for a container written by this codec."""
        return ArchiveManifest(
            version=self.version,
            app_version=self.app_version,
            export_type=selection.options.type,
            category_id=selection.options.category_id,
            document_id=selection.options.document_id,
            total_categories=total_categories,
            total_documents=total_documents,
            total_attachments=total_attachments,
        )

    @asynccontextmanager
    async def create(self, destination: str | Path) -> AsyncIterator[ContainerWriter]:
        """Write a container atomically.

        The zip is built next to the destination and moved into place when
        the block exits normally; on error the partial file is removed.

        Args:
            destination: Final container path

        Yields:
            Writer for entries and payloads
        """
        destination = Path(destination)
        await self.storage.mkdir(destination.parent)
        writer = await asyncio.to_thread(ContainerWriter, destination, self.compression_level)
        try:
            yield writer
            await writer.commit()
        except BaseException:
            await writer.discard()
            raise

    async def write_records(
        self,
        writer: ContainerWriter,
        manifest: ArchiveManifest,
        categories: list[Category],
        documents: list[Document],
        attachments: list[ImportAttachmentRecord],
    ) -> None:
        """Write the four JSON entries."""
        await writer.add_json(
            MANIFEST_ENTRY, manifest.model_dump(mode="json", by_alias=True, exclude_none=True)
        )
        await writer.add_json(
            CATEGORIES_ENTRY, [category.model_dump(mode="json") for category in categories]
        )
        await writer.add_json(
            DOCUMENTS_ENTRY, [document.model_dump(mode="json") for document in documents]
        )
        await writer.add_json(
            ATTACHMENTS_ENTRY,
            [record.model_dump(mode="json", by_alias=True) for record in attachments],
        )

    @asynccontextmanager
    async def extract(self, archive_path: str | Path) -> AsyncIterator[ExtractedArchive]:
        """Extract and parse a container.

        A fresh work directory is created for each call and removed when the
        block exits, whether normally or by exception.

        Args:
            archive_path: Container file path

        Yields:
            Extracted archive with parsed contents

        Raises:
            FileNotFoundError: If the container does not exist
            CorruptArchiveError: If the container is structurally invalid
            UnsupportedVersionError: If the manifest version is not supported
        """
        archive_path = Path(archive_path)
        if not await self.storage.exists(archive_path):
            raise FileNotFoundError(f"Archive not found: {archive_path}")

        work_dir = await self.storage.create_work_dir("import-")
        try:
            await self._extract(archive_path, work_dir)
            contents = await self._read_contents(work_dir)
            yield ExtractedArchive(work_dir, contents)
        finally:
            await self.storage.remove_tree(work_dir)

    async def _extract(self, archive_path: Path, work_dir: Path) -> None:
        try:
            archive = await asyncio.to_thread(zipfile.ZipFile, archive_path)
        except zipfile.BadZipFile as e:
            raise CorruptArchiveError(f"Not a valid archive: {archive_path}: {e}") from e

        try:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                parts = _safe_member_parts(info.filename)
                if not parts:
                    raise CorruptArchiveError(f"Unsafe path in archive: {info.filename}")
                try:
                    data = await asyncio.to_thread(archive.read, info)
                except (zipfile.BadZipFile, zlib.error, EOFError) as e:
                    raise CorruptArchiveError(
                        f"Failed to read archive entry {info.filename}: {e}"
                    ) from e
                await self.storage.write_file(work_dir.joinpath(*parts), data)
        finally:
            archive.close()

        logger.debug("Extracted %s to %s", archive_path, work_dir)

    async def _read_json(self, work_dir: Path, entry: str) -> Any:
        raw = await self.storage.read_file(work_dir / entry)
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptArchiveError(f"Invalid JSON in {entry}: {e}") from e

    def _parse_manifest(self, data: Any) -> ArchiveManifest:
        if not isinstance(data, dict):
            raise CorruptArchiveError(f"{MANIFEST_ENTRY} must contain an object")

        version = data.get("version")
        if not isinstance(version, str):
            raise CorruptArchiveError(f"{MANIFEST_ENTRY} has no version")
        if version not in SUPPORTED_ARCHIVE_VERSIONS:
            raise UnsupportedVersionError(
                f"Unsupported archive version: {version}. "
                f"Supported: {', '.join(SUPPORTED_ARCHIVE_VERSIONS)}"
            )

        try:
            return ArchiveManifest.model_validate(data)
        except PydanticValidationError as e:
            raise CorruptArchiveError(f"Invalid {MANIFEST_ENTRY}: {e}") from e

    async def _read_contents(self, work_dir: Path) -> ArchiveContents:
        missing = [
            entry for entry in REQUIRED_ENTRIES
            if not await self.storage.exists(work_dir / entry)
        ]
        if missing:
            raise CorruptArchiveError(f"Missing required entries: {', '.join(missing)}")

        manifest = self._parse_manifest(await self._read_json(work_dir, MANIFEST_ENTRY))

        records: dict[str, Any] = {}
        for entry, adapter in (
            (CATEGORIES_ENTRY, _categories_adapter),
            (DOCUMENTS_ENTRY, _documents_adapter),
            (ATTACHMENTS_ENTRY, _attachments_adapter),
        ):
            data = await self._read_json(work_dir, entry)
            try:
                records[entry] = adapter.validate_python(data)
            except PydanticValidationError as e:
                raise CorruptArchiveError(f"Invalid {entry}: {e}") from e

        return ArchiveContents(
            manifest=manifest,
            categories=records[CATEGORIES_ENTRY],
            documents=records[DOCUMENTS_ENTRY],
            attachments=records[ATTACHMENTS_ENTRY],
        )
