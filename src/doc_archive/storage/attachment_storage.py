"""Attachment store and temporary work directories on the local filesystem."""

import asyncio
import logging
import mimetypes
import shutil
import tempfile
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from doc_archive.config.settings import Settings
from doc_archive.models.records import FileType

logger = logging.getLogger(__name__)


def detect_filetype(filename: str) -> FileType:
    """Classify a file by its MIME type.

    Args:
        filename: File name (only the extension is inspected)

    Returns:
        FileType for the guessed MIME type, OTHER if unknown
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if not mime_type:
        return FileType.OTHER
    if mime_type.startswith("image/"):
        return FileType.IMAGE
    if mime_type == "application/pdf":
        return FileType.PDF
    if mime_type.startswith("video/"):
        return FileType.VIDEO
    return FileType.OTHER


class AttachmentStorage:
    """Filesystem collaborator rooted in the application data directory."""

    def __init__(self, settings: Settings) -> None:
        """Initialize storage.

        Args:
            settings: Application settings
        """
        self.base_dir = Path(settings.data_dir)
        self.attachments_root = settings.attachments_dir
        self.work_root = settings.work_dir

    @staticmethod
    def join(base: str | Path, *parts: str) -> Path:
        """Join path segments."""
        return Path(base).joinpath(*parts)

    async def exists(self, path: str | Path) -> bool:
        """Check whether a file or directory exists."""
        return await aiofiles.os.path.exists(path)

    async def mkdir(self, path: str | Path, recursive: bool = True) -> None:
        """Create a directory.

        Args:
            path: Directory path
            recursive: Create missing parents as well
        """
        if recursive:
            await aiofiles.os.makedirs(path, exist_ok=True)
        else:
            await aiofiles.os.mkdir(path)

    async def read_file(self, path: str | Path) -> bytes:
        """Read a whole file."""
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    async def write_file(self, path: str | Path, data: bytes) -> None:
        """Write a whole file, creating its directory if needed."""
        await self.mkdir(Path(path).parent)
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)

    async def copy_file(self, source: str | Path, destination: str | Path) -> int:
        """Copy a file.

        Returns:
            Number of bytes in the copied file
        """
        await asyncio.to_thread(shutil.copyfile, source, destination)
        return await aiofiles.os.path.getsize(destination)

    def document_dir(self, document_id: int) -> Path:
        """Directory holding a document's attachment files."""
        return self.attachments_root / str(document_id)

    async def ensure_document_dir(self, document_id: int) -> Path:
        """Create a document's attachment directory if missing."""
        directory = self.document_dir(document_id)
        await self.mkdir(directory)
        return directory

    @staticmethod
    def generate_filename(original: str) -> str:
        """Generate a fresh on-disk name keeping the original extension."""
        return f"{uuid.uuid4().hex}{Path(original).suffix.lower()}"

    async def create_work_dir(self, prefix: str) -> Path:
        """Create a fresh temporary directory under the work root.

        Args:
            prefix: Directory name prefix (e.g. "import-")

        Returns:
            Path to the new, empty directory
        """
        await self.mkdir(self.work_root)
        path = await asyncio.to_thread(tempfile.mkdtemp, prefix=prefix, dir=self.work_root)
        return Path(path)

    async def remove_file(self, path: str | Path) -> None:
        """Remove a file, ignoring one that does not exist."""
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass

    async def remove_tree(self, path: str | Path) -> None:
        """Remove a directory tree if it exists."""
        if await self.exists(path):
            await asyncio.to_thread(shutil.rmtree, path)
            logger.debug("Removed work directory %s", path)
