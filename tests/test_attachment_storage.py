"""Tests for AttachmentStorage."""

from pathlib import Path

import pytest

from doc_archive.config.settings import Settings
from doc_archive.models.records import FileType
from doc_archive.storage.attachment_storage import AttachmentStorage, detect_filetype


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("photo.PNG", FileType.IMAGE),
        ("scan.pdf", FileType.PDF),
        ("clip.mp4", FileType.VIDEO),
        ("notes.txt", FileType.OTHER),
        ("no_extension", FileType.OTHER),
    ],
)
def test_detect_filetype(filename, expected):
    assert detect_filetype(filename) == expected


def test_layout(storage: AttachmentStorage, test_settings: Settings):
    assert storage.base_dir == Path(test_settings.data_dir)
    assert storage.attachments_root == Path(test_settings.data_dir) / "attachments"
    assert storage.work_root == Path(test_settings.data_dir) / "tmp"
    assert storage.document_dir(7) == storage.attachments_root / "7"
    assert storage.join("a", "b", "c") == Path("a") / "b" / "c"


def test_generate_filename_keeps_extension():
    first = AttachmentStorage.generate_filename("Report.PDF")
    second = AttachmentStorage.generate_filename("Report.PDF")

    assert first.endswith(".pdf")
    assert first != second
    assert len(first) == 32 + len(".pdf")


@pytest.mark.asyncio
async def test_write_read_copy(storage: AttachmentStorage, tmp_path: Path) -> None:
    source = tmp_path / "nested" / "dir" / "source.bin"

    await storage.write_file(source, b"hello")
    directory = await storage.ensure_document_dir(3)
    size = await storage.copy_file(source, directory / "copy.bin")

    assert await storage.read_file(directory / "copy.bin") == b"hello"
    assert size == 5
    assert await storage.exists(directory)


@pytest.mark.asyncio
async def test_copy_missing_source(storage: AttachmentStorage, tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        await storage.copy_file(tmp_path / "missing", tmp_path / "target")


@pytest.mark.asyncio
async def test_work_dirs_are_unique_and_removable(storage: AttachmentStorage) -> None:
    first = await storage.create_work_dir("import-")
    second = await storage.create_work_dir("import-")
    await storage.write_file(first / "a" / "b.txt", b"x")

    assert first != second
    assert first.parent == storage.work_root
    assert first.name.startswith("import-")

    await storage.remove_tree(first)
    await storage.remove_tree(first)

    assert not first.exists()
    assert second.exists()


@pytest.mark.asyncio
async def test_mkdir_non_recursive(storage: AttachmentStorage, tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        await storage.mkdir(tmp_path / "x" / "y", recursive=False)

    await storage.mkdir(tmp_path / "x", recursive=False)
    assert (tmp_path / "x").is_dir()


@pytest.mark.asyncio
async def test_remove_file(storage: AttachmentStorage, tmp_path: Path) -> None:
    path = tmp_path / "partial.bin"
    await storage.write_file(path, b"abc")

    await storage.remove_file(path)
    await storage.remove_file(path)

    assert not path.exists()
