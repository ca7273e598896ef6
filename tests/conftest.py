"""Pytest configuration and fixtures for doc-archive tests."""

from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path

import pytest
import pytest_asyncio

from doc_archive.config.settings import Settings
from doc_archive.db.database import Database
from doc_archive.db.store import SqliteArchiveStore
from doc_archive.storage.attachment_storage import AttachmentStorage, detect_filetype

AttachFile = Callable[[int, str, bytes], Awaitable[int]]


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test configuration settings rooted in a temporary directory."""
    return Settings(
        database_path=":memory:",
        data_dir=str(tmp_path / "source"),
        log_level="DEBUG",
    )


@pytest.fixture
def target_settings(tmp_path: Path) -> Settings:
    """Settings for a second, independent store (import target)."""
    return Settings(
        database_path=":memory:",
        data_dir=str(tmp_path / "target"),
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def memory_db() -> AsyncIterator[Database]:
    """In-memory database for fast tests."""
    db = Database(database_path=":memory:")
    await db.connect()
    await db.migrate()

    yield db

    await db.close()


@pytest_asyncio.fixture
async def target_db() -> AsyncIterator[Database]:
    """Second in-memory database."""
    db = Database(database_path=":memory:")
    await db.connect()
    await db.migrate()

    yield db

    await db.close()


@pytest_asyncio.fixture
async def store(memory_db: Database) -> SqliteArchiveStore:
    """Source store."""
    return SqliteArchiveStore(memory_db)


@pytest_asyncio.fixture
async def target_store(target_db: Database) -> SqliteArchiveStore:
    """Target store."""
    return SqliteArchiveStore(target_db)


@pytest.fixture
def storage(test_settings: Settings) -> AttachmentStorage:
    """Attachment storage for the source store."""
    return AttachmentStorage(test_settings)


@pytest.fixture
def target_storage(target_settings: Settings) -> AttachmentStorage:
    """Attachment storage for the target store."""
    return AttachmentStorage(target_settings)


@pytest.fixture
def attach_file(store: SqliteArchiveStore, storage: AttachmentStorage) -> AttachFile:
    """Write a payload into the source attachment store and register it."""

    async def _attach(document_id: int, filename: str, data: bytes) -> int:
        directory = await storage.ensure_document_dir(document_id)
        path = directory / storage.generate_filename(filename)
        await storage.write_file(path, data)
        return await store.add_attachment(
            document_id, filename, str(path), detect_filetype(filename), len(data)
        )

    return _attach


@pytest_asyncio.fixture
async def sample_data(store: SqliteArchiveStore, attach_file: AttachFile) -> dict:
    """Seed the source store.

    Layout::

        Work (1)
          Projects (2)
            Archive 2024 (3)
        Personal (4)

    Documents: "Plan" in Work, "Roadmap" and "Specs" in Projects, "Old Notes"
    in Archive 2024, "Diary" in Personal. Roadmap carries two attachments
    with the same filename.
    """
    work = await store.create_category("Work", "briefcase", "#FF0000")
    projects = await store.create_category("Projects", "folder", "#00FF00", parent_id=work)
    archive = await store.create_category(
        "Archive 2024", "archive", "#0000FF", parent_id=projects
    )
    personal = await store.create_category("Personal", "heart", "#FF00FF")

    plan = await store.create_document("Plan", "Quarterly plan", "<p>plan</p>", work)
    roadmap = await store.create_document("Roadmap", None, "<p>roadmap</p>", projects)
    specs = await store.create_document("Specs", "Specifications", "<p>specs</p>", projects)
    notes = await store.create_document("Old Notes", None, "<p>notes</p>", archive)
    diary = await store.create_document("Diary", "Private", "<p>diary</p>", personal)

    plan_pdf = await attach_file(plan, "plan.pdf", b"%PDF-1.4 plan")
    photo_a = await attach_file(roadmap, "photo.png", b"\x89PNG first")
    photo_b = await attach_file(roadmap, "photo.png", b"\x89PNG second image")
    notes_txt = await attach_file(notes, "notes.txt", b"old notes")

    return {
        "categories": {
            "work": work,
            "projects": projects,
            "archive": archive,
            "personal": personal,
        },
        "documents": {
            "plan": plan,
            "roadmap": roadmap,
            "specs": specs,
            "notes": notes,
            "diary": diary,
        },
        "attachments": {
            "plan_pdf": plan_pdf,
            "photo_a": photo_a,
            "photo_b": photo_b,
            "notes_txt": notes_txt,
        },
    }
