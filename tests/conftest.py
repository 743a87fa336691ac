"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory async database, material rows, fake pdftotext script,
fake OpenAI/S3 clients, temp PDF files
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import sys
import textwrap
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
import uuid

import pytest


FAKE_PDFTOTEXT = textwrap.dedent(
    """
    import sys
    import time

    path = sys.argv[1]
    with open(path, "rb") as fh:
        data = fh.read()

    if data.startswith(b"FAIL"):
        sys.stderr.write("Syntax Error: Couldn't find trailer dictionary\\n")
        sys.exit(1)
    if data.startswith(b"SLOW"):
        time.sleep(30)

    sys.stdout.buffer.write(data)
    """
)


@pytest.fixture
async def db_engine():
    """
    Create in-memory SQLite async engine with all tables.

    StaticPool keeps one connection so every session sees the same database.

    Yields:
        AsyncEngine: Test engine (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool
    from course_ingest.boundary.db.base import Base
    import course_ingest.boundary.db.models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the test engine."""
    from course_ingest.boundary.db.connection import create_session_factory

    return create_session_factory(db_engine)


@pytest.fixture
async def test_async_db(session_factory):
    """
    Session on the in-memory database.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def create_material(session_factory):
    """
    Factory inserting a committed PROCESSING material.

    Returns:
        Callable: async (**overrides) -> material_id
    """
    from course_ingest.boundary.db.CRUD.material_crud import material_crud

    async def _create(**overrides) -> uuid.UUID:
        values = {
            "organization_id": "org-1",
            "uploaded_by_user_id": "user-1",
            "file_name": "lecture.pdf",
            "s3_key": f"course_material/org-1/{uuid.uuid4().hex}.pdf",
        }
        values.update(overrides)
        async with session_factory() as session:
            material = await material_crud.create_processing(session, **values)
            await session.commit()
            return material.material_id

    return _create


@pytest.fixture
def fake_pdftotext(tmp_path) -> dict:
    """
    Extraction settings that run a Python stand-in for pdftotext.

    The script echoes the file's bytes to stdout; files starting with
    b"FAIL" exit 1 with a stderr message, files starting with b"SLOW" hang.

    Returns:
        dict: ExtractionTask keyword arguments
    """
    script = tmp_path / "fake_pdftotext.py"
    script.write_text(FAKE_PDFTOTEXT)
    return {"executable": sys.executable, "extra_args": [str(script)]}


@pytest.fixture
def make_pdf(tmp_path):
    """
    Factory writing a temp upload file.

    Returns:
        Callable: (content: str | bytes, name: str = "upload.pdf") -> str path
    """

    def _make(content, name: str = "upload.pdf") -> str:
        path = tmp_path / name
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return str(path)

    return _make


def make_embedding_response(inputs: list[str], dimensions: int):
    """Build an object shaped like openai's CreateEmbeddingResponse."""
    return SimpleNamespace(
        data=[
            SimpleNamespace(index=i, embedding=[float(len(text) % 7) + i / 1000.0] * dimensions)
            for i, text in enumerate(inputs)
        ]
    )


@pytest.fixture
def mock_embedding_client():
    """
    Create mock AsyncOpenAI client returning one vector per input.

    Vector length defaults to the chunks.embedding column dimension.

    Returns:
        MagicMock: Client whose embeddings.create is an AsyncMock
    """
    from course_ingest.boundary.db.models import EMBEDDING_DIM

    async def _create(model, input):
        return make_embedding_response(input, EMBEDDING_DIM)

    client = MagicMock()
    client.embeddings.create = AsyncMock(side_effect=_create)
    return client


@pytest.fixture
def mock_s3_client():
    """
    Create mock S3MaterialClient.

    Returns:
        MagicMock: Client with blocking put_object and a bucket name
    """
    client = MagicMock()
    client.bucket = "test-materials"
    client.put_object = MagicMock(return_value=None)
    return client


@pytest.fixture
def temp_pdf_file(tmp_path) -> Path:
    """
    Create a temporary PDF-like file for testing.

    Returns:
        Path: Path to temporary PDF file
    """
    path = tmp_path / "document.pdf"
    path.write_bytes(b"%PDF-1.4\n1 0 obj\n<< >>\nendobj\n")
    return path
