"""Test fixtures — temp-dir JSON/blob storage, SQLite stores and FastAPI test client."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from netdrive.main import create_app
from netdrive.models.base import Base
from netdrive.schemas.files import FileItem
from netdrive.services import get_audit_trail, get_file_service
from netdrive.services.audit_trail import JsonAuditTrail
from netdrive.services.blob_store import DiskBlobStore
from netdrive.services.file_service import FileService
from netdrive.services.metadata_store import JsonMetadataStore, SqlMetadataStore


def make_item(path: str, type: str | None = None, **fields) -> FileItem:
    """Build an unsaved item from its materialized path."""
    kind = type or ("folder" if path.endswith("/") else "file")
    name = path.rstrip("/").rsplit("/", 1)[-1]
    return FileItem(
        name=name,
        type=kind,
        path=path,
        size=fields.pop("size", None if kind == "folder" else 0),
        last_modified=datetime.now(timezone.utc),
        **fields,
    )


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Async SQLite session factory on a temp database file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'netdrive.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def json_store(tmp_path):
    return JsonMetadataStore(tmp_path / "metadata.json")


@pytest.fixture(params=["json", "sql"])
def metadata_store(request, tmp_path, session_factory):
    """Each metadata store variant, for contract tests."""
    if request.param == "json":
        return JsonMetadataStore(tmp_path / "metadata.json")
    return SqlMetadataStore(session_factory)


@pytest.fixture
def blob_store(tmp_path):
    return DiskBlobStore(tmp_path / "upload")


@pytest.fixture
def file_service(json_store, blob_store):
    return FileService(json_store, blob_store)


@pytest.fixture
def audit_trail(tmp_path):
    return JsonAuditTrail(tmp_path / "audit.json")


@pytest_asyncio.fixture
async def client(file_service, audit_trail):
    """Async test client with storage dependencies pointed at tmp_path."""
    app = create_app()
    app.dependency_overrides[get_file_service] = lambda: file_service
    app.dependency_overrides[get_audit_trail] = lambda: audit_trail

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
