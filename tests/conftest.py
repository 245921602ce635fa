"""Global test fixtures and shared test infrastructure.

Provides:
- Environment variable defaults (must be set before any app import)
- FakeResult / FakeScalarResult matching SQLAlchemy Result interface
- FakeAsyncSession matching SQLAlchemy AsyncSession interface
- Execute handler helpers (entity_handler, sequence_handler)
- FakeStorage recording object store calls
- An in-memory SQLite session for tests that need real constraints
- Shared pytest fixtures for dependency overrides
"""

from __future__ import annotations

import os

# Environment defaults: must be set before importing the app, which builds
# Settings and the engine on import.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("ENVIRONMENT", "test")
for _aws_var in ("AWS_REGION", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_S3_BUCKET"):
    os.environ.pop(_aws_var, None)

from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api import deps
from app.core.errors import UpstreamUnavailable
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.asset import ASSET_STATUS_UPLOADED, Asset
from app.models.task import Task
from app.models.template import Template


# ---------------------------------------------------------------------------
# Sentinel
# ---------------------------------------------------------------------------

_UNSET = object()


# ---------------------------------------------------------------------------
# FakeResult / FakeScalarResult - mimics sqlalchemy.engine.Result
# ---------------------------------------------------------------------------


class FakeScalarResult:
    """Mimics the object returned by ``Result.scalars()``."""

    def __init__(self, items: list | None = None) -> None:
        self._items = list(items or [])

    def all(self) -> list:
        return list(self._items)

    def first(self):
        return self._items[0] if self._items else None


class FakeResult:
    """Mimics ``sqlalchemy.engine.Result``.

    Parameters
    ----------
    scalar:
        Value returned by ``.scalar_one_or_none()`` / ``.scalar_one()``.
        Use ``_UNSET`` (omit the kwarg) to signal "no scalar configured".
    items:
        List of model instances for ``.scalars().all()`` / ``.scalars().first()``.
    """

    def __init__(self, *, scalar: Any = _UNSET, items: list | None = None) -> None:
        self._scalar = scalar
        self._items = items or []

    def scalar_one_or_none(self):
        if self._scalar is _UNSET:
            return None
        return self._scalar

    def scalar_one(self):
        if self._scalar is _UNSET or self._scalar is None:
            from sqlalchemy.exc import NoResultFound

            raise NoResultFound()
        return self._scalar

    def scalars(self) -> FakeScalarResult:
        return FakeScalarResult(self._items)


# ---------------------------------------------------------------------------
# FakeAsyncSession - mimics sqlalchemy.ext.asyncio.AsyncSession
# ---------------------------------------------------------------------------


class FakeAsyncSession:
    """Fake ``AsyncSession`` implementing the methods production code calls.

    Configure responses via ``on_execute`` and ``on_execute_return``. Set
    ``commit_error`` to make the next ``commit()`` raise it.
    """

    def __init__(self) -> None:
        self.added: list[Any] = []
        self.committed: bool = False
        self.rolled_back: bool = False
        self.commit_error: Exception | None = None
        self._execute_handlers: list[Callable] = []
        self._default_result = FakeResult()
        self._next_id = 1

    # -- Configuration helpers (called from test setup) --

    def on_execute(self, handler: Callable) -> FakeAsyncSession:
        """Register a handler: ``handler(stmt) -> FakeResult | None``."""
        self._execute_handlers.append(handler)
        return self

    def on_execute_return(self, result: FakeResult) -> FakeAsyncSession:
        """Always return *result* for any ``execute()`` call."""
        self._execute_handlers.append(lambda _stmt: result)
        return self

    # -- AsyncSession interface --

    async def execute(self, stmt, *args, **kwargs):
        for handler in self._execute_handlers:
            result = handler(stmt)
            if result is not None:
                return result
        return self._default_result

    def add(self, obj: Any) -> None:
        self.added.append(obj)

    async def commit(self) -> None:
        if self.commit_error is not None:
            error, self.commit_error = self.commit_error, None
            raise error
        self.committed = True
        # Integer keys are assigned on flush, as the database would.
        for obj in self.added:
            if hasattr(obj, "id") and getattr(obj, "id", None) is None:
                obj.id = self._next_id
                self._next_id += 1

    async def rollback(self) -> None:
        self.rolled_back = True

    async def refresh(self, obj: Any, attribute_names: list[str] | None = None) -> None:
        pass


def integrity_error(message: str = "duplicate key value violates unique constraint") -> IntegrityError:
    return IntegrityError("INSERT", {}, Exception(message))


# ---------------------------------------------------------------------------
# Execute handler helpers
# ---------------------------------------------------------------------------


def entity_handler(entity_class: type, result: FakeResult) -> Callable:
    """Return *result* when the query targets *entity_class*.

    Routes based on ``stmt.column_descriptions[0]["entity"]``.
    """

    def _handler(stmt):
        descriptions = getattr(stmt, "column_descriptions", None)
        if descriptions and descriptions[0].get("entity") is entity_class:
            return result
        return None

    return _handler


def sequence_handler(results: list[FakeResult]) -> Callable:
    """Return results sequentially, one per ``execute()`` call."""
    iterator = iter(results)

    def _handler(_stmt):
        try:
            return next(iterator)
        except StopIteration:
            return None

    return _handler


# ---------------------------------------------------------------------------
# FakeStorage - records object store calls instead of talking to S3
# ---------------------------------------------------------------------------


class FakeStorage:
    provider = "s3"

    def __init__(self, bucket: str = "test-bucket") -> None:
        self.bucket = bucket
        self.objects: dict[str, bytes] = {}
        self.put_calls: list[tuple[str, str]] = []
        self.deleted: list[str] = []
        self.presigned: list[tuple[str, int]] = []
        self.fail_put = False
        self.fail_presign_for: set[str] = set()

    def put_object(self, object_key: str, content: bytes, content_type: str) -> None:
        if self.fail_put:
            raise UpstreamUnavailable("failed to upload to S3: boom")
        self.put_calls.append((object_key, content_type))
        self.objects[object_key] = content

    def delete_object(self, object_key: str) -> None:
        self.deleted.append(object_key)
        self.objects.pop(object_key, None)

    def generate_download_url(self, object_key: str, expires_in: int = 3600) -> str:
        if object_key in self.fail_presign_for:
            raise UpstreamUnavailable("failed to generate presigned URL: boom")
        self.presigned.append((object_key, expires_in))
        return f"https://{self.bucket}.s3.test/{object_key}?X-Amz-Expires={expires_in}"

    def object_exists(self, object_key: str) -> bool:
        return object_key in self.objects


# ---------------------------------------------------------------------------
# Model factories
# ---------------------------------------------------------------------------


def make_asset(**overrides: Any) -> Asset:
    defaults: dict[str, Any] = dict(
        id=1,
        file_name="ad1.mp4",
        file_size=2048,
        content_type="video/mp4",
        input_key="input/ad1_abcd1234.mp4",
        output_key=None,
        bucket="test-bucket",
        status=ASSET_STATUS_UPLOADED,
        processed_at=None,
        is_deleted=False,
    )
    defaults.update(overrides)
    return Asset(**defaults)


def make_template(**overrides: Any) -> Template:
    defaults: dict[str, Any] = dict(
        id=1,
        name="Holiday Frame",
        storage_key="template/holiday_frame_abcd1234.png",
        bucket="test-bucket",
        is_deleted=False,
    )
    defaults.update(overrides)
    return Template(**defaults)


def make_task(**overrides: Any) -> Task:
    defaults: dict[str, Any] = dict(id=1, template_id=1, asset_id=1, metadata_=None, is_deleted=False)
    defaults.update(overrides)
    return Task(**defaults)


# ---------------------------------------------------------------------------
# Shared pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _disable_rate_limiter():
    """Give every test a fresh in-memory limiter."""
    original = app.state.limiter
    app.state.limiter = Limiter(
        key_func=get_remote_address,
        storage_uri="memory://",
    )
    yield
    app.state.limiter = original


@pytest.fixture
def fake_db() -> FakeAsyncSession:
    return FakeAsyncSession()


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
async def sqlite_session_factory():
    """A shared in-memory SQLite database with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest.fixture
async def sqlite_db(sqlite_session_factory):
    async with sqlite_session_factory() as session:
        yield session


@pytest.fixture
def override_deps(fake_db, fake_storage):
    """Standard dependency overrides: fake db session and fake storage."""

    async def _get_db():
        yield fake_db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[deps.get_storage] = lambda: fake_storage

    yield

    app.dependency_overrides.clear()


@pytest.fixture
def client(override_deps) -> TestClient:
    return TestClient(app)


@pytest.fixture
async def sqlite_client(sqlite_session_factory, fake_storage):
    """Async client backed by the in-memory SQLite database, one session per request."""

    async def _get_db():
        async with sqlite_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[deps.get_storage] = lambda: fake_storage

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client

    app.dependency_overrides.clear()
