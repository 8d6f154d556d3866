"""Shared test fixtures.

The app runs against an in-memory SQLite database (one shared connection,
schema created from the models) and a fake S3 client, so the suite needs no
Postgres, Redis or MinIO.
"""

import os
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Must be set before any donation_hub import reads settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["COGNITO_MOCK"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key-for-jwt"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ["S3_BUCKET"] = "test-bucket"
os.environ["S3_ENDPOINT_URL"] = "http://minio.test:9000"
os.environ.setdefault("ENVIRONMENT", "test")

import donation_hub.models  # noqa: E402, F401
from donation_hub.core.dependencies import get_db  # noqa: E402
from donation_hub.db.base import Base  # noqa: E402
from donation_hub.main import app  # noqa: E402
from donation_hub.services import storage  # noqa: E402
from donation_hub.services.rate_limit import MemoryCounterStore, set_counter_store  # noqa: E402


class FakeS3Client:
    """Stands in for the boto3 S3 client: records objects in a dict."""

    def __init__(self):
        self.objects: dict[str, dict] = {}
        self.deleted: list[str] = []
        self.fail_put = False
        self.fail_delete = False

    def put_object(self, Bucket, Key, Body, ContentType, **kwargs):  # noqa: N803
        from botocore.exceptions import ClientError

        if self.fail_put:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")
        self.objects[Key] = {"bucket": Bucket, "body": Body, "content_type": ContentType}
        return {}

    def delete_object(self, Bucket, Key):  # noqa: N803
        from botocore.exceptions import ClientError

        if self.fail_delete:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "DeleteObject")
        self.objects.pop(Key, None)
        self.deleted.append(Key)
        return {}


@pytest.fixture(autouse=True)
def fake_s3(monkeypatch) -> FakeS3Client:
    client = FakeS3Client()
    monkeypatch.setattr(storage, "_get_s3_client", lambda: client)
    return client


@pytest.fixture(autouse=True)
def fresh_rate_limits():
    """Each test starts with empty rate-limit counters."""
    set_counter_store(MemoryCounterStore())
    yield
    set_counter_store(None)


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding and inspecting rows. Commit to make seeds visible."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client whose requests use the test database."""

    async def _test_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _test_get_db
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_db, None)
