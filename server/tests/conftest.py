"""Test configuration and fixtures."""

import json
import os
from typing import List, Optional

# Point the module-level engine at SQLite before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tourdesk.core.database import Base, build_engine, build_session_factory, create_schema, get_db
from tourdesk.models import *  # noqa: F403 - Import all models
from tourdesk.services.storage_service import build_object_key
from tourdesk.services.token_service import TokenSigner

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_JWT_SECRET = "test-secret"


class InMemoryObjectStorage:
    """Test double for object storage; can be told to fail after N uploads."""

    def __init__(self, base_url: str = "https://bucket.test", fail_after: Optional[int] = None):
        self.base_url = base_url
        self.fail_after = fail_after
        self.stored: List[dict] = []

    async def upload(self, file, field_name: str) -> str:
        if self.fail_after is not None and len(self.stored) >= self.fail_after:
            raise RuntimeError("storage unavailable")
        key = build_object_key("tour", file.filename)
        self.stored.append({
            "key": key,
            "field_name": field_name,
            "body": await file.read(),
            "content_type": file.content_type,
        })
        return f"{self.base_url}/{key}"

    async def upload_many(self, files, field_name: str) -> List[str]:
        return [await self.upload(file, field_name) for file in files]


class RecordingMailer:
    """Test double for the SMTP mailer."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[tuple] = []

    async def send_otp(self, recipient: str, code: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP server unreachable")
        self.sent.append((recipient, code))


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = build_engine(TEST_DATABASE_URL)
    await create_schema(engine)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async with build_session_factory(test_engine)() as session:
        yield session


@pytest.fixture
def object_storage():
    return InMemoryObjectStorage()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def token_signer():
    return TokenSigner(secret=TEST_JWT_SECRET)


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, object_storage, mailer, token_signer):
    """Create the application with in-memory service handles."""
    from tourdesk.main import create_app

    app = create_app(
        object_storage=object_storage,
        mailer=mailer,
        token_signer=token_signer,
    )

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_tour_form():
    """Text fields of a tour submission."""
    return {
        "title": "Old Town Walking Tour",
        "description": "Two hours through the historic centre",
        "price": "49.5",
        "language": "English",
        "city": "Prague",
        "category": "Walking",
        "date": "2025-06-01T09:00:00",
        "timeSlot": "09:00-11:00",
        "meetingPoint": "Astronomical Clock",
        "teamMembers": json.dumps([
            {"name": "Jana", "description": "Historian", "isLeader": "true"},
            {"name": "Petr", "description": "Photographer", "isLeader": "false"},
        ]),
    }


@pytest.fixture
def sample_tour_files():
    """Gallery images followed by one photo per team member, in upload order."""
    return [
        ("swiperImages", ("bridge.jpg", b"bridge", "image/jpeg")),
        ("swiperImages", ("castle.jpg", b"castle", "image/jpeg")),
        ("teamMemberPhoto0", ("jana.jpg", b"jana", "image/jpeg")),
        ("teamMemberPhoto1", ("petr.jpg", b"petr", "image/jpeg")),
    ]
