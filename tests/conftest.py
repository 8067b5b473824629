"""Pytest configuration and fixtures for Shiori Share tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest
import respx

from shiori_share.client import ShioriClient
from shiori_share.config import Settings
from shiori_share.models import BookmarkResult, Credentials, Tag
from shiori_share.stores import MemoryCredentialStore, RecentTagsCache, SessionCache

SERVER_URL = "https://shiori.example.com"
NOW = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed clock value used by the client under test."""
    return NOW


@pytest.fixture
def credentials() -> Credentials:
    """Valid Shiori credentials for testing."""
    return Credentials(server_url=SERVER_URL, username="alice", password="s3cret")


@pytest.fixture
def credential_store(credentials) -> MemoryCredentialStore:
    return MemoryCredentialStore(credentials)


@pytest.fixture
def session_cache() -> SessionCache:
    return SessionCache()


@pytest.fixture
def recent_tags() -> RecentTagsCache:
    return RecentTagsCache()


@pytest.fixture
def client(credential_store, session_cache, recent_tags, now) -> ShioriClient:
    """A client with in-memory stores and a frozen clock."""
    return ShioriClient(
        credential_store, session_cache, recent_tags, clock=lambda: now
    )


@pytest.fixture
def valid_session(session_cache, now) -> str:
    """Seed the cache with a session issued ten minutes ago."""
    session_cache.set_token("cached-session", now - timedelta(minutes=10))
    return "cached-session"


@pytest.fixture
def mock_api():
    """Mock the Shiori server at the httpx transport level."""
    with respx.mock(base_url=SERVER_URL, assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
def login_response_data() -> dict:
    """Sample successful login response."""
    return {
        "ok": True,
        "message": {
            "token": "jwt-token",
            "session": "fresh-session",
            "expires": 1705318200,
        },
    }


@pytest.fixture
def bookmark_response_data() -> dict:
    """Sample bookmark creation response."""
    return {
        "id": 42,
        "url": "https://example.com/python-testing",
        "title": "Python Testing Best Practices",
        "excerpt": "Comprehensive guide to testing in Python with pytest",
    }


@pytest.fixture
def tags_response_data() -> list[dict]:
    """Sample tag listing response."""
    return [
        {"id": 1, "name": "python", "nBookmarks": 12},
        {"id": 2, "name": "Web", "nBookmarks": 30},
        {"id": 3, "name": "testing", "nBookmarks": 4},
        {"id": 4, "name": "asyncio", "nBookmarks": 12},
    ]


@pytest.fixture
def sample_tags(tags_response_data) -> list[Tag]:
    return [Tag.model_validate(data) for data in tags_response_data]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(state_dir=tmp_path)


@pytest.fixture
def mock_client(bookmark_response_data):
    """Create a mocked ShioriClient for tool tests."""
    client = Mock(spec=ShioriClient)

    client.is_configured = Mock(return_value=True)
    client.suggested_tags = Mock(return_value=["python", "web"])
    client.schedule_popular_tags_refresh = Mock()
    client.add_bookmark = AsyncMock(
        return_value=BookmarkResult.model_validate(bookmark_response_data)
    )
    client.check_connection = AsyncMock(return_value="fresh-session")
    client.close = AsyncMock()

    return client
