"""
Pytest configuration and fixtures for testing.

Provides fixtures for:
- A fresh app per test with its own temporary data directory
- An in-memory provider in place of the real AI SDKs
- Authenticated users (regular and admin) and their tokens
"""

import os
import random
import tempfile
from typing import AsyncGenerator, Dict

import pytest

# Set test environment variables before importing the app
os.environ["JWT_SECRET"] = "test-secret-key-do-not-use-in-production-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="cineai-test-")
os.environ["RATE_LIMIT_ENABLED"] = "false"
for _name in ("OPENAI_API_KEY", "GEMINI_API_KEY", "ANTHROPIC_API_KEY", "AI_DEFAULT_PROVIDER",
              "OPENAI_MODEL", "GEMINI_MODEL", "CLAUDE_MODEL",
              "GOOGLE_SEARCH_API_KEY", "GOOGLE_SEARCH_ENGINE_ID"):
    os.environ.pop(_name, None)

from httpx import ASGITransport, AsyncClient

from cineai.app import create_app
from cineai.auth import create_access_token
from cineai.config import Settings
from cineai.services import AvailabilityEnhancer, IdentificationService, WebSearchService
from tests.utils import FakeProvider, create_test_user


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a per-test data directory, rate limiting off."""
    return Settings(data_dir=str(tmp_path / "data"), rate_limit_enabled=False)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider(key="openai")


@pytest.fixture
def identification_service() -> IdentificationService:
    """Service with no providers registered and a seeded enhancer."""
    return IdentificationService(
        default_provider="openai",
        enhancer=AvailabilityEnhancer(rng=random.Random(1234))
    )


@pytest.fixture
def web_search() -> WebSearchService:
    return WebSearchService()


@pytest.fixture
def app(settings, identification_service, web_search):
    return create_app(settings, identification=identification_service, web_search=web_search)


@pytest.fixture
def configured_app(app, identification_service, fake_provider):
    """App whose active provider is the in-memory fake."""
    identification_service.register(fake_provider)
    return app


@pytest.fixture
def db(app):
    return app.state.db


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def test_user(db) -> Dict:
    """Create a regular user."""
    return create_test_user(db, "viewer@example.com", password="Viewer123", name="Test Viewer")


@pytest.fixture
def test_user_2(db) -> Dict:
    """Create a second regular user for ownership checks."""
    return create_test_user(db, "other@example.com", password="Other1234", name="Other Viewer")


@pytest.fixture
def test_admin(db) -> Dict:
    """Create an admin user."""
    return create_test_user(db, "admin@example.com", password="Admin1234", name="Site Admin", role="admin")


@pytest.fixture
def user_token(test_user) -> str:
    return create_access_token(test_user["id"], test_user["role"])


@pytest.fixture
def user_2_token(test_user_2) -> str:
    return create_access_token(test_user_2["id"], test_user_2["role"])


@pytest.fixture
def admin_token(test_admin) -> str:
    return create_access_token(test_admin["id"], test_admin["role"])
