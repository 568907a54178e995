"""
Security tests for rate limiting.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from cineai.app import create_app
from cineai.config import Settings
from cineai.middleware.rate_limit import RateLimiter
from cineai.services import WebSearchService


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.mark.security
class TestRateLimiter:
    """Sliding window behaviour of RateLimiter."""

    def test_allows_up_to_limit(self):
        limiter = RateLimiter(clock=FakeClock())

        results = [limiter.is_allowed("auth:1.2.3.4", 3, 60)[0] for _ in range(4)]

        assert results == [True, True, True, False]

    def test_headers(self):
        limiter = RateLimiter(clock=FakeClock(1000.0))

        _, headers = limiter.is_allowed("api:1.2.3.4", 10, 60)

        assert headers == {
            "X-RateLimit-Limit": "10",
            "X-RateLimit-Remaining": "9",
            "X-RateLimit-Reset": "1060",
        }

    def test_window_slides(self):
        clock = FakeClock()
        limiter = RateLimiter(clock=clock)
        for _ in range(2):
            limiter.is_allowed("k", 2, 60)

        assert limiter.is_allowed("k", 2, 60)[0] is False
        clock.now += 61
        assert limiter.is_allowed("k", 2, 60)[0] is True

    def test_keys_are_independent(self):
        limiter = RateLimiter(clock=FakeClock())
        limiter.is_allowed("auth:a", 1, 60)

        assert limiter.is_allowed("auth:a", 1, 60)[0] is False
        assert limiter.is_allowed("auth:b", 1, 60)[0] is True

    def test_cleanup_drops_idle_keys(self):
        clock = FakeClock()
        limiter = RateLimiter(cleanup_interval=300, clock=clock)
        limiter.is_allowed("old", 5, 60)

        clock.now += 4000
        limiter.is_allowed("new", 5, 60)

        assert "old" not in limiter.requests


@pytest.mark.security
class TestRateLimitMiddleware:
    """Limits applied to the running app."""

    @pytest.fixture
    async def limited_client(self, tmp_path, identification_service):
        app = create_app(
            Settings(data_dir=str(tmp_path / "limited"), rate_limit_enabled=True),
            identification=identification_service,
            web_search=WebSearchService()
        )
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client

    async def test_login_attempts_limited(self, limited_client):
        """The sixth login attempt in a minute is refused."""
        payload = {"email": "brute@example.com", "password": "Guess1234"}
        statuses = [(await limited_client.post("/api/auth/login", json=payload)).status_code for _ in range(6)]

        assert statuses == [401] * 5 + [429]

    async def test_limit_headers_on_success(self, limited_client):
        response = await limited_client.get("/api/movies")

        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "100"
        assert response.headers["X-RateLimit-Remaining"] == "99"

    async def test_auth_limit_does_not_block_catalog(self, limited_client):
        payload = {"email": "brute@example.com", "password": "Guess1234"}
        for _ in range(6):
            await limited_client.post("/api/auth/login", json=payload)

        response = await limited_client.get("/api/movies")

        assert response.status_code == 200
