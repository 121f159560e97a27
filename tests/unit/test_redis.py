"""Tests for the optional Redis transport (src/safeops/core/redis.py)."""

import pytest

from src.safeops.core import redis as redis_module
from src.safeops.core.config import get_settings
from src.safeops.core.redis import close_redis, get_redis, redis_status, reset_redis_state

pytestmark = pytest.mark.unit

UNREACHABLE = "redis://127.0.0.1:1/0"


@pytest.fixture
def redis_url(monkeypatch):
    """Point the module at a given REDIS_URL."""

    def _set(url):
        settings = get_settings().model_copy(update={"redis_url": url})
        monkeypatch.setattr(redis_module, "get_settings", lambda: settings)

    reset_redis_state()
    yield _set
    reset_redis_state()


class TestGetRedis:
    async def test_returns_none_when_not_configured(self, redis_url):
        redis_url(None)

        assert await get_redis() is None

    async def test_unreachable_server_disables_feed(self, redis_url):
        redis_url(UNREACHABLE)

        assert await get_redis() is None
        assert redis_module._state.client is None
        assert redis_module._state.pool is None

    async def test_failed_attempt_is_not_retried(self, redis_url):
        redis_url(None)

        await get_redis()
        redis_url(UNREACHABLE)

        assert await get_redis() is None
        assert redis_module._state.attempted is True

    async def test_reset_clears_state(self):
        redis_module._state.attempted = True
        redis_module._state.client = "dummy"  # type: ignore[assignment]

        reset_redis_state()

        assert redis_module._state.attempted is False
        assert redis_module._state.client is None


class TestCloseRedis:
    async def test_close_when_not_connected(self, redis_url):
        await close_redis()

        assert redis_module._state.client is None
        assert redis_module._state.attempted is False

    async def test_close_allows_a_new_attempt(self, redis_url):
        redis_url(None)
        await get_redis()

        await close_redis()

        assert redis_module._state.attempted is False


class TestRedisStatus:
    async def test_not_configured(self, redis_url):
        redis_url(None)

        assert await redis_status() == "not_configured"

    async def test_unreachable(self, redis_url):
        redis_url(UNREACHABLE)

        assert (await redis_status()).startswith("unhealthy")

    async def test_healthy(self, redis_url, fake_redis, monkeypatch):
        redis_url("redis://fake:6379/0")
        monkeypatch.setattr(redis_module._state, "client", fake_redis)

        assert await redis_status() == "healthy"
