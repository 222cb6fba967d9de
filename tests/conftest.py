"""Shared pytest fixtures: in-memory Redis and completion fakes, sample catalog."""

import json

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from novellize.core.cache import CacheService
from novellize.core.exceptions import LLMUnavailableError


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeRedis:
    """Async stand-in for redis.asyncio.Redis with decode_responses=True."""

    def __init__(self, data: dict | None = None, fail: bool = False):
        self.data = dict(data or {})
        self.ttls: dict[str, int] = {}
        self.fail = fail
        self.closed = False

    def _check(self):
        if self.fail:
            raise RedisConnectionError("connection refused")

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value):
        self._check()
        self.data[key] = value
        self.ttls.pop(key, None)
        return True

    async def setex(self, key, ttl, value):
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, key):
        self._check()
        return 1 if self.data.pop(key, None) is not None else 0

    async def exists(self, key):
        self._check()
        return 1 if key in self.data else 0

    async def ping(self):
        self._check()
        return True

    async def aclose(self):
        self.closed = True


class FakeCompleter:
    """Completion client returning canned replies in order.

    A reply that is an exception instance is raised instead of returned.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: list[dict] = []

    async def complete(self, messages, max_tokens=None):
        self.calls.append({"messages": messages, "max_tokens": max_tokens})
        if not self.replies:
            raise LLMUnavailableError("No canned reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self):
        pass


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

def make_novel(novel_id, title, genres=(), tags=(), **fields) -> dict:
    """Catalog entry shaped like the document-database export."""
    novel = {
        "novelId": novel_id,
        "title": title,
        "genres": [{"name": g} for g in genres],
        "tags": list(tags),
        "synopsis": f"Synopsis of {title}",
        "coverPhoto": f"https://img.example.com/{novel_id}.jpg",
        "publishers": {"original": "Novellize Originals"},
        "likes": 10,
    }
    novel.update(fields)
    return novel


@pytest.fixture
def novel_a():
    return make_novel(
        "a1", "Novel A",
        genres=["Fantasy"], tags=["magic"], rating=4.5,
        seriesStatus="ONGOING", chapterType="Web Novel",
        availability={"type": "FREE"}, uploader="author-1",
    )


@pytest.fixture
def novel_b():
    return make_novel(
        "b2", "Novel B",
        genres=["Romance"], tags=["slow-burn"], rating=3.0,
        seriesStatus="COMPLETED", chapterType="Light Novel",
        availability={"type": "PAID", "price": 4.99}, uploader="author-2",
    )


@pytest.fixture
def catalog(novel_a, novel_b):
    return [novel_a, novel_b]


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    return CacheService(client=fake_redis)


@pytest.fixture
def seeded_cache(fake_redis, catalog):
    from novellize.config import get_settings
    fake_redis.data[get_settings().novel_cache_key] = json.dumps(catalog)
    return CacheService(client=fake_redis)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
def client():
    """TestClient with rate limiting off and dependency overrides cleared after."""
    from novellize.api.chat import limiter
    from novellize.main import app

    limiter.enabled = False
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True
