"""Tests for the per-user Redis lock."""

from unittest.mock import AsyncMock

import pytest

from app.utils.redis_client import UserLock


@pytest.fixture
def lock(redis):
    return UserLock(redis, "checkin:lock:", ttl_seconds=10)


class TestUserLock:
    """Tests for UserLock."""

    def test_key(self, lock):
        assert lock.key("user-1") == "checkin:lock:user-1"

    @pytest.mark.asyncio
    async def test_acquire_sets_key_with_ttl(self, lock, redis):
        token = await lock.acquire("user-1")

        assert token
        redis.set.assert_awaited_once_with("checkin:lock:user-1", token, nx=True, ex=10)

    @pytest.mark.asyncio
    async def test_acquire_busy(self, lock, redis):
        redis.set.return_value = None

        assert await lock.acquire("user-1") is None

    @pytest.mark.asyncio
    async def test_release_compares_token(self, lock, redis):
        released = await lock.release("user-1", "abc")

        assert released is True
        redis.eval.assert_awaited_once_with(
            UserLock.RELEASE_LOCK_SCRIPT, 1, "checkin:lock:user-1", "abc"
        )

    @pytest.mark.asyncio
    async def test_release_after_expiry(self, lock, redis):
        redis.eval.return_value = 0

        assert await lock.release("user-1", "stale") is False

    @pytest.mark.asyncio
    async def test_hold_releases_own_token(self, lock, redis):
        async with lock.hold("user-1") as acquired:
            assert acquired is True

        token = redis.set.call_args.args[1]
        assert redis.eval.call_args.args[3] == token

    @pytest.mark.asyncio
    async def test_hold_busy_does_not_release(self, lock, redis):
        redis.set.return_value = None

        async with lock.hold("user-1") as acquired:
            assert acquired is False

        redis.eval.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hold_releases_on_error(self, redis):
        lock = UserLock(redis, "p:", ttl_seconds=5)

        with pytest.raises(RuntimeError):
            async with lock.hold("user-1"):
                raise RuntimeError("boom")

        redis.eval.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_tokens_are_unique(self):
        client = AsyncMock()
        client.set.return_value = True
        lock = UserLock(client, "p:", ttl_seconds=5)

        assert await lock.acquire("a") != await lock.acquire("a")
