"""Unit tests for KeyedLock."""

import asyncio

import pytest

from prep_engine.core.locks import KeyedLock


class TestKeyedLock:
    @pytest.mark.asyncio
    async def test_same_key_is_exclusive(self):
        locks = KeyedLock()
        active = 0
        peak = 0

        async def worker():
            nonlocal active, peak
            async with locks.hold("k"):
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0)
                active -= 1

        await asyncio.gather(*(worker() for _ in range(10)))

        assert peak == 1
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_different_keys_do_not_block(self):
        locks = KeyedLock()

        async with locks.hold("a"):
            assert locks.locked("a")
            # Would deadlock if "b" shared the lock for "a"
            await asyncio.wait_for(_enter(locks, "b"), timeout=1)

        assert not locks.locked("a")

    @pytest.mark.asyncio
    async def test_released_on_error(self):
        locks = KeyedLock()

        with pytest.raises(RuntimeError):
            async with locks.hold("k"):
                raise RuntimeError("boom")

        assert len(locks) == 0
        assert not locks.locked("k")


async def _enter(locks: KeyedLock, key: str) -> None:
    async with locks.hold(key):
        pass
