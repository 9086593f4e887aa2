"""Tests for the per-key lock map."""
import asyncio

import pytest

from src.pm_common.keyed_lock import KeyedLocks


class TestKeyedLocks:
    async def test_entry_dropped_after_release(self) -> None:
        locks = KeyedLocks()
        async with locks.hold("a"):
            assert len(locks) == 1
        assert len(locks) == 0

    async def test_same_key_serializes(self) -> None:
        locks = KeyedLocks()
        events: list[str] = []

        async def worker(tag: str) -> None:
            async with locks.hold("k"):
                events.append(f"{tag}-in")
                await asyncio.sleep(0)
                events.append(f"{tag}-out")

        await asyncio.gather(worker("a"), worker("b"), worker("c"))
        assert events == ["a-in", "a-out", "b-in", "b-out", "c-in", "c-out"]
        assert len(locks) == 0

    async def test_distinct_keys_do_not_block(self) -> None:
        locks = KeyedLocks()

        async def enter(key: str) -> bool:
            async with locks.hold(key):
                return True

        async with locks.hold("a"):
            assert await asyncio.wait_for(enter("b"), timeout=1.0)
        assert len(locks) == 0

    async def test_released_on_error(self) -> None:
        locks = KeyedLocks()
        with pytest.raises(RuntimeError):
            async with locks.hold("a"):
                raise RuntimeError("boom")
        assert len(locks) == 0
