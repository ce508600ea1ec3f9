import asyncio

import pytest

from backend.grinta.services.locks import KeyedLocks

pytestmark = pytest.mark.anyio


async def test_same_key_is_serialized():
    locks = KeyedLocks()
    events = []

    async def worker(name):
        async with locks.hold("m1"):
            events.append(f"{name}-in")
            await asyncio.sleep(0.01)
            events.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))

    assert events in (
        ["a-in", "a-out", "b-in", "b-out"],
        ["b-in", "b-out", "a-in", "a-out"],
    )


async def test_different_keys_do_not_block_each_other():
    locks = KeyedLocks()
    entered = asyncio.Event()

    async def holder():
        async with locks.hold("m1"):
            await asyncio.wait_for(entered.wait(), timeout=1)

    async def other():
        async with locks.hold("m2"):
            entered.set()

    await asyncio.gather(holder(), other())


async def test_released_keys_are_forgotten():
    locks = KeyedLocks()

    async with locks.hold("m1"):
        assert locks.is_held("m1")
        assert not locks.is_held("m2")

    assert not locks.is_held("m1")
    assert locks._locks == {}


async def test_lock_is_released_on_error():
    locks = KeyedLocks()

    with pytest.raises(RuntimeError):
        async with locks.hold("m1"):
            raise RuntimeError("boom")

    async with locks.hold("m1"):
        assert locks.is_held("m1")
