import asyncio

import pytest

from app.core.exceptions import InternalError
from app.core.locks import KeyedLock


async def test_same_key_is_serialized():
    locks = KeyedLock()
    order: list[str] = []

    async def worker(name: str):
        async with locks.hold("car:1"):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))

    assert order == ["a-in", "a-out", "b-in", "b-out"]


async def test_different_keys_do_not_block():
    locks = KeyedLock()

    async with locks.hold("car:1"):
        async with locks.hold("car:2", timeout=0.05):
            assert "car:2" in locks


async def test_timeout_raises_internal_error_and_cleans_up():
    locks = KeyedLock()

    async with locks.hold("car:1"):
        with pytest.raises(InternalError):
            async with locks.hold("car:1", timeout=0.01):
                pass

    assert "car:1" not in locks
