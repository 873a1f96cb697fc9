import asyncio

import pytest

from shared.errors import LockTimeoutError
from shared.locks import KeyedLocks


@pytest.mark.asyncio
async def test_waiters_run_one_at_a_time():
    locks = KeyedLocks()
    inside = []
    overlaps = []

    async def work(i):
        async with locks.hold("t-1"):
            if inside:
                overlaps.append(i)
            inside.append(i)
            await asyncio.sleep(0)
            inside.remove(i)

    await asyncio.gather(*(work(i) for i in range(10)))

    assert overlaps == []
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_timeout_raises_and_drops_idle_lock():
    locks = KeyedLocks(timeout_seconds=0.05)
    release = asyncio.Event()

    async def hold():
        async with locks.hold("t-1"):
            await release.wait()

    holder = asyncio.create_task(hold())
    await asyncio.sleep(0)

    with pytest.raises(LockTimeoutError) as exc:
        async with locks.hold("t-1", "training t-1"):
            pass
    assert "training t-1" in str(exc.value)
    assert len(locks) == 1

    release.set()
    await holder
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_error_inside_releases_lock():
    locks = KeyedLocks(timeout_seconds=0.05)

    with pytest.raises(RuntimeError):
        async with locks.hold("t-1"):
            raise RuntimeError("boom")

    async with locks.hold("t-1"):
        pass
    assert len(locks) == 0
