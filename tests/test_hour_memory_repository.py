import asyncio
from datetime import datetime, timezone

import pytest

from shared.errors import DomainConflictError, LockTimeoutError, ValidationError
from trainer_service.adapters.hour_memory_repository import MemoryHourRepository
from trainer_service.adapters.hour_repository import HourNotFoundError
from trainer_service.domain.hour import Availability, HourNotAvailableError

from conftest import hour_at

CONTENDED_HOUR = datetime(2025, 12, 1, 13, tzinfo=timezone.utc)


def schedule(h):
    h.schedule_training()
    return h


def make_available(h):
    h.make_available()
    return h


@pytest.mark.asyncio
async def test_exactly_one_of_twenty_concurrent_schedules_wins(hour_factory):
    repo = MemoryHourRepository(hour_factory)
    await repo.update_hour(CONTENDED_HOUR, make_available)

    results = await asyncio.gather(
        *(repo.update_hour(CONTENDED_HOUR, schedule) for _ in range(20)),
        return_exceptions=True,
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 19
    assert all(isinstance(e, HourNotAvailableError) for e in failures)

    stored = await repo.get_hour(CONTENDED_HOUR)
    assert stored.has_training_scheduled()
    assert len(repo._locks) == 0


@pytest.mark.asyncio
async def test_concurrent_first_access_creates_single_hour(hour_factory):
    repo = MemoryHourRepository(hour_factory)

    results = await asyncio.gather(
        *(repo.update_hour(CONTENDED_HOUR, make_available) for _ in range(20)),
        return_exceptions=True,
    )

    assert sum(1 for r in results if not isinstance(r, Exception)) == 1
    assert all(isinstance(r, DomainConflictError) for r in results if isinstance(r, Exception))
    assert len(repo) == 1


@pytest.mark.asyncio
async def test_sequential_first_access_reuses_hour(hour_factory):
    repo = MemoryHourRepository(hour_factory)

    await repo.update_hour(CONTENDED_HOUR, make_available)
    updated = await repo.update_hour(CONTENDED_HOUR, schedule)

    assert updated.has_training_scheduled()
    assert len(repo) == 1


@pytest.mark.asyncio
async def test_failed_update_leaves_state_untouched(hour_factory):
    repo = MemoryHourRepository(hour_factory)
    await repo.update_hour(CONTENDED_HOUR, make_available)

    def boom(h):
        h.schedule_training()
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await repo.update_hour(CONTENDED_HOUR, boom)

    stored = await repo.get_hour(CONTENDED_HOUR)
    assert stored.availability == Availability.AVAILABLE


@pytest.mark.asyncio
async def test_invalid_first_access_is_rejected(hour_factory):
    repo = MemoryHourRepository(hour_factory)

    with pytest.raises(ValidationError):
        await repo.update_hour(hour_at(1, 5), make_available)
    assert len(repo) == 0


@pytest.mark.asyncio
async def test_lock_timeout_is_infrastructure_error(hour_factory):
    repo = MemoryHourRepository(hour_factory, lock_timeout_seconds=0.05)
    await repo.update_hour(CONTENDED_HOUR, make_available)

    release = asyncio.Event()

    async def hold():
        async with repo._locks.hold(CONTENDED_HOUR):
            await release.wait()

    holder = asyncio.create_task(hold())
    await asyncio.sleep(0)

    with pytest.raises(LockTimeoutError) as exc:
        await repo.update_hour(CONTENDED_HOUR, schedule)
    assert exc.value.retryable

    release.set()
    await holder


@pytest.mark.asyncio
async def test_get_and_delete(hour_factory):
    repo = MemoryHourRepository(hour_factory)
    assert await repo.get_hour(CONTENDED_HOUR) is None

    await repo.update_hour(CONTENDED_HOUR, make_available)
    await repo.delete_hour(CONTENDED_HOUR)
    assert await repo.get_hour(CONTENDED_HOUR) is None

    with pytest.raises(HourNotFoundError):
        await repo.delete_hour(CONTENDED_HOUR)


@pytest.mark.asyncio
async def test_available_hours_fills_band(hour_factory):
    repo = MemoryHourRepository(hour_factory)
    await repo.update_hour(hour_at(1, 14), make_available)

    dates = await repo.available_hours(hour_at(1, 0), hour_at(2, 0))

    assert [d.date for d in dates] == [hour_at(1, 0).date(), hour_at(2, 0).date()]
    first, second = dates
    assert len(first.hours) == 9
    assert first.has_free_hours
    assert [h.hour for h in first.hours if h.available] == [hour_at(1, 14)]
    assert not second.has_free_hours
    assert all(not h.available for h in second.hours)
