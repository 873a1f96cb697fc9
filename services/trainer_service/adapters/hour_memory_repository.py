import asyncio
from datetime import datetime

from shared.locks import KeyedLocks

from ..domain.hour import Availability, Hour, HourFactory, to_utc
from ..domain.repository import UpdateHourFn
from ..queries import DateView
from .dates import build_dates
from .hour_repository import HourNotFoundError


class MemoryHourRepository:
    """In-process HourRepository serialised per timestamp."""

    def __init__(self, factory: HourFactory, lock_timeout_seconds: float = 5.0):
        self.factory = factory
        self.lock_timeout_seconds = lock_timeout_seconds
        self._hours: dict[datetime, Availability] = {}
        self._locks = KeyedLocks(lock_timeout_seconds)

    def __len__(self) -> int:
        return len(self._hours)

    async def get_hour(self, hour_time: datetime) -> Hour | None:
        hour_time = to_utc(hour_time)
        availability = self._hours.get(hour_time)
        if availability is None:
            return None
        return self.factory.unmarshal_hour_from_database(hour_time, availability)

    async def update_hour(self, hour_time: datetime, update_fn: UpdateHourFn) -> Hour:
        hour_time = to_utc(hour_time)
        async with self._locks.hold(hour_time, f"hour {hour_time.isoformat()}"):
            availability = self._hours.get(hour_time)
            if availability is None:
                current = self.factory.new_not_available_hour(hour_time)
            else:
                current = self.factory.unmarshal_hour_from_database(hour_time, availability)

            # give other writers a chance to interleave, as a real store would
            await asyncio.sleep(0)

            updated = update_fn(current)
            self._hours[hour_time] = updated.availability
            return updated

    async def delete_hour(self, hour_time: datetime) -> None:
        hour_time = to_utc(hour_time)
        if self._hours.pop(hour_time, None) is None:
            raise HourNotFoundError(f"hour {hour_time.isoformat()} not found")

    async def available_hours(self, date_from: datetime, date_to: datetime) -> list[DateView]:
        hours = [
            self.factory.unmarshal_hour_from_database(t, a)
            for t, a in self._hours.items()
        ]
        return build_dates(hours, date_from, date_to, self.factory.config)
