from datetime import datetime
from typing import Callable, Protocol

from .hour import Hour

UpdateHourFn = Callable[[Hour], Hour]


class HourRepository(Protocol):
    async def get_hour(self, hour_time: datetime) -> Hour | None:
        """Plain read without locking. None when the hour was never written."""
        ...

    async def update_hour(self, hour_time: datetime, update_fn: UpdateHourFn) -> Hour:
        """
        Guarded read-modify-write of one hour.

        Holds an exclusive lock on the hour for the whole call, creates a
        not-available hour when none exists yet, and persists nothing when
        `update_fn` raises. Returns the hour as persisted.
        """
        ...

    async def delete_hour(self, hour_time: datetime) -> None:
        ...
