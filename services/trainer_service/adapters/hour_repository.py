import logging
import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DBAPIError

from shared.database import dialect_name, set_lock_timeout
from shared.db_errors import translate_db_error
from shared.errors import NotFoundError

from ..domain.hour import Hour, HourFactory, availability_from_string, to_utc
from ..domain.repository import UpdateHourFn
from ..models import TrainerHour
from ..queries import DateView
from .dates import build_dates, day_range

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class HourNotFoundError(NotFoundError):
    default_slug = "hour-not-found"


class SqlAlchemyHourRepository:
    """
    Hour storage with a pessimistic concurrency gate.

    update_hour runs in one transaction:
      1. SELECT ... FOR UPDATE on hour_time
      2. on miss: validate through the factory, INSERT ... ON CONFLICT DO NOTHING,
         then SELECT ... FOR UPDATE again. Concurrent first writers all end up
         waiting on the single row that won the insert.
      3. apply update_fn to the locked hour, write availability back, commit.
    Any exception rolls the transaction back, which also releases the lock.
    """

    def __init__(self, session_factory, factory: HourFactory, logger: logging.Logger, lock_timeout_seconds: float = 5.0):
        self.session_factory = session_factory
        self.factory = factory
        self.logger = logger
        self.lock_timeout_seconds = lock_timeout_seconds

    def _to_domain(self, row: TrainerHour) -> Hour:
        return self.factory.unmarshal_hour_from_database(
            to_utc(row.hour_time),
            availability_from_string(row.availability),
        )

    async def get_hour(self, hour_time: datetime) -> Hour | None:
        hour_time = to_utc(hour_time)
        try:
            async with self.session_factory() as session:
                res = await session.execute(select(TrainerHour).where(TrainerHour.hour_time == hour_time))
                row = res.scalar_one_or_none()
        except DBAPIError as e:
            raise translate_db_error(e) from e

        if row is None:
            return None
        return self._to_domain(row)

    async def update_hour(self, hour_time: datetime, update_fn: UpdateHourFn) -> Hour:
        hour_time = to_utc(hour_time)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await set_lock_timeout(session, self.lock_timeout_seconds)

                    row = await self._select_for_update(session, hour_time)
                    if row is None:
                        new_hour = self.factory.new_not_available_hour(hour_time)
                        await self._insert_if_missing(session, new_hour)
                        row = await self._select_for_update(session, hour_time)

                    current = self._to_domain(row)
                    updated = update_fn(current)

                    row.availability = updated.availability.value
                    self.logger.debug(
                        "hour %s availability -> %s", hour_time.isoformat(), updated.availability.value
                    )
        except DBAPIError as e:
            raise translate_db_error(e) from e

        return updated

    async def delete_hour(self, hour_time: datetime) -> None:
        hour_time = to_utc(hour_time)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    res = await session.execute(delete(TrainerHour).where(TrainerHour.hour_time == hour_time))
                    if res.rowcount == 0:
                        raise HourNotFoundError(f"hour {hour_time.isoformat()} not found")
        except DBAPIError as e:
            raise translate_db_error(e) from e

    async def available_hours(self, date_from: datetime, date_to: datetime) -> list[DateView]:
        start, end = day_range(date_from, date_to)
        try:
            async with self.session_factory() as session:
                res = await session.execute(
                    select(TrainerHour)
                    .where(TrainerHour.hour_time >= start, TrainerHour.hour_time < end)
                    .order_by(TrainerHour.hour_time)
                )
                rows = res.scalars().all()
        except DBAPIError as e:
            raise translate_db_error(e) from e

        return build_dates([self._to_domain(r) for r in rows], date_from, date_to, self.factory.config)

    async def _select_for_update(self, session, hour_time: datetime) -> TrainerHour | None:
        res = await session.execute(
            select(TrainerHour)
            .where(TrainerHour.hour_time == hour_time)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return res.scalar_one_or_none()

    async def _insert_if_missing(self, session, hour: Hour) -> None:
        insert = _INSERTS.get(dialect_name(session))
        if insert is None:
            raise RuntimeError(f"unsupported dialect for hour upsert: {dialect_name(session)}")

        stmt = (
            insert(TrainerHour)
            .values(id=str(uuid.uuid4()), hour_time=hour.time, availability=hour.availability.value)
            .on_conflict_do_nothing(index_elements=["hour_time"])
        )
        await session.execute(stmt)
