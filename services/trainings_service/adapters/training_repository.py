import logging

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError

from shared.database import set_lock_timeout
from shared.db_errors import translate_db_error

from ..domain.repository import TrainingNotFoundError, UpdateTrainingFn
from ..domain.training import Training, User, can_user_see_training, user_type_from_string
from ..models import TrainingRecord
from ..queries import TrainingView, training_view


def _to_domain(row: TrainingRecord) -> Training:
    move_proposed_by = None
    if row.move_proposed_by:
        move_proposed_by = user_type_from_string(row.move_proposed_by)

    return Training.unmarshal_from_database(
        uuid=row.id,
        user_uuid=row.user_id,
        user_name=row.user_name,
        time=row.training_time,
        notes=row.notes or "",
        canceled=row.canceled,
        proposed_new_time=row.proposed_new_time,
        move_proposed_by=move_proposed_by,
    )


def _write(row: TrainingRecord, tr: Training) -> None:
    row.training_time = tr.time
    row.notes = tr.notes or None
    # the proposal columns always move together
    row.proposed_new_time = tr.proposed_new_time
    row.move_proposed_by = tr.move_proposed_by.value if tr.move_proposed_by else None
    row.canceled = tr.is_canceled()


class SqlAlchemyTrainingRepository:
    def __init__(self, session_factory, logger: logging.Logger, lock_timeout_seconds: float = 5.0):
        self.session_factory = session_factory
        self.logger = logger
        self.lock_timeout_seconds = lock_timeout_seconds

    async def add_training(self, training: Training) -> None:
        row = TrainingRecord(
            id=training.uuid,
            user_id=training.user_uuid,
            user_name=training.user_name,
        )
        _write(row, training)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(row)
        except DBAPIError as e:
            raise translate_db_error(e) from e

    async def get_training(self, training_uuid: str, user: User) -> Training:
        try:
            async with self.session_factory() as session:
                res = await session.execute(select(TrainingRecord).where(TrainingRecord.id == training_uuid))
                row = res.scalar_one_or_none()
        except DBAPIError as e:
            raise translate_db_error(e) from e

        if row is None:
            raise TrainingNotFoundError(training_uuid)

        tr = _to_domain(row)
        can_user_see_training(user, tr)
        return tr

    async def update_training(self, training_uuid: str, user: User, update_fn: UpdateTrainingFn) -> None:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await set_lock_timeout(session, self.lock_timeout_seconds)
                    res = await session.execute(
                        select(TrainingRecord)
                        .where(TrainingRecord.id == training_uuid)
                        .with_for_update()
                        .execution_options(populate_existing=True)
                    )
                    row = res.scalar_one_or_none()
                    if row is None:
                        raise TrainingNotFoundError(training_uuid)

                    tr = _to_domain(row)
                    can_user_see_training(user, tr)

                    updated = await update_fn(tr)
                    _write(row, updated)
                    self.logger.debug("training %s updated", training_uuid)
        except DBAPIError as e:
            raise translate_db_error(e) from e

    async def all_trainings(self) -> list[TrainingView]:
        return await self._list(
            select(TrainingRecord)
            .where(TrainingRecord.canceled.is_(False))
            .order_by(TrainingRecord.training_time, TrainingRecord.id)
        )

    async def find_trainings_for_user(self, user_uuid: str) -> list[TrainingView]:
        return await self._list(
            select(TrainingRecord)
            .where(TrainingRecord.user_id == user_uuid, TrainingRecord.canceled.is_(False))
            .order_by(TrainingRecord.training_time, TrainingRecord.id)
        )

    async def _list(self, stmt) -> list[TrainingView]:
        try:
            async with self.session_factory() as session:
                res = await session.execute(stmt)
                rows = res.scalars().all()
        except DBAPIError as e:
            raise translate_db_error(e) from e
        return [training_view(_to_domain(r)) for r in rows]
