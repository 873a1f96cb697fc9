import logging

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError

from shared.db_errors import translate_db_error

from ..domain.user import InsufficientBalanceError, User, UserNotFoundError
from ..models import UserRecord


def _to_domain(row: UserRecord) -> User:
    return User(
        uuid=row.id,
        user_type=row.user_type,
        name=row.name,
        email=row.email,
        balance=row.balance,
        last_ip=row.last_ip,
    )


class SqlAlchemyUserRepository:
    def __init__(self, session_factory, logger: logging.Logger):
        self.session_factory = session_factory
        self.logger = logger

    async def create_user(self, user: User) -> None:
        row = UserRecord(
            id=user.uuid,
            user_type=user.user_type,
            name=user.name,
            email=user.email,
            balance=user.balance,
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(row)
        except DBAPIError as e:
            raise translate_db_error(e) from e

    async def get_user(self, user_uuid: str) -> User:
        try:
            async with self.session_factory() as session:
                res = await session.execute(select(UserRecord).where(UserRecord.id == user_uuid))
                row = res.scalar_one_or_none()
        except DBAPIError as e:
            raise translate_db_error(e) from e

        if row is None:
            raise UserNotFoundError(user_uuid)
        return _to_domain(row)

    async def update_training_balance(self, user_uuid: str, amount_change: int) -> int:
        """
        Applies `balance = balance + amount_change` in one statement, refusing
        any change that would leave the balance below zero. Returns the new
        balance.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    res = await session.execute(
                        update(UserRecord)
                        .where(
                            UserRecord.id == user_uuid,
                            UserRecord.balance + amount_change >= 0,
                        )
                        .values(balance=UserRecord.balance + amount_change)
                        .returning(UserRecord.balance)
                        .execution_options(synchronize_session=False)
                    )
                    new_balance = res.scalar_one_or_none()

                    if new_balance is None:
                        exists = await session.execute(select(UserRecord.id).where(UserRecord.id == user_uuid))
                        if exists.scalar_one_or_none() is None:
                            raise UserNotFoundError(user_uuid)
                        raise InsufficientBalanceError(user_uuid, amount_change)
        except DBAPIError as e:
            raise translate_db_error(e) from e

        self.logger.debug("balance of %s changed by %d to %d", user_uuid, amount_change, new_balance)
        return new_balance

    async def update_last_ip(self, user_uuid: str, ip: str) -> None:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    res = await session.execute(
                        update(UserRecord)
                        .where(UserRecord.id == user_uuid)
                        .values(last_ip=ip)
                        .execution_options(synchronize_session=False)
                    )
                    if res.rowcount == 0:
                        raise UserNotFoundError(user_uuid)
        except DBAPIError as e:
            raise translate_db_error(e) from e
