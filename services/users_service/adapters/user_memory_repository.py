import copy

from shared.errors import ConflictError

from ..domain.user import InsufficientBalanceError, User, UserNotFoundError


class MemoryUserRepository:
    def __init__(self, users: list[User] | None = None):
        self._users: dict[str, User] = {u.uuid: copy.copy(u) for u in users or []}

    async def create_user(self, user: User) -> None:
        if user.uuid in self._users:
            raise ConflictError(f"user '{user.uuid}' already exists")
        self._users[user.uuid] = copy.copy(user)

    async def get_user(self, user_uuid: str) -> User:
        user = self._users.get(user_uuid)
        if user is None:
            raise UserNotFoundError(user_uuid)
        return copy.copy(user)

    async def update_training_balance(self, user_uuid: str, amount_change: int) -> int:
        user = self._users.get(user_uuid)
        if user is None:
            raise UserNotFoundError(user_uuid)
        if user.balance + amount_change < 0:
            raise InsufficientBalanceError(user_uuid, amount_change)
        user.balance += amount_change
        return user.balance

    async def update_last_ip(self, user_uuid: str, ip: str) -> None:
        user = self._users.get(user_uuid)
        if user is None:
            raise UserNotFoundError(user_uuid)
        user.last_ip = ip
