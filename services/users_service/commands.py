from dataclasses import dataclass
from typing import Protocol

from shared.decorator import apply_command_decorators
from shared.idempotency import IdempotencyStore

from .domain.user import User


class UserRepository(Protocol):
    async def create_user(self, user: User) -> None: ...

    async def get_user(self, user_uuid: str) -> User: ...

    async def update_training_balance(self, user_uuid: str, amount_change: int) -> int: ...

    async def update_last_ip(self, user_uuid: str, ip: str) -> None: ...


@dataclass(frozen=True)
class UpdateTrainingBalance:
    user_uuid: str
    amount_change: int
    idempotency_key: str | None = None


@dataclass(frozen=True)
class CreateUser:
    user_uuid: str
    user_type: str
    name: str
    email: str | None = None
    balance: int = 0


@dataclass(frozen=True)
class UpdateLastIp:
    user_uuid: str
    ip: str


class UpdateTrainingBalanceHandler:
    """
    Balance changes keyed by an idempotency key are applied once; a repeated
    key is acknowledged without touching the balance. The key is claimed
    before the balance changes and given back when the change fails. Keys are
    only tracked when Redis is configured.
    """

    def __init__(self, repo: UserRepository, idempotency: IdempotencyStore | None = None):
        if repo is None:
            raise ValueError("nil repo")
        self.repo = repo
        self.idempotency = idempotency

    async def handle(self, cmd: UpdateTrainingBalance) -> None:
        key = cmd.idempotency_key if self.idempotency is not None else None
        if key and not await self.idempotency.claim(key):
            return

        try:
            await self.repo.update_training_balance(cmd.user_uuid, cmd.amount_change)
        except Exception:
            if key:
                await self.idempotency.release(key)
            raise


class CreateUserHandler:
    def __init__(self, repo: UserRepository):
        if repo is None:
            raise ValueError("nil repo")
        self.repo = repo

    async def handle(self, cmd: CreateUser) -> None:
        user = User(
            uuid=cmd.user_uuid,
            user_type=cmd.user_type,
            name=cmd.name,
            email=cmd.email,
            balance=cmd.balance,
        )
        await self.repo.create_user(user)


class UpdateLastIpHandler:
    def __init__(self, repo: UserRepository):
        if repo is None:
            raise ValueError("nil repo")
        self.repo = repo

    async def handle(self, cmd: UpdateLastIp) -> None:
        await self.repo.update_last_ip(cmd.user_uuid, cmd.ip)


def new_update_training_balance_handler(repo, idempotency, logger):
    return apply_command_decorators(UpdateTrainingBalanceHandler(repo, idempotency), logger)


def new_create_user_handler(repo, logger):
    return apply_command_decorators(CreateUserHandler(repo), logger)


def new_update_last_ip_handler(repo, logger):
    return apply_command_decorators(UpdateLastIpHandler(repo), logger)
