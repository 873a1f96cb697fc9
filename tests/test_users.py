import asyncio
import logging

import pytest

from shared.errors import ConflictError, ValidationError
from shared.idempotency import IdempotencyStore
from users_service import commands, queries
from users_service.adapters.user_memory_repository import MemoryUserRepository
from users_service.adapters.user_repository import SqlAlchemyUserRepository
from users_service.domain.user import InsufficientBalanceError, User, UserNotFoundError

logger = logging.getLogger("test.users")


class _RedisStub:
    def __init__(self):
        self.values = {}

    async def set(self, key, value, nx=False, ex=None):
        await asyncio.sleep(0)
        if nx and key in self.values:
            return None
        self.values[key] = value
        return True

    async def delete(self, *keys):
        await asyncio.sleep(0)
        for key in keys:
            self.values.pop(key, None)


@pytest.fixture(params=["memory", "sql"])
def repo(request, users_db):
    if request.param == "memory":
        return MemoryUserRepository()
    return SqlAlchemyUserRepository(users_db, logger)


async def create_ann(repo, balance=5):
    await repo.create_user(User(uuid="attendee-1", user_type="attendee", name="Ann", balance=balance))


@pytest.mark.asyncio
async def test_create_and_get(repo):
    await create_ann(repo)

    user = await repo.get_user("attendee-1")
    assert user.name == "Ann"
    assert user.balance == 5
    assert user.user_type == "attendee"


@pytest.mark.asyncio
async def test_duplicate_user(repo):
    await create_ann(repo)
    with pytest.raises(ConflictError):
        await create_ann(repo)


@pytest.mark.asyncio
async def test_get_missing_user(repo):
    with pytest.raises(UserNotFoundError):
        await repo.get_user("nobody")


@pytest.mark.asyncio
async def test_balance_changes(repo):
    await create_ann(repo)

    assert await repo.update_training_balance("attendee-1", -1) == 4
    assert await repo.update_training_balance("attendee-1", 2) == 6
    assert (await repo.get_user("attendee-1")).balance == 6


@pytest.mark.asyncio
async def test_balance_never_drops_below_zero(repo):
    await create_ann(repo, balance=1)

    await repo.update_training_balance("attendee-1", -1)
    with pytest.raises(InsufficientBalanceError):
        await repo.update_training_balance("attendee-1", -1)

    assert (await repo.get_user("attendee-1")).balance == 0


@pytest.mark.asyncio
async def test_balance_of_missing_user(repo):
    with pytest.raises(UserNotFoundError):
        await repo.update_training_balance("nobody", 1)


@pytest.mark.asyncio
async def test_update_last_ip(repo):
    await create_ann(repo)
    await repo.update_last_ip("attendee-1", "10.0.0.7")

    assert (await repo.get_user("attendee-1")).last_ip == "10.0.0.7"
    with pytest.raises(UserNotFoundError):
        await repo.update_last_ip("nobody", "10.0.0.7")


@pytest.mark.asyncio
async def test_concurrent_debits_stop_at_zero():
    repo = MemoryUserRepository([User(uuid="attendee-1", user_type="attendee", name="Ann", balance=3)])

    results = await asyncio.gather(
        *(repo.update_training_balance("attendee-1", -1) for _ in range(5)),
        return_exceptions=True,
    )

    assert sum(1 for r in results if isinstance(r, InsufficientBalanceError)) == 2
    assert (await repo.get_user("attendee-1")).balance == 0


@pytest.mark.asyncio
async def test_balance_update_is_idempotent_per_key():
    repo = MemoryUserRepository([User(uuid="attendee-1", user_type="attendee", name="Ann", balance=5)])
    store = IdempotencyStore(_RedisStub(), "users-balance")
    handler = commands.new_update_training_balance_handler(repo, store, logger)

    cmd = commands.UpdateTrainingBalance("attendee-1", -1, "t-1:schedule")
    await handler.handle(cmd)
    await handler.handle(cmd)
    await handler.handle(commands.UpdateTrainingBalance("attendee-1", 1, "t-1:cancel"))

    assert (await repo.get_user("attendee-1")).balance == 5


@pytest.mark.asyncio
async def test_concurrent_balance_updates_with_same_key_apply_once():
    repo = MemoryUserRepository([User(uuid="attendee-1", user_type="attendee", name="Ann", balance=5)])
    handler = commands.new_update_training_balance_handler(repo, IdempotencyStore(_RedisStub(), "users-balance"), logger)

    cmd = commands.UpdateTrainingBalance("attendee-1", -1, "t-1:schedule")
    await asyncio.gather(handler.handle(cmd), handler.handle(cmd))

    assert (await repo.get_user("attendee-1")).balance == 4


@pytest.mark.asyncio
async def test_failed_balance_update_does_not_consume_key():
    repo = MemoryUserRepository([User(uuid="attendee-1", user_type="attendee", name="Ann", balance=0)])
    redis = _RedisStub()
    handler = commands.new_update_training_balance_handler(repo, IdempotencyStore(redis, "users-balance"), logger)

    with pytest.raises(InsufficientBalanceError):
        await handler.handle(commands.UpdateTrainingBalance("attendee-1", -1, "t-1:schedule"))
    assert redis.values == {}


@pytest.mark.asyncio
async def test_balance_update_without_idempotency_store():
    repo = MemoryUserRepository([User(uuid="attendee-1", user_type="attendee", name="Ann", balance=5)])
    handler = commands.new_update_training_balance_handler(repo, None, logger)

    cmd = commands.UpdateTrainingBalance("attendee-1", -1, "t-1:schedule")
    await handler.handle(cmd)
    await handler.handle(cmd)

    assert (await repo.get_user("attendee-1")).balance == 3


@pytest.mark.asyncio
async def test_create_user_and_get_user_handlers():
    repo = MemoryUserRepository()
    create = commands.new_create_user_handler(repo, logger)
    get = queries.new_get_user_handler(repo, logger)

    await create.handle(commands.CreateUser("trainer-1", "trainer", "Tom"))
    assert (await get.handle(queries.GetUser("trainer-1"))).name == "Tom"

    with pytest.raises(ValidationError):
        await create.handle(commands.CreateUser("x", "admin", "Eve"))
