import logging
from dataclasses import dataclass

from shared.database import get_engine, get_session
from shared.idempotency import IdempotencyStore
from shared.redis_client import create_redis

from . import commands, queries
from .adapters.user_repository import SqlAlchemyUserRepository
from .config import Settings


@dataclass
class Commands:
    update_training_balance: object
    create_user: object
    update_last_ip: object


@dataclass
class Queries:
    get_user: object


@dataclass
class Application:
    commands: Commands
    queries: Queries


def build_application(repo, idempotency, logger: logging.Logger) -> Application:
    return Application(
        commands=Commands(
            update_training_balance=commands.new_update_training_balance_handler(repo, idempotency, logger),
            create_user=commands.new_create_user_handler(repo, logger),
            update_last_ip=commands.new_update_last_ip_handler(repo, logger),
        ),
        queries=Queries(
            get_user=queries.new_get_user_handler(repo, logger),
        ),
    )


@dataclass
class Resources:
    engine: object
    redis: object


def new_application(settings: Settings, logger: logging.Logger):
    engine = get_engine(settings.database_url, echo=settings.db_echo)
    repo = SqlAlchemyUserRepository(get_session(engine), logger)

    redis_client = create_redis(settings.redis_url)
    idempotency = None
    if redis_client is not None:
        idempotency = IdempotencyStore(redis_client, "users-balance", ttl_seconds=settings.idempotency_ttl_seconds)
    else:
        logger.warning("REDIS_URL not set; balance updates are not deduplicated")

    return build_application(repo, idempotency, logger), Resources(engine=engine, redis=redis_client)
