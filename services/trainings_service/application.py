import logging
from dataclasses import dataclass

from shared.breaker import CircuitBreaker
from shared.database import get_engine, get_session
from shared.rabbitmq import RabbitPublisher
from shared.redis_client import create_redis

from . import commands, queries
from .adapters.trainer_client import TrainerHttpClient
from .adapters.training_repository import SqlAlchemyTrainingRepository
from .adapters.users_client import UsersHttpClient
from .config import Settings


@dataclass
class Commands:
    schedule_training: object
    cancel_training: object
    reschedule_training: object
    request_training_reschedule: object
    approve_training_reschedule: object
    reject_training_reschedule: object


@dataclass
class Queries:
    all_trainings: object
    trainings_for_user: object


@dataclass
class Application:
    commands: Commands
    queries: Queries


def build_application(repo, user_service, trainer_service, publisher, logger: logging.Logger) -> Application:
    return Application(
        commands=Commands(
            schedule_training=commands.new_schedule_training_handler(
                repo, user_service, trainer_service, publisher, logger
            ),
            cancel_training=commands.new_cancel_training_handler(
                repo, user_service, trainer_service, publisher, logger
            ),
            reschedule_training=commands.new_reschedule_training_handler(
                repo, user_service, trainer_service, publisher, logger
            ),
            request_training_reschedule=commands.new_request_training_reschedule_handler(repo, publisher, logger),
            approve_training_reschedule=commands.new_approve_training_reschedule_handler(
                repo, user_service, trainer_service, publisher, logger
            ),
            reject_training_reschedule=commands.new_reject_training_reschedule_handler(repo, publisher, logger),
        ),
        queries=Queries(
            all_trainings=queries.new_all_trainings_handler(repo, logger),
            trainings_for_user=queries.new_trainings_for_user_handler(repo, logger),
        ),
    )


@dataclass
class Resources:
    engine: object
    redis: object
    publisher: RabbitPublisher


def new_application(settings: Settings, logger: logging.Logger):
    """Wires the production adapters. Returns the application and what to close on shutdown."""
    engine = get_engine(settings.database_url, echo=settings.db_echo)
    repo = SqlAlchemyTrainingRepository(
        get_session(engine), logger, lock_timeout_seconds=settings.training_lock_timeout_seconds
    )

    redis_client = create_redis(settings.redis_url)
    trainer_breaker = None
    users_breaker = None
    if redis_client is not None:
        trainer_breaker = CircuitBreaker(
            redis_client,
            "trainer-service",
            failure_threshold=settings.breaker_failure_threshold,
            reset_timeout_seconds=settings.breaker_reset_timeout_seconds,
        )
        users_breaker = CircuitBreaker(
            redis_client,
            "users-service",
            failure_threshold=settings.breaker_failure_threshold,
            reset_timeout_seconds=settings.breaker_reset_timeout_seconds,
        )

    trainer_client = TrainerHttpClient(
        settings.trainer_service_url, breaker=trainer_breaker, timeout=settings.rpc_timeout_seconds
    )
    users_client = UsersHttpClient(
        settings.users_service_url, breaker=users_breaker, timeout=settings.rpc_timeout_seconds
    )
    publisher = RabbitPublisher(settings.rabbit_url, logger)

    app = build_application(repo, users_client, trainer_client, publisher, logger)
    return app, Resources(engine=engine, redis=redis_client, publisher=publisher)
