import logging
from dataclasses import dataclass

from shared.database import get_engine, get_session

from . import commands, queries
from .adapters.hour_repository import SqlAlchemyHourRepository
from .config import Settings
from .domain.hour import FactoryConfig, HourFactory


@dataclass
class Commands:
    schedule_training: object
    cancel_training: object
    move_training: object
    make_hours_available: object
    make_hours_unavailable: object
    delete_hour: object


@dataclass
class Queries:
    hour_availability: object
    available_hours: object


@dataclass
class Application:
    commands: Commands
    queries: Queries


def factory_config(settings: Settings) -> FactoryConfig:
    return FactoryConfig(
        max_weeks_in_the_future_to_set=settings.max_weeks_in_the_future_to_set,
        min_utc_hour=settings.min_utc_hour,
        max_utc_hour=settings.max_utc_hour,
    )


def build_application(hour_repo, logger: logging.Logger) -> Application:
    return Application(
        commands=Commands(
            schedule_training=commands.new_schedule_training_handler(hour_repo, logger),
            cancel_training=commands.new_cancel_training_handler(hour_repo, logger),
            move_training=commands.new_move_training_handler(hour_repo, logger),
            make_hours_available=commands.new_make_hours_available_handler(hour_repo, logger),
            make_hours_unavailable=commands.new_make_hours_unavailable_handler(hour_repo, logger),
            delete_hour=commands.new_delete_hour_handler(hour_repo, logger),
        ),
        queries=Queries(
            hour_availability=queries.new_hour_availability_handler(hour_repo, logger),
            available_hours=queries.new_available_hours_handler(hour_repo, logger),
        ),
    )


def new_application(settings: Settings, logger: logging.Logger):
    """Returns the application and the engine to dispose on shutdown."""
    engine = get_engine(settings.database_url, echo=settings.db_echo)
    session_factory = get_session(engine)

    hour_factory = HourFactory(factory_config(settings))
    hour_repo = SqlAlchemyHourRepository(
        session_factory,
        hour_factory,
        logger,
        lock_timeout_seconds=settings.hour_lock_timeout_seconds,
    )
    return build_application(hour_repo, logger), engine
