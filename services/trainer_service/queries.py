from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Protocol

from shared.decorator import apply_query_decorators
from shared.errors import ValidationError

from .domain.hour import to_utc
from .domain.repository import HourRepository


@dataclass
class HourView:
    hour: datetime
    available: bool
    has_training_scheduled: bool


@dataclass
class DateView:
    date: date
    has_free_hours: bool = False
    hours: list[HourView] = field(default_factory=list)


class AvailableHoursReadModel(Protocol):
    async def available_hours(self, date_from: datetime, date_to: datetime) -> list[DateView]: ...


@dataclass(frozen=True)
class AvailableHours:
    date_from: datetime
    date_to: datetime


@dataclass(frozen=True)
class HourAvailability:
    hour: datetime


class AvailableHoursHandler:
    def __init__(self, read_model: AvailableHoursReadModel):
        if read_model is None:
            raise ValueError("nil read_model")
        self.read_model = read_model

    async def handle(self, query: AvailableHours) -> list[DateView]:
        date_from = to_utc(query.date_from)
        date_to = to_utc(query.date_to)
        if date_from > date_to:
            raise ValidationError("Date from after date to", "date-from-after-date-to")
        return await self.read_model.available_hours(date_from, date_to)


class HourAvailabilityHandler:
    def __init__(self, hour_repo: HourRepository):
        if hour_repo is None:
            raise ValueError("nil hour_repo")
        self.hour_repo = hour_repo

    async def handle(self, query: HourAvailability) -> bool:
        hour = await self.hour_repo.get_hour(query.hour)
        if hour is None:
            return False
        return hour.is_available()


def new_available_hours_handler(read_model, logger):
    return apply_query_decorators(AvailableHoursHandler(read_model), logger)


def new_hour_availability_handler(hour_repo, logger):
    return apply_query_decorators(HourAvailabilityHandler(hour_repo), logger)
