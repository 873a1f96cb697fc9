from dataclasses import dataclass, field
from datetime import datetime

from shared.decorator import apply_command_decorators
from shared.errors import wrap_error

from .domain.hour import Hour
from .domain.repository import HourRepository


@dataclass(frozen=True)
class ScheduleTraining:
    hour: datetime


@dataclass(frozen=True)
class CancelTraining:
    hour: datetime


@dataclass(frozen=True)
class MoveTraining:
    new_time: datetime
    original_time: datetime


@dataclass(frozen=True)
class MakeHoursAvailable:
    hours: list[datetime] = field(default_factory=list)


@dataclass(frozen=True)
class MakeHoursUnavailable:
    hours: list[datetime] = field(default_factory=list)


@dataclass(frozen=True)
class DeleteHour:
    hour: datetime


def _schedule(h: Hour) -> Hour:
    h.schedule_training()
    return h


def _cancel(h: Hour) -> Hour:
    h.cancel_training()
    return h


def _make_available(h: Hour) -> Hour:
    h.make_available()
    return h


def _make_not_available(h: Hour) -> Hour:
    h.make_not_available()
    return h


class _HourCommandHandler:
    def __init__(self, hour_repo: HourRepository):
        if hour_repo is None:
            raise ValueError("nil hour_repo")
        self.hour_repo = hour_repo


class ScheduleTrainingHandler(_HourCommandHandler):
    async def handle(self, cmd: ScheduleTraining) -> None:
        await self.hour_repo.update_hour(cmd.hour, _schedule)


class CancelTrainingHandler(_HourCommandHandler):
    async def handle(self, cmd: CancelTraining) -> None:
        await self.hour_repo.update_hour(cmd.hour, _cancel)


class MoveTrainingHandler(_HourCommandHandler):
    """
    Claims the new hour first, then frees the original one.

    The two hours are locked one after another, never together. When freeing
    the original hour fails, the new hour stays claimed and the error is
    reported to the caller.
    """

    async def handle(self, cmd: MoveTraining) -> None:
        await self.hour_repo.update_hour(cmd.new_time, _schedule)
        try:
            await self.hour_repo.update_hour(cmd.original_time, _cancel)
        except Exception as e:
            raise wrap_error(
                e,
                f"new hour {cmd.new_time.isoformat()} scheduled, but unable to free {cmd.original_time.isoformat()}",
                "move-training-cancel-failed",
            ) from e


class MakeHoursAvailableHandler(_HourCommandHandler):
    async def handle(self, cmd: MakeHoursAvailable) -> None:
        # one transaction per hour
        for hour in cmd.hours:
            await self.hour_repo.update_hour(hour, _make_available)


class MakeHoursUnavailableHandler(_HourCommandHandler):
    async def handle(self, cmd: MakeHoursUnavailable) -> None:
        for hour in cmd.hours:
            await self.hour_repo.update_hour(hour, _make_not_available)


class DeleteHourHandler(_HourCommandHandler):
    async def handle(self, cmd: DeleteHour) -> None:
        await self.hour_repo.delete_hour(cmd.hour)


def new_schedule_training_handler(hour_repo, logger):
    return apply_command_decorators(ScheduleTrainingHandler(hour_repo), logger)


def new_cancel_training_handler(hour_repo, logger):
    return apply_command_decorators(CancelTrainingHandler(hour_repo), logger)


def new_move_training_handler(hour_repo, logger):
    return apply_command_decorators(MoveTrainingHandler(hour_repo), logger)


def new_make_hours_available_handler(hour_repo, logger):
    return apply_command_decorators(MakeHoursAvailableHandler(hour_repo), logger)


def new_make_hours_unavailable_handler(hour_repo, logger):
    return apply_command_decorators(MakeHoursUnavailableHandler(hour_repo), logger)


def new_delete_hour_handler(hour_repo, logger):
    return apply_command_decorators(DeleteHourHandler(hour_repo), logger)
