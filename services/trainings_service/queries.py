from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from shared.decorator import apply_query_decorators
from shared.errors import AuthorizationError

from .domain.training import Training, User, UserType


@dataclass
class TrainingView:
    uuid: str
    user_uuid: str
    user: str
    time: datetime
    notes: str
    can_be_cancelled: bool
    proposed_time: datetime | None = None
    move_proposed_by: str | None = None


def training_view(tr: Training, now: datetime | None = None) -> TrainingView:
    return TrainingView(
        uuid=tr.uuid,
        user_uuid=tr.user_uuid,
        user=tr.user_name,
        time=tr.time,
        notes=tr.notes,
        can_be_cancelled=tr.can_be_canceled_for_free(now),
        proposed_time=tr.proposed_new_time,
        move_proposed_by=tr.move_proposed_by.value if tr.move_proposed_by else None,
    )


class AllTrainingsReadModel(Protocol):
    async def all_trainings(self) -> list[TrainingView]: ...


class TrainingsForUserReadModel(Protocol):
    async def find_trainings_for_user(self, user_uuid: str) -> list[TrainingView]: ...


@dataclass(frozen=True)
class AllTrainings:
    user: User


@dataclass(frozen=True)
class TrainingsForUser:
    user: User


class AllTrainingsHandler:
    def __init__(self, read_model: AllTrainingsReadModel):
        if read_model is None:
            raise ValueError("nil read_model")
        self.read_model = read_model

    async def handle(self, query: AllTrainings) -> list[TrainingView]:
        if query.user.user_type != UserType.TRAINER:
            raise AuthorizationError("only trainers can list all trainings", "user-is-not-trainer")
        return await self.read_model.all_trainings()


class TrainingsForUserHandler:
    def __init__(self, read_model: TrainingsForUserReadModel):
        if read_model is None:
            raise ValueError("nil read_model")
        self.read_model = read_model

    async def handle(self, query: TrainingsForUser) -> list[TrainingView]:
        return await self.read_model.find_trainings_for_user(query.user.uuid)


def new_all_trainings_handler(read_model, logger):
    return apply_query_decorators(AllTrainingsHandler(read_model), logger)


def new_trainings_for_user_handler(read_model, logger):
    return apply_query_decorators(TrainingsForUserHandler(read_model), logger)
