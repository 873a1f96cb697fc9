import copy

from shared.errors import ConflictError
from shared.locks import KeyedLocks

from ..domain.repository import TrainingNotFoundError, UpdateTrainingFn
from ..domain.training import Training, User, can_user_see_training
from ..queries import TrainingView, training_view


class MemoryTrainingRepository:
    def __init__(self, lock_timeout_seconds: float = 5.0):
        self._trainings: dict[str, Training] = {}
        self._locks = KeyedLocks(lock_timeout_seconds)

    def __len__(self) -> int:
        return len(self._trainings)

    async def add_training(self, training: Training) -> None:
        if training.uuid in self._trainings:
            raise ConflictError(f"training '{training.uuid}' already exists")
        self._trainings[training.uuid] = copy.deepcopy(training)

    async def get_training(self, training_uuid: str, user: User) -> Training:
        tr = self._trainings.get(training_uuid)
        if tr is None:
            raise TrainingNotFoundError(training_uuid)
        can_user_see_training(user, tr)
        return copy.deepcopy(tr)

    async def update_training(self, training_uuid: str, user: User, update_fn: UpdateTrainingFn) -> None:
        async with self._locks.hold(training_uuid, f"training {training_uuid}"):
            current = self._trainings.get(training_uuid)
            if current is None:
                raise TrainingNotFoundError(training_uuid)
            can_user_see_training(user, current)

            # work on a copy so a failing update_fn leaves nothing behind
            updated = await update_fn(copy.deepcopy(current))
            self._trainings[training_uuid] = updated

    async def all_trainings(self) -> list[TrainingView]:
        return self._views(lambda tr: True)

    async def find_trainings_for_user(self, user_uuid: str) -> list[TrainingView]:
        return self._views(lambda tr: tr.user_uuid == user_uuid)

    def _views(self, predicate) -> list[TrainingView]:
        trainings = [
            tr for tr in self._trainings.values()
            if not tr.is_canceled() and predicate(tr)
        ]
        trainings.sort(key=lambda tr: (tr.time, tr.uuid))
        return [training_view(tr) for tr in trainings]
