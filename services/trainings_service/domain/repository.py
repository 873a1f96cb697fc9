from typing import Awaitable, Callable, Protocol

from shared.errors import NotFoundError

from .training import Training, User

UpdateTrainingFn = Callable[[Training], Awaitable[Training]]


class TrainingNotFoundError(NotFoundError):
    default_slug = "training-not-found"

    def __init__(self, training_uuid: str):
        self.training_uuid = training_uuid
        super().__init__(f"training '{training_uuid}' not found")


class TrainingRepository(Protocol):
    async def add_training(self, training: Training) -> None: ...

    async def get_training(self, training_uuid: str, user: User) -> Training: ...

    async def update_training(self, training_uuid: str, user: User, update_fn: UpdateTrainingFn) -> None:
        """
        Locks the training, checks that `user` may see it, then awaits
        `update_fn`. Nothing is persisted when `update_fn` raises.
        """
        ...
