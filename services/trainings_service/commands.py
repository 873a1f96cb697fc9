from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from shared.decorator import apply_command_decorators
from shared.errors import wrap_error
from shared.events import publish_event

from .domain.repository import TrainingRepository
from .domain.training import Training, User, cancel_balance_delta

EVENT_SOURCE = "trainings-service"


class UserService(Protocol):
    async def update_training_balance(
        self, user_uuid: str, amount_change: int, idempotency_key: str | None = None
    ) -> None: ...


class TrainerService(Protocol):
    async def schedule_training(self, training_time: datetime) -> None: ...

    async def cancel_training(self, training_time: datetime) -> None: ...

    async def move_training(self, new_time: datetime, original_time: datetime) -> None: ...


class EventPublisher(Protocol):
    async def publish(self, routing_key: str, message_body: str): ...


@dataclass(frozen=True)
class ScheduleTraining:
    training_uuid: str
    user_uuid: str
    user_name: str
    training_time: datetime
    notes: str = ""


@dataclass(frozen=True)
class CancelTraining:
    training_uuid: str
    user: User


@dataclass(frozen=True)
class RescheduleTraining:
    training_uuid: str
    new_time: datetime
    user: User
    new_notes: str = ""


@dataclass(frozen=True)
class RequestTrainingReschedule:
    training_uuid: str
    new_time: datetime
    user: User
    new_notes: str = ""


@dataclass(frozen=True)
class ApproveTrainingReschedule:
    training_uuid: str
    user: User


@dataclass(frozen=True)
class RejectTrainingReschedule:
    training_uuid: str
    user: User


def schedule_key(training_uuid: str) -> str:
    return f"{training_uuid}:schedule"


def cancel_key(training_uuid: str) -> str:
    return f"{training_uuid}:cancel"


def training_event_data(tr: Training) -> dict:
    return {
        "training_uuid": tr.uuid,
        "user_uuid": tr.user_uuid,
        "time": tr.time.isoformat(),
        "proposed_new_time": tr.proposed_new_time.isoformat() if tr.proposed_new_time else None,
        "move_proposed_by": tr.move_proposed_by.value if tr.move_proposed_by else None,
    }


class _TrainingCommandHandler:
    def __init__(self, repo: TrainingRepository, publisher: EventPublisher | None = None):
        if repo is None:
            raise ValueError("nil repo")
        self.repo = repo
        self.publisher = publisher

    async def _publish(self, event_type: str, tr: Training) -> None:
        await publish_event(self.publisher, event_type, training_event_data(tr), EVENT_SOURCE)


class _CrossContextHandler(_TrainingCommandHandler):
    def __init__(
        self,
        repo: TrainingRepository,
        user_service: UserService,
        trainer_service: TrainerService,
        publisher: EventPublisher | None = None,
    ):
        super().__init__(repo, publisher)
        if user_service is None:
            raise ValueError("nil user_service")
        if trainer_service is None:
            raise ValueError("nil trainer_service")
        self.user_service = user_service
        self.trainer_service = trainer_service


class ScheduleTrainingHandler(_CrossContextHandler):
    """
    Persists the training, debits one credit, then claims the trainer hour.

    The three steps are not one transaction. A failing step leaves the earlier
    ones applied and reports the failure; the balance debit is keyed by the
    training uuid so a retried request is charged once.
    """

    async def handle(self, cmd: ScheduleTraining) -> None:
        tr = Training(cmd.training_uuid, cmd.user_uuid, cmd.user_name, cmd.training_time, cmd.notes)

        try:
            await self.repo.add_training(tr)
        except Exception as e:
            raise wrap_error(e, "unable to add training", "add-training-failed") from e

        try:
            await self.user_service.update_training_balance(tr.user_uuid, -1, schedule_key(tr.uuid))
        except Exception as e:
            raise wrap_error(e, "unable to change trainings balance", "update-balance-failed") from e

        try:
            await self.trainer_service.schedule_training(tr.time)
        except Exception as e:
            raise wrap_error(e, "unable to schedule training", "schedule-training-failed") from e

        await self._publish("training.scheduled", tr)


class CancelTrainingHandler(_CrossContextHandler):
    """
    Frees the trainer hour, then refunds the attendee.

    The refund only runs once the hour is freed, so a cancel rejected by the
    trainer context never touches the balance however often it is retried.
    """

    async def handle(self, cmd: CancelTraining) -> None:
        canceled = None

        async def update(tr: Training) -> Training:
            nonlocal canceled
            tr.cancel()
            delta = cancel_balance_delta(tr, cmd.user.user_type)

            try:
                await self.trainer_service.cancel_training(tr.time)
            except Exception as e:
                raise wrap_error(e, "unable to cancel training", "cancel-training-failed") from e

            if delta != 0:
                try:
                    await self.user_service.update_training_balance(tr.user_uuid, delta, cancel_key(tr.uuid))
                except Exception as e:
                    raise wrap_error(e, "unable to change trainings balance", "update-balance-failed") from e

            canceled = tr
            return tr

        await self.repo.update_training(cmd.training_uuid, cmd.user, update)
        await self._publish("training.canceled", canceled)


class RescheduleTrainingHandler(_CrossContextHandler):
    async def handle(self, cmd: RescheduleTraining) -> None:
        rescheduled = None

        async def update(tr: Training) -> Training:
            nonlocal rescheduled
            original_time = tr.time

            tr.update_notes(cmd.new_notes)
            tr.reschedule_training(cmd.new_time)

            try:
                await self.trainer_service.move_training(tr.time, original_time)
            except Exception as e:
                raise wrap_error(e, "unable to move training", "move-training-failed") from e

            rescheduled = tr
            return tr

        await self.repo.update_training(cmd.training_uuid, cmd.user, update)
        await self._publish("training.rescheduled", rescheduled)


class RequestTrainingRescheduleHandler(_TrainingCommandHandler):
    async def handle(self, cmd: RequestTrainingReschedule) -> None:
        proposed = None

        async def update(tr: Training) -> Training:
            nonlocal proposed
            tr.update_notes(cmd.new_notes)
            tr.propose_reschedule(cmd.new_time, cmd.user.user_type)
            proposed = tr
            return tr

        await self.repo.update_training(cmd.training_uuid, cmd.user, update)
        await self._publish("training.reschedule_requested", proposed)


class ApproveTrainingRescheduleHandler(_CrossContextHandler):
    async def handle(self, cmd: ApproveTrainingReschedule) -> None:
        approved = None

        async def update(tr: Training) -> Training:
            nonlocal approved
            original_time = tr.time

            tr.approve_reschedule(cmd.user.user_type)

            try:
                await self.trainer_service.move_training(tr.time, original_time)
            except Exception as e:
                raise wrap_error(e, "unable to move training", "move-training-failed") from e

            approved = tr
            return tr

        await self.repo.update_training(cmd.training_uuid, cmd.user, update)
        await self._publish("training.rescheduled", approved)


class RejectTrainingRescheduleHandler(_TrainingCommandHandler):
    async def handle(self, cmd: RejectTrainingReschedule) -> None:
        rejected = None

        async def update(tr: Training) -> Training:
            nonlocal rejected
            tr.reject_reschedule()
            rejected = tr
            return tr

        await self.repo.update_training(cmd.training_uuid, cmd.user, update)
        await self._publish("training.reschedule_rejected", rejected)


def new_schedule_training_handler(repo, user_service, trainer_service, publisher, logger):
    return apply_command_decorators(
        ScheduleTrainingHandler(repo, user_service, trainer_service, publisher), logger
    )


def new_cancel_training_handler(repo, user_service, trainer_service, publisher, logger):
    return apply_command_decorators(
        CancelTrainingHandler(repo, user_service, trainer_service, publisher), logger
    )


def new_reschedule_training_handler(repo, user_service, trainer_service, publisher, logger):
    return apply_command_decorators(
        RescheduleTrainingHandler(repo, user_service, trainer_service, publisher), logger
    )


def new_request_training_reschedule_handler(repo, publisher, logger):
    return apply_command_decorators(RequestTrainingRescheduleHandler(repo, publisher), logger)


def new_approve_training_reschedule_handler(repo, user_service, trainer_service, publisher, logger):
    return apply_command_decorators(
        ApproveTrainingRescheduleHandler(repo, user_service, trainer_service, publisher), logger
    )


def new_reject_training_reschedule_handler(repo, publisher, logger):
    return apply_command_decorators(RejectTrainingRescheduleHandler(repo, publisher), logger)
