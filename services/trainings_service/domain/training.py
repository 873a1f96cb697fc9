"""
Training: one booked session and its reschedule negotiation.

A pending reschedule is the pair (proposed_new_time, move_proposed_by); both
are set together by propose_reschedule and cleared together by approve or
reject. A canceled training is terminal.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from shared.errors import AuthorizationError, DomainConflictError, ValidationError

MAX_NOTES_LENGTH = 1000
FREE_CANCELLATION_WINDOW = timedelta(hours=24)


class UserType(str, Enum):
    TRAINER = "trainer"
    ATTENDEE = "attendee"


def user_type_from_string(value: str) -> UserType:
    try:
        return UserType(value)
    except ValueError:
        raise ValidationError(f"unknown user type: {value!r}", "invalid-user-type")


@dataclass(frozen=True)
class User:
    uuid: str
    user_type: UserType


class TrainingAlreadyCanceledError(DomainConflictError):
    default_slug = "training-already-canceled"

    def __init__(self):
        super().__init__("training is already canceled")


class CantRescheduleBeforeTimeError(DomainConflictError):
    default_slug = "cant-reschedule-before-time"

    def __init__(self, training_time: datetime):
        self.training_time = training_time
        super().__init__(
            f"can't reschedule training, not enough time before, training time: {training_time.isoformat()}"
        )


class NoRescheduleRequestedError(DomainConflictError):
    default_slug = "no-reschedule-requested"

    def __init__(self):
        super().__init__("no training reschedule was requested yet")


class SameUserTypeApprovalError(DomainConflictError):
    default_slug = "same-user-type-approval"

    def __init__(self, user_type: UserType):
        super().__init__(
            f"cannot approve reschedule by the same user type that proposed it: {user_type.value}"
        )


class ForbiddenToSeeTrainingError(AuthorizationError):
    default_slug = "user-cannot-see-training"

    def __init__(self, requesting_user_uuid: str, training_owner_uuid: str):
        super().__init__(
            f"user '{requesting_user_uuid}' can't see user '{training_owner_uuid}' training"
        )


class NotesTooLongError(ValidationError):
    default_slug = "notes-too-long"

    def __init__(self, length: int):
        super().__init__(f"notes too long, max {MAX_NOTES_LENGTH} characters, provided {length}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _validate_notes(notes: str) -> None:
    if len(notes) > MAX_NOTES_LENGTH:
        raise NotesTooLongError(len(notes))


class Training:
    def __init__(self, uuid: str, user_uuid: str, user_name: str, time: datetime, notes: str = ""):
        if not uuid:
            raise ValidationError("empty training uuid", "empty-training-uuid")
        if not user_uuid:
            raise ValidationError("empty user uuid", "empty-user-uuid")
        if not user_name:
            raise ValidationError("empty user name", "empty-user-name")
        if time is None:
            raise ValidationError("zero training time", "empty-training-time")
        notes = notes or ""
        _validate_notes(notes)

        self.uuid = uuid
        self.user_uuid = user_uuid
        self.user_name = user_name
        self._time = _as_utc(time)
        self._notes = notes
        self._canceled = False
        self._proposed_new_time: datetime | None = None
        self._move_proposed_by: UserType | None = None

    @classmethod
    def unmarshal_from_database(
        cls,
        uuid: str,
        user_uuid: str,
        user_name: str,
        time: datetime,
        notes: str,
        canceled: bool,
        proposed_new_time: datetime | None,
        move_proposed_by: UserType | None,
    ) -> "Training":
        tr = cls.__new__(cls)
        tr.uuid = uuid
        tr.user_uuid = user_uuid
        tr.user_name = user_name
        tr._time = _as_utc(time)
        tr._notes = notes or ""
        tr._canceled = bool(canceled)
        if proposed_new_time is not None and move_proposed_by is not None:
            tr._proposed_new_time = _as_utc(proposed_new_time)
            tr._move_proposed_by = move_proposed_by
        else:
            tr._proposed_new_time = None
            tr._move_proposed_by = None
        return tr

    @property
    def time(self) -> datetime:
        return self._time

    @property
    def notes(self) -> str:
        return self._notes

    @property
    def proposed_new_time(self) -> datetime | None:
        return self._proposed_new_time

    @property
    def move_proposed_by(self) -> UserType | None:
        return self._move_proposed_by

    def is_canceled(self) -> bool:
        return self._canceled

    def _ensure_not_canceled(self) -> None:
        if self._canceled:
            raise TrainingAlreadyCanceledError()

    def can_be_canceled_for_free(self, now: datetime | None = None) -> bool:
        now = _as_utc(now) if now is not None else _utcnow()
        return self._time - now >= FREE_CANCELLATION_WINDOW

    def cancel(self) -> None:
        self._ensure_not_canceled()
        self._canceled = True

    def update_notes(self, notes: str) -> None:
        self._ensure_not_canceled()
        notes = notes or ""
        _validate_notes(notes)
        self._notes = notes

    def reschedule_training(self, new_time: datetime, now: datetime | None = None) -> None:
        self._ensure_not_canceled()
        if not self.can_be_canceled_for_free(now):
            raise CantRescheduleBeforeTimeError(self._time)
        self._time = _as_utc(new_time)

    def propose_reschedule(self, new_time: datetime, proposer_type: UserType) -> None:
        self._ensure_not_canceled()
        self._proposed_new_time = _as_utc(new_time)
        self._move_proposed_by = proposer_type

    def is_reschedule_proposed(self) -> bool:
        return self._proposed_new_time is not None and self._move_proposed_by is not None

    def approve_reschedule(self, approver_type: UserType) -> None:
        self._ensure_not_canceled()
        if not self.is_reschedule_proposed():
            raise NoRescheduleRequestedError()
        if self._move_proposed_by == approver_type:
            raise SameUserTypeApprovalError(approver_type)

        self._time = self._proposed_new_time
        self._clear_proposal()

    def reject_reschedule(self) -> None:
        self._ensure_not_canceled()
        if not self.is_reschedule_proposed():
            raise NoRescheduleRequestedError()
        self._clear_proposal()

    def _clear_proposal(self) -> None:
        self._proposed_new_time = None
        self._move_proposed_by = None

    def __repr__(self) -> str:
        return (
            f"Training(uuid={self.uuid}, user_uuid={self.user_uuid}, time={self._time.isoformat()}, "
            f"canceled={self._canceled}, proposed_new_time={self._proposed_new_time})"
        )


def can_user_see_training(user: User, training: Training) -> None:
    if user.user_type == UserType.TRAINER:
        return
    if user.uuid == training.user_uuid:
        return
    raise ForbiddenToSeeTrainingError(user.uuid, training.user_uuid)


def cancel_balance_delta(training: Training, canceling_user_type: UserType, now: datetime | None = None) -> int:
    """
    Credits returned to the attendee when a training is canceled.

    Inside the free window the credit comes back. Later than that the trainer
    pays a penalty of one extra credit, while an attendee loses the credit.
    """
    if training.can_be_canceled_for_free(now):
        return 1
    if canceling_user_type == UserType.TRAINER:
        return 2
    if canceling_user_type == UserType.ATTENDEE:
        return 0
    raise ValidationError(f"unsupported user type {canceling_user_type!r}", "invalid-user-type")
