"""
Hour: one bookable trainer slot, keyed by its UTC timestamp.

Legal availability transitions:

    not_available --make_available-----> available
    available     --make_not_available-> not_available
    available     --schedule_training--> training_scheduled
    training_scheduled --cancel_training-> available

Anything else (same-state moves included) raises a DomainConflictError and
leaves the hour untouched, so callers must read before they write.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from shared.errors import DomainConflictError, ValidationError


class Availability(str, Enum):
    AVAILABLE = "available"
    NOT_AVAILABLE = "not_available"
    TRAINING_SCHEDULED = "training_scheduled"


def availability_from_string(value: str) -> Availability:
    try:
        return Availability(value)
    except ValueError:
        raise ValidationError(f"unknown availability: {value!r}", "invalid-availability")


# ---- transition errors ----

class TrainingScheduledError(DomainConflictError):
    default_slug = "hour-has-training-scheduled"

    def __init__(self):
        super().__init__("unable to modify hour, because scheduled training")


class NoTrainingScheduledError(DomainConflictError):
    default_slug = "no-training-scheduled"

    def __init__(self):
        super().__init__("training is not scheduled")


class HourNotAvailableError(DomainConflictError):
    default_slug = "hour-not-available"

    def __init__(self):
        super().__init__("hour is not available")


class HourAlreadyAvailableError(DomainConflictError):
    default_slug = "hour-already-available"

    def __init__(self):
        super().__init__("hour is already available")


class HourAlreadyNotAvailableError(DomainConflictError):
    default_slug = "hour-already-not-available"

    def __init__(self):
        super().__init__("hour is already not available")


# ---- creation errors ----

class NotFullHourError(ValidationError):
    default_slug = "not-full-hour"

    def __init__(self, provided: datetime):
        super().__init__(f"hour should be a full hour, provided: {provided.isoformat()}")


class PastHourError(ValidationError):
    default_slug = "past-hour"

    def __init__(self, provided: datetime):
        super().__init__(f"cannot create hour from the past: {provided.isoformat()}")


class TooDistantDateError(ValidationError):
    default_slug = "too-distant-date"

    def __init__(self, max_weeks: int, provided: datetime):
        self.max_weeks = max_weeks
        self.provided = provided
        super().__init__(
            f"schedule can be only set for next {max_weeks} weeks, provided date: {provided.isoformat()}"
        )


class TooEarlyHourError(ValidationError):
    default_slug = "too-early-hour"

    def __init__(self, min_utc_hour: int, provided: datetime):
        super().__init__(f"too early hour, min UTC hour: {min_utc_hour}, provided: {provided.isoformat()}")


class TooLateHourError(ValidationError):
    default_slug = "too-late-hour"

    def __init__(self, max_utc_hour: int, provided: datetime):
        super().__init__(f"too late hour, max UTC hour: {max_utc_hour}, provided: {provided.isoformat()}")


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Hour:
    def __init__(self, hour: datetime, availability: Availability):
        self._time = to_utc(hour)
        self._availability = availability

    @property
    def time(self) -> datetime:
        return self._time

    @property
    def availability(self) -> Availability:
        return self._availability

    def is_available(self) -> bool:
        return self._availability == Availability.AVAILABLE

    def has_training_scheduled(self) -> bool:
        return self._availability == Availability.TRAINING_SCHEDULED

    def make_available(self) -> None:
        if self.has_training_scheduled():
            raise TrainingScheduledError()
        if self.is_available():
            raise HourAlreadyAvailableError()
        self._availability = Availability.AVAILABLE

    def make_not_available(self) -> None:
        if self.has_training_scheduled():
            raise TrainingScheduledError()
        if self._availability == Availability.NOT_AVAILABLE:
            raise HourAlreadyNotAvailableError()
        self._availability = Availability.NOT_AVAILABLE

    def schedule_training(self) -> None:
        if not self.is_available():
            raise HourNotAvailableError()
        self._availability = Availability.TRAINING_SCHEDULED

    def cancel_training(self) -> None:
        if not self.has_training_scheduled():
            raise NoTrainingScheduledError()
        self._availability = Availability.AVAILABLE

    def __repr__(self) -> str:
        return f"Hour(time={self._time.isoformat()}, availability={self._availability.value})"


@dataclass(frozen=True)
class FactoryConfig:
    max_weeks_in_the_future_to_set: int = 6
    min_utc_hour: int = 12
    max_utc_hour: int = 20

    def validate(self) -> None:
        errors = []
        if self.max_weeks_in_the_future_to_set < 1:
            errors.append(
                f"max_weeks_in_the_future_to_set should be at least 1, but is {self.max_weeks_in_the_future_to_set}"
            )
        if not 0 <= self.min_utc_hour <= 24:
            errors.append(f"min_utc_hour should be value between 0 and 24, but is {self.min_utc_hour}")
        if not 0 <= self.max_utc_hour <= 24:
            errors.append(f"max_utc_hour should be value between 0 and 24, but is {self.max_utc_hour}")
        if self.min_utc_hour > self.max_utc_hour:
            errors.append(
                f"max_utc_hour ({self.max_utc_hour}) can't be before min_utc_hour ({self.min_utc_hour})"
            )
        if errors:
            raise ValueError("; ".join(errors))


class HourFactory:
    def __init__(self, config: FactoryConfig, clock=None):
        config.validate()
        self.config = config
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def now(self) -> datetime:
        return to_utc(self._clock())

    def new_available_hour(self, hour: datetime) -> Hour:
        hour = self._validate_time(hour)
        return Hour(hour, Availability.AVAILABLE)

    def new_not_available_hour(self, hour: datetime) -> Hour:
        hour = self._validate_time(hour)
        return Hour(hour, Availability.NOT_AVAILABLE)

    def unmarshal_hour_from_database(self, hour: datetime, availability: Availability) -> Hour:
        return Hour(hour, availability)

    def _validate_time(self, hour: datetime) -> datetime:
        if hour is None:
            raise ValidationError("hour time is required", "no-time")

        hour = to_utc(hour)
        if hour != hour.replace(minute=0, second=0, microsecond=0):
            raise NotFullHourError(hour)

        now = self.now()
        if hour > now + timedelta(weeks=self.config.max_weeks_in_the_future_to_set):
            raise TooDistantDateError(self.config.max_weeks_in_the_future_to_set, hour)

        current_hour = now.replace(minute=0, second=0, microsecond=0)
        if hour <= current_hour:
            raise PastHourError(hour)

        if hour.hour > self.config.max_utc_hour:
            raise TooLateHourError(self.config.max_utc_hour, hour)
        if hour.hour < self.config.min_utc_hour:
            raise TooEarlyHourError(self.config.min_utc_hour, hour)

        return hour
