from dataclasses import dataclass

from shared.errors import DomainConflictError, NotFoundError, ValidationError

USER_TYPES = ("trainer", "attendee")


@dataclass
class User:
    uuid: str
    user_type: str
    name: str
    email: str | None = None
    balance: int = 0
    last_ip: str | None = None

    def __post_init__(self):
        if not self.uuid:
            raise ValidationError("empty user uuid", "empty-user-uuid")
        if self.user_type not in USER_TYPES:
            raise ValidationError(f"unknown user type: {self.user_type!r}", "invalid-user-type")
        if not self.name:
            raise ValidationError("empty user name", "empty-user-name")
        if self.balance < 0:
            raise ValidationError("balance cannot be negative", "negative-balance")


class UserNotFoundError(NotFoundError):
    default_slug = "user-not-found"

    def __init__(self, user_uuid: str):
        super().__init__(f"user '{user_uuid}' not found")


class InsufficientBalanceError(DomainConflictError):
    default_slug = "insufficient-balance"

    def __init__(self, user_uuid: str, amount_change: int):
        super().__init__(f"balance of user '{user_uuid}' is too low to apply {amount_change}")
