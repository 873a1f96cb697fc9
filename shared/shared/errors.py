class SlugError(Exception):
    """
    Base error carrying a stable machine-readable slug.

    Kinds (subclasses below) decide how the error is rendered over HTTP:
      - ValidationError      -> 400, never retried
      - AuthorizationError   -> 403
      - NotFoundError        -> 404
      - DomainConflictError  -> 409, caller must pick different input
      - InfrastructureError  -> 503, may be retried with backoff
    """

    status_code = 500
    default_slug = "internal-error"

    def __init__(self, message: str, slug: str | None = None):
        super().__init__(message)
        self.message = message
        self.slug = slug or self.default_slug

    def __str__(self) -> str:
        return self.message


class ValidationError(SlugError):
    status_code = 400
    default_slug = "incorrect-input"


class AuthorizationError(SlugError):
    status_code = 403
    default_slug = "forbidden"


class NotFoundError(SlugError):
    status_code = 404
    default_slug = "not-found"


class DomainConflictError(SlugError):
    status_code = 409
    default_slug = "conflict"


class InfrastructureError(SlugError):
    status_code = 503
    default_slug = "infrastructure-error"
    retryable = True


# ---- storage-level kinds ----

class ConflictError(DomainConflictError):
    default_slug = "entity-already-exists"


class ForeignKeyViolationError(DomainConflictError):
    default_slug = "foreign-key-violation"


class CheckViolationError(ValidationError):
    default_slug = "check-violation"


class LockTimeoutError(InfrastructureError):
    default_slug = "lock-timeout"


class DeadlockError(InfrastructureError):
    default_slug = "deadlock-detected"


class ConnectionFailedError(InfrastructureError):
    default_slug = "database-connection-failed"


ERROR_KINDS = (
    ValidationError,
    AuthorizationError,
    NotFoundError,
    DomainConflictError,
    InfrastructureError,
)

_KIND_BY_STATUS = {kind.status_code: kind for kind in ERROR_KINDS}


def error_kind(err: Exception) -> type[SlugError]:
    if isinstance(err, SlugError):
        for cls in type(err).__mro__:
            if cls in ERROR_KINDS:
                return cls
    return InfrastructureError


def wrap_error(err: Exception, context: str, slug: str) -> SlugError:
    """Prefix `err` with `context` without changing its kind."""
    kind = error_kind(err)
    return kind(f"{context}: {err}", slug)


def kind_for_status(status_code: int) -> type[SlugError]:
    if status_code in _KIND_BY_STATUS:
        return _KIND_BY_STATUS[status_code]
    if status_code == 401:
        return AuthorizationError
    if 400 <= status_code < 500:
        return ValidationError
    return InfrastructureError
