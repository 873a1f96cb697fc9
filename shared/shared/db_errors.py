from sqlalchemy import exc as sa_exc

from .errors import (
    CheckViolationError,
    ConflictError,
    ConnectionFailedError,
    DeadlockError,
    ForeignKeyViolationError,
    InfrastructureError,
    LockTimeoutError,
    SlugError,
)

# https://www.postgresql.org/docs/current/errcodes-appendix.html
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"
PG_CHECK_VIOLATION = "23514"
PG_SERIALIZATION_FAILURE = "40001"
PG_DEADLOCK_DETECTED = "40P01"
PG_LOCK_NOT_AVAILABLE = "55P03"
PG_QUERY_CANCELED = "57014"

_CONNECTION_MARKERS = (
    "connection refused",
    "connection reset",
    "connection timeout",
    "connection is closed",
    "no such host",
    "network is unreachable",
)


def _sqlstate(err: sa_exc.DBAPIError) -> str | None:
    orig = err.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return str(code)
    return None


def translate_db_error(err: sa_exc.DBAPIError) -> SlugError:
    """
    Map a SQLAlchemy/DBAPI error to the shared error taxonomy.

    Unique violations become ConflictError, lock timeouts and deadlocks become
    retryable infrastructure errors, anything unrecognised stays infrastructure.
    """
    code = _sqlstate(err)
    detail = str(err.orig) if err.orig is not None else str(err)

    if code == PG_UNIQUE_VIOLATION:
        return ConflictError(f"entity already exists: {detail}")
    if code == PG_FOREIGN_KEY_VIOLATION:
        return ForeignKeyViolationError(f"foreign key constraint violation: {detail}")
    if code == PG_CHECK_VIOLATION:
        return CheckViolationError(f"check constraint violation: {detail}")
    if code in (PG_DEADLOCK_DETECTED, PG_SERIALIZATION_FAILURE):
        return DeadlockError(f"database deadlock detected: {detail}")
    if code in (PG_LOCK_NOT_AVAILABLE, PG_QUERY_CANCELED):
        return LockTimeoutError(f"timed out waiting for row lock: {detail}")

    if isinstance(err, sa_exc.IntegrityError):
        # sqlite and other drivers without SQLSTATE
        lowered = detail.lower()
        if "unique" in lowered:
            return ConflictError(f"entity already exists: {detail}")
        if "foreign key" in lowered:
            return ForeignKeyViolationError(f"foreign key constraint violation: {detail}")
        if "check" in lowered:
            return CheckViolationError(f"check constraint violation: {detail}")
        return ConflictError(f"integrity error: {detail}")

    if err.connection_invalidated or isinstance(err, (sa_exc.InterfaceError, sa_exc.OperationalError)):
        lowered = detail.lower()
        if "database is locked" in lowered:
            return LockTimeoutError(f"timed out waiting for row lock: {detail}")
        if err.connection_invalidated or any(m in lowered for m in _CONNECTION_MARKERS):
            return ConnectionFailedError(f"database connection failed: {detail}")

    return InfrastructureError(f"database error: {detail}", "database-error")
