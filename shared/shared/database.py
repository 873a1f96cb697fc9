from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker


def get_engine(database_url: str, echo: bool = False, **kwargs):
    return create_async_engine(database_url, echo=echo, future=True, **kwargs)


def get_session(engine):
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False
    )


def dialect_name(session) -> str:
    return session.bind.dialect.name


async def set_lock_timeout(session, timeout_seconds: float) -> None:
    """Bounds row lock waits for the current transaction. Only PostgreSQL supports it."""
    if dialect_name(session) != "postgresql":
        return
    timeout_ms = int(timeout_seconds * 1000)
    await session.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))
