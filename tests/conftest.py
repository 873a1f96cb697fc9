import os
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from shared.database import get_engine, get_session
from trainer_service.domain.hour import FactoryConfig, HourFactory

JWT_SECRET = "test-secret"

# Monday morning, before the default 12..20 UTC band opens.
FIXED_NOW = datetime(2025, 11, 24, 9, 30, tzinfo=timezone.utc)


def make_token(sub: str, role: str, name: str = "", secret: str = JWT_SECRET) -> str:
    payload = {"sub": sub, "role": role, "name": name}
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(sub: str, role: str, name: str = "") -> dict:
    return {"Authorization": f"Bearer {make_token(sub, role, name)}"}


def hour_at(day_offset: int, utc_hour: int, now: datetime = FIXED_NOW) -> datetime:
    day = (now + timedelta(days=day_offset)).date()
    return datetime(day.year, day.month, day.day, utc_hour, tzinfo=timezone.utc)


@pytest.fixture
def hour_factory():
    return HourFactory(FactoryConfig(), clock=lambda: FIXED_NOW)


async def sqlite_session_factory(metadata):
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    return engine, get_session(engine)


@pytest_asyncio.fixture
async def trainer_db():
    from trainer_service.db import Base
    import trainer_service.models  # noqa: F401

    engine, session_factory = await sqlite_session_factory(Base.metadata)
    yield session_factory
    await engine.dispose()


@pytest_asyncio.fixture
async def trainings_db():
    from trainings_service.db import Base
    import trainings_service.models  # noqa: F401

    engine, session_factory = await sqlite_session_factory(Base.metadata)
    yield session_factory
    await engine.dispose()


@pytest_asyncio.fixture
async def users_db():
    from users_service.db import Base
    import users_service.models  # noqa: F401

    engine, session_factory = await sqlite_session_factory(Base.metadata)
    yield session_factory
    await engine.dispose()


TEST_POSTGRES_URL = os.getenv("TEST_POSTGRES_URL")

# Row locks only serialise writers on PostgreSQL; sqlite ignores FOR UPDATE.
requires_postgres = pytest.mark.skipif(not TEST_POSTGRES_URL, reason="TEST_POSTGRES_URL not set")


@pytest_asyncio.fixture
async def trainings_postgres():
    from trainings_service.db import Base
    from trainings_service.models import TrainingRecord

    engine = get_engine(TEST_POSTGRES_URL, pool_size=10)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(TrainingRecord.__table__.delete())
    yield get_session(engine)
    await engine.dispose()
