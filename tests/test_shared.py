import logging

import pytest

from shared.decorator import apply_command_decorators, apply_query_decorators
from trainer_service.config import Settings as TrainerSettings
from trainings_service.config import Settings as TrainingsSettings
from users_service.config import Settings as UsersSettings


class _Echo:
    async def handle(self, cmd):
        return cmd


class _Failing:
    async def handle(self, cmd):
        raise RuntimeError("broken")


@pytest.mark.asyncio
async def test_decorators_delegate_and_log(caplog):
    logger = logging.getLogger("test.decorator")
    caplog.set_level(logging.DEBUG, logger="test.decorator")

    assert await apply_query_decorators(_Echo(), logger).handle("q") == "q"
    with pytest.raises(RuntimeError):
        await apply_command_decorators(_Failing(), logger).handle("c")

    messages = [r.getMessage() for r in caplog.records]
    assert any("Query str executed successfully" in m for m in messages)
    assert any("Failed to execute command str" in m for m in messages)


def test_trainer_settings_from_env(monkeypatch):
    monkeypatch.setenv("TRAINER_DB", "postgresql+asyncpg://trainer@db/trainer")
    monkeypatch.setenv("JWT_SECRET", "s3cret")
    monkeypatch.setenv("MIN_UTC_HOUR", "8")
    monkeypatch.setenv("HOUR_LOCK_TIMEOUT_SECONDS", "1.5")
    monkeypatch.delenv("JWT_ALGORITHM", raising=False)

    settings = TrainerSettings.from_env()

    assert settings.database_url.endswith("/trainer")
    assert settings.jwt_algorithm == "HS256"
    assert settings.min_utc_hour == 8
    assert settings.max_utc_hour == 20
    assert settings.hour_lock_timeout_seconds == 1.5


def test_missing_database_url_fails(monkeypatch):
    monkeypatch.delenv("USERS_DB", raising=False)
    monkeypatch.setenv("JWT_SECRET", "s3cret")

    with pytest.raises(RuntimeError):
        UsersSettings.from_env()


def test_trainings_settings_optional_services(monkeypatch):
    monkeypatch.setenv("TRAININGS_DB", "postgresql+asyncpg://trainings@db/trainings")
    monkeypatch.setenv("JWT_SECRET", "s3cret")
    monkeypatch.setenv("DB_ECHO", "true")
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("RABBIT_URL", raising=False)
    monkeypatch.setenv("TRAINING_LOCK_TIMEOUT_SECONDS", "0.5")

    settings = TrainingsSettings.from_env()

    assert settings.redis_url is None
    assert settings.rabbit_url is None
    assert settings.db_echo is True
    assert settings.training_lock_timeout_seconds == 0.5
