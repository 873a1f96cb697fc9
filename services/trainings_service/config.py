import os
from dataclasses import dataclass

from shared.config import env_bool, env_float, env_int, require_env


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    trainer_service_url: str
    users_service_url: str
    jwt_algorithm: str = "HS256"
    log_level: str = "INFO"
    db_echo: bool = False
    redis_url: str | None = None
    rabbit_url: str | None = None
    rpc_timeout_seconds: float = 3.0
    training_lock_timeout_seconds: float = 5.0
    breaker_failure_threshold: int = 5
    breaker_reset_timeout_seconds: int = 15

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=require_env("TRAININGS_DB"),
            jwt_secret=require_env("JWT_SECRET"),
            trainer_service_url=os.getenv("TRAINER_SERVICE_URL", "http://trainer-service:8000"),
            users_service_url=os.getenv("USERS_SERVICE_URL", "http://users-service:8000"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM") or "HS256",
            log_level=os.getenv("LOG_LEVEL") or "INFO",
            db_echo=env_bool("DB_ECHO"),
            redis_url=os.getenv("REDIS_URL") or None,
            rabbit_url=os.getenv("RABBIT_URL") or None,
            rpc_timeout_seconds=env_float("RPC_TIMEOUT_SECONDS", 3.0),
            training_lock_timeout_seconds=env_float("TRAINING_LOCK_TIMEOUT_SECONDS", 5.0),
            breaker_failure_threshold=env_int("BREAKER_FAILURE_THRESHOLD", 5),
            breaker_reset_timeout_seconds=env_int("BREAKER_RESET_TIMEOUT_SECONDS", 15),
        )
