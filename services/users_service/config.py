import os
from dataclasses import dataclass

from shared.config import env_bool, env_int, require_env


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    log_level: str = "INFO"
    db_echo: bool = False
    redis_url: str | None = None
    idempotency_ttl_seconds: int = 86400

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=require_env("USERS_DB"),
            jwt_secret=require_env("JWT_SECRET"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM") or "HS256",
            log_level=os.getenv("LOG_LEVEL") or "INFO",
            db_echo=env_bool("DB_ECHO"),
            redis_url=os.getenv("REDIS_URL") or None,
            idempotency_ttl_seconds=env_int("IDEMPOTENCY_TTL_SECONDS", 86400),
        )
