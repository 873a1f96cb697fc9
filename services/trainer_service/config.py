import os
from dataclasses import dataclass

from shared.config import env_bool, env_float, env_int, require_env


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    log_level: str = "INFO"
    db_echo: bool = False
    hour_lock_timeout_seconds: float = 5.0
    max_weeks_in_the_future_to_set: int = 6
    min_utc_hour: int = 12
    max_utc_hour: int = 20

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=require_env("TRAINER_DB"),
            jwt_secret=require_env("JWT_SECRET"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM") or "HS256",
            log_level=os.getenv("LOG_LEVEL") or "INFO",
            db_echo=env_bool("DB_ECHO"),
            hour_lock_timeout_seconds=env_float("HOUR_LOCK_TIMEOUT_SECONDS", 5.0),
            max_weeks_in_the_future_to_set=env_int("MAX_WEEKS_IN_THE_FUTURE_TO_SET", 6),
            min_utc_hour=env_int("MIN_UTC_HOUR", 12),
            max_utc_hour=env_int("MAX_UTC_HOUR", 20),
        )
