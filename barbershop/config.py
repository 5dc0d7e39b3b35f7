# barbershop/config.py

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

# Load environment variables from a local .env file, if present
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./barber.db"
    slot_minutes: int = 30
    booking_lock_timeout_seconds: float = 5.0
    sql_echo: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    settings = Settings(
        database_url=os.environ.get("DATABASE_URL", Settings.database_url),
        slot_minutes=int(os.environ.get("SLOT_MINUTES", Settings.slot_minutes)),
        booking_lock_timeout_seconds=float(
            os.environ.get("BOOKING_LOCK_TIMEOUT_SECONDS", Settings.booking_lock_timeout_seconds)
        ),
        sql_echo=_env_bool("SQL_ECHO"),
        log_level=os.environ.get("LOG_LEVEL", Settings.log_level).upper(),
    )
    if settings.slot_minutes <= 0:
        raise ValueError("SLOT_MINUTES must be a positive integer")
    return settings


@lru_cache
def get_settings() -> Settings:
    return load_settings()
