# barbershop/deps.py

from datetime import datetime
from functools import lru_cache
from typing import Callable

from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlmodel import Session

from .booking import BookingTransactor
from .cache import ScheduleCache
from .config import Settings, get_settings
from .db import get_engine, get_session
from .schedule import AvailabilityService
from .schedule_admin import ScheduleAdmin


@lru_cache
def get_schedule_cache() -> ScheduleCache:
    return ScheduleCache()


def get_clock() -> Callable[[], datetime]:
    # Naive local wall-clock time; one implicit timezone
    return datetime.now


def get_transactor(
    engine: Engine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> BookingTransactor:
    return BookingTransactor(engine, settings.booking_lock_timeout_seconds, clock)


def get_availability_service(
    session: Session = Depends(get_session),
    cache: ScheduleCache = Depends(get_schedule_cache),
    settings: Settings = Depends(get_settings),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AvailabilityService:
    return AvailabilityService(session, cache, settings.slot_minutes, clock)


def get_schedule_admin(
    session: Session = Depends(get_session),
    cache: ScheduleCache = Depends(get_schedule_cache),
) -> ScheduleAdmin:
    return ScheduleAdmin(session, cache)
