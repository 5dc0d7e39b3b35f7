# barbershop/schedule.py

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence

from sqlmodel import Session, select

from .cache import ScheduleCache
from .core import DayAvailability, compute_slots
from .errors import NotFoundError
from .models import Barber
from .repository import AppointmentRepository, ScheduleRepository


@dataclass
class BarberDay:
    barber: Barber
    availability: DayAvailability


class AvailabilityService:
    """Read side of the engine: per-barber availability and the multi-barber day view."""

    def __init__(
        self,
        session: Session,
        cache: ScheduleCache,
        slot_minutes: int,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session = session
        self.cache = cache
        self.slot_minutes = slot_minutes
        self.clock = clock

    def _day(self, barber_id: int, on_date: date, appointments: Sequence, now: datetime) -> DayAvailability:
        snapshot = self.cache.get(barber_id, ScheduleRepository(self.session).snapshot)
        return compute_slots(
            barber_id,
            on_date,
            self.slot_minutes,
            snapshot.working_hours,
            snapshot.blocked_dates,
            appointments,
            now,
        )

    def availability_for_barber(self, barber_id: int, on_date: date) -> DayAvailability:
        if self.session.get(Barber, barber_id) is None:
            raise NotFoundError("Barber not found")

        appointments = AppointmentRepository(self.session).active_on(on_date, [barber_id])
        return self._day(barber_id, on_date, appointments, self.clock())

    def schedule_for_date(self, on_date: date, barbers: Optional[Sequence[Barber]] = None) -> List[BarberDay]:
        if barbers is None:
            barbers = self.session.exec(select(Barber).order_by(Barber.id)).all()

        # One query for every barber's appointments that day
        appointments = AppointmentRepository(self.session).active_on(on_date, [b.id for b in barbers])
        now = self.clock()

        return [
            BarberDay(barber=barber, availability=self._day(barber.id, on_date, appointments, now))
            for barber in barbers
        ]
