# barbershop/core.py

"""Pure slot arithmetic shared by availability queries and booking.

Nothing in this module touches the database or the clock: callers pass in
the rows they loaded and the current time, so the same inputs always give
the same slots.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, List, Optional

from .models import AppointmentStatus

REASON_BLOCKED = "blocked"
REASON_NOT_WORKING = "not working"


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    # Half-open intervals: touching ends do not overlap
    return start_a < end_b and start_b < end_a


@dataclass(frozen=True)
class WorkingWindow:
    """Detached copy of a WorkingHours row."""

    weekday: int
    start_time: time
    end_time: time
    is_active: bool = True

    @classmethod
    def from_row(cls, row: Any) -> "WorkingWindow":
        return cls(
            weekday=row.weekday,
            start_time=row.start_time,
            end_time=row.end_time,
            is_active=row.is_active,
        )

    def bounds(self, on_date: date):
        return (
            datetime.combine(on_date, self.start_time),
            datetime.combine(on_date, self.end_time),
        )


@dataclass(frozen=True)
class Slot:
    starts_at: datetime
    available: bool
    # The appointment occupying this slot, if any
    appointment: Any = None

    @property
    def time(self) -> str:
        return self.starts_at.strftime("%H:%M")


@dataclass
class DayAvailability:
    barber_id: int
    date: date
    available: bool
    reason: Optional[str] = None
    block_reason: Optional[str] = None
    working_hours: Optional[WorkingWindow] = None
    slots: List[Slot] = field(default_factory=list)


def is_active_appointment(appointment: Any) -> bool:
    return appointment.status != AppointmentStatus.CANCELLED


def find_block(barber_id: int, on_date: date, blocked_dates: Iterable[Any]):
    for block in blocked_dates:
        if getattr(block, "barber_id", barber_id) != barber_id:
            continue
        if block.date == on_date:
            return block
    return None


def find_working_window(barber_id: int, on_date: date, working_hours: Iterable[Any]) -> Optional[WorkingWindow]:
    weekday = on_date.weekday()  # 0 = Monday, ..., 6 = Sunday
    for row in working_hours:
        if getattr(row, "barber_id", barber_id) != barber_id:
            continue
        if row.weekday == weekday and row.is_active:
            return row if isinstance(row, WorkingWindow) else WorkingWindow.from_row(row)
    return None


def compute_slots(
    barber_id: int,
    on_date: date,
    granularity_minutes: int,
    working_hours: Iterable[Any],
    blocked_dates: Iterable[Any],
    appointments: Iterable[Any],
    now: datetime,
) -> DayAvailability:
    """Enumerate the bookable slots of one barber on one date.

    A block on the date wins over the weekly template. Slots that already
    started are left out; slots that intersect a non-cancelled appointment
    are reported with ``available=False``. A trailing slot that would run
    past closing time is never produced.
    """
    if granularity_minutes <= 0:
        raise ValueError("granularity_minutes must be positive")

    # 1) Blackout overrides everything
    block = find_block(barber_id, on_date, blocked_dates)
    if block is not None:
        return DayAvailability(
            barber_id=barber_id,
            date=on_date,
            available=False,
            reason=REASON_BLOCKED,
            block_reason=block.reason,
        )

    # 2) Weekly template for this weekday
    window = find_working_window(barber_id, on_date, working_hours)
    if window is None:
        return DayAvailability(
            barber_id=barber_id,
            date=on_date,
            available=False,
            reason=REASON_NOT_WORKING,
        )

    # 3) Only live appointments of this barber on this date matter
    work_start, work_end = window.bounds(on_date)
    busy = [
        a for a in appointments
        if getattr(a, "barber_id", barber_id) == barber_id
        and is_active_appointment(a)
        and overlaps(work_start, work_end, a.starts_at, a.ends_at)
    ]

    # 4) Walk the grid; no partial trailing slot
    step = timedelta(minutes=granularity_minutes)
    slots = []
    current = work_start
    while work_end - current >= step:
        slot_start = current
        slot_end = current + step
        current += step

        if slot_start < now:
            continue

        occupant = None
        for a in busy:
            if overlaps(slot_start, slot_end, a.starts_at, a.ends_at):
                occupant = a
                break

        slots.append(Slot(starts_at=slot_start, available=occupant is None, appointment=occupant))

    return DayAvailability(
        barber_id=barber_id,
        date=on_date,
        available=True,
        working_hours=window,
        slots=slots,
    )


def booking_interval(on_date: date, at_time: time, duration_minutes: int):
    starts_at = datetime.combine(on_date, at_time)
    return starts_at, starts_at + timedelta(minutes=duration_minutes)


def fits_within(window: WorkingWindow, on_date: date, starts_at: datetime, ends_at: datetime) -> bool:
    work_start, work_end = window.bounds(on_date)
    return work_start <= starts_at and ends_at <= work_end
