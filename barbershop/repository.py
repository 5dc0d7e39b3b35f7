# barbershop/repository.py

from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from .cache import BlockedDay, ScheduleSnapshot
from .core import WorkingWindow
from .models import ACTIVE_STATUSES, Appointment, AppointmentStatus, Barber, BlockedDate, WorkingHours


def day_bounds(on_date: date):
    day_start = datetime.combine(on_date, datetime.min.time())
    if on_date == date.max:
        return day_start, datetime.max
    return day_start, day_start + timedelta(days=1)


class ScheduleRepository:
    """Weekly templates and blackout dates."""

    def __init__(self, session: Session):
        self.session = session

    def working_hours(self, barber_id: int) -> Sequence[WorkingHours]:
        return self.session.exec(
            select(WorkingHours)
            .where(WorkingHours.barber_id == barber_id)
            .order_by(WorkingHours.weekday)
        ).all()

    def working_hours_for(self, barber_id: int, weekday: int) -> Optional[WorkingHours]:
        return self.session.exec(
            select(WorkingHours)
            .where(WorkingHours.barber_id == barber_id)
            .where(WorkingHours.weekday == weekday)
        ).first()

    def blocked_dates(self, barber_id: int) -> Sequence[BlockedDate]:
        return self.session.exec(
            select(BlockedDate)
            .where(BlockedDate.barber_id == barber_id)
            .order_by(BlockedDate.date)
        ).all()

    def block_for(self, barber_id: int, on_date: date) -> Optional[BlockedDate]:
        return self.session.exec(
            select(BlockedDate)
            .where(BlockedDate.barber_id == barber_id)
            .where(BlockedDate.date == on_date)
        ).first()

    def snapshot(self, barber_id: int) -> ScheduleSnapshot:
        return ScheduleSnapshot(
            barber_id=barber_id,
            working_hours=tuple(WorkingWindow.from_row(row) for row in self.working_hours(barber_id)),
            blocked_dates=tuple(
                BlockedDay(barber_id=b.barber_id, date=b.date, reason=b.reason)
                for b in self.blocked_dates(barber_id)
            ),
        )


class AppointmentRepository:
    def __init__(self, session: Session):
        self.session = session

    def _with_details(self, stmt):
        return stmt.options(
            selectinload(Appointment.barber),
            selectinload(Appointment.service),
            selectinload(Appointment.customer),
        )

    def get(self, appointment_id: int) -> Optional[Appointment]:
        return self.session.exec(
            self._with_details(select(Appointment).where(Appointment.id == appointment_id))
        ).first()

    def get_for_update(self, appointment_id: int) -> Optional[Appointment]:
        return self.session.exec(
            self._with_details(
                select(Appointment).where(Appointment.id == appointment_id).with_for_update()
            )
        ).first()

    def find_overlapping(self, barber_id: int, starts_at: datetime, ends_at: datetime) -> Optional[Appointment]:
        # Half-open overlap: existing.start < new.end AND existing.end > new.start
        return self.session.exec(
            select(Appointment)
            .where(Appointment.barber_id == barber_id)
            .where(Appointment.status.in_(ACTIVE_STATUSES))
            .where(Appointment.starts_at < ends_at)
            .where(Appointment.ends_at > starts_at)
            .order_by(Appointment.starts_at)
        ).first()

    def active_on(self, on_date: date, barber_ids: Optional[List[int]] = None) -> Sequence[Appointment]:
        """Non-cancelled appointments touching ``on_date``, with customer and service loaded."""
        day_start, day_end = day_bounds(on_date)
        stmt = (
            select(Appointment)
            .where(Appointment.status.in_(ACTIVE_STATUSES))
            .where(Appointment.starts_at < day_end)
            .where(Appointment.ends_at > day_start)
        )
        if barber_ids is not None:
            stmt = stmt.where(Appointment.barber_id.in_(barber_ids))
        stmt = stmt.order_by(Appointment.starts_at)
        return self.session.exec(self._with_details(stmt)).all()

    def for_customer(self, customer_id: int) -> Sequence[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.customer_id == customer_id)
            .order_by(Appointment.starts_at.desc())
        )
        return self.session.exec(self._with_details(stmt)).all()

    def search(
        self,
        on_date: Optional[date] = None,
        barber_id: Optional[int] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> Sequence[Appointment]:
        stmt = select(Appointment)

        if on_date is not None:
            day_start, day_end = day_bounds(on_date)
            stmt = stmt.where(Appointment.starts_at >= day_start).where(Appointment.starts_at < day_end)
        if barber_id is not None:
            stmt = stmt.where(Appointment.barber_id == barber_id)
        if status is not None:
            stmt = stmt.where(Appointment.status == status)

        stmt = stmt.order_by(Appointment.starts_at)
        return self.session.exec(self._with_details(stmt)).all()

    def lock_barber(self, barber_id: int) -> Optional[Barber]:
        # Row lock keyed by barber; SQLite ignores FOR UPDATE and relies on BEGIN IMMEDIATE
        return self.session.exec(
            select(Barber).where(Barber.id == barber_id).with_for_update()
        ).first()

    def add(self, appointment: Appointment) -> Appointment:
        self.session.add(appointment)
        self.session.flush()  # fills appointment.id and hits the unique index
        return appointment
