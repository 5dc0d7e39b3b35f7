# barbershop/booking.py

"""Booking Transactor: commits reservations and status changes.

``book`` validates the request against the barber's schedule and inserts the
appointment in the same locked transaction as its overlap query, so two
overlapping requests for one barber can never both be written. Schedule rows
are re-read inside that transaction rather than taken from the cache.
"""

import logging
from datetime import date, datetime, time
from typing import Callable

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError

from .core import booking_interval, find_working_window, fits_within
from .db import locked_session
from .errors import (
    BlockedError,
    BookingError,
    BusyError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    OutsideHoursError,
    PastTimeError,
    SlotConflictError,
)
from .models import Appointment, AppointmentStatus, Customer, Service
from .repository import AppointmentRepository, ScheduleRepository

logger = logging.getLogger(__name__)

# Allowed status changes; CANCELLED is terminal
TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CONFIRMED: {AppointmentStatus.CANCELLED},
    AppointmentStatus.CANCELLED: set(),
}


def check_transition(current: AppointmentStatus, target: AppointmentStatus) -> None:
    if target not in TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Cannot change appointment from {current.value} to {target.value}"
        )


class BookingTransactor:
    def __init__(
        self,
        engine: Engine,
        lock_timeout_seconds: float = 5.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.engine = engine
        self.lock_timeout_seconds = lock_timeout_seconds
        self.clock = clock

    def book(self, barber_id: int, service_id: int, customer_id: int, on_date: date, at_time: time) -> Appointment:
        try:
            appointment = self._book(barber_id, service_id, customer_id, on_date, at_time)
        except BookingError as exc:
            logger.info("Booking rejected for barber %s at %s %s: %s", barber_id, on_date, at_time, exc.kind)
            raise
        except IntegrityError:
            # Partial unique index on (barber_id, starts_at) caught a race
            logger.info("Booking for barber %s at %s %s lost a race", barber_id, on_date, at_time)
            raise SlotConflictError()
        except OperationalError:
            # Lock wait timed out or the store aborted the transaction
            logger.warning("Booking transaction for barber %s aborted by the database", barber_id, exc_info=True)
            raise SlotConflictError()

        logger.info(
            "Booked appointment %s: barber %s, customer %s, %s-%s",
            appointment.id, barber_id, customer_id, appointment.starts_at, appointment.ends_at,
        )
        return appointment

    def _book(self, barber_id, service_id, customer_id, on_date, at_time) -> Appointment:
        now = self.clock()

        with locked_session(self.engine, self.lock_timeout_seconds) as session:
            appointments = AppointmentRepository(session)
            schedule = ScheduleRepository(session)

            # 0) Referenced rows exist; locking the barber serializes its bookings
            barber = appointments.lock_barber(barber_id)
            if barber is None:
                raise NotFoundError("Barber not found")
            service = session.get(Service, service_id)
            if service is None:
                raise NotFoundError("Service not found")
            if session.get(Customer, customer_id) is None:
                raise NotFoundError("Customer not found")

            # 1) Build appointment interval
            try:
                starts_at, ends_at = booking_interval(on_date, at_time, service.duration_minutes)
            except OverflowError:
                # Runs past the last representable day
                raise OutsideHoursError()

            # 2) Prevent booking in the past
            if starts_at < now:
                raise PastTimeError()

            # 3) Blackout date
            if schedule.block_for(barber_id, on_date) is not None:
                raise BlockedError()

            # 4) Working hours must contain the whole interval
            window = find_working_window(barber_id, on_date, schedule.working_hours(barber_id))
            if window is None:
                raise OutsideHoursError("Barber does not work on this day")
            if not fits_within(window, on_date, starts_at, ends_at):
                raise OutsideHoursError()

            # 5) Overlap check and insert in the same transaction
            if appointments.find_overlapping(barber_id, starts_at, ends_at) is not None:
                raise SlotConflictError()

            appointment = appointments.add(
                Appointment(
                    barber_id=barber_id,
                    service_id=service_id,
                    customer_id=customer_id,
                    starts_at=starts_at,
                    ends_at=ends_at,
                    status=AppointmentStatus.PENDING,
                    created_at=now,
                )
            )
            # 6) Denormalize for the response before the session closes
            session.refresh(appointment, attribute_names=["barber", "service", "customer"])
            return appointment

    def cancel(self, appointment_id: int, customer_id: int) -> Appointment:
        """Customer self-service cancellation; only the owner may cancel."""

        def authorize(appointment: Appointment) -> None:
            if appointment.customer_id != customer_id:
                raise ForbiddenError("Not authorized to cancel this appointment")

        return self._transition(appointment_id, AppointmentStatus.CANCELLED, authorize)

    def update_status(self, appointment_id: int, status: AppointmentStatus) -> Appointment:
        return self._transition(appointment_id, AppointmentStatus(status))

    def _transition(self, appointment_id, target, authorize=None) -> Appointment:
        try:
            with locked_session(self.engine, self.lock_timeout_seconds) as session:
                appointment = AppointmentRepository(session).get_for_update(appointment_id)
                if appointment is None:
                    raise NotFoundError("Appointment not found")
                if authorize is not None:
                    authorize(appointment)

                previous = appointment.status
                check_transition(previous, target)

                appointment.status = target
                session.add(appointment)
                session.flush()
        except OperationalError:
            logger.warning("Status change for appointment %s aborted by the database", appointment_id, exc_info=True)
            raise BusyError()

        logger.info("Appointment %s: %s -> %s", appointment_id, previous.value, target.value)
        return appointment
