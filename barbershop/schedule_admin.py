# barbershop/schedule_admin.py

import logging
from datetime import date, time
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session

from .cache import ScheduleCache
from .errors import AlreadyExistsError, BusyError, NotFoundError
from .models import Barber, BlockedDate, WorkingHours
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleAdmin:
    """Administrative edits of working hours and blackout dates.

    Every write commits first and then drops the barber's cache entry, so no
    availability read that starts after the response can see the old schedule.
    """

    def __init__(self, session: Session, cache: ScheduleCache):
        self.session = session
        self.cache = cache
        self.repo = ScheduleRepository(session)

    def _require_barber(self, barber_id: int) -> Barber:
        barber = self.session.get(Barber, barber_id)
        if barber is None:
            raise NotFoundError("Barber not found")
        return barber

    def working_hours(self, barber_id: int):
        self._require_barber(barber_id)
        return self.repo.working_hours(barber_id)

    def blocked_dates(self, barber_id: int):
        self._require_barber(barber_id)
        return self.repo.blocked_dates(barber_id)

    def _commit(self, barber_id: int) -> None:
        try:
            self.session.commit()
        except OperationalError:
            # Lock wait ran out behind a booking transaction
            self.session.rollback()
            logger.warning("Schedule edit for barber %s timed out waiting for the database", barber_id)
            raise BusyError()
        self.cache.invalidate(barber_id)

    def _upsert(self, barber_id: int, weekday: int, start_time: time, end_time: time, is_active: bool) -> WorkingHours:
        # DB upsert: one row per (barber, weekday)
        row = self.repo.working_hours_for(barber_id, weekday)
        if row is None:
            row = WorkingHours(
                barber_id=barber_id,
                weekday=weekday,
                start_time=start_time,
                end_time=end_time,
                is_active=is_active,
            )
        else:
            row.start_time = start_time
            row.end_time = end_time
            row.is_active = is_active
        self.session.add(row)
        return row

    def set_working_hours(self, barber_id: int, weekday: int, start_time: time, end_time: time, is_active: bool = True) -> WorkingHours:
        self._require_barber(barber_id)
        row = self._upsert(barber_id, weekday, start_time, end_time, is_active)
        self._commit(barber_id)
        self.session.refresh(row)
        logger.info("Working hours set for barber %s, weekday %s", barber_id, weekday)
        return row

    def set_bulk_working_hours(self, barber_id: int, entries: Iterable) -> List[WorkingHours]:
        """Upsert several weekdays in one commit; entries carry weekday/start_time/end_time/is_active."""
        self._require_barber(barber_id)
        try:
            rows = [
                self._upsert(barber_id, e.weekday, e.start_time, e.end_time, e.is_active)
                for e in entries
            ]
        except OperationalError:
            # Autoflush between upserts can hit the lock too
            self.session.rollback()
            raise BusyError()
        self._commit(barber_id)
        for row in rows:
            self.session.refresh(row)
        logger.info("Working hours set for barber %s, %d weekdays", barber_id, len(rows))
        return sorted(rows, key=lambda r: r.weekday)

    def block_date(self, barber_id: int, on_date: date, reason: Optional[str] = None) -> BlockedDate:
        self._require_barber(barber_id)
        if self.repo.block_for(barber_id, on_date) is not None:
            raise AlreadyExistsError("Date is already blocked")

        block = BlockedDate(barber_id=barber_id, date=on_date, reason=reason)
        self.session.add(block)
        try:
            self._commit(barber_id)
        except IntegrityError:
            self.session.rollback()
            raise AlreadyExistsError("Date is already blocked")

        self.session.refresh(block)
        logger.info("Blocked %s for barber %s", on_date, barber_id)
        return block

    def unblock_date(self, block_id: int) -> None:
        block = self.session.get(BlockedDate, block_id)
        if block is None:
            raise NotFoundError("Blocked date not found")

        barber_id, blocked_on = block.barber_id, block.date
        self.session.delete(block)
        self._commit(barber_id)
        logger.info("Unblocked %s for barber %s", blocked_on, barber_id)
