# barbershop/cache.py

import logging
import threading
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Optional, Tuple

from .core import WorkingWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockedDay:
    barber_id: int
    date: date
    reason: Optional[str] = None


@dataclass(frozen=True)
class ScheduleSnapshot:
    """Weekly template and blackout dates of one barber, detached from any session."""

    barber_id: int
    working_hours: Tuple[WorkingWindow, ...] = ()
    blocked_dates: Tuple[BlockedDay, ...] = ()


class ScheduleCache:
    """Read-through cache of barber schedules.

    Entries are only ever dropped by ``invalidate``/``clear``, which the
    schedule editing code calls right after each committed change. A load
    that raced with an invalidation is returned to its caller but not stored.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[int, ScheduleSnapshot] = {}
        self._generations: Dict[int, int] = {}

    def get(self, barber_id: int, loader: Callable[[int], ScheduleSnapshot]) -> ScheduleSnapshot:
        with self._lock:
            cached = self._entries.get(barber_id)
            if cached is not None:
                return cached
            generation = self._generations.get(barber_id, 0)

        snapshot = loader(barber_id)

        with self._lock:
            if self._generations.get(barber_id, 0) == generation:
                self._entries[barber_id] = snapshot
        return snapshot

    def invalidate(self, barber_id: int) -> None:
        with self._lock:
            self._entries.pop(barber_id, None)
            self._generations[barber_id] = self._generations.get(barber_id, 0) + 1
        logger.debug("Schedule cache invalidated for barber %s", barber_id)

    def clear(self) -> None:
        with self._lock:
            for barber_id in set(self._entries) | set(self._generations):
                self._generations[barber_id] = self._generations.get(barber_id, 0) + 1
            self._entries.clear()

    def __contains__(self, barber_id: int) -> bool:
        with self._lock:
            return barber_id in self._entries
