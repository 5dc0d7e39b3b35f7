# barbershop/errors.py

"""Typed outcomes of the booking engine.

Every error here is an expected, user-facing result. The HTTP layer turns
them into ``{"error": kind, "detail": message}`` responses; nothing in the
engine retries after one of them.
"""


class BookingError(Exception):
    kind = "booking_error"
    status_code = 400
    default_detail = "Booking failed"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class PastTimeError(BookingError):
    kind = "past_time"
    status_code = 422
    default_detail = "Cannot book an appointment in the past"


class BlockedError(BookingError):
    kind = "blocked"
    status_code = 409
    default_detail = "Barber is not available on this date"


class OutsideHoursError(BookingError):
    kind = "outside_hours"
    status_code = 422
    default_detail = "Requested time is outside working hours"


class SlotConflictError(BookingError):
    kind = "slot_conflict"
    status_code = 409
    # Same message whether the slot was taken earlier or a moment ago
    default_detail = "This slot is no longer available"


class NotFoundError(BookingError):
    kind = "not_found"
    status_code = 404
    default_detail = "Not found"


class ForbiddenError(BookingError):
    kind = "forbidden"
    status_code = 403
    default_detail = "Forbidden"


class InvalidTransitionError(BookingError):
    kind = "invalid_transition"
    status_code = 409
    default_detail = "Appointment status cannot change that way"


class AlreadyExistsError(BookingError):
    kind = "already_exists"
    status_code = 409
    default_detail = "Already exists"


class BusyError(BookingError):
    kind = "busy"
    status_code = 409
    # Lock wait ran out on a status change or schedule edit
    default_detail = "The schedule is being updated, please try again"
