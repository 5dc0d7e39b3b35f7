# barbershop/routers/slots_routes.py

from datetime import date
from typing import List

from fastapi import APIRouter, Depends

from barbershop.core import DayAvailability
from barbershop.deps import get_availability_service
from barbershop.schedule import AvailabilityService
from barbershop.schemas import AvailabilityResponse, BarberPublic, BarberSchedule, BookedBy, HoursPublic

router = APIRouter(
    tags=["slots"],
)


def _hours(day: DayAvailability):
    if day.working_hours is None:
        return None
    return HoursPublic(start=day.working_hours.start_time, end=day.working_hours.end_time)


def _reason(day: DayAvailability):
    # Show the admin's note for a blocked date when there is one
    return day.block_reason or day.reason


def _booked_by(slot):
    appt = slot.appointment
    if appt is None:
        return None
    return BookedBy(
        appointment_id=appt.id,
        customer=appt.customer.name if appt.customer else "",
        service=appt.service.name if appt.service else "",
        status=appt.status,
    )


@router.get("/barbers/{barber_id}/availability", response_model=AvailabilityResponse)
def barber_availability(
    barber_id: int,
    date: date,
    service: AvailabilityService = Depends(get_availability_service),
):
    day = service.availability_for_barber(barber_id, date)
    return {
        "barber_id": barber_id,
        "date": date,
        "available": day.available,
        "reason": _reason(day),
        "working_hours": _hours(day),
        "slots": [{"time": s.time, "available": s.available} for s in day.slots],
    }


@router.get("/schedule", response_model=List[BarberSchedule])
def schedule_view(
    date: date,
    service: AvailabilityService = Depends(get_availability_service),
):
    return [
        {
            "barber": BarberPublic.model_validate(entry.barber, from_attributes=True),
            "available": entry.availability.available,
            "reason": _reason(entry.availability),
            "working_hours": _hours(entry.availability),
            "slots": [
                {"time": s.time, "available": s.available, "booked_by": _booked_by(s)}
                for s in entry.availability.slots
            ],
        }
        for entry in service.schedule_for_date(date)
    ]
