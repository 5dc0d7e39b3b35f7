# barbershop/routers/appointments_routes.py

from fastapi import APIRouter, Depends

from barbershop.booking import BookingTransactor
from barbershop.deps import get_transactor
from barbershop.schemas import AppointmentPublic, BookingCreate, CancelRequest

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


def to_public(appointment) -> AppointmentPublic:
    return AppointmentPublic.model_validate(appointment, from_attributes=True)


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    booking: BookingCreate,
    transactor: BookingTransactor = Depends(get_transactor),
):
    appointment = transactor.book(
        booking.barber_id,
        booking.service_id,
        booking.customer_id,
        booking.date,
        booking.time,
    )
    return to_public(appointment)


@router.patch("/{appointment_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appointment_id: int,
    request: CancelRequest,
    transactor: BookingTransactor = Depends(get_transactor),
):
    return to_public(transactor.cancel(appointment_id, request.customer_id))
