# barbershop/routers/admin_routes.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from barbershop.booking import BookingTransactor
from barbershop.db import get_session
from barbershop.deps import get_schedule_admin, get_transactor
from barbershop.models import AppointmentStatus
from barbershop.repository import AppointmentRepository
from barbershop.routers.appointments_routes import to_public
from barbershop.schedule_admin import ScheduleAdmin
from barbershop.schemas import (
    AppointmentPublic,
    BlockCreate,
    BlockedDatePublic,
    BulkWorkingHours,
    StatusUpdate,
    WorkingHoursIn,
    WorkingHoursPublic,
)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
)


@router.patch("/appointments/{appointment_id}/status", response_model=AppointmentPublic)
def update_appointment_status(
    appointment_id: int,
    update: StatusUpdate,
    transactor: BookingTransactor = Depends(get_transactor),
):
    return to_public(transactor.update_status(appointment_id, update.status))


@router.get("/appointments", response_model=List[AppointmentPublic])
def list_appointments(
    on_date: Optional[date] = None,
    barber_id: Optional[int] = None,
    status: Optional[AppointmentStatus] = None,
    session: Session = Depends(get_session),
):
    appts = AppointmentRepository(session).search(on_date=on_date, barber_id=barber_id, status=status)
    return [to_public(a) for a in appts]


@router.get("/barbers/{barber_id}/working-hours", response_model=List[WorkingHoursPublic])
def get_working_hours(
    barber_id: int,
    admin: ScheduleAdmin = Depends(get_schedule_admin),
):
    return admin.working_hours(barber_id)


@router.put("/barbers/{barber_id}/working-hours", response_model=WorkingHoursPublic)
def set_working_hours(
    barber_id: int,
    hours: WorkingHoursIn,
    admin: ScheduleAdmin = Depends(get_schedule_admin),
):
    return admin.set_working_hours(barber_id, hours.weekday, hours.start_time, hours.end_time, hours.is_active)


@router.put("/barbers/{barber_id}/working-hours/bulk", response_model=List[WorkingHoursPublic])
def set_bulk_working_hours(
    barber_id: int,
    bulk: BulkWorkingHours,
    admin: ScheduleAdmin = Depends(get_schedule_admin),
):
    return admin.set_bulk_working_hours(barber_id, bulk.schedule)


@router.get("/barbers/{barber_id}/blocked-dates", response_model=List[BlockedDatePublic])
def get_blocked_dates(
    barber_id: int,
    admin: ScheduleAdmin = Depends(get_schedule_admin),
):
    return admin.blocked_dates(barber_id)


@router.post("/barbers/{barber_id}/blocked-dates", response_model=BlockedDatePublic, status_code=201)
def block_date(
    barber_id: int,
    block: BlockCreate,
    admin: ScheduleAdmin = Depends(get_schedule_admin),
):
    return admin.block_date(barber_id, block.date, block.reason)


@router.delete("/blocked-dates/{block_id}")
def unblock_date(
    block_id: int,
    admin: ScheduleAdmin = Depends(get_schedule_admin),
):
    admin.unblock_date(block_id)
    return {"message": "Date unblocked successfully"}
