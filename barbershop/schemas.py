# barbershop/schemas.py

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from .models import AppointmentStatus


class BarberPublic(BaseModel):
    id: int
    name: str
    specialty: Optional[str] = None
    photo_url: Optional[str] = None


class ServicePublic(BaseModel):
    id: int
    name: str
    price: float
    duration_minutes: int


class CustomerCreate(BaseModel):
    name: str = Field(min_length=2)
    email: EmailStr


class CustomerPublic(BaseModel):
    id: int
    name: str
    email: str


class BookingCreate(BaseModel):
    barber_id: int
    service_id: int
    customer_id: int
    date: date
    time: time

    @field_validator("time")
    @classmethod
    def no_timezone(cls, value):
        # Shop times are local wall-clock times
        if value.tzinfo is not None:
            raise ValueError("time must not carry a timezone offset")
        return value


class CancelRequest(BaseModel):
    customer_id: int


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentPublic(BaseModel):
    id: int
    barber_id: int
    service_id: int
    customer_id: int
    starts_at: datetime
    ends_at: datetime
    status: AppointmentStatus
    created_at: datetime
    barber: Optional[BarberPublic] = None
    service: Optional[ServicePublic] = None


class WorkingHoursIn(BaseModel):
    weekday: int = Field(ge=0, le=6)  # 0=Mon, 1=Tues....
    start_time: time
    end_time: time
    is_active: bool = True

    @model_validator(mode="after")
    def check_order(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class BulkWorkingHours(BaseModel):
    schedule: List[WorkingHoursIn] = Field(min_length=1)

    @field_validator("schedule")
    @classmethod
    def no_duplicate_days(cls, value):
        weekdays = [entry.weekday for entry in value]
        if len(weekdays) != len(set(weekdays)):
            raise ValueError("schedule cannot contain duplicate weekdays")
        return value


class WorkingHoursPublic(BaseModel):
    id: int
    barber_id: int
    weekday: int
    start_time: time
    end_time: time
    is_active: bool


class BlockCreate(BaseModel):
    date: date
    reason: Optional[str] = None


class BlockedDatePublic(BaseModel):
    id: int
    barber_id: int
    date: date
    reason: Optional[str] = None


class HoursPublic(BaseModel):
    start: time
    end: time


class SlotPublic(BaseModel):
    time: str
    available: bool


class AvailabilityResponse(BaseModel):
    barber_id: int
    date: date
    available: bool
    reason: Optional[str] = None
    working_hours: Optional[HoursPublic] = None
    slots: List[SlotPublic]


class BookedBy(BaseModel):
    appointment_id: int
    customer: str
    service: str
    status: AppointmentStatus


class ScheduleSlot(SlotPublic):
    booked_by: Optional[BookedBy] = None


class BarberSchedule(BaseModel):
    barber: BarberPublic
    available: bool
    reason: Optional[str] = None
    working_hours: Optional[HoursPublic] = None
    slots: List[ScheduleSlot]


class ErrorResponse(BaseModel):
    error: str
    detail: str
