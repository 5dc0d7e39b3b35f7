# barbershop/models.py

from datetime import date as Date, datetime, time
from enum import Enum
from typing import List, Optional

from sqlalchemy import Index, UniqueConstraint, text
from sqlmodel import Field, Relationship, SQLModel


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


# Statuses that occupy a barber's time
ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)


class Barber(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    specialty: Optional[str] = None
    photo_url: Optional[str] = None

    working_hours: List["WorkingHours"] = Relationship(back_populates="barber")
    blocked_dates: List["BlockedDate"] = Relationship(back_populates="barber")


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    price: float
    duration_minutes: int


class Customer(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)


class WorkingHours(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("barber_id", "weekday", name="uq_barber_weekday"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="barber.id", index=True)
    weekday: int  # 0 = Monday, ..., 6 = Sunday
    start_time: time
    end_time: time
    is_active: bool = True

    barber: Optional[Barber] = Relationship(back_populates="working_hours")


class BlockedDate(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("barber_id", "date", name="uq_barber_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="barber.id", index=True)
    date: Date = Field(index=True)
    reason: Optional[str] = None

    barber: Optional[Barber] = Relationship(back_populates="blocked_dates")


class Appointment(SQLModel, table=True):
    # Two live appointments can never share a start; general overlap is
    # enforced by the booking transaction
    __table_args__ = (
        Index(
            "uq_barber_active_start",
            "barber_id",
            "starts_at",
            unique=True,
            sqlite_where=text("status != 'CANCELLED'"),
            postgresql_where=text("status != 'CANCELLED'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    barber_id: int = Field(foreign_key="barber.id", index=True)
    service_id: int = Field(foreign_key="service.id")
    customer_id: int = Field(foreign_key="customer.id", index=True)
    starts_at: datetime = Field(index=True)
    ends_at: datetime
    status: AppointmentStatus = AppointmentStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.now)

    barber: Optional[Barber] = Relationship()
    service: Optional[Service] = Relationship()
    customer: Optional[Customer] = Relationship()
