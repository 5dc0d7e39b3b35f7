# barbershop/routers/customers_routes.py

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.errors import AlreadyExistsError, NotFoundError
from barbershop.models import Customer
from barbershop.repository import AppointmentRepository
from barbershop.routers.appointments_routes import to_public
from barbershop.schemas import AppointmentPublic, CustomerCreate, CustomerPublic

router = APIRouter(
    prefix="/customers",
    tags=["customers"],
)


@router.post("", status_code=201, response_model=CustomerPublic)
def create_customer(
    customer: CustomerCreate,
    session: Session = Depends(get_session),
):
    # 1) Check if email already exists
    existing = session.exec(
        select(Customer).where(Customer.email == customer.email)
    ).first()
    if existing is not None:
        raise AlreadyExistsError("Email already registered")

    # 2) Create customer in DB
    db_customer = Customer(name=customer.name, email=customer.email)
    session.add(db_customer)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AlreadyExistsError("Email already registered")

    session.refresh(db_customer)  # fills db_customer.id
    return db_customer


@router.get("/{customer_id}/appointments", response_model=List[AppointmentPublic])
def list_customer_appointments(
    customer_id: int,
    session: Session = Depends(get_session),
):
    if session.get(Customer, customer_id) is None:
        raise NotFoundError("Customer not found")

    return [to_public(a) for a in AppointmentRepository(session).for_customer(customer_id)]
