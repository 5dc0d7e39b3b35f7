# barbershop/routers/barbers_routes.py

from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Barber, Service
from barbershop.schemas import BarberPublic, ServicePublic

router = APIRouter(
    tags=["barbers"],
)


@router.get("/barbers", response_model=List[BarberPublic])
def list_barbers(session: Session = Depends(get_session)):
    return session.exec(select(Barber).order_by(Barber.id)).all()


@router.get("/services", response_model=List[ServicePublic])
def list_services(session: Session = Depends(get_session)):
    return session.exec(select(Service).order_by(Service.id)).all()
