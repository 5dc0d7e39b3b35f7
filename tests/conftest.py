from datetime import date, datetime, time
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from barbershop.booking import BookingTransactor
from barbershop.cache import ScheduleCache
from barbershop.config import Settings
from barbershop.db import build_engine, get_engine, init_db
from barbershop.deps import get_clock, get_schedule_cache
from barbershop.main import app
from barbershop.models import Appointment, AppointmentStatus, Barber, Customer, Service, WorkingHours

# 2030-01-07 is a Monday
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
NOW = datetime(2030, 1, 6, 12, 0)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute))


@pytest.fixture
def engine(tmp_path):
    settings = Settings(database_url=f"sqlite:///{tmp_path / 'test.db'}", booking_lock_timeout_seconds=5)
    engine = build_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def impatient_engine(engine):
    """Second engine on the same database that gives up on locks quickly."""
    settings = Settings(database_url=str(engine.url), booking_lock_timeout_seconds=0.2)
    impatient = build_engine(settings)
    yield impatient
    impatient.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def shop(engine):
    """Two barbers working Monday 09:00-17:00, three services, two customers."""
    with Session(engine) as session:
        budi = Barber(name="Budi", specialty="Fades")
        andi = Barber(name="Andi", specialty="Beards")
        haircut = Service(name="Haircut", price=50000, duration_minutes=30)
        full = Service(name="Full Service", price=85000, duration_minutes=60)
        coloring = Service(name="Coloring", price=150000, duration_minutes=90)
        alice = Customer(name="Alice", email="alice@example.com")
        bob = Customer(name="Bob", email="bob@example.com")
        session.add_all([budi, andi, haircut, full, coloring, alice, bob])
        session.flush()

        for barber in (budi, andi):
            session.add(
                WorkingHours(
                    barber_id=barber.id,
                    weekday=MONDAY.weekday(),
                    start_time=time(9, 0),
                    end_time=time(17, 0),
                )
            )
        session.commit()

        return SimpleNamespace(
            barber=budi.id,
            other_barber=andi.id,
            haircut=haircut.id,
            full=full.id,
            coloring=coloring.id,
            alice=alice.id,
            bob=bob.id,
        )


@pytest.fixture
def add_appointment(engine):
    def _add(barber_id, service_id, customer_id, starts_at, ends_at, status=AppointmentStatus.CONFIRMED):
        with Session(engine) as session:
            appt = Appointment(
                barber_id=barber_id,
                service_id=service_id,
                customer_id=customer_id,
                starts_at=starts_at,
                ends_at=ends_at,
                status=status,
            )
            session.add(appt)
            session.commit()
            return appt.id

    return _add


@pytest.fixture
def cache():
    return ScheduleCache()


@pytest.fixture
def transactor(engine):
    return BookingTransactor(engine, lock_timeout_seconds=5, clock=lambda: NOW)


@pytest.fixture
def client(engine, cache):
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_schedule_cache] = lambda: cache
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)
    yield TestClient(app)
    app.dependency_overrides.clear()
