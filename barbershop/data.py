# barbershop/data.py

"""Seed data: a small shop with three barbers and the services they offer.

Run ``python -m barbershop.data`` to create the tables and load it into the
database named by ``DATABASE_URL``. Seeding is idempotent.
"""

import logging
from datetime import time

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from .db import get_engine, init_db
from .models import Barber, Service, WorkingHours

logger = logging.getLogger(__name__)

# name -> (price, duration in minutes)
SERVICES = {
    "Gentleman Haircut": (50000, 30),
    "Full Service (Cut + Wash)": (85000, 60),
    "Beard Trim & Shave": (35000, 30),
    "Hair Coloring": (150000, 90),
}

BARBERS = {
    "Budi Santoso": "Classic Cut & Fade Specialist",
    "Andi Kurniawan": "Modern Style & Hair Design",
    "Rudi Hermawan": "Beard & Grooming Expert",
}

# weekday (0 = Monday) -> (start, end, is_active)
DEFAULT_WEEK = {
    0: (time(9, 0), time(21, 0), True),
    1: (time(9, 0), time(21, 0), True),
    2: (time(9, 0), time(21, 0), True),
    3: (time(9, 0), time(21, 0), True),
    4: (time(9, 0), time(21, 0), True),
    5: (time(10, 0), time(18, 0), True),
    6: (time(10, 0), time(18, 0), False),  # Sunday off
}


def seed(engine: Engine) -> None:
    init_db(engine)

    with Session(engine) as session:
        for name, (price, duration) in SERVICES.items():
            exists = session.exec(select(Service).where(Service.name == name)).first()
            if exists is None:
                session.add(Service(name=name, price=price, duration_minutes=duration))

        for name, specialty in BARBERS.items():
            barber = session.exec(select(Barber).where(Barber.name == name)).first()
            if barber is not None:
                continue
            barber = Barber(name=name, specialty=specialty)
            session.add(barber)
            session.flush()  # fills barber.id

            for weekday, (start, end, active) in DEFAULT_WEEK.items():
                session.add(
                    WorkingHours(
                        barber_id=barber.id,
                        weekday=weekday,
                        start_time=start,
                        end_time=end,
                        is_active=active,
                    )
                )

        session.commit()
    logger.info("Seeded %d services and %d barbers", len(SERVICES), len(BARBERS))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed(get_engine())
