# barbershop/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import get_settings
from .db import get_engine, init_db
from .errors import BookingError
from .routers import admin_routes, appointments_routes, barbers_routes, customers_routes, slots_routes

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(get_settings().log_level)
    engine = app.dependency_overrides.get(get_engine, get_engine)()
    init_db(engine)
    logger.info("Booking engine ready on %s", engine.url.render_as_string(hide_password=True))
    yield


app = FastAPI(title="Barbershop Booking", lifespan=lifespan)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.detail},
    )


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(barbers_routes.router)
app.include_router(slots_routes.router)
app.include_router(appointments_routes.router)
app.include_router(customers_routes.router)
app.include_router(admin_routes.router)
