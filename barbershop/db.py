# barbershop/db.py

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from fastapi import Depends
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from .config import Settings, get_settings

# Execution option that makes a SQLite transaction take the write lock up front
IMMEDIATE = "barbershop_immediate"


def _configure_sqlite(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # pysqlite's own BEGIN handling is replaced by the "begin" hook below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def build_engine(settings: Settings) -> Engine:
    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,  # required for SQLite + FastAPI
            "timeout": settings.booking_lock_timeout_seconds,
        }

    engine = create_engine(
        settings.database_url,
        echo=settings.sql_echo,
        connect_args=connect_args,
    )
    if engine.dialect.name == "sqlite":
        _configure_sqlite(engine)
    return engine


@lru_cache
def _default_engine() -> Engine:
    return build_engine(get_settings())


def get_engine() -> Engine:
    return _default_engine()


def init_db(engine: Engine) -> None:
    # Import models so their tables are registered on the metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


# Dependency: one session per request
def get_session(engine: Engine = Depends(get_engine)):
    with Session(engine) as session:
        yield session


@contextmanager
def locked_session(engine: Engine, lock_timeout_seconds: float) -> Iterator[Session]:
    """Open a session whose transaction is serialized against other writers.

    SQLite takes the database write lock at ``BEGIN IMMEDIATE``. Other
    backends run at SERIALIZABLE isolation with a bounded lock wait; callers
    additionally lock the rows they key on with ``SELECT ... FOR UPDATE``.
    Commits on normal exit, rolls back on any exception.
    """
    if engine.dialect.name == "sqlite":
        options = {IMMEDIATE: True}
    else:
        options = {"isolation_level": "SERIALIZABLE"}

    with Session(engine, expire_on_commit=False) as session:
        session.connection(execution_options=options)
        if engine.dialect.name == "postgresql":
            timeout_ms = int(lock_timeout_seconds * 1000)
            session.execute(text(f"SET LOCAL lock_timeout = {timeout_ms}"))
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
