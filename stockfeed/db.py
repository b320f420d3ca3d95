from __future__ import annotations

import logging

from sqlalchemy import BigInteger, Column, Double, MetaData, Table, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from stockfeed.errors import StoreConnectionError


log = logging.getLogger(__name__)

metadata = MetaData()

# append-only, exactly four columns: no surrogate key, no constraints
stock_prices = Table(
    "stock_prices",
    metadata,
    Column("symbol", Text, nullable=False),
    Column("price", Double, nullable=False),
    Column("source", Text, nullable=False),
    Column("timestamp", BigInteger, nullable=False),
)


def make_engine(url: str, *, timeout_sec: float = 10.0) -> Engine:
    connect_args: dict = {}
    if url.startswith("sqlite"):
        # sqlite needs check_same_thread for FastAPI sync access
        connect_args = {"check_same_thread": False, "timeout": timeout_sec}
    elif url.startswith("postgresql"):
        # libpq wants whole seconds; statement_timeout is in ms
        connect_args = {
            "connect_timeout": max(1, int(timeout_sec)),
            "options": f"-c statement_timeout={int(timeout_sec * 1000)}",
        }

    return create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    metadata.create_all(engine)


def open_store(url: str | None, *, timeout_sec: float = 10.0) -> Engine:
    """
    Build the engine, check connectivity and make sure the table exists.

    Any failure here is fatal for the process and surfaces as StoreConnectionError.
    """
    if not url:
        raise StoreConnectionError("DATABASE_URL is required")

    try:
        engine = make_engine(url, timeout_sec=timeout_sec)
    except (SQLAlchemyError, ImportError) as e:
        # ImportError: DBAPI driver missing, ex: psycopg2 without the postgres extra
        raise StoreConnectionError(f"cannot create engine: {e}") from e

    try:
        init_db(engine)
    except SQLAlchemyError as e:
        engine.dispose()
        raise StoreConnectionError(f"cannot open store: {e}") from e

    log.info("store ready (%s)", engine.url.render_as_string(hide_password=True))
    return engine
