"""
db/connection.py
----------------
Opens and closes the single database connection a store works on.
PostgreSQL connections come from psycopg2; SQLite connections come from
the standard library driver and are used for local runs and tests.
"""

import sqlite3
import sys

import psycopg2

from config import DATABASE_URL, DB_BACKEND, SQLITE_PATH
from utils.logger import get_logger

logger = get_logger(__name__)

# Base exception classes of every supported driver.
DB_ERRORS: tuple[type[Exception], ...] = (psycopg2.Error, sqlite3.Error)

SUPPORTED_BACKENDS = ("postgresql", "sqlite")


def open_connection(backend: str | None = None):
    """
    Open a new database connection.

    Args:
        backend: "postgresql" or "sqlite". Defaults to ``DB_BACKEND``.

    Returns:
        A DB-API connection. Transactions are left to the caller.

    Raises:
        ValueError: If the backend is not supported.
        psycopg2.OperationalError / sqlite3.OperationalError:
            If the database is unreachable.
    """
    backend = (backend or DB_BACKEND).lower()
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(f"Unsupported database backend: {backend!r}")
    try:
        if backend == "postgresql":
            conn = psycopg2.connect(DATABASE_URL)
        else:
            conn = sqlite3.connect(SQLITE_PATH)
        logger.info(f"Opened {backend} connection.")
        return conn
    except (psycopg2.OperationalError, sqlite3.OperationalError) as e:
        logger.error(f"Failed to open {backend} connection: {e}")
        raise


def close_connection(conn) -> None:
    """Close a connection opened by `open_connection`."""
    if conn is not None:
        conn.close()
        logger.info("Database connection closed.")


def paramstyle_of(conn) -> str:
    """
    Return the DB-API ``paramstyle`` of the driver that created ``conn``.

    Falls back to "qmark" when the driver module cannot be found.
    """
    module_name = type(conn).__module__.split(".")[0]
    driver = sys.modules.get(module_name)
    return getattr(driver, "paramstyle", "qmark")
