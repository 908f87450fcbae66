"""Database connection helpers, transactions and initialization."""

import logging
import os
import sqlite3
from contextlib import contextmanager
from itertools import count

from store_ratings.core.config import settings

logger = logging.getLogger(__name__)

_savepoint_ids = count(1)


def _db_path() -> str:
    """Extract the file path from DATABASE_URL (strip "sqlite:///")."""
    return settings.DATABASE_URL.replace("sqlite:///", "")


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection with row factory."""
    db_path = _db_path()
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    logger.trace("Opening database connection to %s", db_path)
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_db():
    """Context manager that yields a database connection and auto-commits/rolls back."""
    conn = get_connection()
    try:
        yield conn
        conn.commit()
        logger.trace("Database transaction committed")
    except Exception:
        logger.error("Database transaction rolled back", exc_info=True)
        conn.rollback()
        raise
    finally:
        conn.close()
        logger.trace("Database connection closed")


@contextmanager
def atomic(conn: sqlite3.Connection):
    """
    Run the enclosed statements as one all-or-nothing unit.

    Uses a SAVEPOINT so the block nests inside the request transaction opened
    by ``get_db``: on any exception every write made inside the block is
    undone before the exception propagates. When no transaction is open yet,
    one is started first so releasing the savepoint leaves the final commit
    or rollback to the caller.
    """
    if not conn.in_transaction:
        conn.execute("BEGIN")
    name = f"sp_{next(_savepoint_ids)}"
    conn.execute(f"SAVEPOINT {name}")
    logger.trace("Savepoint %s opened", name)
    try:
        yield conn
    except Exception:
        conn.execute(f"ROLLBACK TO SAVEPOINT {name}")
        conn.execute(f"RELEASE SAVEPOINT {name}")
        logger.warning("Savepoint %s rolled back", name)
        raise
    conn.execute(f"RELEASE SAVEPOINT {name}")
    logger.trace("Savepoint %s released", name)


def init_db() -> None:
    """Initialize the database by creating all tables."""
    logger.info("Initializing database schema at %s", _db_path())
    from store_ratings.db import schema
    schema.create_tables()
