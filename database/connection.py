"""
Database connection management.
Handles per-request connections, standalone connections, transactions,
initialization and teardown.
"""

import sqlite3
import os
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal

from flask import g, current_app


# =============================================================================
# TYPE ADAPTERS
# =============================================================================

# Dates are stored as ISO strings; money as its decimal text.
sqlite3.register_adapter(date, lambda value: value.isoformat())
sqlite3.register_adapter(datetime, lambda value: value.isoformat(sep=' '))
sqlite3.register_adapter(Decimal, str)
sqlite3.register_converter('DATE', lambda raw: date.fromisoformat(raw.decode()))
sqlite3.register_converter('TIMESTAMP', lambda raw: datetime.fromisoformat(raw.decode()))
sqlite3.register_converter('DECIMAL', lambda raw: Decimal(raw.decode()))


def connect_db(db_path: str, timeout: float = 10.0) -> sqlite3.Connection:
    """
    Open a standalone connection with the project defaults applied.

    Used directly by CLI commands, worker threads and tests; request
    handlers go through get_db().

    Args:
        db_path: SQLite database file path (or ':memory:')
        timeout: Seconds to wait on a locked database

    Returns:
        sqlite3.Connection: Database connection object
    """
    if db_path != ':memory:':
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    conn = sqlite3.connect(
        db_path,
        timeout=timeout,
        detect_types=sqlite3.PARSE_DECLTYPES,
        check_same_thread=False
    )
    conn.row_factory = sqlite3.Row
    # Enable foreign key constraints
    conn.execute('PRAGMA foreign_keys = ON')
    # Enable WAL mode for better concurrency
    conn.execute('PRAGMA journal_mode = WAL')
    return conn


def get_db() -> sqlite3.Connection:
    """
    Get the connection bound to the current application context.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        g.db = connect_db(
            current_app.config.get('DATABASE_PATH', 'instance/hotel.db'),
            timeout=current_app.config.get('DATABASE_BUSY_TIMEOUT', 10.0)
        )
    return g.db


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    db = g.pop('db', None)
    if db is not None:
        db.close()


@contextmanager
def transaction(db: sqlite3.Connection):
    """
    Run a block as one all-or-nothing write transaction.

    BEGIN IMMEDIATE takes the reserved lock up front, so a read-check-write
    sequence inside the block cannot interleave with another writer.
    Commits when the block exits normally, rolls back on any exception.

    Usage:
        with transaction(db):
            db.execute(...)
    """
    db.execute('BEGIN IMMEDIATE')
    try:
        yield db
    except BaseException:
        db.rollback()
        raise
    else:
        db.commit()


def init_db(db: sqlite3.Connection = None, seed: bool = False):
    """
    Initialize database: drop existing tables and create the schema.
    WARNING: This will delete all existing data!

    Args:
        db: Connection to initialize (default: request connection)
        seed: Also insert demo data
    """
    from database.schema import drop_tables, create_tables, create_indexes, create_triggers
    from database.seed import seed_database

    db = db or get_db()

    drop_tables(db)
    create_tables(db)
    create_indexes(db)
    create_triggers(db)

    if seed:
        seed_database(db)

    db.commit()
