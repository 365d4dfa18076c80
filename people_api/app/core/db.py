"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and checking that the database is reachable (``ping``).
SQLite is used as an embedded database; to switch to another DBMS
you would replace connection logic and adapt SQL syntax accordingly.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings
from .exceptions import StorageError

logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: people table
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS people (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            surname TEXT NOT NULL,
            patronymic TEXT NOT NULL DEFAULT 'N/A',
            age INTEGER,
            gender TEXT,
            nationality TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """,
    ),
    # Migration 2: indices for the list filters
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_people_name ON people(name);
        CREATE INDEX IF NOT EXISTS idx_people_surname ON people(surname);
        CREATE INDEX IF NOT EXISTS idx_people_age ON people(age);
        CREATE INDEX IF NOT EXISTS idx_people_gender ON people(gender);
        CREATE INDEX IF NOT EXISTS idx_people_nationality ON people(nationality);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # people_api/
    return str((base_dir / db_url).resolve())


def get_connection(timeout: Optional[float] = None) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be read by
    name.  ``timeout`` bounds how long a statement waits on a locked
    database.
    """
    db_path = get_database_path()
    if timeout is None:
        conn = sqlite3.connect(db_path)
    else:
        conn = sqlite3.connect(db_path, timeout=timeout)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Yield a cursor, commit on success, roll back on failure, always close."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any migrations from
    ``MIGRATIONS`` newer than it.  New migrations are appended with an
    incremented version number.
    """
    logger.debug("Applying migrations to %s", get_database_path())
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        applied = 0
        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
                applied += 1

    if applied:
        logger.info("Applied %d migration(s), schema version %d", applied, current_version)
    else:
        logger.warning("Migrations didn't run. Nothing to change")


def ping(timeout: Optional[float] = None) -> None:
    """Check that the database answers a trivial query.

    Raises ``StorageError`` when it does not.
    """
    if timeout is None:
        timeout = settings.db_ping_timeout
    try:
        conn = get_connection(timeout=timeout)
        try:
            conn.execute("SELECT 1").fetchone()
        finally:
            conn.close()
    except sqlite3.Error as exc:
        raise StorageError(f"no database connection: {exc}", operation="ping") from exc
