"""Process-wide SQLite connection holding the components table."""

from __future__ import annotations

import logging
import os
import sqlite3
import threading

logger = logging.getLogger(__name__)

_PATH_ENV_VAR = "DB_PATH"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS components (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    parent_id INTEGER REFERENCES components(id) ON DELETE SET NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_components_parent_id ON components(parent_id);
"""

_lock = threading.Lock()
_connection: sqlite3.Connection | None = None


class DatabaseError(Exception):
    """The database could not be opened, prepared or reached."""


def init_db(path: str | None = None) -> sqlite3.Connection:
    """Open the database at ``path`` (or $DB_PATH), apply the schema and keep it.

    A previously opened connection is closed and replaced.
    """
    global _connection
    if path is None:
        path = os.environ.get(_PATH_ENV_VAR, "")
    if not path:
        raise DatabaseError(
            f"a database path is required (pass one or set {_PATH_ENV_VAR})"
        )
    try:
        conn = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
    except sqlite3.Error as exc:
        raise DatabaseError(f"error opening database connection: {exc}") from exc
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("SELECT 1").fetchone()
        conn.executescript(_SCHEMA)
    except sqlite3.Error as exc:
        conn.close()
        raise DatabaseError(f"error preparing database: {exc}") from exc

    with _lock:
        previous, _connection = _connection, conn
    if previous is not None:
        previous.close()
    logger.info("Successfully connected to the database at %s", path)
    return conn


def get_db() -> sqlite3.Connection:
    """Return the active connection; raise DatabaseError if none is open."""
    with _lock:
        conn = _connection
    if conn is None:
        raise DatabaseError("database connection is not initialized; call init_db first")
    return conn


def close_db() -> None:
    """Close the active connection, if any."""
    global _connection
    with _lock:
        conn, _connection = _connection, None
    if conn is not None:
        conn.close()