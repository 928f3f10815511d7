# movies_api/storage.py
"""
Access to the relational store backing the catalogue.

Every query in the project goes through a ``sqlite3.Connection`` handed
out by :func:`connect`. The connection runs in autocommit mode so that
transactions are always explicit: writers enter :func:`transaction`,
readers enter :func:`reading`. Both hold the same lock for their whole
duration because a single connection is shared by the request threads.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from . import settings


logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS movie (
    id       TEXT PRIMARY KEY,
    title    TEXT NOT NULL,
    year     INTEGER NOT NULL,
    director TEXT NOT NULL,
    duration INTEGER NOT NULL,
    poster   TEXT,
    rate     REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS genre (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE COLLATE NOCASE
);

CREATE TABLE IF NOT EXISTS movie_genre (
    movie_id TEXT NOT NULL REFERENCES movie(id),
    genre_id INTEGER NOT NULL REFERENCES genre(id),
    PRIMARY KEY (movie_id, genre_id)
);
"""

_lock = threading.RLock()


def connect(path: Optional[str] = None) -> sqlite3.Connection:
    """Open a connection to the catalogue database and bootstrap its schema.

    Parameters
    ----------
    path : Optional[str]
        SQLite database file, or ``":memory:"``. Defaults to
        ``settings.DATABASE_PATH``.

    Returns
    -------
    sqlite3.Connection
        A connection with ``sqlite3.Row`` rows and foreign keys enforced.
    """
    db_path = path or settings.DATABASE_PATH
    conn = sqlite3.connect(
        db_path,
        timeout=settings.DATABASE_TIMEOUT,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    init_schema(conn)
    logger.info("Opened catalogue database at %s", db_path)
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the ``movie``, ``genre`` and ``movie_genre`` tables if missing."""
    with _lock:
        conn.executescript(SCHEMA)


@contextmanager
def reading(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Hold the connection for a read so it never interleaves with a write."""
    with _lock:
        yield conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the enclosed statements as one atomic unit.

    Commits when the block exits normally (early ``return`` included) and
    rolls back when it raises; the exception is re-raised unchanged.
    """
    with _lock:
        conn.execute("BEGIN")
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()
