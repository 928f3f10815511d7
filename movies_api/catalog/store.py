"""
Data store for the catalogue API.

All SQL touching ``movie``, ``genre`` and ``movie_genre`` lives here.
Every function takes the connection explicitly as its first argument,
so the router (or a test) decides which database is used. Writes run
inside :func:`movies_api.storage.transaction`: a create, update or
delete either commits every statement or leaves no trace at all.

Genres are created lazily: any name a movie write refers to is looked
up case-insensitively and inserted (lowercased) when missing. Genres
are never deleted here.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from typing import Dict, Iterable, List, Optional

from ..storage import reading, transaction
from .schemas import Movie, MovieInput


logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for errors raised by the catalogue store."""


class CatalogWriteError(CatalogError):
    """A write path failed and every statement of it was rolled back.

    The message is deliberately generic; the driver error is available
    as ``__cause__`` for logging but must not be shown to clients.
    """

    def __init__(self, operation: str) -> None:
        super().__init__(f"Could not {operation} movie")
        self.operation = operation


_SELECT_MOVIES = """
    SELECT m.id, m.title, m.year, m.director, m.duration, m.poster, m.rate,
           g.name AS genre
    FROM movie m
    LEFT JOIN movie_genre mg ON mg.movie_id = m.id
    LEFT JOIN genre g ON g.id = mg.genre_id
"""

_ORDER = " ORDER BY m.rowid, g.name"


def _norm(s: Optional[str]) -> str:
    """Normalize a genre name for case-insensitive comparison and storage."""
    return (s or "").strip().lower()


def _normalize_genres(names: Optional[Iterable[str]]) -> List[str]:
    """Lowercase genre names, dropping blanks and repeated names.

    First-seen order is preserved. ``None`` yields an empty list.
    """
    normalized = (_norm(name) for name in (names or []))
    return list(dict.fromkeys(name for name in normalized if name))


def _fold_rows(rows: Iterable[sqlite3.Row]) -> List[Movie]:
    """Collapse one-row-per-genre join results into ``Movie`` records."""
    movies: Dict[str, dict] = {}
    for row in rows:
        entry = movies.get(row["id"])
        if entry is None:
            entry = {
                "id": row["id"],
                "title": row["title"],
                "year": row["year"],
                "director": row["director"],
                "duration": row["duration"],
                "poster": row["poster"],
                "rate": row["rate"],
                "genres": [],
            }
            movies[row["id"]] = entry
        # LEFT JOIN yields a NULL genre for movies without associations
        if row["genre"] is not None:
            entry["genres"].append(row["genre"])
    return [Movie(**entry) for entry in movies.values()]


def _resolve_genre(conn: sqlite3.Connection, name: str) -> int:
    """Return the id of genre ``name``, inserting the genre if needed."""
    row = conn.execute(
        "SELECT id FROM genre WHERE LOWER(name) = ?", (name,)
    ).fetchone()
    if row is not None:
        return row["id"]
    cur = conn.execute("INSERT INTO genre (name) VALUES (?)", (name,))
    logger.debug("Created genre %r with id %s", name, cur.lastrowid)
    return cur.lastrowid


def _link_genres(
    conn: sqlite3.Connection, movie_id: str, names: Optional[Iterable[str]]
) -> int:
    """Associate ``movie_id`` with every genre in ``names``.

    Must be called inside an open transaction. Returns the number of
    distinct genres linked.
    """
    genres = _normalize_genres(names)
    for name in genres:
        genre_id = _resolve_genre(conn, name)
        conn.execute(
            "INSERT OR IGNORE INTO movie_genre (movie_id, genre_id) VALUES (?, ?)",
            (movie_id, genre_id),
        )
    return len(genres)


def list_movies(conn: sqlite3.Connection, genre: Optional[str] = None) -> List[Movie]:
    """Return every movie, or only those associated with ``genre``.

    Parameters
    ----------
    conn : sqlite3.Connection
        Open catalogue connection.
    genre : Optional[str]
        Genre name to filter on, matched case-insensitively. When the
        genre does not exist or has no movies, an empty list is
        returned.

    Returns
    -------
    List[Movie]
        Matching movies, each carrying its complete genre list.
    """
    # a whitespace-only filter still filters, and matches nothing
    ngenre = _norm(genre)
    with reading(conn):
        if genre:
            rows = conn.execute(
                _SELECT_MOVIES
                + """
                WHERE m.id IN (
                    SELECT fmg.movie_id
                    FROM movie_genre fmg
                    JOIN genre fg ON fg.id = fmg.genre_id
                    WHERE LOWER(fg.name) = ?
                )"""
                + _ORDER,
                (ngenre,),
            ).fetchall()
        else:
            rows = conn.execute(_SELECT_MOVIES + _ORDER).fetchall()
    return _fold_rows(rows)


def get_movie(conn: sqlite3.Connection, movie_id: str) -> Optional[Movie]:
    """Fetch one movie with its genres, or ``None`` if no row matches."""
    with reading(conn):
        rows = conn.execute(
            _SELECT_MOVIES + " WHERE m.id = ?" + _ORDER, (movie_id,)
        ).fetchall()
    movies = _fold_rows(rows)
    return movies[0] if movies else None


def create_movie(conn: sqlite3.Connection, data: MovieInput) -> Movie:
    """Insert a movie and its genre associations atomically.

    Unknown genres are created on the fly. The returned record is read
    back from the database so it has exactly the shape of
    :func:`get_movie`.

    Raises
    ------
    CatalogWriteError
        If any statement fails; nothing is persisted in that case.
    """
    movie_id = str(uuid.uuid4())
    try:
        with transaction(conn):
            conn.execute(
                "INSERT INTO movie (id, title, year, director, duration, rate, poster)"
                " VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    movie_id,
                    data.title,
                    data.year,
                    data.director,
                    data.duration,
                    data.rate,
                    data.poster,
                ),
            )
            linked = _link_genres(conn, movie_id, data.genre)
            movie = get_movie(conn, movie_id)
    except (sqlite3.Error, OverflowError) as exc:
        logger.error("Error creating movie %r: %s", data.title, exc)
        raise CatalogWriteError("create") from exc

    logger.info("Created movie %s with %d genre(s)", movie_id, linked)
    return movie


def update_movie(
    conn: sqlite3.Connection, movie_id: str, data: MovieInput
) -> Optional[Movie]:
    """Overwrite every field of a movie and rebuild its genre set.

    The existing associations are deleted and recreated from
    ``data.genre``; leaving the list out clears them. Returns ``None``
    when ``movie_id`` does not exist.

    Raises
    ------
    CatalogWriteError
        If any statement fails; the movie is left as it was.
    """
    try:
        with transaction(conn):
            cur = conn.execute(
                "UPDATE movie SET title = ?, year = ?, director = ?, duration = ?,"
                " rate = ?, poster = ? WHERE id = ?",
                (
                    data.title,
                    data.year,
                    data.director,
                    data.duration,
                    data.rate,
                    data.poster,
                    movie_id,
                ),
            )
            if cur.rowcount == 0:
                return None
            conn.execute("DELETE FROM movie_genre WHERE movie_id = ?", (movie_id,))
            linked = _link_genres(conn, movie_id, data.genre)
            movie = get_movie(conn, movie_id)
    except (sqlite3.Error, OverflowError) as exc:
        logger.error("Error updating movie %s: %s", movie_id, exc)
        raise CatalogWriteError("update") from exc

    logger.info("Updated movie %s with %d genre(s)", movie_id, linked)
    return movie


def delete_movie(conn: sqlite3.Connection, movie_id: Optional[str]) -> Optional[Movie]:
    """Remove a movie and its associations, returning the removed record.

    Returns ``None`` without touching the database when ``movie_id`` is
    empty, and ``None`` (with no writes) when the movie does not exist.

    Raises
    ------
    CatalogWriteError
        If either delete fails; both are rolled back together.
    """
    if not movie_id:
        return None

    try:
        with transaction(conn):
            existing = get_movie(conn, movie_id)
            if existing is None:
                return None
            conn.execute("DELETE FROM movie_genre WHERE movie_id = ?", (movie_id,))
            conn.execute("DELETE FROM movie WHERE id = ?", (movie_id,))
    except sqlite3.Error as exc:
        logger.error("Error deleting movie %s: %s", movie_id, exc)
        raise CatalogWriteError("delete") from exc

    logger.info("Deleted movie %s", movie_id)
    return existing
