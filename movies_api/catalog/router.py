"""
Route definitions for the catalogue API.

Endpoints under /movies:
- GET    /movies              : list movies, optionally ?genre=<name>
- GET    /movies/{movie_id}   : get one movie
- POST   /movies              : create a movie
- PUT    /movies/{movie_id}   : replace a movie and its genres
- DELETE /movies/{movie_id}   : delete a movie
"""

from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from . import store
from .schemas import Movie, MovieInput
from .store import CatalogWriteError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/movies", tags=["movies"])


def get_connection(request: Request) -> sqlite3.Connection:
    """Return the connection shared by the application.

    Opened at startup by ``main.create_app``; tests override this
    dependency with their own in-memory database.
    """
    return request.app.state.db


@router.get("", response_model=List[Movie])
def list_movies(
    genre: Optional[str] = Query(default=None, description="Filter by genre name"),
    conn: sqlite3.Connection = Depends(get_connection),
) -> List[Movie]:
    return store.list_movies(conn, genre=genre)


@router.get("/{movie_id}", response_model=Movie)
def get_movie(
    movie_id: str, conn: sqlite3.Connection = Depends(get_connection)
) -> Movie:
    movie = store.get_movie(conn, movie_id)
    if movie is None:
        raise HTTPException(status_code=404, detail="Movie not found")
    return movie


@router.post("", response_model=Movie, status_code=201)
def create_movie(
    data: MovieInput, conn: sqlite3.Connection = Depends(get_connection)
) -> Movie:
    try:
        return store.create_movie(conn, data)
    except CatalogWriteError:
        raise HTTPException(status_code=500, detail="Error creating movie")


@router.put("/{movie_id}", response_model=Movie)
def update_movie(
    movie_id: str,
    data: MovieInput,
    conn: sqlite3.Connection = Depends(get_connection),
) -> Movie:
    try:
        movie = store.update_movie(conn, movie_id, data)
    except CatalogWriteError:
        raise HTTPException(status_code=500, detail="Error updating movie")
    if movie is None:
        raise HTTPException(status_code=404, detail="Movie not found")
    return movie


@router.delete("/{movie_id}", response_model=Movie)
def delete_movie(
    movie_id: str, conn: sqlite3.Connection = Depends(get_connection)
) -> Movie:
    """Delete a movie and return the record as it was before removal."""
    try:
        movie = store.delete_movie(conn, movie_id)
    except CatalogWriteError:
        raise HTTPException(status_code=500, detail="Error deleting movie")
    if movie is None:
        raise HTTPException(status_code=404, detail="Movie not found")
    logger.debug("Served delete for movie %s", movie_id)
    return movie
