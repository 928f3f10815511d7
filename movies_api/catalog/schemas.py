"""
Pydantic schema definitions for the catalog module.

``Movie`` is the record returned by every read and write of the
catalogue, genres included. ``MovieInput`` is the payload accepted by
create and update; both operations require every scalar field
(``poster`` included), while the genre list may be left out (an update
then clears all genres).
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class Movie(BaseModel):
    """A single movie entry.

    ``genres`` holds the lowercased names of every genre associated
    with the movie and is empty for a movie without genres.
    """

    id: str
    title: str
    year: int
    director: str
    duration: int
    poster: Optional[str] = None
    rate: float
    genres: List[str] = Field(default_factory=list)


class MovieInput(BaseModel):
    """Payload for creating or fully replacing a movie."""

    title: str
    year: int
    director: str
    duration: int
    rate: float
    poster: str
    # Genre names as typed by the client; matched case-insensitively.
    genre: Optional[List[str]] = None
