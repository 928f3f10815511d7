"""Shared fixtures: an in-memory catalogue and an API client bound to it."""

import pytest
from fastapi.testclient import TestClient

from movies_api import storage
from movies_api.catalog.router import get_connection
from movies_api.catalog.schemas import MovieInput
from movies_api.main import create_app


@pytest.fixture()
def conn():
    """Fresh in-memory database with the catalogue schema."""
    connection = storage.connect(":memory:")
    yield connection
    connection.close()


@pytest.fixture()
def client(conn):
    """TestClient whose requests all use the ``conn`` fixture."""
    app = create_app()
    app.dependency_overrides[get_connection] = lambda: conn
    return TestClient(app)


@pytest.fixture()
def make_input():
    """Build a ``MovieInput`` with sensible defaults for omitted fields."""

    def _make(**overrides):
        fields = {
            "title": "Dune",
            "year": 2021,
            "director": "Villeneuve",
            "duration": 155,
            "rate": 8.0,
            "poster": "https://example.com/dune.jpg",
            "genre": ["Sci-Fi", "Drama"],
        }
        fields.update(overrides)
        return MovieInput(**fields)

    return _make


@pytest.fixture()
def reject_genre(conn):
    """Install a trigger making any association with genre ``cursed`` fail."""
    conn.execute(
        """
        CREATE TRIGGER reject_cursed BEFORE INSERT ON movie_genre
        WHEN (SELECT name FROM genre WHERE id = NEW.genre_id) = 'cursed'
        BEGIN
            SELECT RAISE(ABORT, 'association rejected');
        END
        """
    )
    return "cursed"
