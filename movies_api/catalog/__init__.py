"""
Catalog package for the movies API.

This package contains the schemas, the SQL store and the route
definitions exposing CRUD operations over movies and their genres.
The store owns every query; the router only maps HTTP verbs onto it
and turns missing records into 404 responses.
"""

from .router import router as catalog_router  # noqa: F401
