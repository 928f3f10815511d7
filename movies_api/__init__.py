"""Movies catalogue REST API: movies, genres and their associations."""
