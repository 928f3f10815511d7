# movies_api/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import settings
from . import storage
from .catalog import catalog_router


logger = logging.getLogger(__name__)


def create_app(database_path: Optional[str] = None) -> FastAPI:
    """Build the API with one shared connection to ``database_path``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db = storage.connect(database_path)
        try:
            yield
        finally:
            app.state.db.close()
            logger.info("Closed catalogue database")

    app = FastAPI(
        title="Movies API",
        description="CRUD over a catalogue of movies and their genres.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ACCEPTED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # 🔹 Quick liveness route
    @app.get("/")
    def health_check():
        return {"status": "ok"}

    app.include_router(catalog_router)
    return app


app = create_app()


def run() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Server is running on http://%s:%s", settings.HOST, settings.PORT)
    uvicorn.run("movies_api.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
