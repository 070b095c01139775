# clinisync/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinisync.auth.sessions import SessionDirectory
from clinisync.common.config import settings
from clinisync.common.database.database import Database
from clinisync.common.storage.file_storage import FileStorage
from clinisync.router.routers import include_routers


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Lifespan context manager for startup and shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    await app.state.database.connect()
    yield
    await app.state.database.close()


def create_app(
    database: Optional[Database] = None,
    sessions: Optional[SessionDirectory] = None,
    file_storage: Optional[FileStorage] = None,
) -> FastAPI:
    """Build the application around its own database, session directory and file storage."""
    configure_logging()

    app = FastAPI(
        title="Clinisync API",
        description="Practice management API for clinics and visiting consultants",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.database = database or Database()
    app.state.sessions = sessions or SessionDirectory()
    app.state.file_storage = file_storage or FileStorage()

    # Middleware for CORS using allowed origins from settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    include_routers(app)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
