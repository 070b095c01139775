import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from clinisync.common.config import settings
from clinisync.common.database.store import EntityStore
from clinisync.models.models import Base

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url)


def _engine_options(url: str) -> dict:
    if _is_memory_sqlite(url):
        # One shared connection, otherwise every session sees its own empty database
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 1800}


class Database:
    """Owns the engine, the session factory and the unit-of-work lock.

    Every session handed out holds the lock until it is closed, so units of
    work run one at a time against the shared store.
    """

    def __init__(self, url: Optional[str] = None, echo: bool = False):
        self.url = url or settings.DATABASE_URL
        self.engine: AsyncEngine = create_async_engine(self.url, echo=echo, future=True, **_engine_options(self.url))
        self.session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        """Create the schema and check the connection."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
                await conn.execute(text("SELECT 1"))
            logger.info("Database connected successfully")
        except Exception:
            logger.exception("Error connecting to the database")
            raise

    async def close(self) -> None:
        """Close the database connection."""
        try:
            await self.engine.dispose()
            logger.info("Database connection closed successfully")
        except Exception:
            logger.exception("Error closing the database connection")
            raise

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[EntityStore, None]:
        """Open one unit of work. Uncommitted changes are rolled back on error."""
        async with self._lock:
            async with self.session_factory() as session:
                store = EntityStore(session)
                try:
                    yield store
                except Exception:
                    await session.rollback()
                    raise


# Dependency for using a store in routes
async def get_store(request: Request) -> AsyncGenerator[EntityStore, None]:
    """Yield an entity store bound to the application's database."""
    database: Database = request.app.state.database
    async with database.session() as store:
        yield store
