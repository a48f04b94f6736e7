import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from forum.config import settings

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(engine) -> None:
    """SQLite ignores ON DELETE CASCADE/SET NULL unless each connection opts in."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str, production: bool = False):
    # SQLite files are opened per session; pool sizing applies to servers only
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, poolclass=NullPool)
        enable_sqlite_foreign_keys(engine)
        return engine
    if production:
        return create_async_engine(
            database_url,
            pool_size=20,
            max_overflow=50,
            pool_timeout=60,
            pool_recycle=1800,
        )
    return create_async_engine(
        database_url,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
    )


engine = build_engine(settings.database_url, settings.is_production)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db():
    async with AsyncSessionLocal() as db:
        try:
            yield db
        except Exception:
            await db.rollback()
            raise


async def init_models() -> None:
    """Create any missing tables."""
    # Models must be imported so their tables are registered on Base
    import forum.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created (if not existing).")
