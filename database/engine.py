import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url

# SQLite-friendly engine options (local runs and tests)
is_sqlite = DATABASE_URL.startswith("sqlite")
engine_kwargs: dict = {"echo": settings.database_echo}
if is_sqlite:
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    if ":memory:" in DATABASE_URL or DATABASE_URL.rstrip("/").endswith("sqlite+aiosqlite:"):
        engine_kwargs["poolclass"] = StaticPool
else:
    engine_kwargs["pool_pre_ping"] = True

db_engine = create_async_engine(DATABASE_URL, **engine_kwargs)


def make_session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# Create async session maker to be used throughout the application
AsyncSessionLocal = make_session_factory(db_engine)


# Base class for declarative models
class Base(DeclarativeBase):
    pass


# Dependency to get DB session
async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


def _import_models() -> None:
    # Registers every table on Base.metadata
    from database.models import applications, candidates, jobs, pokes  # noqa: F401


# Function to initialize the database (create tables)
async def init_db():
    _import_models()
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized", extra={"sqlite": is_sqlite})


# Function to close database connections
async def close_db():
    """Close database engine and connections."""
    await db_engine.dispose()
