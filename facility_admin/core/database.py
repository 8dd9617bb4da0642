"""Database engine and session management."""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from facility_admin.core.config import settings


def build_engine(url: str, echo: bool = False):
    """
    Create an async engine for the given URL.

    In-memory SQLite databases live inside a single connection, so they
    are pinned to one with StaticPool.

    Args:
        url: SQLAlchemy database URL
        echo: Log emitted SQL

    Returns:
        AsyncEngine
    """
    if url.startswith("sqlite") and ":memory:" in url:
        return create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(url, echo=echo)


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def init_db(bind=None):
    """Create all tables."""
    # Register models on the metadata
    import facility_admin.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind=None):
    """Drop all tables."""
    import facility_admin.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
