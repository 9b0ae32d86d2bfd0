# rollcall/db/session.py
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from rollcall.core.config import get_settings
from rollcall.db.base import Base

settings = get_settings()

engine_options: dict[str, Any] = {"echo": False}
if settings.APP_ENV == "test":
    # Tests drive the engine from several event loops (TestClient portal,
    # pytest-asyncio); never hand a pooled connection to another loop.
    engine_options["poolclass"] = NullPool

engine = create_async_engine(settings.DB_URL, **engine_options)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    autoflush=False,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async SQLAlchemy session.

    The session is automatically closed when the request is completed.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def init_db() -> None:
    """
    Create any missing tables.

    Called from the application lifespan. Typically you'd eventually replace
    this with Alembic migrations.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

