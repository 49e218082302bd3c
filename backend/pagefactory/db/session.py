from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from pagefactory.models.base import Base


def create_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    # Importing the model registers its table on Base.metadata
    from pagefactory.models import job  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
