from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from shared.config import settings

engine = create_async_engine(settings.DATABASE_URL, echo=False)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def create_tables() -> None:
    # Imported for their side effect of registering tables on Base.metadata
    import articles.infrastructure.models  # noqa: F401
    import categories.infrastructure.models  # noqa: F401
    import comments.infrastructure.models  # noqa: F401
    import locks.infrastructure.models  # noqa: F401
    import versions.infrastructure.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
