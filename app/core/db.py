from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from .config import settings
from .base import Base

engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

async def get_session():
    async with SessionLocal() as session:
        yield session

@asynccontextmanager
async def transaction(session: AsyncSession):
    """Commit everything flushed inside the block, or roll all of it back."""
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise

async def init_models():
    ## In dev-only "create_all" mode create tables; otherwise migrations own the schema.
    if settings.DB_MANAGE == "create_all":
        # register every mapped table on Base.metadata
        import app.modules.codes.models  # noqa: F401
        import app.modules.clients.models  # noqa: F401
        import app.modules.addresses.models  # noqa: F401
        import app.modules.commands.models  # noqa: F401
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
