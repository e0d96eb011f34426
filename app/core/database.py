from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base
from app.core.config import settings

# Async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True, # ping before handing out a pooled connection
    echo=settings.DATABASE_ECHO,
)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# ORM model base class
Base = declarative_base()


async def get_db() -> AsyncSession:
    """FastAPI Dependency: one async session per request"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_models(bind=None) -> None:
    """Create all tables (startup / tests)."""
    # register every model on Base.metadata
    from app.models import (  # noqa: F401
        user, project, proposal, contract, message, payment,
        wallet, notification, review, dispute, admin_log,
    )

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
