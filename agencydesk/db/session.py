import logging

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from agencydesk.core.config import settings, is_debug_mode

logger = logging.getLogger(__name__)

if is_debug_mode():
    logger.info("Creating database engine in debug mode")

engine = create_async_engine(settings.DATABASE_URL, future=True, echo=False, pool_pre_ping=True)
SessionAsync = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables():
    """Create all tables from the model metadata."""
    from agencydesk.db.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
