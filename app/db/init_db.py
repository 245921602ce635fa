import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from app import models  # noqa: F401 - registers tables on Base.metadata
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)


async def init_db(bind: AsyncEngine = engine) -> None:
    """
    Create any missing tables. Alembic migrations remain the source of truth
    for production schemas; this keeps a fresh development database usable.
    """
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")


if __name__ == "__main__":
    asyncio.run(init_db())
