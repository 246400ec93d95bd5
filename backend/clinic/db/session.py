from sqlalchemy.ext.asyncio import AsyncSession
from typing import AsyncGenerator, Optional
from contextlib import asynccontextmanager
import logging

logger = logging.getLogger(__name__)

# Global variable to hold the session factory
_global_session_factory: Optional[AsyncSession] = None

def set_global_session_factory(factory):
    """Sets the globally accessible session factory. Called once at startup."""
    global _global_session_factory
    _global_session_factory = factory
    logger.info("Global SQLAlchemy session factory has been set.")

# Context manager for services running outside a request (scripts, jobs)
@asynccontextmanager
async def service_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provides a DB session using the globally set factory.
    """
    global _global_session_factory
    if _global_session_factory is None:
        logger.error("Global session factory accessed before being set.")
        raise RuntimeError("Database session factory not initialized globally.")

    session_factory = _global_session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            logger.exception("Error occurred within service_db_session context")
            raise


@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Unit of work around a single write.

    Commits when the block exits normally. Any exception raised inside the
    block (including validation errors) rolls the session back and is
    re-raised unchanged.
    """
    try:
        yield db
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(
            f"Transaction rolled back: {type(e).__name__} - {e}",
            exc_info=True,
        )
        raise
