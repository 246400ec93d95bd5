from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

# Async engine and session factory
async def get_engine(database_url: str, echo: bool = False):
    return create_async_engine(database_url, echo=echo)

async def get_session_factory(engine):
    return sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autocommit=False, autoflush=False
    )
