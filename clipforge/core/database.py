"""Database engine, session factory and declarative base.

The schema is owned by Alembic; this module never creates tables. Stores
receive ``async_session_maker`` through the DI container and open one short
session per query.
"""

import re
from typing import ClassVar

from sqlalchemy import MetaData, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, declared_attr

from clipforge.core.config import get_config
from clipforge.core.logging import get_logger

logger = get_logger(__name__)

# Constraint names must match the ones in alembic/versions
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Base(DeclarativeBase):
    """Declarative base for ClipForge tables.

    Table names default to the snake_case class name; models in this
    package set ``__tablename__`` explicitly anyway.
    """

    metadata: ClassVar[MetaData] = metadata

    @declared_attr.directive
    @classmethod
    def __tablename__(cls) -> str:
        return re.sub(r"(?<!^)(?=[A-Z])", "_", cls.__name__).lower()


_config = get_config()
engine: AsyncEngine = create_async_engine(
    str(_config.database_url),
    echo=_config.database_echo,
    pool_size=_config.database_pool_size,
    max_overflow=_config.database_max_overflow,
    pool_pre_ping=True,
    pool_recycle=3600,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def check_db_connection() -> bool:
    """Run ``SELECT 1`` against the pipeline database.

    Returns:
        True when the database answered
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database unreachable", error_type=type(e).__name__, error=str(e))
        return False
    return True


async def close_db() -> None:
    """Dispose of the connection pool on shutdown."""
    await engine.dispose()
    logger.info("Database connections closed")


__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "async_session_maker",
    "check_db_connection",
    "close_db",
    "engine",
]
