"""
Async SQLAlchemy engine and session factory.

The store is a single PostgreSQL database reached through ``asyncpg``.
Every request gets one ``AsyncSession`` (one transaction); the lifecycle
services never open sessions of their own.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    echo=settings.sql_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base shared by the account, resource and inbox tables."""


async def dispose_engine() -> None:
    """Close pooled connections (application shutdown)."""
    await engine.dispose()
    logger.info("Database connections closed")
