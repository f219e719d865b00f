"""Database handle with a lazily created async engine.

The handle is built once at startup, stored on ``app.state.database`` and
handed to request handlers through :func:`get_session`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

logger = logging.getLogger(__name__)


class DatabaseUnavailable(RuntimeError):
    """Raised when the engine cannot be created (bad URL, missing driver)."""


def normalize_url(raw_url: str) -> str:
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return raw_url


class Database:
    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        self.url = normalize_url(url)
        self._engine_kwargs = engine_kwargs
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    def _connect(self) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
        if self._engine is None or self._sessionmaker is None:
            kwargs = dict(self._engine_kwargs)
            if self.url.startswith("postgresql"):
                kwargs.setdefault("pool_pre_ping", True)
            try:
                self._engine = create_async_engine(self.url, **kwargs)
            except Exception as exc:
                logger.error("Failed to create database engine: %s", exc)
                raise DatabaseUnavailable(str(exc)) from exc
            self._sessionmaker = async_sessionmaker(self._engine, class_=AsyncSession, expire_on_commit=False)
        return self._engine, self._sessionmaker

    @property
    def engine(self) -> AsyncEngine:
        return self._connect()[0]

    def session(self) -> AsyncSession:
        return self._connect()[1]()

    async def create_all(self) -> None:
        from metabalance.tracking.tables import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
