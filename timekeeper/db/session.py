"""
Async SQLAlchemy engine & session factory (asyncpg driver).

The ``Database`` handle is built once by the app factory, stored on
``app.state`` and disposed at shutdown.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from timekeeper.db.base import Base


class Database:
    def __init__(self, url: str, **engine_args: Any) -> None:
        args: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
        if "postgresql" in url:
            args.update(
                {
                    "pool_size": 20,
                    "max_overflow": 10,
                    "pool_recycle": 300,
                }
            )
        args.update(engine_args)

        self.url = url
        self.engine = create_async_engine(url, **args)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
