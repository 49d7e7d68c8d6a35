from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker

from inventory_api.core.logging_config import get_logger

logger = get_logger("db")

Base = declarative_base()


class Database:
    """Engine and session factory for one process.

    Built once by the application factory and handed to whoever needs it;
    nothing in the package reaches for a module-level engine.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine = create_async_engine(url, future=True, echo=echo)
        self.session_factory = sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        """Atomic scope: commit on normal exit, roll back and re-raise on any exception."""
        async with self.session_factory() as session:
            logger.debug("transaction_started")
            try:
                yield session
                await session.commit()
                logger.debug("transaction_committed")
            except Exception as exc:
                await session.rollback()
                logger.info(
                    "transaction_rolled_back",
                    extra={"reason": type(exc).__name__},
                )
                raise

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        # models register themselves on Base.metadata when imported
        from inventory_api.db.models import products, purchase_lines, purchases, users  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.db


async def get_db(request: Request):
    async with get_database(request).session_factory() as session:
        yield session
