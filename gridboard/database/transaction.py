"""
Scoped unit of work over a MongoDB client session
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase

from gridboard.core.logging import logger


@asynccontextmanager
async def transaction(db: AsyncIOMotorDatabase) -> AsyncIterator[AsyncIOMotorClientSession]:
    """
    Acquire a session, run a transaction on it and release it.

    Commits when the block exits normally and aborts when it raises. The
    session is ended on every exit path, including cancellation.

    Usage:
        async with transaction(db) as session:
            await db.layouts.update_one(..., session=session)
    """
    session = await db.client.start_session()
    try:
        session.start_transaction()
        try:
            yield session
        except BaseException:
            logger.warning("Aborting transaction")
            await session.abort_transaction()
            raise
        await session.commit_transaction()
    finally:
        await session.end_session()
