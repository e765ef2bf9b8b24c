import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack

import psycopg
from fastapi import HTTPException
from psycopg import AsyncConnection
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from .config import settings

logger = logging.getLogger(__name__)

# Shared async pool used by FastAPI dependencies.
pool: AsyncConnectionPool | None = None


async def init_db_pool() -> None:
    global pool

    # Keep app booting in non-DB contexts; CRUD endpoints fail explicitly, chat degrades.
    if not settings.database_url:
        logger.warning("DATABASE_URL is not set; storage-backed endpoints are disabled")
        return

    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        open=False,
        min_size=1,
        max_size=10,
        kwargs={"autocommit": True, "row_factory": dict_row},
    )
    await pool.open()


async def close_db_pool() -> None:
    global pool

    if pool is None:
        return

    await pool.close()
    pool = None


async def get_db_connection() -> AsyncIterator[AsyncConnection]:
    """Connection for CRUD routes; storage problems surface as request errors."""
    if pool is None:
        raise HTTPException(status_code=500, detail="DATABASE_URL is not configured")

    async with pool.connection() as connection:
        yield connection


async def get_optional_db_connection() -> AsyncIterator[AsyncConnection | None]:
    """
    Connection for the coach turn, or None when storage is unreachable.

    A missing pool or a failed checkout (`PoolTimeout` is a psycopg
    `OperationalError`) yields None so the turn runs with absent state.
    """
    if pool is None:
        logger.warning("no connection pool; chat turn runs without storage")
        yield None
        return

    async with AsyncExitStack() as stack:
        try:
            connection = await stack.enter_async_context(pool.connection())
        except psycopg.Error as exc:
            logger.error("connection checkout failed; chat turn runs without storage error=%r", exc)
            connection = None
        yield connection
