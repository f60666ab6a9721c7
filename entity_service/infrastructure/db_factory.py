"""
Database connection factory utilities for the entity service.

Callers hand `EntityService` an open `AsyncConnection`; this module is where
they get one. The PoolManager singleton owns a shared async pool, and
`get_async_connection` opens a dedicated connection for one-off work.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import psycopg
from psycopg import AsyncConnection, sql
from psycopg_pool import AsyncConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from entity_service.config import get_settings
from entity_service.utils.logging import get_logger

log = get_logger(__name__)


async def apply_statement_timeout(conn: AsyncConnection, timeout_ms: int) -> None:
    """
    Set the session ``statement_timeout`` when `timeout_ms` is positive.

    The SET is committed so the connection is left idle, as the pool expects.
    """
    if timeout_ms <= 0:
        return
    await conn.execute(
        sql.SQL("SET statement_timeout = {}").format(sql.Literal(int(timeout_ms)))
    )
    await conn.commit()


async def _configure_pooled_connection(conn: AsyncConnection) -> None:
    await apply_statement_timeout(conn, get_settings().db_statement_timeout_ms)


class PoolManager:
    """
    Thread-safe singleton for managing the async connection pool.

    The pool is created on first use and opened lazily; call `close` during
    application shutdown.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._async_pool = None
                cls._instance._opened = False
            return cls._instance

    def get_async_pool(
        self,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ) -> AsyncConnectionPool:
        """
        Get or create the asynchronous connection pool.

        Parameters
        ----------
        min_size : int, optional
            Minimum number of idle connections to keep. Defaults to settings.
        max_size : int, optional
            Maximum total connections in the pool. Defaults to settings.

        Returns
        -------
        AsyncConnectionPool
            The managed async pool instance (not necessarily opened yet).

        Raises
        ------
        ValueError
            If the pool already exists with a different `min_size` or
            `max_size` than the one requested. Sizes are fixed at creation.
        """
        with self._lock:
            if self._async_pool is None:
                settings = get_settings()
                self._async_pool = AsyncConnectionPool(
                    conninfo=settings.dsn,
                    min_size=settings.db_pool_min_size if min_size is None else min_size,
                    max_size=settings.db_pool_max_size if max_size is None else max_size,
                    configure=_configure_pooled_connection,
                    open=False,
                )
                self._opened = False
            else:
                requested = {"min_size": min_size, "max_size": max_size}
                for name, size in requested.items():
                    current = getattr(self._async_pool, name)
                    if size is not None and size != current:
                        raise ValueError(
                            f"Async pool already exists with {name}={current}; got {name}={size}"
                        )
            return self._async_pool

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[AsyncConnection]:
        """
        Borrow a connection from the pool.

        The pool commits on clean exit and rolls back if the block raises.

        Example
        -------
            manager = PoolManager()
            async with manager.connection() as conn:
                async with conn.transaction():
                    row = await service.update(conn, {"id": 1}, {"price": 12})
        """
        pool = self.get_async_pool()
        if not self._opened:
            await pool.open(wait=True)
            self._opened = True
            log.info("Opened async connection pool (max_size=%s)", pool.max_size)
        async with pool.connection() as conn:
            yield conn

    async def close(self) -> None:
        """
        Close the managed pool and release resources.
        """
        pool = self._async_pool
        self._async_pool = None
        self._opened = False
        if pool is not None:
            await pool.close()
            log.info("Closed async connection pool")


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, OSError)),
    reraise=True,
)
async def get_async_connection(dsn: Optional[str] = None) -> AsyncConnection:
    """
    Open a dedicated asynchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection
    errors, then applies the configured statement timeout. Prefer the pool
    for repeated use.

    Returns
    -------
    AsyncConnection
        A new psycopg async connection; the caller closes it.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    settings = get_settings()
    conn = await AsyncConnection.connect(dsn or settings.dsn)
    await apply_statement_timeout(conn, settings.db_statement_timeout_ms)
    return conn


def get_async_pool(
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
) -> AsyncConnectionPool:
    """
    Get or create the asynchronous connection pool via PoolManager.
    """
    manager = PoolManager()
    return manager.get_async_pool(min_size=min_size, max_size=max_size)


__all__ = [
    "PoolManager",
    "apply_statement_timeout",
    "get_async_connection",
    "get_async_pool",
]
