"""
Database connection and transaction management using asyncpg.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import asyncpg
from asyncpg import Pool, Connection
from fastapi import Request

from user_service.config import Settings
from user_service.errors import DatabaseConnectionError, StorageError

logger = logging.getLogger(__name__)

# Failures that mean the store could not be reached at all
CONNECT_ERRORS = (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError)

# Failures raised while a statement runs on an acquired connection
STATEMENT_ERRORS = (OSError, asyncpg.PostgresError, asyncpg.InterfaceError)


class Transaction:
    """
    Handle on one in-progress transaction.

    Owned by a single request. ``commit()`` and ``rollback()`` end it;
    the handle cannot be used afterwards.
    """

    def __init__(self, conn: Connection):
        self._conn = conn
        self._tx = conn.transaction()
        self._started = False
        self._finished = False

    @property
    def active(self) -> bool:
        return self._started and not self._finished

    def _check_active(self) -> None:
        if not self.active:
            raise RuntimeError("Transaction is not active")

    async def start(self) -> None:
        if self._started:
            raise RuntimeError("Transaction already started")
        try:
            await self._tx.start()
        except STATEMENT_ERRORS as e:
            raise StorageError(f"Could not begin transaction: {e}") from e
        self._started = True

    async def fetchrow(self, query: str, *args) -> Optional[asyncpg.Record]:
        """Run one statement inside the transaction and return its first row."""
        self._check_active()
        try:
            return await self._conn.fetchrow(query, *args)
        except STATEMENT_ERRORS as e:
            raise StorageError(f"Statement failed: {e}") from e

    async def commit(self) -> None:
        self._check_active()
        self._finished = True
        try:
            await self._tx.commit()
        except STATEMENT_ERRORS as e:
            raise StorageError(f"Commit failed: {e}") from e

    async def rollback(self) -> None:
        self._check_active()
        self._finished = True
        try:
            await self._tx.rollback()
        except STATEMENT_ERRORS as e:
            raise StorageError(f"Rollback failed: {e}") from e


class Database:
    """Async PostgreSQL connection pool manager."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._pool: Optional[Pool] = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        """
        Initialize the connection pool.

        Retries with exponential backoff up to ``db_connect_attempts`` times,
        then raises DatabaseConnectionError.
        """
        async with self._lock:
            if self._pool is not None:
                return

            attempts = self._settings.db_connect_attempts
            delay = self._settings.db_connect_backoff

            for attempt in range(1, attempts + 1):
                logger.info(f"Connecting to PostgreSQL (attempt {attempt}/{attempts})...")
                try:
                    self._pool = await asyncpg.create_pool(
                        dsn=self._settings.database_url,
                        min_size=self._settings.db_pool_min_size,
                        max_size=self._settings.db_pool_max_size,
                        command_timeout=self._settings.db_command_timeout,
                        server_settings={
                            'application_name': self._settings.app_name,
                        }
                    )
                except CONNECT_ERRORS as e:
                    if attempt == attempts:
                        raise DatabaseConnectionError(
                            f"Could not connect to PostgreSQL after {attempts} attempts"
                        ) from e
                    logger.warning(f"PostgreSQL connection failed: {e}; retrying in {delay:.1f}s")
                    await asyncio.sleep(delay)
                    delay *= 2
                else:
                    break

            logger.info("PostgreSQL connection pool created successfully")

    async def disconnect(self) -> None:
        """Close the connection pool."""
        async with self._lock:
            if self._pool is None:
                return

            logger.info("Closing PostgreSQL connection pool...")
            await self._pool.close()
            self._pool = None
            logger.info("PostgreSQL connection pool closed")

    @property
    def pool(self) -> Pool:
        """Get the connection pool."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    async def _acquire(self) -> Connection:
        try:
            return await self.pool.acquire(timeout=self._settings.db_pool_timeout)
        except CONNECT_ERRORS as e:
            raise DatabaseConnectionError(f"Could not acquire a database connection: {e}") from e

    @asynccontextmanager
    async def acquire(self) -> AsyncGenerator[Connection, None]:
        """Acquire a connection from the pool."""
        conn = await self._acquire()
        try:
            yield conn
        finally:
            await self.pool.release(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[Transaction, None]:
        """
        Begin a transaction on a pooled connection.

        Commits when the block exits normally and rolls back on any
        exception, cancellation included. The connection goes back to the
        pool either way.
        """
        async with self.acquire() as conn:
            tx = Transaction(conn)
            await tx.start()
            try:
                yield tx
            except BaseException:
                if tx.active:
                    try:
                        await tx.rollback()
                    except StorageError:
                        logger.exception("Rollback failed; connection will be reset by the pool")
                raise
            if tx.active:
                await tx.commit()

    def pool_stats(self) -> dict:
        """Current pool occupancy; zero sizes when not connected."""
        if self._pool is None:
            size = idle = 0
        else:
            size = self._pool.get_size()
            idle = self._pool.get_idle_size()
        return {
            "max_size": self._settings.db_pool_max_size,
            "size": size,
            "in_use": size - idle,
        }

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
            return result == 1
        except (DatabaseConnectionError, RuntimeError, *STATEMENT_ERRORS) as e:
            logger.error(f"Database health check failed: {e}")
            return False


def get_db(request: Request) -> Database:
    """Dependency injection for the pool created at startup."""
    return request.app.state.database
