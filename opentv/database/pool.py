"""Bounded pool of SQLite connections to one database file.

Connections are opened lazily up to ``max_size`` and handed out LIFO.
Usage:
    pool = ConnectionPool(path, max_size=20)

    with pool.connection() as conn:
        rows = conn.execute("SELECT * FROM sources").fetchall()

    with pool.transaction() as conn:
        conn.execute("UPDATE channels SET favorite = 1 WHERE id = ?", (42,))
"""

import logging
import queue
import sqlite3
import threading
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from opentv.database.errors import DatabaseError, PoolExhausted, TransactionFailure

logger = logging.getLogger(__name__)


def open_connection(path: Path | str) -> sqlite3.Connection:
    """Open a configured connection to the database file.

    Creates the file's parent directories if they are missing.

    Returns:
        SQLite connection in autocommit mode with row factory set to sqlite3.Row
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # isolation_level=None: transactions are opened explicitly by transaction()
    # check_same_thread=False: a connection may be released from another thread
    conn = sqlite3.connect(path, timeout=30.0, check_same_thread=False, isolation_level=None)
    conn.row_factory = sqlite3.Row

    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=30000")
    conn.execute("PRAGMA foreign_keys = ON")

    return conn


class ConnectionPool:
    """Fixed-size pool of connections.

    The size is set at construction and never changes. ``acquire`` raises
    PoolExhausted when every connection stays checked out past the timeout.
    """

    def __init__(self, path: Path | str, max_size: int = 20, timeout: float = 5.0):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.path = Path(path)
        self.max_size = max_size
        self.timeout = timeout
        self._idle: queue.LifoQueue[sqlite3.Connection] = queue.LifoQueue()
        self._lock = threading.Lock()
        self._opened = 0
        self._closed = False

    @property
    def opened(self) -> int:
        """Number of connections currently owned by the pool."""
        return self._opened

    def acquire(self, timeout: float | None = None) -> sqlite3.Connection:
        """Borrow a connection.

        Args:
            timeout: Seconds to wait for a free connection. Defaults to the
                pool timeout; 0 means do not wait.

        Raises:
            PoolExhausted: If no connection is available in time
        """
        if self._closed:
            raise DatabaseError("Connection pool is closed")

        try:
            return self._idle.get_nowait()
        except queue.Empty:
            pass

        with self._lock:
            if self._opened < self.max_size:
                conn = open_connection(self.path)
                self._opened += 1
                logger.debug("[POOL] Opened connection %d/%d", self._opened, self.max_size)
                return conn

        wait = self.timeout if timeout is None else timeout
        try:
            if wait <= 0:
                return self._idle.get_nowait()
            return self._idle.get(timeout=wait)
        except queue.Empty:
            logger.warning("[POOL] No connection available (max_size=%d)", self.max_size)
            raise PoolExhausted(
                f"No sqlite connection available within {wait}s (pool size {self.max_size})"
            ) from None

    def release(self, conn: sqlite3.Connection) -> None:
        """Return a borrowed connection. Rolls back any open transaction."""
        if conn.in_transaction:
            conn.rollback()
        if self._closed:
            conn.close()
            with self._lock:
                self._opened -= 1
            return
        self._idle.put(conn)

    @contextmanager
    def connection(self, timeout: float | None = None) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for a pooled connection (autocommit)."""
        conn = self.acquire(timeout)
        try:
            yield conn
        finally:
            self.release(conn)

    @contextmanager
    def transaction(
        self, timeout: float | None = None
    ) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for a write transaction.

        Commits when the block completes, rolls back on any exception.
        SQLite errors are re-raised as TransactionFailure; other errors
        are re-raised unchanged after the rollback.
        """
        conn = self.acquire(timeout)
        try:
            try:
                # A busy lock surfaces here once busy_timeout runs out
                conn.execute("BEGIN IMMEDIATE")
                yield conn
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                logger.error("[POOL] Transaction rolled back: %s", e)
                raise TransactionFailure(str(e)) from e
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
        finally:
            self.release(conn)

    def close(self) -> None:
        """Close every idle connection and refuse further acquires."""
        self._closed = True
        while True:
            try:
                conn = self._idle.get_nowait()
            except queue.Empty:
                break
            conn.close()
            with self._lock:
                self._opened -= 1
        logger.debug("[POOL] Closed (%d connections still checked out)", self._opened)
