"""Database handle and schema initialization.

A single Database (file path + connection pool) is built at startup with
open_database() and passed to everything that needs storage.
"""

import logging
import sqlite3
import sys
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from opentv.config import Config
from opentv.database.errors import MigrationFailure
from opentv.database.migrations import (
    BASELINE_VERSION,
    apply_pending_migrations,
    ensure_ledger,
    record_migration,
)
from opentv.database.pool import ConnectionPool

logger = logging.getLogger(__name__)

# Schema file location
SCHEMA_PATH = Path(__file__).parent / "schema.sql"

# Tables removed by drop_db(), children first
_ALL_TABLES = (
    "channel_http_headers",
    "epg_notifications",
    "channels",
    "groups",
    "sources",
    "settings",
    "schema_migrations",
)


@dataclass
class Database:
    """Process-scoped storage handle."""

    path: Path
    pool: ConnectionPool

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Borrow a connection for reads or single-statement writes.

        Usage:
            with db.connection() as conn:
                sources = get_sources(conn)
        """
        with self.pool.connection() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Borrow a connection inside a transaction (commit or rollback)."""
        with self.pool.transaction() as conn:
            yield conn

    def close(self) -> None:
        self.pool.close()


def get_db_path(db_path: Path | str | None = None) -> Path:
    """Resolve the database path. The file itself is created on first connect."""
    return Path(db_path) if db_path else Config.get_database_path()


def open_database(
    db_path: Path | str | None = None,
    pool_size: int | None = None,
    timeout: float | None = None,
    initialize: bool = True,
) -> Database:
    """Build the process-wide Database handle.

    Args:
        db_path: Database file. Uses the configured path if not specified.
        pool_size: Maximum open connections. Defaults to Config.POOL_SIZE.
        timeout: Seconds acquire() waits for a free connection.
        initialize: Run init_db() before returning.

    Raises:
        MigrationFailure: If initialization fails to migrate the schema
    """
    path = get_db_path(db_path)
    pool = ConnectionPool(
        path,
        max_size=pool_size or Config.POOL_SIZE,
        timeout=Config.POOL_TIMEOUT if timeout is None else timeout,
    )
    db = Database(path=path, pool=pool)
    if initialize:
        try:
            init_db(db)
        except Exception:
            pool.close()
            raise
    return db


# =============================================================================
# SCHEMA
# =============================================================================


def schema_present(conn: sqlite3.Connection) -> bool:
    """Check whether the baseline tables exist."""
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'channels' LIMIT 1"
    ).fetchone()
    return row is not None


def create_baseline(conn: sqlite3.Connection) -> None:
    """Create the baseline tables and indexes and stamp the ledger at v0.

    Runs as one transaction: either the whole baseline exists afterwards or
    nothing does.

    Raises:
        MigrationFailure: If the schema script fails (version 0, "baseline")
    """
    schema_sql = SCHEMA_PATH.read_text()
    try:
        # executescript() commits any pending transaction, so the script
        # carries its own BEGIN/COMMIT
        conn.executescript(f"BEGIN IMMEDIATE;\n{schema_sql}\nCOMMIT;")
        conn.execute("BEGIN IMMEDIATE")
        ensure_ledger(conn)
        record_migration(conn, BASELINE_VERSION, "baseline")
        conn.execute("COMMIT")
    except sqlite3.Error as e:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        logger.error("[SCHEMA] Baseline creation failed: %s", e)
        raise MigrationFailure(BASELINE_VERSION, "baseline", e) from e
    logger.info("[SCHEMA] Created baseline schema")


def init_db(db: Database) -> int:
    """Initialize the database: create the baseline if absent, then migrate.

    Safe to call multiple times.

    Returns:
        Number of migrations applied

    Raises:
        MigrationFailure: If any migration fails. The caller must not
            continue with the database.
    """
    with db.connection() as conn:
        if not schema_present(conn):
            logger.info("[SCHEMA] No schema found in %s", db.path)
            create_baseline(conn)
        return apply_pending_migrations(conn)


def drop_db(conn: sqlite3.Connection) -> None:
    """Drop every table. Used by tests and resets."""
    for table in _ALL_TABLES:
        conn.execute(f"DROP TABLE IF EXISTS {table}")
    conn.execute("PRAGMA user_version = 0")
    logger.warning("[SCHEMA] Dropped all tables")


def delete_database(db: Database) -> None:
    """Delete the database file and end the process.

    Destructive: the caller has already confirmed with the user.
    """
    db.close()
    for suffix in ("", "-wal", "-shm"):
        Path(f"{db.path}{suffix}").unlink(missing_ok=True)
    logger.warning("[SCHEMA] Deleted database %s, exiting", db.path)
    sys.exit(0)
