"""Forward-only schema migrations.

Each migration is applied at most once per database file and recorded in the
``schema_migrations`` ledger in the same transaction as its changes. Version 0
is the baseline written by schema.sql.

Rules for adding a migration:
1. Append it to MIGRATIONS with the next version number
2. Use "IF NOT EXISTS" forms and the _ensure/_add helpers so a partially
   applied migration can run again
3. Never drop a table or column that holds user data
"""

import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass

from opentv.database.errors import MigrationFailure

logger = logging.getLogger(__name__)

BASELINE_VERSION = 0

LEDGER_DDL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""


@dataclass(frozen=True)
class Migration:
    """One forward schema change."""

    version: int
    name: str
    apply: Callable[[sqlite3.Connection], None]


# =============================================================================
# HELPERS
# =============================================================================


def _get_table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    """Get all column names for a table."""
    cursor = conn.execute(f"PRAGMA table_info({table})")
    return {row["name"] for row in cursor.fetchall()}


def _table_exists(conn: sqlite3.Connection, table: str) -> bool:
    """Check if a table exists."""
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,))
    return cursor.fetchone() is not None


def _index_columns(conn: sqlite3.Connection, index_name: str) -> list[str]:
    """Get the ordered column list of an index (empty if it doesn't exist)."""
    cursor = conn.execute(f"PRAGMA index_info({index_name})")
    return [row["name"] for row in sorted(cursor.fetchall(), key=lambda r: r["seqno"])]


def _add_column_safe(conn: sqlite3.Connection, table: str, column: str, definition: str) -> bool:
    """Add a column if it doesn't exist.

    Returns:
        True if column was added, False if it already existed
    """
    if column in _get_table_columns(conn, table):
        return False
    conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")
    logger.info("[MIGRATE] Added %s.%s", table, column)
    return True


# =============================================================================
# MIGRATIONS
# =============================================================================


def _migrate_channel_http_headers(conn: sqlite3.Connection) -> None:
    """Per-source channel uniqueness, per-channel HTTP headers, use_tvg_id."""
    # The same stream may appear in several sources
    if _index_columns(conn, "channels_unique") != ["name", "url", "source_id"]:
        conn.execute("DROP INDEX IF EXISTS channels_unique")
        conn.execute("CREATE UNIQUE INDEX channels_unique ON channels(name, url, source_id)")

    conn.execute("""
        CREATE TABLE IF NOT EXISTS channel_http_headers (
            id INTEGER PRIMARY KEY,
            channel_id INTEGER,
            referrer VARCHAR(500),
            user_agent VARCHAR(500),
            http_origin VARCHAR(500),
            ignore_ssl INTEGER DEFAULT 0,
            FOREIGN KEY (channel_id) REFERENCES channels(id) ON DELETE CASCADE
        )
    """)
    conn.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS index_channel_http_headers_channel_id "
        "ON channel_http_headers(channel_id)"
    )

    if _add_column_safe(conn, "sources", "use_tvg_id", "INTEGER"):
        # Playlist sources (m3u file and m3u link) carry usable tvg-ids
        conn.execute("UPDATE sources SET use_tvg_id = 1 WHERE source_type IN (0, 1)")


def _migrate_epg_notifications(conn: sqlite3.Connection) -> None:
    """Scheduled program-start notifications."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS epg_notifications (
            epg_id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            channel_name TEXT NOT NULL,
            start_timestamp INTEGER NOT NULL
        )
    """)
    conn.execute(
        "CREATE INDEX IF NOT EXISTS index_epg_notifications_start "
        "ON epg_notifications(start_timestamp)"
    )


MIGRATIONS: list[Migration] = [
    Migration(1, "channel_http_headers", _migrate_channel_http_headers),
    Migration(2, "epg_notifications", _migrate_epg_notifications),
]

LATEST_VERSION = MIGRATIONS[-1].version


# =============================================================================
# LEDGER
# =============================================================================


def ensure_ledger(conn: sqlite3.Connection) -> None:
    """Create the migration ledger if it doesn't exist."""
    conn.execute(LEDGER_DDL)


def get_current_version(conn: sqlite3.Connection) -> int:
    """Highest applied migration version, or -1 if nothing is recorded."""
    if not _table_exists(conn, "schema_migrations"):
        return -1
    row = conn.execute("SELECT MAX(version) AS version FROM schema_migrations").fetchone()
    return row["version"] if row["version"] is not None else -1


def record_migration(conn: sqlite3.Connection, version: int, name: str) -> None:
    """Record a migration as applied."""
    conn.execute(
        "INSERT OR IGNORE INTO schema_migrations (version, name) VALUES (?, ?)",
        (version, name),
    )
    conn.execute(f"PRAGMA user_version = {int(version)}")


def _adopt_user_version(conn: sqlite3.Connection) -> int:
    """Seed the ledger from PRAGMA user_version for files without one.

    Databases written before the ledger existed tracked their migration
    level in user_version only.
    """
    user_version = conn.execute("PRAGMA user_version").fetchone()[0]
    conn.execute("BEGIN IMMEDIATE")
    try:
        ensure_ledger(conn)
        record_migration(conn, BASELINE_VERSION, "baseline")
        for migration in MIGRATIONS:
            if migration.version <= user_version:
                record_migration(conn, migration.version, migration.name)
        conn.execute("COMMIT")
    except sqlite3.Error:
        conn.execute("ROLLBACK")
        raise
    if user_version:
        logger.info("[MIGRATE] Adopted user_version %d into migration ledger", user_version)
    return min(user_version, LATEST_VERSION)


def apply_pending_migrations(conn: sqlite3.Connection) -> int:
    """Apply every migration not yet recorded in the ledger, in order.

    Each migration runs in its own transaction together with its ledger row.
    The connection must be in autocommit mode (isolation_level=None).

    Returns:
        Number of migrations applied

    Raises:
        MigrationFailure: If a migration fails (that migration is rolled back)
    """
    current = get_current_version(conn)
    if current < 0:
        current = _adopt_user_version(conn)

    applied = 0
    for migration in MIGRATIONS:
        if migration.version <= current:
            continue

        logger.info("[MIGRATE] Applying v%d: %s", migration.version, migration.name)
        try:
            conn.execute("BEGIN IMMEDIATE")
            migration.apply(conn)
            record_migration(conn, migration.version, migration.name)
            conn.execute("COMMIT")
        except Exception as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            logger.error("[MIGRATE] v%d (%s) failed: %s", migration.version, migration.name, e)
            raise MigrationFailure(migration.version, migration.name, e) from e

        applied += 1
        current = migration.version

    if applied:
        logger.info("[MIGRATE] Schema now at v%d", current)
    return applied
