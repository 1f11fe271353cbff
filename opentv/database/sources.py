"""Database operations for channel sources.

A source is an IPTV provider, an imported playlist or a custom collection.
Deleting a source removes its channels and groups explicitly, in order.
"""

import logging
import sqlite3
from dataclasses import dataclass
from sqlite3 import Connection, Row

from opentv.core.types import SourceType
from opentv.database.errors import ConstraintViolation, NotFound
from opentv.database.safe_sql import build_update_query

logger = logging.getLogger(__name__)


@dataclass
class Source:
    """A channel source."""

    name: str
    source_type: SourceType
    id: int | None = None
    url: str | None = None
    username: str | None = None
    password: str | None = None
    enabled: bool = True
    use_tvg_id: bool | None = None


def _row_to_source(row: Row) -> Source:
    """Convert a database row to Source."""
    use_tvg_id = row["use_tvg_id"] if "use_tvg_id" in row.keys() else None
    return Source(
        id=row["id"],
        name=row["name"],
        source_type=SourceType(row["source_type"]),
        url=row["url"],
        username=row["username"],
        password=row["password"],
        enabled=bool(row["enabled"]),
        use_tvg_id=bool(use_tvg_id) if use_tvg_id is not None else None,
    )


def custom_source(name: str) -> Source:
    """Build an unsaved custom source."""
    return Source(name=name, source_type=SourceType.CUSTOM, enabled=True)


# =============================================================================
# READ OPERATIONS
# =============================================================================


def get_source(conn: Connection, source_id: int) -> Source | None:
    """Get a single source by ID."""
    row = conn.execute("SELECT * FROM sources WHERE id = ?", (source_id,)).fetchone()
    return _row_to_source(row) if row else None


def get_sources(conn: Connection) -> list[Source]:
    """Get all sources."""
    cursor = conn.execute("SELECT * FROM sources ORDER BY id")
    return [_row_to_source(row) for row in cursor.fetchall()]


def get_enabled_sources(conn: Connection) -> list[Source]:
    """Get sources that are enabled."""
    cursor = conn.execute("SELECT * FROM sources WHERE enabled = 1 ORDER BY id")
    return [_row_to_source(row) for row in cursor.fetchall()]


def source_name_exists(conn: Connection, name: str) -> bool:
    """Check if a source with this name exists."""
    row = conn.execute("SELECT 1 FROM sources WHERE name = ?", (name,)).fetchone()
    return row is not None


def get_source_from_series_id(conn: Connection, series_id: int) -> Source | None:
    """Get the source owning a series.

    A series row stores the provider's series id in its url column.
    """
    row = conn.execute(
        """
        SELECT * FROM sources WHERE id = (
            SELECT source_id FROM channels WHERE url = ? LIMIT 1
        )
        """,
        (str(series_id),),
    ).fetchone()
    return _row_to_source(row) if row else None


def get_channel_count_by_source(conn: Connection, source_id: int) -> int:
    """Count channels belonging to a source."""
    row = conn.execute(
        "SELECT COUNT(*) FROM channels WHERE source_id = ?", (source_id,)
    ).fetchone()
    return row[0]


# =============================================================================
# CREATE / UPDATE OPERATIONS
# =============================================================================


def create_or_find_source(conn: Connection, source: Source) -> int:
    """Get the ID of the source with this name, inserting it if needed.

    Call inside a transaction so the lookup and insert are atomic.
    Re-importing a playlist under the same name reuses the existing row.

    Returns:
        Source ID
    """
    row = conn.execute("SELECT id FROM sources WHERE name = ?", (source.name,)).fetchone()
    if row:
        return row["id"]

    cursor = conn.execute(
        """INSERT INTO sources (name, source_type, url, username, password, enabled, use_tvg_id)
           VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (
            source.name,
            int(source.source_type),
            source.url,
            source.username,
            source.password,
            int(source.enabled),
            None if source.use_tvg_id is None else int(source.use_tvg_id),
        ),
    )
    logger.info("[SOURCE] Created source '%s' (id=%d)", source.name, cursor.lastrowid)
    return cursor.lastrowid


def update_source(conn: Connection, source_id: int, **updates) -> None:
    """Update columns of a source.

    Raises:
        ValueError: If a column is not updatable
        ConstraintViolation: If the new name is taken
        NotFound: If the source doesn't exist
    """
    for key in ("enabled", "use_tvg_id"):
        if key in updates and updates[key] is not None:
            updates[key] = int(updates[key])
    if "source_type" in updates:
        updates["source_type"] = int(updates["source_type"])

    query, values = build_update_query("sources", updates)
    values.append(source_id)
    try:
        cursor = conn.execute(query, values)
    except sqlite3.IntegrityError as e:
        raise ConstraintViolation(f"Cannot update source {source_id}: {e}") from e
    if cursor.rowcount == 0:
        raise NotFound(f"Source {source_id} not found")


def set_source_enabled(conn: Connection, source_id: int, enabled: bool) -> None:
    """Enable or disable a source.

    Raises:
        NotFound: If the source doesn't exist
    """
    cursor = conn.execute(
        "UPDATE sources SET enabled = ? WHERE id = ?", (int(enabled), source_id)
    )
    if cursor.rowcount == 0:
        raise NotFound(f"Source {source_id} not found")


# =============================================================================
# DELETE OPERATIONS
# =============================================================================


def delete_channels_by_source(conn: Connection, source_id: int) -> int:
    """Delete a source's channels, keeping favorites.

    Returns:
        Number of channels deleted
    """
    cursor = conn.execute(
        "DELETE FROM channels WHERE source_id = ? AND COALESCE(favorite, 0) = 0",
        (source_id,),
    )
    return cursor.rowcount


def delete_groups_by_source(conn: Connection, source_id: int) -> int:
    """Delete a source's groups, keeping any group holding a favorite.

    Returns:
        Number of groups deleted
    """
    cursor = conn.execute(
        """
        DELETE FROM groups
        WHERE source_id = ?
        AND id NOT IN (
            SELECT group_id
            FROM channels
            WHERE favorite = 1
            AND group_id IS NOT NULL
        )
        """,
        (source_id,),
    )
    return cursor.rowcount


def refresh_source(conn: Connection, source_id: int) -> tuple[int, int]:
    """Clear a source ahead of re-import; favorites and their groups survive.

    Call inside the import transaction.

    Returns:
        Tuple of (channels_deleted, groups_deleted)
    """
    channels = delete_channels_by_source(conn, source_id)
    groups = delete_groups_by_source(conn, source_id)
    logger.info(
        "[SOURCE] Refreshed source %d: removed %d channels, %d groups",
        source_id,
        channels,
        groups,
    )
    return channels, groups


def delete_source(conn: Connection, source_id: int) -> None:
    """Delete a source with all its channels and groups.

    Call inside a transaction.

    Raises:
        NotFound: If no source row was deleted
    """
    # Headers go with their channels via ON DELETE CASCADE
    conn.execute("DELETE FROM channels WHERE source_id = ?", (source_id,))
    conn.execute("DELETE FROM groups WHERE source_id = ?", (source_id,))
    cursor = conn.execute("DELETE FROM sources WHERE id = ?", (source_id,))
    if cursor.rowcount != 1:
        raise NotFound(f"Source {source_id} not found")
    logger.info("[SOURCE] Deleted source %d", source_id)
