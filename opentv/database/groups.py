"""Database operations for channel groups (categories).

A group name is unique within its source. Import creates groups lazily the
first time a name is seen; custom sources create them explicitly.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from sqlite3 import Connection, Row
from typing import TYPE_CHECKING

from opentv.database.errors import ConstraintViolation, NotFound
from opentv.database.safe_sql import like_pattern

if TYPE_CHECKING:
    from opentv.database.channels.types import Channel

logger = logging.getLogger(__name__)


@dataclass
class Group:
    """A channel group."""

    name: str
    id: int | None = None
    image: str | None = None
    source_id: int | None = None


@dataclass
class IdName:
    """Minimal id/name pair for auto-complete lists."""

    id: int
    name: str


@dataclass
class GroupCache:
    """Group name -> id map for one import batch.

    Owned by the import that creates it; never shared between imports.
    """

    source_id: int
    ids: dict[str, int] = field(default_factory=dict)

    def get(self, name: str) -> int | None:
        return self.ids.get(name)

    def put(self, name: str, group_id: int) -> None:
        self.ids[name] = group_id

    def __contains__(self, name: str) -> bool:
        return name in self.ids

    def __len__(self) -> int:
        return len(self.ids)


def _row_to_group(row: Row) -> Group:
    """Convert a database row to Group."""
    return Group(
        id=row["id"],
        name=row["name"],
        image=row["image"],
        source_id=row["source_id"],
    )


# =============================================================================
# READ OPERATIONS
# =============================================================================


def get_group(conn: Connection, group_id: int) -> Group | None:
    """Get a single group by ID."""
    row = conn.execute("SELECT * FROM groups WHERE id = ?", (group_id,)).fetchone()
    return _row_to_group(row) if row else None


def get_group_id(conn: Connection, name: str, source_id: int) -> int | None:
    """Get a group ID by name within a source."""
    row = conn.execute(
        "SELECT id FROM groups WHERE name = ? AND source_id = ?", (name, source_id)
    ).fetchone()
    return row["id"] if row else None


def get_groups_by_source(conn: Connection, source_id: int) -> list[Group]:
    """Get all groups of a source."""
    cursor = conn.execute("SELECT * FROM groups WHERE source_id = ? ORDER BY id", (source_id,))
    return [_row_to_group(row) for row in cursor.fetchall()]


def group_exists(conn: Connection, name: str, source_id: int) -> bool:
    """Check if a group name is taken within a source."""
    return get_group_id(conn, name, source_id) is not None


def group_not_empty(conn: Connection, group_id: int) -> bool:
    """Check if any channel belongs to a group."""
    row = conn.execute(
        "SELECT 1 FROM channels WHERE group_id = ? LIMIT 1", (group_id,)
    ).fetchone()
    return row is not None


def group_auto_complete(conn: Connection, query: str | None, source_id: int) -> list[IdName]:
    """Groups of a source whose name contains ``query``."""
    cursor = conn.execute(
        "SELECT id, name FROM groups WHERE name LIKE ? AND source_id = ? ORDER BY name",
        (like_pattern(query), source_id),
    )
    return [IdName(id=row["id"], name=row["name"]) for row in cursor.fetchall()]


# =============================================================================
# CREATE OPERATIONS
# =============================================================================


def insert_group(conn: Connection, name: str, image: str | None, source_id: int) -> int:
    """Insert a group unless the name already exists in the source.

    Returns:
        ID of the new or existing group
    """
    cursor = conn.execute(
        "INSERT OR IGNORE INTO groups (name, image, source_id) VALUES (?, ?, ?)",
        (name, image, source_id),
    )
    if cursor.rowcount == 1:
        return cursor.lastrowid

    # Name collision within the source: reuse the stored row
    group_id = get_group_id(conn, name, source_id)
    if group_id is None:
        raise NotFound(f"Group '{name}' was neither inserted nor found in source {source_id}")
    return group_id


def set_channel_group(
    conn: Connection,
    channel: "Channel",
    source_id: int,
    cache: GroupCache,
) -> int | None:
    """Resolve ``channel.group`` to an ID and store it on ``channel.group_id``.

    Groups are created on first sight of a name; later channels of the
    same batch hit the cache.

    Returns:
        Group ID, or None if the channel has no group
    """
    if cache.source_id != source_id:
        raise ValueError(f"Group cache belongs to source {cache.source_id}, not {source_id}")
    if not channel.group:
        return None

    group_id = cache.get(channel.group)
    if group_id is None:
        # The first channel's logo doubles as the group image
        group_id = insert_group(conn, channel.group, channel.image, source_id)
        cache.put(channel.group, group_id)

    channel.group_id = group_id
    return group_id


def add_custom_group(conn: Connection, group: Group) -> int:
    """Create a group in a custom source.

    Raises:
        ConstraintViolation: If the name is taken within the source
    """
    try:
        cursor = conn.execute(
            "INSERT INTO groups (name, image, source_id) VALUES (?, ?, ?)",
            (group.name, group.image, group.source_id),
        )
    except sqlite3.IntegrityError as e:
        raise ConstraintViolation(
            f"Group '{group.name}' already exists in source {group.source_id}"
        ) from e
    return cursor.lastrowid


# =============================================================================
# UPDATE / DELETE OPERATIONS
# =============================================================================


def edit_custom_group(conn: Connection, group: Group) -> None:
    """Rename a group or change its image.

    Raises:
        ConstraintViolation: If the new name is taken within the source
        NotFound: If the group doesn't exist
    """
    try:
        cursor = conn.execute(
            "UPDATE groups SET name = ?, image = ? WHERE id = ?",
            (group.name, group.image, group.id),
        )
    except sqlite3.IntegrityError as e:
        raise ConstraintViolation(f"Group name '{group.name}' is taken") from e
    if cursor.rowcount == 0:
        raise NotFound(f"Group {group.id} not found")


def delete_custom_group(
    conn: Connection,
    group_id: int,
    new_group_id: int | None = None,
    do_channels_update: bool = False,
) -> None:
    """Delete a group.

    Call inside a transaction.

    Args:
        conn: Database connection
        group_id: Group to delete
        new_group_id: Group receiving the channels (None leaves them ungrouped)
        do_channels_update: Move the group's channels first. When False the
            group must already be empty.

    Raises:
        ConstraintViolation: If channels still reference the group
        NotFound: If the group doesn't exist
    """
    if do_channels_update:
        conn.execute(
            "UPDATE channels SET group_id = ? WHERE group_id = ?",
            (new_group_id, group_id),
        )
    try:
        cursor = conn.execute("DELETE FROM groups WHERE id = ?", (group_id,))
    except sqlite3.IntegrityError as e:
        raise ConstraintViolation(f"Group {group_id} still has channels") from e
    if cursor.rowcount == 0:
        raise NotFound(f"Group {group_id} not found")
    logger.debug("[GROUP] Deleted group %d (channels moved to %s)", group_id, new_group_id)
