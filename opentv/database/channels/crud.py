"""Channel CRUD operations.

Create, Read, Update, Delete operations for the channels table.
"""

import logging
from sqlite3 import Connection

from opentv.database.errors import NotFound

from .types import Channel

logger = logging.getLogger(__name__)


def insert_channel(conn: Connection, channel: Channel) -> int | None:
    """Insert a channel unless (name, url, source) already exists.

    Duplicate playlist entries are skipped silently on re-import.

    Returns:
        ID of the new channel, or None if it was skipped as a duplicate
    """
    cursor = conn.execute(
        """INSERT OR IGNORE INTO channels
           (name, group_id, image, url, source_id, media_type, series_id, favorite)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            channel.name,
            channel.group_id,
            channel.image,
            channel.url,
            channel.source_id,
            int(channel.media_type),
            channel.series_id,
            int(channel.favorite),
        ),
    )
    if cursor.rowcount == 0:
        return None
    channel.id = cursor.lastrowid
    return cursor.lastrowid


def get_channel(conn: Connection, channel_id: int) -> Channel | None:
    """Get a channel by ID.

    Args:
        conn: Database connection
        channel_id: Channel ID

    Returns:
        Channel or None if not found
    """
    row = conn.execute("SELECT * FROM channels WHERE id = ?", (channel_id,)).fetchone()
    if not row:
        return None
    return Channel.from_row(dict(row))


def channel_exists(conn: Connection, name: str, url: str, source_id: int) -> bool:
    """Check if a channel with this name and url exists in a source."""
    row = conn.execute(
        "SELECT 1 FROM channels WHERE name = ? AND source_id = ? AND url = ?",
        (name, source_id, url),
    ).fetchone()
    return row is not None


def series_has_episodes(conn: Connection, series_id: int) -> bool:
    """Check if episodes of a series are stored."""
    row = conn.execute(
        "SELECT 1 FROM channels WHERE series_id = ? LIMIT 1", (series_id,)
    ).fetchone()
    return row is not None


def favorite_channel(conn: Connection, channel_id: int, favorite: bool) -> None:
    """Pin or unpin a channel.

    Raises:
        NotFound: If the channel doesn't exist
    """
    cursor = conn.execute(
        "UPDATE channels SET favorite = ? WHERE id = ?", (int(favorite), channel_id)
    )
    if cursor.rowcount == 0:
        raise NotFound(f"Channel {channel_id} not found")


def update_channel(conn: Connection, channel: Channel) -> None:
    """Update the user-editable fields of a channel.

    Raises:
        NotFound: If the channel doesn't exist
    """
    cursor = conn.execute(
        """UPDATE channels
           SET name = ?, image = ?, url = ?, media_type = ?, group_id = ?
           WHERE id = ?""",
        (
            channel.name,
            channel.image,
            channel.url,
            int(channel.media_type),
            channel.group_id,
            channel.id,
        ),
    )
    if cursor.rowcount == 0:
        raise NotFound(f"Channel {channel.id} not found")


def delete_channel(conn: Connection, channel_id: int) -> None:
    """Delete a channel; its headers cascade.

    Raises:
        NotFound: If the channel doesn't exist
    """
    cursor = conn.execute("DELETE FROM channels WHERE id = ?", (channel_id,))
    if cursor.rowcount == 0:
        raise NotFound(f"Channel {channel_id} not found")
