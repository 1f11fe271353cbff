"""Per-channel HTTP header overrides.

At most one header row exists per channel. Header sets with no value are
never written.
"""

from sqlite3 import Connection

from .types import ChannelHttpHeaders


def insert_channel_headers(conn: Connection, headers: ChannelHttpHeaders) -> bool:
    """Attach headers to a channel unless it already has some.

    Returns:
        True if a row was written
    """
    if headers.channel_id is None:
        raise ValueError("Headers need a channel_id")
    if headers.is_empty():
        return False
    cursor = conn.execute(
        """INSERT OR IGNORE INTO channel_http_headers
           (channel_id, referrer, user_agent, http_origin, ignore_ssl)
           VALUES (?, ?, ?, ?, ?)""",
        (
            headers.channel_id,
            headers.referrer,
            headers.user_agent,
            headers.http_origin,
            int(bool(headers.ignore_ssl)),
        ),
    )
    return cursor.rowcount == 1


def upsert_channel_headers(conn: Connection, headers: ChannelHttpHeaders) -> None:
    """Insert a channel's headers or overwrite every field of the existing row."""
    if headers.channel_id is None:
        raise ValueError("Headers need a channel_id")
    conn.execute(
        """INSERT INTO channel_http_headers
           (referrer, user_agent, http_origin, ignore_ssl, channel_id)
           VALUES (?, ?, ?, ?, ?)
           ON CONFLICT(channel_id) DO UPDATE SET
               referrer = excluded.referrer,
               user_agent = excluded.user_agent,
               http_origin = excluded.http_origin,
               ignore_ssl = excluded.ignore_ssl""",
        (
            headers.referrer,
            headers.user_agent,
            headers.http_origin,
            int(bool(headers.ignore_ssl)),
            headers.channel_id,
        ),
    )


def delete_channel_headers(conn: Connection, channel_id: int) -> int:
    """Remove a channel's headers. Returns the number of rows deleted."""
    cursor = conn.execute(
        "DELETE FROM channel_http_headers WHERE channel_id = ?", (channel_id,)
    )
    return cursor.rowcount


def get_channel_headers_by_id(conn: Connection, channel_id: int) -> ChannelHttpHeaders | None:
    """Get a channel's headers, or None to use player defaults."""
    row = conn.execute(
        "SELECT * FROM channel_http_headers WHERE channel_id = ?", (channel_id,)
    ).fetchone()
    return ChannelHttpHeaders.from_row(dict(row)) if row else None
