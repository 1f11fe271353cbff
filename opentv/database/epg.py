"""Scheduled program notifications.

Auxiliary table read and written by the EPG notifier: one row per program
the user asked to be reminded of.
"""

import time
from dataclasses import dataclass
from sqlite3 import Connection


@dataclass
class EpgNotification:
    """A program start to notify about."""

    epg_id: str
    title: str
    channel_name: str
    start_timestamp: int  # unix seconds


def add_epg(conn: Connection, epg: EpgNotification) -> None:
    """Schedule a notification (replaces one with the same epg_id)."""
    conn.execute(
        """INSERT OR REPLACE INTO epg_notifications
           (epg_id, title, channel_name, start_timestamp)
           VALUES (?, ?, ?, ?)""",
        (epg.epg_id, epg.title, epg.channel_name, epg.start_timestamp),
    )


def get_epgs(conn: Connection) -> list[EpgNotification]:
    """Get scheduled notifications, soonest first."""
    cursor = conn.execute(
        "SELECT * FROM epg_notifications ORDER BY start_timestamp, epg_id"
    )
    return [
        EpgNotification(
            epg_id=row["epg_id"],
            title=row["title"],
            channel_name=row["channel_name"],
            start_timestamp=row["start_timestamp"],
        )
        for row in cursor.fetchall()
    ]


def remove_epg(conn: Connection, epg_id: str) -> bool:
    """Cancel a notification. Returns True if one was removed."""
    cursor = conn.execute("DELETE FROM epg_notifications WHERE epg_id = ?", (epg_id,))
    return cursor.rowcount > 0


def clean_epgs(conn: Connection, now: int | None = None) -> int:
    """Drop notifications whose program has already started.

    Returns:
        Number of rows removed
    """
    if now is None:
        now = int(time.time())
    cursor = conn.execute(
        "DELETE FROM epg_notifications WHERE start_timestamp <= ?", (now,)
    )
    return cursor.rowcount
