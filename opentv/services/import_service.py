"""Channel import service facade.

Playlist and provider parsers hand parsed channels to an ImportSession.
One session is one transaction: either the whole batch lands or none of it.
"""

import logging
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from dataclasses import dataclass
from sqlite3 import Connection

from opentv.database.channels import ChannelHttpHeaders, insert_channel, insert_channel_headers
from opentv.database.channels.types import Channel
from opentv.database.connection import Database
from opentv.database.groups import GroupCache, set_channel_group
from opentv.database.sources import Source, create_or_find_source, refresh_source

logger = logging.getLogger(__name__)


@dataclass
class ImportStats:
    """Counters for one import batch."""

    inserted: int = 0
    skipped: int = 0
    headers: int = 0
    removed_channels: int = 0
    removed_groups: int = 0


class ImportSession:
    """Writes one source's channels inside an open transaction.

    Owns the group cache for the batch; create through import_source().
    """

    def __init__(self, conn: Connection, source_id: int):
        self._conn = conn
        self.source_id = source_id
        self.groups = GroupCache(source_id=source_id)
        self.stats = ImportStats()

    def add_channel(
        self,
        channel: Channel,
        headers: ChannelHttpHeaders | None = None,
    ) -> int | None:
        """Store a parsed channel, creating its group on first sight.

        Returns:
            New channel ID, or None if it was already stored
        """
        channel.source_id = self.source_id
        set_channel_group(self._conn, channel, self.source_id, self.groups)

        channel_id = insert_channel(self._conn, channel)
        if channel_id is None:
            self.stats.skipped += 1
            return None
        self.stats.inserted += 1

        if headers is not None and not headers.is_empty():
            headers.channel_id = channel_id
            if insert_channel_headers(self._conn, headers):
                self.stats.headers += 1
        return channel_id

    def add_channels(self, channels: Iterable[Channel]) -> None:
        for channel in channels:
            self.add_channel(channel)


@contextmanager
def import_source(
    db: Database,
    source: Source,
    refresh: bool = False,
) -> Generator[ImportSession, None, None]:
    """Open an import transaction for a source.

    The source is looked up by name and created if missing. With
    ``refresh`` the source's non-favorite channels and unprotected groups
    are cleared first.

    Usage:
        with import_source(db, source, refresh=True) as session:
            for channel in parsed:
                session.add_channel(channel)

    Raises:
        TransactionFailure: If any write failed (the batch is rolled back)
    """
    with db.transaction() as conn:
        source_id = create_or_find_source(conn, source)
        source.id = source_id
        session = ImportSession(conn, source_id)
        if refresh:
            removed = refresh_source(conn, source_id)
            session.stats.removed_channels, session.stats.removed_groups = removed
        yield session

    stats = session.stats
    logger.info(
        "[IMPORT] Source '%s': %d inserted, %d skipped, %d groups, %d header sets",
        source.name,
        stats.inserted,
        stats.skipped,
        len(session.groups),
        stats.headers,
    )
