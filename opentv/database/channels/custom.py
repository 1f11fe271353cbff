"""Custom channel operations.

Custom channels belong to user-defined sources and carry optional HTTP
headers that are written and removed together with the channel.
"""

import logging
from sqlite3 import Connection
from typing import TYPE_CHECKING

from opentv.core.types import MediaType
from opentv.database.groups import Group, get_group, get_groups_by_source

from .crud import delete_channel, insert_channel, update_channel
from .headers import (
    delete_channel_headers,
    get_channel_headers_by_id,
    insert_channel_headers,
    upsert_channel_headers,
)
from .types import (
    Channel,
    ChannelHttpHeaders,
    CustomChannel,
    CustomChannelExtraData,
    ExportedGroup,
)

if TYPE_CHECKING:
    from opentv.database.connection import Database

logger = logging.getLogger(__name__)


def add_custom_channel(conn: Connection, custom: CustomChannel) -> int | None:
    """Insert a custom channel and its headers.

    Call inside a transaction.

    Returns:
        New channel ID, or None if the channel already existed
    """
    channel_id = insert_channel(conn, custom.data)
    if channel_id is None:
        return None
    if custom.headers is not None and not custom.headers.is_empty():
        custom.headers.channel_id = channel_id
        insert_channel_headers(conn, custom.headers)
    return channel_id


def edit_custom_channel_tx(conn: Connection, custom: CustomChannel) -> None:
    """Update a channel and replace or remove its headers.

    Must run inside a transaction so a failed header write undoes the
    channel update.

    Raises:
        NotFound: If the channel doesn't exist
    """
    update_channel(conn, custom.data)
    if custom.headers is not None and not custom.headers.is_empty():
        custom.headers.channel_id = custom.data.id
        upsert_channel_headers(conn, custom.headers)
    else:
        delete_channel_headers(conn, custom.data.id)


def edit_custom_channel(db: "Database", custom: CustomChannel) -> None:
    """Edit a custom channel atomically.

    Raises:
        TransactionFailure: If a statement failed (nothing was changed)
        NotFound: If the channel doesn't exist (nothing was changed)
    """
    with db.transaction() as conn:
        edit_custom_channel_tx(conn, custom)
    logger.debug("[CUSTOM] Edited channel %s", custom.data.id)


def delete_custom_channel(conn: Connection, channel_id: int) -> None:
    """Delete a custom channel and its headers."""
    delete_channel(conn, channel_id)


def get_custom_channel_extra_data(
    conn: Connection,
    channel_id: int,
    group_id: int | None,
) -> CustomChannelExtraData:
    """Get the headers and group of a channel."""
    return CustomChannelExtraData(
        headers=get_channel_headers_by_id(conn, channel_id),
        group=get_group(conn, group_id) if group_id is not None else None,
    )


def get_custom_channels(
    conn: Connection,
    group_id: int | None,
    source_id: int,
) -> list[CustomChannel]:
    """Get channels of a source in one group (or ungrouped), ids stripped.

    Args:
        conn: Database connection
        group_id: Group to list, or None for channels without a group
        source_id: Owning source

    Returns:
        Channels with their headers, ready for export
    """
    query = """
        SELECT c.name, c.image, c.url, c.media_type,
               ch.referrer, ch.user_agent, ch.http_origin, ch.ignore_ssl
        FROM channels c
        LEFT JOIN channel_http_headers ch ON ch.channel_id = c.id
        WHERE c.source_id = ?
    """
    params: list = [source_id]
    if group_id is not None:
        query += " AND c.group_id = ?"
        params.append(group_id)
    else:
        query += " AND c.group_id IS NULL"
    query += " ORDER BY c.id"

    result = []
    for row in conn.execute(query, params).fetchall():
        headers = ChannelHttpHeaders(
            referrer=row["referrer"],
            user_agent=row["user_agent"],
            http_origin=row["http_origin"],
            ignore_ssl=bool(row["ignore_ssl"]),
        )
        result.append(
            CustomChannel(
                data=Channel(
                    name=row["name"],
                    image=row["image"],
                    url=row["url"],
                    media_type=MediaType(row["media_type"]),
                ),
                headers=None if headers.is_empty() else headers,
            )
        )
    return result


def get_custom_groups(conn: Connection, source_id: int) -> list[ExportedGroup]:
    """Export every group of a custom source with its channels."""
    return [
        ExportedGroup(
            group=Group(name=group.name, image=group.image),
            channels=get_custom_channels(conn, group.id, source_id),
        )
        for group in get_groups_by_source(conn, source_id)
    ]
