"""Channel database operations."""

from .crud import (
    channel_exists,
    delete_channel,
    favorite_channel,
    get_channel,
    insert_channel,
    series_has_episodes,
    update_channel,
)
from .custom import (
    add_custom_channel,
    delete_custom_channel,
    edit_custom_channel,
    edit_custom_channel_tx,
    get_custom_channel_extra_data,
    get_custom_channels,
    get_custom_groups,
)
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

__all__ = [
    # Types
    "Channel",
    "ChannelHttpHeaders",
    "CustomChannel",
    "CustomChannelExtraData",
    "ExportedGroup",
    # CRUD
    "channel_exists",
    "delete_channel",
    "favorite_channel",
    "get_channel",
    "insert_channel",
    "series_has_episodes",
    "update_channel",
    # Headers
    "delete_channel_headers",
    "get_channel_headers_by_id",
    "insert_channel_headers",
    "upsert_channel_headers",
    # Custom sources
    "add_custom_channel",
    "delete_custom_channel",
    "edit_custom_channel",
    "edit_custom_channel_tx",
    "get_custom_channel_extra_data",
    "get_custom_channels",
    "get_custom_groups",
]
