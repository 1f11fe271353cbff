"""Channel database types and dataclasses.

Data types for channels, their HTTP header overrides and custom-source
export payloads.
"""

from dataclasses import dataclass, field

from opentv.core.types import MediaType
from opentv.database.groups import Group


@dataclass
class Channel:
    """A playable channel, or a category row synthesized by group browsing."""

    name: str
    media_type: MediaType
    id: int | None = None
    image: str | None = None
    url: str | None = None
    source_id: int | None = None
    group_id: int | None = None
    series_id: int | None = None
    favorite: bool = False
    # Group name from the playlist; resolved to group_id during import
    group: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Channel":
        """Create from database row dict."""
        return cls(
            id=row["id"],
            name=row["name"],
            image=row.get("image"),
            url=row.get("url"),
            media_type=MediaType(row["media_type"]),
            source_id=row.get("source_id"),
            group_id=row.get("group_id"),
            series_id=row.get("series_id"),
            favorite=bool(row.get("favorite")),
        )

    @classmethod
    def from_group_row(cls, row: dict) -> "Channel":
        """Project a groups row as a category entry."""
        return cls(
            id=row["id"],
            name=row["name"],
            image=row.get("image"),
            media_type=MediaType.GROUP,
            source_id=row.get("source_id"),
        )


@dataclass
class ChannelHttpHeaders:
    """Per-channel network overrides. Absent means player defaults."""

    id: int | None = None
    channel_id: int | None = None
    referrer: str | None = None
    user_agent: str | None = None
    http_origin: str | None = None
    ignore_ssl: bool | None = None

    def is_empty(self) -> bool:
        """True when no override is set; empty header sets are not stored."""
        return (
            not self.ignore_ssl
            and not self.http_origin
            and not self.referrer
            and not self.user_agent
        )

    @classmethod
    def from_row(cls, row: dict) -> "ChannelHttpHeaders":
        """Create from database row dict."""
        return cls(
            id=row.get("id"),
            channel_id=row.get("channel_id"),
            referrer=row.get("referrer"),
            user_agent=row.get("user_agent"),
            http_origin=row.get("http_origin"),
            ignore_ssl=bool(row.get("ignore_ssl")),
        )


@dataclass
class CustomChannel:
    """A user-defined channel with its optional headers."""

    data: Channel
    headers: ChannelHttpHeaders | None = None


@dataclass
class CustomChannelExtraData:
    """Headers and group of a channel, for the edit form."""

    headers: ChannelHttpHeaders | None = None
    group: Group | None = None


@dataclass
class ExportedGroup:
    """A custom group and its channels, without database ids."""

    group: Group
    channels: list[CustomChannel] = field(default_factory=list)
