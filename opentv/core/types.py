"""Core enumerations and the browse query input.

Enumerations are IntEnum so they compare equal to the integers stored in
the database.
"""

from enum import IntEnum

from pydantic import BaseModel, Field


class SourceType(IntEnum):
    """Kind of channel source."""

    M3U = 0  # playlist file
    M3U_LINK = 1  # playlist fetched from a URL
    XTREAM = 2  # provider API
    CUSTOM = 3  # user-defined collection


class MediaType(IntEnum):
    """Kind of channel row."""

    LIVESTREAM = 0
    MOVIE = 1
    SERIES = 2
    # Synthesized by the category browse query, never stored
    GROUP = 3


# Series episodes are stored as movies carrying a series_id
EPISODE = MediaType.MOVIE


class ViewType(IntEnum):
    """Browse listing mode."""

    ALL = 0
    FAVORITES = 1
    CATEGORIES = 2


class Filters(BaseModel):
    """Browse/search request from the UI."""

    page: int = Field(default=1, ge=1)
    query: str | None = None
    # None is only meaningful with series_id set
    media_types: list[MediaType] | None = None
    source_ids: list[int] = Field(default_factory=list)
    view_type: ViewType = ViewType.ALL
    group_id: int | None = None
    series_id: int | None = None

    @property
    def browses_categories(self) -> bool:
        """True when the request lists groups rather than channels."""
        return (
            self.view_type == ViewType.CATEGORIES
            and self.group_id is None
            and self.series_id is None
        )
