"""Browse and search queries.

Compiles a Filters request into one of two parameterized queries:

- group browse: the categories view with no group or series selected lists
  groups, projected as Channel rows with media_type GROUP
- channel browse: everything else lists playable channels (url not null).
  Episodes (rows with a series_id) are listed only under their series

Every value is bound as a parameter. Empty id/kind sets compile to a
predicate that matches nothing.
"""

from dataclasses import dataclass
from sqlite3 import Connection
from typing import Any, Literal

from opentv.core.types import EPISODE, Filters, ViewType
from opentv.database.channels.types import Channel
from opentv.database.safe_sql import QueryBuilder, like_pattern

PAGE_SIZE = 36


@dataclass(frozen=True)
class CompiledQuery:
    """Query text, bound parameters and the row shape it returns."""

    sql: str
    params: list[Any]
    kind: Literal["channels", "groups"]


def compile_channel_query(filters: Filters, page_size: int = PAGE_SIZE) -> CompiledQuery:
    """Build the flat channel listing query."""
    if filters.series_id is not None:
        media_types = [int(EPISODE)]
    else:
        media_types = [int(m) for m in filters.media_types or []]

    qb = QueryBuilder("SELECT * FROM channels")
    qb.where("name LIKE ?", like_pattern(filters.query))
    qb.where_in("media_type", media_types)
    qb.where_in("source_id", filters.source_ids)
    qb.where("url IS NOT NULL")

    if filters.view_type == ViewType.FAVORITES and filters.series_id is None:
        qb.where("favorite = 1")

    if filters.series_id is not None:
        qb.where("series_id = ?", filters.series_id)
    else:
        # Episodes only show up inside their series
        qb.where("series_id IS NULL")
        if filters.group_id is not None:
            qb.where("group_id = ?", filters.group_id)

    qb.limit_page(filters.page, page_size)
    sql, params = qb.build()
    return CompiledQuery(sql=sql, params=params, kind="channels")


def compile_group_query(filters: Filters, page_size: int = PAGE_SIZE) -> CompiledQuery:
    """Build the category listing query."""
    qb = QueryBuilder("SELECT * FROM groups")
    qb.where("name LIKE ?", like_pattern(filters.query))
    qb.where_in("source_id", filters.source_ids)
    qb.limit_page(filters.page, page_size)
    sql, params = qb.build()
    return CompiledQuery(sql=sql, params=params, kind="groups")


def compile_search(filters: Filters, page_size: int = PAGE_SIZE) -> CompiledQuery:
    """Pick the query shape for a request and build it."""
    if filters.browses_categories:
        return compile_group_query(filters, page_size)
    return compile_channel_query(filters, page_size)


def search(conn: Connection, filters: Filters) -> list[Channel]:
    """Run a browse request.

    Returns:
        One page of channels, or of category rows for the categories view.
        A page past the end is an empty list.
    """
    compiled = compile_search(filters)
    rows = conn.execute(compiled.sql, compiled.params).fetchall()
    if compiled.kind == "groups":
        return [Channel.from_group_row(dict(row)) for row in rows]
    return [Channel.from_row(dict(row)) for row in rows]


def search_groups(conn: Connection, filters: Filters) -> list[Channel]:
    """Run the category listing regardless of view type."""
    compiled = compile_group_query(filters)
    rows = conn.execute(compiled.sql, compiled.params).fetchall()
    return [Channel.from_group_row(dict(row)) for row in rows]
