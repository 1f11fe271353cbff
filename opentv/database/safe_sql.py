"""Safe SQL query building utilities.

Provides column name validation for dynamic UPDATEs and a predicate builder
for queries assembled from optional filters. Values are always bound as
parameters, never interpolated into the query text.
"""

import re
from collections.abc import Sequence
from typing import Any

# Valid column names per table (whitelist approach)
VALID_COLUMNS: dict[str, set[str]] = {
    "sources": {
        "name", "source_type", "url", "username", "password", "enabled", "use_tvg_id",
    },
    "channels": {
        "name", "image", "url", "media_type", "source_id", "favorite", "series_id",
        "group_id",
    },
    "groups": {
        "name", "image", "source_id",
    },
    "channel_http_headers": {
        "channel_id", "referrer", "user_agent", "http_origin", "ignore_ssl",
    },
}

# Pattern for valid SQL identifiers
VALID_IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

# Matches no rows; stands in for an IN () over an empty set
FALSE_PREDICATE = "0 = 1"

# Largest value SQLite accepts as an INTEGER parameter
SQLITE_MAX_INTEGER = 2**63 - 1


def validate_column_name(column: str, table: str | None = None) -> bool:
    """Validate that a column name is safe for SQL.

    Args:
        column: Column name to validate
        table: Optional table name for whitelist check

    Returns:
        True if column is valid

    Raises:
        ValueError: If column name is invalid
    """
    if not VALID_IDENTIFIER_PATTERN.match(column):
        raise ValueError(f"Invalid column name format: {column}")

    if len(column) > 64:
        raise ValueError(f"Column name too long: {column}")

    if table and table in VALID_COLUMNS:
        if column not in VALID_COLUMNS[table]:
            raise ValueError(f"Column '{column}' not allowed for table '{table}'")

    return True


def validate_columns(columns: list[str], table: str | None = None) -> bool:
    """Validate multiple column names.

    Raises:
        ValueError: If any column is invalid
    """
    for col in columns:
        validate_column_name(col, table)
    return True


def placeholders(count: int) -> str:
    """Render a comma-separated list of ``count`` placeholders."""
    return ",".join("?" * count)


def like_pattern(query: str | None) -> str:
    """Substring LIKE pattern; None or empty matches everything."""
    return f"%{query}%" if query else "%"


def build_update_query(
    table: str,
    updates: dict[str, Any],
    where_column: str = "id",
) -> tuple[str, list[Any]]:
    """Build a safe UPDATE query with validated column names.

    Args:
        table: Table name
        updates: Dict of column -> value to update
        where_column: Column for WHERE clause (default: id)

    Returns:
        Tuple of (query_string, values_list). The caller appends the
        WHERE value to values_list.

    Raises:
        ValueError: If table or column names are invalid
    """
    if not updates:
        raise ValueError("No updates provided")

    if not VALID_IDENTIFIER_PATTERN.match(table):
        raise ValueError(f"Invalid table name: {table}")

    columns = list(updates.keys())
    validate_columns(columns, table)
    validate_column_name(where_column, table if where_column != "id" else None)

    set_clause = ", ".join(f"{col} = ?" for col in columns)
    query = f"UPDATE {table} SET {set_clause} WHERE {where_column} = ?"

    return query, list(updates.values())


class QueryBuilder:
    """Accumulates WHERE predicates and their parameters in matching order.

    Usage:
        qb = QueryBuilder("SELECT * FROM channels")
        qb.where("name LIKE ?", "%news%")
        qb.where_in("source_id", [1, 2])
        qb.limit_page(page=2, page_size=36)
        sql, params = qb.build()
    """

    def __init__(self, select: str):
        self._select = select.strip()
        self._predicates: list[str] = []
        self._params: list[Any] = []
        self._tail: list[str] = []
        self._tail_params: list[Any] = []

    def where(self, fragment: str, *params: Any) -> "QueryBuilder":
        """Add a predicate. ``fragment`` must hold one ``?`` per param."""
        if fragment.count("?") != len(params):
            raise ValueError(f"Placeholder count mismatch in {fragment!r}")
        self._predicates.append(fragment)
        self._params.extend(params)
        return self

    def where_in(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        """Add ``column IN (...)`` sized to ``values``; empty matches nothing."""
        validate_column_name(column)
        if not values:
            return self.where(FALSE_PREDICATE)
        return self.where(f"{column} IN ({placeholders(len(values))})", *values)

    def limit_page(self, page: int, page_size: int) -> "QueryBuilder":
        """Paginate with 1-based page numbers."""
        if page < 1:
            raise ValueError(f"Page numbers start at 1, got {page}")
        self._tail.append("LIMIT ? OFFSET ?")
        # Pages past the end are empty, even past the INTEGER range
        offset = min((page - 1) * page_size, SQLITE_MAX_INTEGER)
        self._tail_params.extend([page_size, offset])
        return self

    def build(self) -> tuple[str, list[Any]]:
        """Return the final query text and its parameter list."""
        parts = [self._select]
        if self._predicates:
            parts.append("WHERE " + "\nAND ".join(self._predicates))
        parts.extend(self._tail)
        return "\n".join(parts), self._params + self._tail_params
