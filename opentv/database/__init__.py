"""Database layer."""

from opentv.database.connection import (
    Database,
    create_baseline,
    delete_database,
    drop_db,
    get_db_path,
    init_db,
    open_database,
    schema_present,
)
from opentv.database.errors import (
    ConstraintViolation,
    DatabaseError,
    MigrationFailure,
    NotFound,
    PoolExhausted,
    TransactionFailure,
)
from opentv.database.groups import (
    Group,
    GroupCache,
    IdName,
    add_custom_group,
    delete_custom_group,
    edit_custom_group,
    get_group,
    group_auto_complete,
    group_exists,
    group_not_empty,
    insert_group,
    set_channel_group,
)
from opentv.database.migrations import apply_pending_migrations
from opentv.database.pool import ConnectionPool
from opentv.database.search import PAGE_SIZE, compile_search, search
from opentv.database.sources import (
    Source,
    create_or_find_source,
    delete_source,
    get_enabled_sources,
    get_sources,
    refresh_source,
    set_source_enabled,
)

__all__ = [
    # Connection / schema
    "ConnectionPool",
    "Database",
    "apply_pending_migrations",
    "create_baseline",
    "delete_database",
    "drop_db",
    "get_db_path",
    "init_db",
    "open_database",
    "schema_present",
    # Errors
    "ConstraintViolation",
    "DatabaseError",
    "MigrationFailure",
    "NotFound",
    "PoolExhausted",
    "TransactionFailure",
    # Groups
    "Group",
    "GroupCache",
    "IdName",
    "add_custom_group",
    "delete_custom_group",
    "edit_custom_group",
    "get_group",
    "group_auto_complete",
    "group_exists",
    "group_not_empty",
    "insert_group",
    "set_channel_group",
    # Search
    "PAGE_SIZE",
    "compile_search",
    "search",
    # Sources
    "Source",
    "create_or_find_source",
    "delete_source",
    "get_enabled_sources",
    "get_sources",
    "refresh_source",
    "set_source_enabled",
]
