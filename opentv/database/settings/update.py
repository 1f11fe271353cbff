"""Settings update operations.

Updates merge into the stored map: keys not passed are left untouched.
There is no per-key delete.
"""

import logging
from collections.abc import Mapping
from sqlite3 import Connection
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from opentv.database.connection import Database

logger = logging.getLogger(__name__)


def upsert_settings(conn: Connection, settings: Mapping[str, object]) -> int:
    """Insert or overwrite each key. Call inside a transaction.

    Values are stored as strings (True -> "true").

    Returns:
        Number of keys written
    """
    for key, value in settings.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        conn.execute(
            """INSERT INTO settings (key, value)
               VALUES (?, ?)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
            (key, None if value is None else str(value)),
        )
    return len(settings)


def update_settings(db: "Database", settings: Mapping[str, object]) -> None:
    """Merge settings in one transaction.

    Raises:
        TransactionFailure: If any key failed (no key was written)
    """
    with db.transaction() as conn:
        count = upsert_settings(conn, settings)
    logger.info("[UPDATED] Settings: %s", sorted(settings))
    logger.debug("[UPDATED] %d settings keys written", count)
