"""Service layer facades over the database."""

from opentv.services.import_service import ImportSession, ImportStats, import_source

__all__ = [
    "ImportSession",
    "ImportStats",
    "import_source",
]
