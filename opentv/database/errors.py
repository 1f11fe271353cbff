"""Errors raised by the storage layer.

All errors propagate to the caller; the storage layer never retries
beyond rolling back a failed transaction.
"""


class DatabaseError(Exception):
    """Base class for storage errors."""


class PoolExhausted(DatabaseError):
    """No pooled connection became available in time. Retryable."""


class ConstraintViolation(DatabaseError):
    """A uniqueness or foreign-key constraint rejected a write."""


class NotFound(DatabaseError):
    """A write that must affect a row affected none."""


class MigrationFailure(DatabaseError):
    """A schema migration failed; the database must not be used."""

    def __init__(self, version: int, name: str, cause: Exception):
        super().__init__(f"Migration {version} ({name}) failed: {cause}")
        self.version = version
        self.name = name
        self.cause = cause


class TransactionFailure(DatabaseError):
    """A transactional unit failed and was rolled back."""
