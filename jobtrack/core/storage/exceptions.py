"""
Storage exceptions.

Every job store backend raises these so lifecycle writes can be logged
uniformly regardless of the engine behind them.
"""


class StorageError(Exception):
    """Base exception for all job store errors."""

    pass


class ConnectionError(StorageError):
    """Cannot connect to the job store."""

    pass


class NotFoundError(StorageError):
    """Requested record does not exist."""

    pass


class DuplicateError(StorageError):
    """Record already exists (unique key violation on insert)."""

    pass


class ConfigurationError(StorageError):
    """Invalid or missing store configuration."""

    pass


class UnknownCollectionError(StorageError):
    """Collection name is not mapped to any table or keyspace."""

    pass
