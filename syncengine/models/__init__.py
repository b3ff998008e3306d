"""Data models for the snapshot sync engine."""

from syncengine.models.config import (
    AppConfig,
    LoggingConfig,
    RemoteSourceConfig,
    RetryPolicy,
    StorageConfig,
)
from syncengine.models.records import Snapshot, TransactionRecord, UserRecord

__all__ = [
    "Snapshot",
    "UserRecord",
    "TransactionRecord",
    "AppConfig",
    "LoggingConfig",
    "RemoteSourceConfig",
    "RetryPolicy",
    "StorageConfig",
]
