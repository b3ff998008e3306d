"""Snapshot persistence."""

from syncengine.storage.snapshot_store import (
    JsonSnapshotStore,
    SnapshotStore,
    SnapshotStoreError,
    serialize_snapshot,
)

__all__ = ["JsonSnapshotStore", "SnapshotStore", "SnapshotStoreError", "serialize_snapshot"]
