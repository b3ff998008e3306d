"""Durable, atomic persistence of merged snapshots."""

import json
import os
import tempfile
import threading
from contextlib import suppress
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import ValidationError

from syncengine.models.records import Snapshot

log = structlog.stdlib.get_logger()

_umask_lock = threading.Lock()


class SnapshotStoreError(OSError):
    """Raised when a snapshot cannot be written or read back."""


class SnapshotStore(Protocol):
    """Anything that can durably write a whole snapshot."""

    def persist(self, snapshot: Snapshot) -> None: ...


def serialize_snapshot(snapshot: Snapshot) -> bytes:
    """Render a snapshot as the persisted JSON document.

    Output is deterministic for a given snapshot.
    """
    text = json.dumps(snapshot.to_document(), indent=2, ensure_ascii=False)
    return (text + "\n").encode("utf-8")


def _current_umask() -> int:
    with _umask_lock:
        mask = os.umask(0)
        os.umask(mask)
    return mask


def _document_mode(path: Path) -> int:
    """Permission bits for a new document: the existing file's, else 0o666 minus umask."""
    try:
        return path.stat().st_mode & 0o7777
    except FileNotFoundError:
        return 0o666 & ~_current_umask()


class JsonSnapshotStore:
    """Stores the latest snapshot as a single JSON document on disk.

    Every ``persist`` replaces the whole document. The new content is
    written to a temporary file in the same directory, fsynced and moved
    over the target with ``os.replace``, so readers see either the old or
    the new document and never a partial one. Writes through one store are
    serialized; across processes the last writer wins.
    """

    def __init__(self, path: str | Path):
        """
        Initialize snapshot store.

        Args:
            path: Location of the persisted snapshot document
        """
        self._path = Path(path)
        self._lock = threading.Lock()
        log.info("snapshot_store_initialized", path=str(self._path))

    @property
    def path(self) -> Path:
        return self._path

    def persist(self, snapshot: Snapshot) -> None:
        """
        Write ``snapshot`` as the current document, replacing any previous one.

        Failures are not retried here.

        Args:
            snapshot: Snapshot to persist

        Raises:
            SnapshotStoreError: If the document cannot be written
        """
        data = serialize_snapshot(snapshot)

        with self._lock:
            try:
                self._write_atomic(data)
            except OSError as e:
                log.error(
                    "failed_to_persist_snapshot",
                    path=str(self._path),
                    timestamp=snapshot.timestamp,
                    error=str(e),
                )
                raise SnapshotStoreError(f"Failed to write snapshot to {self._path}: {e}") from e

        log.info(
            "snapshot_persisted",
            path=str(self._path),
            timestamp=snapshot.timestamp,
            user_count=len(snapshot.users),
            transaction_count=len(snapshot.transactions),
            size_bytes=len(data),
        )

    def load(self) -> Snapshot | None:
        """
        Read the persisted snapshot back.

        Returns:
            Snapshot if a document exists, None otherwise

        Raises:
            SnapshotStoreError: If the document exists but cannot be parsed
        """
        if not self._path.exists():
            log.info("no_snapshot_found", path=str(self._path))
            return None

        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
            return Snapshot.from_document(document)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            log.error("failed_to_load_snapshot", path=str(self._path), error=str(e))
            raise SnapshotStoreError(f"Failed to load snapshot from {self._path}: {e}") from e

    def _write_atomic(self, data: bytes) -> None:
        """Write ``data`` to the target path via temp file and rename."""
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=str(directory), prefix=f".{self._path.name}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                # mkstemp creates 0600 files; give the document regular permissions
                os.chmod(tmp_path, _document_mode(self._path))
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self._path)
        except BaseException:
            with suppress(OSError):
                os.unlink(tmp_path)
            raise

        # Make the rename itself durable where the platform allows it
        dir_fd = None
        try:
            dir_fd = os.open(str(directory), os.O_RDONLY)
            os.fsync(dir_fd)
        except OSError:
            pass
        finally:
            if dir_fd is not None:
                with suppress(OSError):
                    os.close(dir_fd)
