"""Synchronization orchestrator producing one merged snapshot per run."""

from datetime import datetime, timezone
from typing import Any, Callable

import structlog
from pydantic import ValidationError

from syncengine.ingestion.remote_source import RemoteSource
from syncengine.models.config import RetryPolicy
from syncengine.models.records import Snapshot
from syncengine.storage.snapshot_store import SnapshotStore
from syncengine.sync.errors import (
    InvalidPayloadError,
    PersistenceFailedError,
    RetriesExhaustedError,
    SyncError,
)
from syncengine.sync.models import SyncReport
from syncengine.sync.resilient_invoker import ResilientInvoker
from syncengine.utils.clock import Clock, SystemClock
from syncengine.utils.progress import ProgressReporter

log = structlog.stdlib.get_logger()

USERS_PHASE = "users"
TRANSACTIONS_PHASE = "transactions"
PERSIST_PHASE = "persist"


class SyncOrchestrator:
    """Fetches users, then transactions, and persists them as one snapshot."""

    def __init__(
        self,
        remote_source: RemoteSource,
        snapshot_store: SnapshotStore,
        policy: RetryPolicy | None = None,
        clock: Clock | None = None,
        progress: ProgressReporter | None = None,
        invoker: ResilientInvoker | None = None,
    ):
        """
        Initialize sync orchestrator.

        Args:
            remote_source: Source exposing fetch_primary and fetch_secondary
            snapshot_store: Store that durably writes the merged snapshot
            policy: Retry policy applied to both fetches (defaults if None)
            clock: Time source for snapshot timestamps and backoff sleeps
            progress: Reporter receiving progress events
            invoker: Optional preconfigured invoker (built from the above if None)
        """
        self._remote_source: RemoteSource = remote_source
        self._snapshot_store: SnapshotStore = snapshot_store
        self._policy: RetryPolicy = policy or RetryPolicy()
        self._clock: Clock = clock or SystemClock()
        self._progress: ProgressReporter = progress or ProgressReporter()
        self._invoker: ResilientInvoker = invoker or ResilientInvoker(
            self._policy, clock=self._clock, progress=self._progress
        )

        log.info(
            "sync_orchestrator_initialized",
            max_attempts=self._policy.max_attempts,
            per_attempt_timeout=self._policy.per_attempt_timeout,
            backoff_delay=self._policy.backoff_delay,
        )

    def run(self) -> Snapshot:
        """
        Perform one synchronization run.

        This method:
        1. Fetches users through the resilient invoker
        2. Fetches transactions, only once users succeeded
        3. Builds the snapshot from both payloads
        4. Persists the snapshot

        Returns:
            The persisted Snapshot

        Raises:
            RetriesExhaustedError: If either fetch ran out of attempts
            InvalidPayloadError: If fetched records fail validation
            PersistenceFailedError: If the snapshot could not be written
        """
        return self._run({})

    def _run(self, attempts: dict[str, int]) -> Snapshot:
        """Perform one run, recording attempts per phase into ``attempts``."""
        log.info("sync_run_started")

        users = self._fetch(self._remote_source.fetch_primary, USERS_PHASE, attempts)
        log.info("users_received", user_count=len(users))

        transactions = self._fetch(
            self._remote_source.fetch_secondary, TRANSACTIONS_PHASE, attempts
        )
        log.info("transactions_received", transaction_count=len(transactions))

        snapshot = self._build_snapshot(users, transactions)

        try:
            self._snapshot_store.persist(snapshot)
        except Exception as e:
            self._progress.report(PERSIST_PHASE, "failure", reason=str(e))
            log.error("snapshot_persistence_failed", timestamp=snapshot.timestamp, error=str(e))
            raise PersistenceFailedError(snapshot, e) from e

        self._progress.report(PERSIST_PHASE, "success", timestamp=snapshot.timestamp)
        log.info(
            "sync_run_completed",
            timestamp=snapshot.timestamp,
            user_count=len(snapshot.users),
            transaction_count=len(snapshot.transactions),
        )
        return snapshot

    def sync(self) -> SyncReport:
        """
        Perform one run and summarize it instead of raising.

        Returns:
            SyncReport describing success or the single failure reason
        """
        start_time = datetime.now(timezone.utc)
        started = self._clock.monotonic()
        attempts: dict[str, int] = {}

        try:
            snapshot = self._run(attempts)
        except SyncError as e:
            end_time = datetime.now(timezone.utc)
            duration = max(self._clock.monotonic() - started, 0.0)
            log.error(
                "sync_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=duration,
            )
            return SyncReport(
                success=False,
                attempts=attempts,
                duration_seconds=duration,
                start_time=start_time,
                end_time=end_time,
                error=str(e),
                error_type=type(e).__name__,
            )

        end_time = datetime.now(timezone.utc)
        duration = max(self._clock.monotonic() - started, 0.0)
        return SyncReport(
            success=True,
            snapshot_timestamp=snapshot.timestamp,
            user_count=len(snapshot.users),
            transaction_count=len(snapshot.transactions),
            attempts=attempts,
            duration_seconds=duration,
            start_time=start_time,
            end_time=end_time,
        )

    def _fetch(
        self, call: Callable[[], Any], phase: str, attempts: dict[str, int]
    ) -> list[Any]:
        """Run one resilient fetch and record its attempt count."""
        try:
            result = self._invoker.invoke(call, self._policy, phase=phase)
        except RetriesExhaustedError as e:
            attempts[phase] = e.attempts
            raise

        attempts[phase] = result.attempts
        payload = result.payload

        if not isinstance(payload, list):
            raise InvalidPayloadError(
                f"Expected a list of records for '{phase}', got {type(payload).__name__}"
            )
        return payload

    def _build_snapshot(self, users: list[Any], transactions: list[Any]) -> Snapshot:
        """Validate both payloads into a snapshot stamped with the current time."""
        try:
            return Snapshot(
                timestamp=self._clock.now_ms(),
                users=users,
                transactions=transactions,
            )
        except ValidationError as e:
            log.error("invalid_payload", error=str(e), error_count=e.error_count())
            raise InvalidPayloadError(f"Fetched records failed validation: {e}") from e
