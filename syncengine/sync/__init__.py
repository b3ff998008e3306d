"""Synchronization components for resilient snapshot runs."""

from syncengine.sync.errors import (
    AttemptTimeoutError,
    InvalidPayloadError,
    PersistenceFailedError,
    RetriesExhaustedError,
    SyncError,
    TransientFailureError,
)
from syncengine.sync.models import AttemptOutcome, InvocationResult, OutcomeKind, SyncReport
from syncengine.sync.race import AttemptGate, race_with_timeout
from syncengine.sync.resilient_invoker import ResilientInvoker
from syncengine.sync.sync_orchestrator import SyncOrchestrator

__all__ = [
    "AttemptGate",
    "AttemptOutcome",
    "AttemptTimeoutError",
    "InvalidPayloadError",
    "InvocationResult",
    "OutcomeKind",
    "PersistenceFailedError",
    "ResilientInvoker",
    "RetriesExhaustedError",
    "SyncError",
    "SyncOrchestrator",
    "SyncReport",
    "TransientFailureError",
    "race_with_timeout",
]
