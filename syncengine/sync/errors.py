"""Exception hierarchy for synchronization runs."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from syncengine.models.records import Snapshot


class SyncError(Exception):
    """Base class for every error a synchronization run can surface."""


class AttemptTimeoutError(SyncError):
    """An attempt did not settle within its per-attempt timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Timeout after {timeout:.3f}s")


class TransientFailureError(SyncError):
    """The remote call raised an error during an attempt."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")


class RetriesExhaustedError(SyncError):
    """Every attempt of a resilient call failed."""

    def __init__(self, phase: str, attempts: int, last_reason: str):
        self.phase = phase
        self.attempts = attempts
        self.last_reason = last_reason
        super().__init__(
            f"Retries exhausted for '{phase}' after {attempts} attempt(s): {last_reason}"
        )


class InvalidPayloadError(SyncError):
    """Fetched records could not be validated into a snapshot."""


class PersistenceFailedError(SyncError):
    """The snapshot could not be written after both fetches succeeded.

    The snapshot is kept on the error so callers can retry persistence alone.
    """

    def __init__(self, snapshot: "Snapshot", cause: BaseException):
        self.snapshot = snapshot
        self.cause = cause
        super().__init__(f"Failed to persist snapshot: {cause}")
