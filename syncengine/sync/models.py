"""Data models for synchronization operations."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from syncengine.sync.errors import AttemptTimeoutError, SyncError, TransientFailureError


class OutcomeKind(str, Enum):
    """How a single attempt settled."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    FAILURE = "failure"


class AttemptOutcome(BaseModel):
    """Result of racing one call against its timeout."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: OutcomeKind
    payload: Any = None
    error: SyncError | None = None

    @classmethod
    def success(cls, payload: Any) -> "AttemptOutcome":
        return cls(kind=OutcomeKind.SUCCESS, payload=payload)

    @classmethod
    def timeout(cls, seconds: float) -> "AttemptOutcome":
        return cls(kind=OutcomeKind.TIMEOUT, error=AttemptTimeoutError(seconds))

    @classmethod
    def failure(cls, cause: BaseException) -> "AttemptOutcome":
        return cls(kind=OutcomeKind.FAILURE, error=TransientFailureError(cause))

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def reason(self) -> str:
        """Short human-readable summary used in logs and errors."""
        if self.error is None:
            return "ok"
        return str(self.error)


class InvocationResult(BaseModel):
    """Payload of a successful resilient call and the attempts it took."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    payload: Any = None
    attempts: int = Field(..., ge=1)


class SyncReport(BaseModel):
    """Report of synchronization operation results."""

    success: bool = Field(default=False, description="True if the snapshot was persisted")
    snapshot_timestamp: int | None = Field(
        default=None, description="Timestamp of the persisted snapshot (ms since epoch)"
    )
    user_count: int = Field(default=0, ge=0, description="Number of users persisted")
    transaction_count: int = Field(
        default=0, ge=0, description="Number of transactions persisted"
    )
    attempts: dict[str, int] = Field(
        default_factory=dict, description="Attempts made per phase"
    )
    duration_seconds: float = Field(default=0.0, ge=0.0, description="Sync duration in seconds")
    start_time: datetime = Field(..., description="Sync start timestamp")
    end_time: datetime = Field(..., description="Sync end timestamp")
    error: str | None = Field(default=None, description="Reason the run failed, if it did")
    error_type: str | None = Field(default=None, description="Class name of the failure")

    @property
    def total_records(self) -> int:
        """Get total number of records persisted."""
        return self.user_count + self.transaction_count
