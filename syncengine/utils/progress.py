"""Structured progress reporting for synchronization runs."""

import threading
from typing import Any, Callable

import structlog

log = structlog.stdlib.get_logger()

ProgressListener = Callable[[dict[str, Any]], None]


class ProgressReporter:
    """Emits ``{phase, attempt, outcome}`` events to the log and to listeners.

    Events are observational only. A listener that raises is logged and
    skipped so it can never change the result of a run.
    """

    def __init__(self, listeners: list[ProgressListener] | None = None):
        self._listeners: list[ProgressListener] = list(listeners or [])
        self._lock = threading.Lock()

    def subscribe(self, listener: ProgressListener) -> None:
        """Register a listener that receives every subsequent event."""
        with self._lock:
            self._listeners.append(listener)

    def report(self, phase: str, outcome: str, attempt: int | None = None, **fields: Any) -> None:
        """Record one progress event.

        Args:
            phase: Step of the run (e.g. "users", "transactions", "persist")
            outcome: Short outcome summary (e.g. "success", "timeout")
            attempt: Attempt number within the phase, if applicable
            **fields: Additional context to attach to the event
        """
        event: dict[str, Any] = {"phase": phase, "attempt": attempt, "outcome": outcome, **fields}
        log.info("sync_progress", **event)

        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                log.warning(
                    "progress_listener_failed",
                    phase=phase,
                    error=str(e),
                    error_type=type(e).__name__,
                )
