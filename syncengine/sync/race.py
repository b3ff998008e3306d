"""Racing a single call against its timeout."""

import threading
from typing import Any, Callable

import structlog

from syncengine.sync.models import AttemptOutcome

log = structlog.stdlib.get_logger()


class AttemptGate:
    """Single-resolution gate shared by the two branches of one attempt.

    The first branch to call ``settle`` decides the attempt. Every later
    settlement is rejected, which is what keeps a late response from
    reaching the caller after its timeout has fired.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._decided = threading.Event()
        self._outcome: AttemptOutcome | None = None

    def settle(self, outcome: AttemptOutcome) -> bool:
        """Try to decide the attempt; return False if it was already decided."""
        with self._lock:
            if self._decided.is_set():
                return False
            self._outcome = outcome
            self._decided.set()
            return True

    def wait(self, timeout: float) -> bool:
        """Block until decided or ``timeout`` elapses."""
        return self._decided.wait(timeout)

    @property
    def decided(self) -> bool:
        return self._decided.is_set()

    @property
    def outcome(self) -> AttemptOutcome | None:
        return self._outcome


def race_with_timeout(
    call: Callable[[], Any],
    timeout: float,
    name: str = "call",
) -> AttemptOutcome:
    """
    Run ``call`` on a worker thread and race it against ``timeout``.

    The losing branch is abandoned, not cancelled: if the call completes
    after the timer won, its result is discarded and only logged.

    Args:
        call: Zero-argument callable returning the payload or raising
        timeout: Seconds the call may take
        name: Label used for the worker thread and log events

    Returns:
        AttemptOutcome of whichever branch settled first
    """
    gate = AttemptGate()

    def _run_call() -> None:
        try:
            payload = call()
        except Exception as e:
            accepted = gate.settle(AttemptOutcome.failure(e))
        else:
            accepted = gate.settle(AttemptOutcome.success(payload))

        if not accepted:
            log.debug("late_response_discarded", call=name, timeout_seconds=timeout)

    worker = threading.Thread(target=_run_call, name=f"attempt-{name}", daemon=True)
    worker.start()

    if not gate.wait(timeout):
        # The call still wins if it settled between the wait expiring and here
        gate.settle(AttemptOutcome.timeout(timeout))

    outcome = gate.outcome
    if outcome is None:
        raise RuntimeError(f"Attempt gate for '{name}' was left undecided")
    return outcome
