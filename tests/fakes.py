"""Controllable collaborators shared by the sync engine tests."""

import threading
import time
from typing import Any

from syncengine.models.records import Snapshot


class FakeClock:
    """Clock whose sleeps are recorded instead of waited."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.current_ms = start_ms
        self.sleeps: list[float] = []
        self._monotonic = 0.0

    def now_ms(self) -> int:
        return self.current_ms

    def monotonic(self) -> float:
        return self._monotonic

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._monotonic += seconds


def ok(payload: Any) -> tuple[str, Any]:
    return ("ok", payload)


def fail(message: str = "Error 500: server failure") -> tuple[str, Any]:
    return ("fail", message)


def hang() -> tuple[str, Any]:
    return ("hang", None)


class ScriptedCall:
    """Zero-argument call that plays back one scripted step per invocation.

    The last step repeats once the script runs out. ``hang`` steps block
    until ``release`` is set, then raise.
    """

    def __init__(self, steps: list[tuple[str, Any]], latency: float = 0.0):
        self._steps = list(steps)
        self._latency = latency
        self._lock = threading.Lock()
        self.calls = 0
        self.release = threading.Event()

    def __call__(self) -> Any:
        with self._lock:
            index = self.calls
            self.calls += 1

        kind, value = self._steps[min(index, len(self._steps) - 1)]

        if self._latency:
            time.sleep(self._latency)

        if kind == "hang":
            self.release.wait(10)
            raise RuntimeError("hung call released")
        if kind == "fail":
            raise RuntimeError(value)
        return value


class FakeSource:
    """RemoteSource backed by two scripted calls."""

    def __init__(self, primary: ScriptedCall, secondary: ScriptedCall):
        self.primary = primary
        self.secondary = secondary

    def fetch_primary(self) -> Any:
        return self.primary()

    def fetch_secondary(self) -> Any:
        return self.secondary()


class RecordingStore:
    """SnapshotStore that keeps every persisted snapshot in memory."""

    def __init__(self) -> None:
        self.persisted: list[Snapshot] = []

    def persist(self, snapshot: Snapshot) -> None:
        self.persisted.append(snapshot)


class FailingStore:
    """SnapshotStore whose writes always fail."""

    def __init__(self, message: str = "disk full") -> None:
        self.message = message
        self.calls = 0

    def persist(self, snapshot: Snapshot) -> None:
        self.calls += 1
        raise OSError(self.message)


USERS: list[dict[str, Any]] = [
    {"id": 1, "name": "Ana", "role": "admin"},
    {"id": 2, "name": "Carlos", "role": "user"},
]

TRANSACTIONS: list[dict[str, Any]] = [
    {"id": 101, "userId": 1, "amount": 50},
    {"id": 102, "userId": 2, "amount": 120},
]
