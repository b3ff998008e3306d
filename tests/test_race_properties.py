"""Property-based tests for racing calls against their timeout.

Feature: resilient-snapshot-sync
"""

import threading
import time

import pytest
import structlog
from hypothesis import given, settings, strategies as st

from fakes import FakeClock
from syncengine.models.config import RetryPolicy
from syncengine.sync.errors import AttemptTimeoutError, TransientFailureError
from syncengine.sync.models import AttemptOutcome, OutcomeKind
from syncengine.sync.race import AttemptGate, race_with_timeout
from syncengine.sync.resilient_invoker import ResilientInvoker

log = structlog.stdlib.get_logger()

outcome_strategy = st.one_of(
    st.builds(AttemptOutcome.success, st.lists(st.integers(), max_size=3)),
    st.builds(AttemptOutcome.timeout, st.floats(min_value=0.001, max_value=10.0)),
    st.builds(AttemptOutcome.failure, st.builds(RuntimeError, st.text(max_size=20))),
)


@given(st.lists(outcome_strategy, min_size=1, max_size=6))
@settings(max_examples=100)
def test_property_3_first_settlement_decides_the_gate(outcomes: list[AttemptOutcome]):
    """Property 3: Single resolution.

    For any sequence of settlements, only the first is accepted and the
    gate's outcome never changes afterwards.
    """
    gate = AttemptGate()

    accepted = [gate.settle(outcome) for outcome in outcomes]

    assert accepted[0] is True
    assert not any(accepted[1:])
    assert gate.decided
    assert gate.outcome is outcomes[0]


def test_concurrent_settlements_accept_exactly_one():
    """Many threads settling at once still yield a single winner."""
    gate = AttemptGate()
    start = threading.Barrier(16)
    results: list[bool] = []
    results_lock = threading.Lock()

    def settle(index: int) -> None:
        start.wait()
        accepted = gate.settle(AttemptOutcome.success([index]))
        with results_lock:
            results.append(accepted)

    threads = [threading.Thread(target=settle, args=(i,)) for i in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert gate.outcome is not None
    assert gate.outcome.succeeded


def test_fast_call_wins_the_race():
    outcome = race_with_timeout(lambda: ["payload"], timeout=1.0, name="users")

    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.payload == ["payload"]
    assert outcome.reason == "ok"


def test_raising_call_settles_as_failure():
    def boom() -> list:
        raise ConnectionError("connection reset")

    outcome = race_with_timeout(boom, timeout=1.0)

    assert outcome.kind is OutcomeKind.FAILURE
    assert isinstance(outcome.error, TransientFailureError)
    assert isinstance(outcome.error.cause, ConnectionError)
    assert "connection reset" in outcome.reason


def test_slow_call_loses_to_the_timer_and_its_response_is_discarded():
    """A response arriving after the timeout never replaces the timeout outcome."""
    finished = threading.Event()

    def slow_call() -> list:
        time.sleep(0.15)
        finished.set()
        return ["late"]

    started = time.monotonic()
    outcome = race_with_timeout(slow_call, timeout=0.03)
    elapsed = time.monotonic() - started

    assert outcome.kind is OutcomeKind.TIMEOUT
    assert isinstance(outcome.error, AttemptTimeoutError)
    assert elapsed < 0.15

    assert finished.wait(2.0)
    time.sleep(0.02)
    assert outcome.kind is OutcomeKind.TIMEOUT
    assert outcome.payload is None


def test_late_response_never_reaches_the_next_attempt():
    """Property 4: Late-response suppression.

    The first attempt times out and its response arrives while the second
    attempt is still running. The caller only ever sees the second
    attempt's payload.
    """
    release_stale = threading.Event()
    stale_returned = threading.Event()
    calls: list[int] = []

    def fetch() -> list:
        calls.append(len(calls) + 1)
        if len(calls) == 1:
            release_stale.wait(5.0)
            stale_returned.set()
            return ["stale"]

        release_stale.set()
        assert stale_returned.wait(5.0)
        # Give the abandoned worker time to try settling its own gate
        time.sleep(0.02)
        return ["fresh"]

    policy = RetryPolicy(max_attempts=2, per_attempt_timeout=0.3, backoff_delay=0.0)
    invoker = ResilientInvoker(policy, clock=FakeClock())

    result = invoker.invoke(fetch, phase="users")

    assert result.payload == ["fresh"]
    assert result.attempts == 2
    assert calls == [1, 2]


def test_undecided_gate_raises_instead_of_returning_nothing(monkeypatch):
    """If neither branch manages to settle, the race fails loudly."""
    monkeypatch.setattr(AttemptGate, "settle", lambda self, outcome: False)

    with pytest.raises(RuntimeError, match="undecided"):
        race_with_timeout(lambda: ["payload"], timeout=0.02, name="users")
