"""Property-based tests for the resilient invoker.

Feature: resilient-snapshot-sync
"""

import threading

import pytest
import structlog
from hypothesis import given, settings, strategies as st

from fakes import FakeClock, ScriptedCall, fail, hang, ok
from syncengine.models.config import RetryPolicy
from syncengine.sync.errors import RetriesExhaustedError
from syncengine.sync.models import InvocationResult
from syncengine.sync.resilient_invoker import ResilientInvoker
from syncengine.utils.progress import ProgressReporter

log = structlog.stdlib.get_logger()


def make_invoker(policy: RetryPolicy) -> tuple[ResilientInvoker, FakeClock, list[dict]]:
    clock = FakeClock()
    events: list[dict] = []
    invoker = ResilientInvoker(policy, clock=clock, progress=ProgressReporter([events.append]))
    return invoker, clock, events


@given(st.integers(min_value=1, max_value=4))
@settings(max_examples=8, deadline=None)
def test_property_1_always_timing_out_call_exhausts_every_attempt(max_attempts: int):
    """Property 1: Timeouts exhaust the policy.

    For any policy with max_attempts = n, a call that never settles is
    attempted exactly n times and ends in RetriesExhaustedError.
    """
    log.info("test_property_1_always_timing_out", max_attempts=max_attempts)

    policy = RetryPolicy(max_attempts=max_attempts, per_attempt_timeout=0.02, backoff_delay=0.5)
    invoker, clock, events = make_invoker(policy)
    call = ScriptedCall([hang()])

    try:
        with pytest.raises(RetriesExhaustedError) as exc_info:
            invoker.execute(call, phase="users")
    finally:
        call.release.set()

    error = exc_info.value
    assert call.calls == max_attempts
    assert error.attempts == max_attempts
    assert error.phase == "users"
    assert "Timeout" in error.last_reason
    assert [event["attempt"] for event in events] == list(range(1, max_attempts + 1))
    assert all(event["outcome"] == "timeout" for event in events)

    # No backoff after the final attempt
    assert clock.sleeps == [0.5] * (max_attempts - 1)


@given(st.data())
@settings(max_examples=30, deadline=None)
def test_property_2_success_after_k_failures(data: st.DataObject):
    """Property 2: Recovery after transient failures.

    A call failing on attempts 1..k and succeeding on attempt k+1
    (k < max_attempts) returns that payload after exactly k+1 attempts.
    """
    max_attempts = data.draw(st.integers(min_value=1, max_value=6), label="max_attempts")
    failures = data.draw(st.integers(min_value=0, max_value=max_attempts - 1), label="failures")
    payload = data.draw(st.lists(st.integers(), max_size=5), label="payload")

    policy = RetryPolicy(max_attempts=max_attempts, per_attempt_timeout=1.0, backoff_delay=1.0)
    invoker, clock, events = make_invoker(policy)
    call = ScriptedCall([fail(f"failure {i}") for i in range(failures)] + [ok(payload)])

    result = invoker.invoke(call, phase="transactions")

    assert result.payload == payload
    assert result.attempts == failures + 1
    assert call.calls == failures + 1
    assert len(events) == failures + 1
    assert events[-1]["outcome"] == "success"
    assert clock.sleeps == [1.0] * failures


def test_single_attempt_policy_never_retries():
    """max_attempts = 1 means one timed attempt and no backoff."""
    policy = RetryPolicy(max_attempts=1, per_attempt_timeout=1.0, backoff_delay=1.0)
    invoker, clock, events = make_invoker(policy)
    call = ScriptedCall([fail("Error 503: unavailable"), ok(["never"])])

    with pytest.raises(RetriesExhaustedError) as exc_info:
        invoker.execute(call, phase="users")

    assert call.calls == 1
    assert clock.sleeps == []
    assert len(events) == 1
    assert "Error 503: unavailable" in exc_info.value.last_reason


def test_timeouts_and_failures_are_equally_retryable():
    """A timeout and a failure both lead to a retry; only the reason differs."""
    policy = RetryPolicy(max_attempts=3, per_attempt_timeout=0.05, backoff_delay=0.0)
    invoker, _, events = make_invoker(policy)
    call = ScriptedCall([hang(), fail("Error 500: boom"), ok(["done"])])

    try:
        result = invoker.execute(call, phase="users")
    finally:
        call.release.set()

    assert result == ["done"]
    assert [event["outcome"] for event in events] == ["timeout", "failure", "success"]
    assert "Timeout" in events[0]["reason"]
    assert "Error 500: boom" in events[1]["reason"]


def test_default_backoff_is_constant():
    """Without a multiplier every retry waits the same delay."""
    policy = RetryPolicy(max_attempts=5, per_attempt_timeout=1.0, backoff_delay=0.25)
    invoker, clock, _ = make_invoker(policy)
    call = ScriptedCall([fail()])

    with pytest.raises(RetriesExhaustedError):
        invoker.execute(call)

    assert clock.sleeps == [0.25, 0.25, 0.25, 0.25]


def test_exponential_backoff_is_opt_in_and_capped():
    """A multiplier above 1.0 grows the delay up to max_backoff_delay."""
    policy = RetryPolicy(
        max_attempts=5,
        per_attempt_timeout=1.0,
        backoff_delay=1.0,
        backoff_multiplier=2.0,
        max_backoff_delay=5.0,
    )
    invoker, clock, _ = make_invoker(policy)
    call = ScriptedCall([fail()])

    with pytest.raises(RetriesExhaustedError):
        invoker.execute(call)

    assert clock.sleeps == [1.0, 2.0, 4.0, 5.0]


def test_policy_argument_overrides_invoker_default():
    """A policy passed to execute wins over the invoker's own."""
    invoker, _, _ = make_invoker(RetryPolicy(max_attempts=5, backoff_delay=0.0))
    call = ScriptedCall([fail()])

    with pytest.raises(RetriesExhaustedError) as exc_info:
        invoker.execute(call, RetryPolicy(max_attempts=2, backoff_delay=0.0))

    assert call.calls == 2
    assert exc_info.value.attempts == 2


@given(backoff=st.floats(min_value=60.5, max_value=600.0))
@settings(max_examples=20, deadline=None)
def test_constant_backoff_is_never_capped(backoff: float):
    """max_backoff_delay only bounds exponential delays, not a constant one."""
    policy = RetryPolicy(max_attempts=3, per_attempt_timeout=1.0, backoff_delay=backoff)
    invoker, clock, _ = make_invoker(policy)

    with pytest.raises(RetriesExhaustedError):
        invoker.execute(ScriptedCall([fail()]))

    assert clock.sleeps == [backoff, backoff]
    assert policy.worst_case_seconds == pytest.approx(3 * 1.0 + 2 * backoff)


def test_concurrent_invocations_report_their_own_attempts():
    """Two calls sharing one invoker each get their own attempt count."""
    policy = RetryPolicy(max_attempts=3, per_attempt_timeout=2.0, backoff_delay=0.0)
    invoker, _, _ = make_invoker(policy)
    fast_done = threading.Event()
    slow_calls: list[int] = []

    def slow() -> list:
        slow_calls.append(1)
        if len(slow_calls) == 1:
            raise RuntimeError("Error 500: first attempt")
        assert fast_done.wait(1.0)
        return ["slow"]

    results: dict[str, InvocationResult] = {}

    def run_slow() -> None:
        results["slow"] = invoker.invoke(slow, phase="users")

    worker = threading.Thread(target=run_slow)
    worker.start()
    results["fast"] = invoker.invoke(ScriptedCall([ok(["fast"])]), phase="transactions")
    fast_done.set()
    worker.join(5.0)

    assert results["fast"].attempts == 1
    assert results["fast"].payload == ["fast"]
    assert results["slow"].attempts == 2
    assert results["slow"].payload == ["slow"]
