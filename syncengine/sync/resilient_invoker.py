"""Timeout and bounded retry around a single remote call."""

from typing import Any, Callable, TypeVar

import structlog

from syncengine.models.config import RetryPolicy
from syncengine.sync.errors import RetriesExhaustedError
from syncengine.sync.models import AttemptOutcome, InvocationResult
from syncengine.sync.race import race_with_timeout
from syncengine.utils.clock import Clock, SystemClock
from syncengine.utils.progress import ProgressReporter
from syncengine.utils.retry import compute_backoff_delay

log = structlog.stdlib.get_logger()

T = TypeVar("T")


class ResilientInvoker:
    """Executes a call under a per-attempt timeout with retry and backoff."""

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        clock: Clock | None = None,
        progress: ProgressReporter | None = None,
    ):
        """
        Initialize resilient invoker.

        Args:
            policy: Default retry policy (library defaults if None)
            clock: Time source used for backoff sleeps
            progress: Reporter receiving one event per attempt
        """
        self._policy: RetryPolicy = policy or RetryPolicy()
        self._clock: Clock = clock or SystemClock()
        self._progress: ProgressReporter = progress or ProgressReporter()

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def execute(
        self,
        call: Callable[[], T],
        policy: RetryPolicy | None = None,
        *,
        phase: str = "call",
    ) -> T:
        """Run ``call`` resiliently and return only its payload.

        See ``invoke`` for the attempt semantics.
        """
        return self.invoke(call, policy, phase=phase).payload

    def invoke(
        self,
        call: Callable[[], Any],
        policy: RetryPolicy | None = None,
        *,
        phase: str = "call",
    ) -> InvocationResult:
        """
        Run ``call`` until one attempt succeeds or the policy is exhausted.

        Timeouts and errors raised by ``call`` are both retryable. Attempts
        never overlap: the next one starts only after the previous attempt
        was decided and the backoff delay has elapsed.

        Args:
            call: Zero-argument callable returning the payload or raising
            policy: Policy overriding the invoker's default for this call
            phase: Label used in progress events and errors

        Returns:
            InvocationResult with the first successful payload and the
            number of attempts it took

        Raises:
            RetriesExhaustedError: If every attempt timed out or failed
        """
        policy = policy or self._policy
        last_outcome: AttemptOutcome | None = None
        attempts = 0

        for attempt in range(1, policy.max_attempts + 1):
            attempts = attempt
            outcome = race_with_timeout(call, policy.per_attempt_timeout, name=phase)
            last_outcome = outcome

            self._progress.report(
                phase,
                outcome.kind.value,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                reason=outcome.reason,
            )

            if outcome.succeeded:
                return InvocationResult(payload=outcome.payload, attempts=attempt)

            if attempt == policy.max_attempts:
                break

            delay = compute_backoff_delay(policy, attempt)
            log.warning(
                "retrying_after_error",
                phase=phase,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                delay_seconds=delay,
                error=outcome.reason,
            )
            self._clock.sleep(delay)

        last_reason = last_outcome.reason if last_outcome else "no attempt made"
        log.error(
            "max_retries_reached",
            phase=phase,
            max_attempts=policy.max_attempts,
            error=last_reason,
        )
        raise RetriesExhaustedError(phase, attempts, last_reason)
