"""Unstable in-process remote source for demos and drills."""

import copy
import random

import structlog

from syncengine.ingestion.remote_source import Record, RemoteSourceError
from syncengine.utils.clock import Clock, SystemClock

log = structlog.stdlib.get_logger()

DEFAULT_USERS: list[Record] = [
    {"id": 1, "name": "Ana", "role": "admin"},
    {"id": 2, "name": "Carlos", "role": "user"},
]

DEFAULT_TRANSACTIONS: list[Record] = [
    {"id": 101, "userId": 1, "amount": 50},
    {"id": 102, "userId": 2, "amount": 120},
]


class SimulatedRemoteSource:
    """Remote source with random latency and random server errors."""

    def __init__(
        self,
        failure_rate: float = 0.3,
        min_latency: float = 0.5,
        max_latency: float = 1.5,
        users: list[Record] | None = None,
        transactions: list[Record] | None = None,
        seed: int | None = None,
        clock: Clock | None = None,
    ):
        """
        Initialize simulated source.

        Args:
            failure_rate: Probability in [0, 1] that a fetch raises
            min_latency: Minimum simulated latency in seconds
            max_latency: Maximum simulated latency in seconds
            users: Records served by ``fetch_primary``
            transactions: Records served by ``fetch_secondary``
            seed: Optional seed for reproducible runs
            clock: Clock used to simulate latency
        """
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")
        if min_latency < 0 or min_latency > max_latency:
            raise ValueError("latency range must satisfy 0 <= min_latency <= max_latency")

        self._failure_rate = failure_rate
        self._min_latency = min_latency
        self._max_latency = max_latency
        self._users = users if users is not None else DEFAULT_USERS
        self._transactions = transactions if transactions is not None else DEFAULT_TRANSACTIONS
        self._random = random.Random(seed)
        self._clock: Clock = clock or SystemClock()

    def fetch_primary(self) -> list[Record]:
        """Fetch the user records."""
        return self._respond(self._users, "Error 500: users service failure")

    def fetch_secondary(self) -> list[Record]:
        """Fetch the transaction records."""
        return self._respond(self._transactions, "Error 503: payments service unavailable")

    def _respond(self, records: list[Record], error_message: str) -> list[Record]:
        latency = self._random.uniform(self._min_latency, self._max_latency)
        fails = self._random.random() < self._failure_rate
        self._clock.sleep(latency)

        if fails:
            log.debug("simulated_failure", latency_seconds=latency, error=error_message)
            raise RemoteSourceError(error_message)

        return copy.deepcopy(records)
