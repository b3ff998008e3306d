"""Interface of the remote source the sync engine pulls from."""

from typing import Any, Protocol, runtime_checkable

Record = dict[str, Any]


class RemoteSourceError(Exception):
    """Raised when the remote source answers with an error."""


@runtime_checkable
class RemoteSource(Protocol):
    """Two fetch operations with unbounded latency that may fail.

    Implementations return the records of one dataset as a list of dicts,
    or raise. Retries and timeouts are the caller's concern.
    """

    def fetch_primary(self) -> list[Record]:
        """Fetch the user records."""
        ...

    def fetch_secondary(self) -> list[Record]:
        """Fetch the transaction records."""
        ...
