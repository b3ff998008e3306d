"""HTTP implementation of the remote source."""

from typing import Any

import requests
import structlog
from requests.exceptions import RequestException

from syncengine.ingestion.remote_source import Record, RemoteSourceError

log = structlog.stdlib.get_logger()


class HttpRemoteSource:
    """Fetches users and transactions from a JSON HTTP API using requests."""

    def __init__(
        self,
        base_url: str,
        users_path: str = "/users",
        transactions_path: str = "/transactions",
        auth_token: str | None = None,
        request_timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        """
        Initialize HTTP remote source.

        Args:
            base_url: Base URL of the remote API
            users_path: Path of the users endpoint
            transactions_path: Path of the transactions endpoint
            auth_token: Optional bearer token sent with every request
            request_timeout: Socket timeout in seconds for each request
            session: Optional preconfigured requests session
        """
        self._base_url = base_url.rstrip("/")
        self._users_path = users_path
        self._transactions_path = transactions_path
        self._request_timeout = request_timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")
        if auth_token:
            self._session.headers["Authorization"] = f"Bearer {auth_token}"

        log.info(
            "http_remote_source_initialized",
            base_url=self._base_url,
            request_timeout=request_timeout,
        )

    def fetch_primary(self) -> list[Record]:
        """Fetch the user records."""
        return self._get_records(self._users_path)

    def fetch_secondary(self) -> list[Record]:
        """Fetch the transaction records."""
        return self._get_records(self._transactions_path)

    def close(self) -> None:
        """Release the underlying HTTP connections."""
        self._session.close()

    def _get_records(self, path: str) -> list[Record]:
        """
        GET ``path`` and return its records.

        The body must be a JSON array, or an object holding the array
        under ``data``.

        Args:
            path: Endpoint path relative to the base URL

        Returns:
            List of record dicts

        Raises:
            RemoteSourceError: On transport errors, non-2xx responses or
                an unexpected body
        """
        url = f"{self._base_url}/{path.lstrip('/')}"
        log.debug("fetching_records", url=url)

        try:
            response = self._session.get(url, timeout=self._request_timeout)
            response.raise_for_status()
            body: Any = response.json()
        except RequestException as e:
            log.error("failed_to_fetch_records", url=url, error=str(e))
            raise RemoteSourceError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            log.error("invalid_json_response", url=url, error=str(e))
            raise RemoteSourceError(f"Response from {url} is not valid JSON: {e}") from e

        if isinstance(body, dict) and isinstance(body.get("data"), list):
            body = body["data"]

        if not isinstance(body, list):
            raise RemoteSourceError(
                f"Expected a JSON array from {url}, got {type(body).__name__}"
            )

        log.info("records_fetched", url=url, record_count=len(body))
        return body
