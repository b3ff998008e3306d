"""Centralized provider module for remote sources and snapshot stores.

This module provides factory functions that turn configuration sections into
the collaborators a SyncOrchestrator needs. Swap implementations here without
changing other code.

Default implementations:
- RemoteSource: HttpRemoteSource (JSON over HTTP via requests)
- SnapshotStore: JsonSnapshotStore (single JSON document on local disk)
"""

import structlog

from syncengine.ingestion.http_source import HttpRemoteSource
from syncengine.ingestion.remote_source import RemoteSource
from syncengine.ingestion.simulated_source import SimulatedRemoteSource
from syncengine.models.config import AppConfig, RemoteSourceConfig, StorageConfig
from syncengine.storage.snapshot_store import JsonSnapshotStore
from syncengine.sync.sync_orchestrator import SyncOrchestrator
from syncengine.utils.progress import ProgressReporter

log = structlog.stdlib.get_logger()


def get_remote_source(config: RemoteSourceConfig) -> RemoteSource:
    """Get the remote source described by ``config``.

    Args:
        config: Remote source configuration section

    Returns:
        RemoteSource instance

    Raises:
        ValueError: If the source type is unknown or misconfigured
    """
    log.info("initializing_remote_source", source_type=config.type)

    if config.type == "http":
        if config.base_url is None:
            raise ValueError("base_url is required for the http remote source")
        return HttpRemoteSource(
            base_url=str(config.base_url),
            users_path=config.users_path,
            transactions_path=config.transactions_path,
            auth_token=config.auth_token,
            request_timeout=config.request_timeout,
        )

    if config.type == "simulated":
        return SimulatedRemoteSource(
            failure_rate=config.failure_rate,
            min_latency=config.min_latency,
            max_latency=config.max_latency,
        )

    error_msg = f"Unsupported remote source type: {config.type}"
    log.error("get_remote_source_failed", error=error_msg)
    raise ValueError(error_msg)


def get_snapshot_store(config: StorageConfig) -> JsonSnapshotStore:
    """Get the configured snapshot store.

    Args:
        config: Storage configuration section

    Returns:
        JsonSnapshotStore writing to ``config.snapshot_path``

    Raises:
        ValueError: If snapshot_path is empty
    """
    if not config.snapshot_path or not config.snapshot_path.strip():
        error_msg = "snapshot_path cannot be empty"
        log.error("get_snapshot_store_failed", error=error_msg)
        raise ValueError(error_msg)

    return JsonSnapshotStore(config.snapshot_path)


def get_sync_orchestrator(
    config: AppConfig, progress: ProgressReporter | None = None
) -> SyncOrchestrator:
    """Wire a SyncOrchestrator from a full application config."""
    return SyncOrchestrator(
        remote_source=get_remote_source(config.remote),
        snapshot_store=get_snapshot_store(config.storage),
        policy=config.retry,
        progress=progress,
    )
