"""Remote sources the sync engine can pull from."""

from syncengine.ingestion.http_source import HttpRemoteSource
from syncengine.ingestion.remote_source import RemoteSource, RemoteSourceError
from syncengine.ingestion.simulated_source import SimulatedRemoteSource

__all__ = ["HttpRemoteSource", "RemoteSource", "RemoteSourceError", "SimulatedRemoteSource"]
