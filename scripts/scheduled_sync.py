#!/usr/bin/env python3
"""
Scheduled synchronization script for the snapshot sync engine.

This script performs one synchronization run:
- Fetches users, then transactions, with timeout and retry
- Persists the merged snapshot atomically
- Logs progress and prints a summary

Designed to be run on a schedule (e.g., via cron or Airflow).

Usage:
    python scripts/scheduled_sync.py [--config CONFIG_PATH] [--simulate] [--output PATH]
"""

import argparse
import sys
import uuid

import structlog

from syncengine.models.config import AppConfig, RemoteSourceConfig
from syncengine.providers import get_sync_orchestrator
from syncengine.sync.models import SyncReport
from syncengine.utils.config_loader import DEFAULT_CONFIG_DIR, ConfigLoader, ConfigurationError
from syncengine.utils.logging_config import configure_logging_from_config

log = structlog.stdlib.get_logger()


def load_app_config(
    config_path: str | None = None,
    simulate: bool = False,
    output: str | None = None,
) -> AppConfig:
    """
    Load configuration and apply command line overrides.

    Args:
        config_path: Optional path to configuration file
        simulate: If True, replace the remote source with the simulated one
        output: Optional snapshot path overriding storage.snapshot_path

    Returns:
        AppConfig ready to build an orchestrator
    """
    loader = ConfigLoader()
    if simulate and config_path is None:
        config_path = str(DEFAULT_CONFIG_DIR / "simulated.yaml")
    config = loader.load_config(config_path)

    updates: dict = {}
    if simulate and config.remote.type != "simulated":
        updates["remote"] = RemoteSourceConfig(type="simulated")
    if output:
        updates["storage"] = config.storage.model_copy(update={"snapshot_path": output})
    if updates:
        config = config.model_copy(update=updates)

    loader.validate_config(config)
    return config


def perform_sync(config: AppConfig) -> SyncReport:
    """Run one synchronization with a fresh run id bound to every log event."""
    structlog.contextvars.bind_contextvars(run_id=uuid.uuid4().hex)
    try:
        log.info("scheduled_sync_started", source_type=config.remote.type)
        orchestrator = get_sync_orchestrator(config)
        return orchestrator.sync()
    finally:
        structlog.contextvars.unbind_contextvars("run_id")


def print_summary(report: SyncReport) -> None:
    """Print a human-readable summary of a sync report."""
    print("\n" + "=" * 60)
    print("SYNCHRONIZATION SUMMARY")
    print("=" * 60)

    if report.success:
        print("Status: SUCCESS")
        print(f"Snapshot Timestamp: {report.snapshot_timestamp}")
        print(f"Users: {report.user_count}")
        print(f"Transactions: {report.transaction_count}")
    else:
        print("Status: FAILED")
        print(f"Error: {report.error}")

    for phase, attempts in report.attempts.items():
        print(f"Attempts ({phase}): {attempts}")
    print(f"Duration: {report.duration_seconds:.2f} seconds")
    print("=" * 60)


def main() -> None:
    """Main entry point for scheduled sync script."""
    parser = argparse.ArgumentParser(description="Resilient two-source snapshot sync")
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Use the simulated unstable source instead of the configured one",
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Snapshot path overriding storage.snapshot_path",
        default=None,
    )

    args = parser.parse_args()

    try:
        config = load_app_config(args.config, simulate=args.simulate, output=args.output)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    configure_logging_from_config(config.logging)

    report = perform_sync(config)
    print_summary(report)

    sys.exit(0 if report.success else 1)


if __name__ == "__main__":
    main()
