"""Shared utilities for configuration, logging, timing and progress reporting"""

from syncengine.utils.clock import Clock, SystemClock
from syncengine.utils.progress import ProgressReporter
from syncengine.utils.retry import compute_backoff_delay

__all__ = ["Clock", "ProgressReporter", "SystemClock", "compute_backoff_delay"]
