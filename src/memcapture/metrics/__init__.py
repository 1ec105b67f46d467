"""
Metrics and their periodic scheduling.

This module provides:
- PeriodicCollector / CancellationToken: the interruptible collection loop
- AbstractMetric: start/stop/save lifecycle shared by all metrics
- ProcessMetric: per-process memory statistics
- MemoryMetric: system-wide memory pools
"""

from .base import AbstractMetric
from .memory_metric import LINUX_MEMORY_CATEGORIES, MemoryMetric
from .process_metric import ProcessMetric
from .scheduler import CancellationToken, CollectionState, PeriodicCollector

__all__ = [
    "AbstractMetric",
    "LINUX_MEMORY_CATEGORIES",
    "MemoryMetric",
    "ProcessMetric",
    "CancellationToken",
    "CollectionState",
    "PeriodicCollector",
]
