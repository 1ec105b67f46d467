"""
System interaction for the memcapture package.

This module provides process enumeration and identity, the per-process
memory sampler and the run metadata gathered from the device.
"""

from .metadata import Metadata
from .processes import Process, list_pids
from .procrank import ProcessMemorySample, Procrank

__all__ = [
    "Metadata",
    "Process",
    "list_pids",
    "ProcessMemorySample",
    "Procrank",
]
