"""
Per-key measurement records held by the metrics during a capture.

A record is created lazily the first time its key (a process, a CMA
region, a buddy zone order, ...) is observed and is never removed while
collection is running.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .statistics import StatAccumulator

if TYPE_CHECKING:
    from ..system.processes import Process
    from ..system.procrank import ProcessMemorySample


def _accumulator(name: str):
    return field(default_factory=lambda: StatAccumulator(name))


@dataclass
class ProcessMeasurement:
    """Running memory statistics for a single process identity."""

    process: "Process"
    pss: StatAccumulator = _accumulator("PSS")
    rss: StatAccumulator = _accumulator("RSS")
    uss: StatAccumulator = _accumulator("USS")
    vss: StatAccumulator = _accumulator("VSS")
    swap: StatAccumulator = _accumulator("Swap")
    swap_pss: StatAccumulator = _accumulator("SwapPSS")
    swap_zram: StatAccumulator = _accumulator("SwapZram")
    locked: StatAccumulator = _accumulator("Locked")

    def add_sample(self, sample: "ProcessMemorySample") -> None:
        self.pss.add_data_point(sample.pss)
        self.rss.add_data_point(sample.rss)
        self.uss.add_data_point(sample.uss)
        self.vss.add_data_point(sample.vss)
        self.swap.add_data_point(sample.swap)
        self.swap_pss.add_data_point(sample.swap_pss)
        self.swap_zram.add_data_point(sample.swap_zram)
        self.locked.add_data_point(sample.locked)


@dataclass
class CmaMeasurement:
    """One CMA region: its size (last observed) and used/unused statistics."""

    size_kb: float
    used: StatAccumulator = _accumulator("Used_KB")
    unused: StatAccumulator = _accumulator("Unused_KB")


@dataclass
class FragmentationMeasurement:
    """Free page count and fragmentation percentage of one allocation order."""

    free_pages: StatAccumulator = _accumulator("Free_Pages")
    fragmentation: StatAccumulator = _accumulator("Fragmentation_%")


@dataclass
class GpuMeasurement:
    """GPU memory attributed to one process."""

    process: "Process"
    used: StatAccumulator = _accumulator("Memory_Usage_KB")
