"""
Point-in-time memory usage of every running process.

This module provides:
- ProcessMemorySample: memory figures of one process at one instant.
- Procrank: walks /proc once and produces a sample per live process,
  including an estimate of how much zram its swapped pages occupy.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..models.platform import DEFAULT_KERNEL_PATHS, KernelPaths
from ..parsers.meminfo import MemInfo
from ..parsers.smaps import Smaps
from .processes import Process, list_pids

logger = logging.getLogger(__name__)

MAX_ZRAM_DEVICES = 256


@dataclass
class ProcessMemorySample:
    """
    Memory usage of a single process at a point in time, all in kB.

    Attributes:
        process: Identity of the sampled process
        vss: Virtual set size (sum of mapping sizes)
        rss: Resident set size
        pss: Proportional set size
        uss: Unique set size (private clean + private dirty)
        locked: Locked pages
        swap: Swapped-out pages
        swap_pss: Proportional share of swapped-out pages
        swap_zram: Estimated physical memory used by the process in zram
    """

    process: Process
    vss: int = 0
    rss: int = 0
    pss: int = 0
    uss: int = 0
    locked: int = 0
    swap: int = 0
    swap_pss: int = 0
    swap_zram: float = 0.0


class Procrank:
    """
    Snapshot sampler of per-process memory.

    Swap size and the zram compression ratio are read once, at
    construction; build a new instance for each collection pass.
    """

    def __init__(self, paths: Optional[KernelPaths] = None):
        self.paths = paths or DEFAULT_KERNEL_PATHS
        self._swap_total_kb = MemInfo(self.paths.meminfo).swap_total
        self.zram_compression_ratio = self._zram_compression_ratio()

    @property
    def swap_enabled(self) -> bool:
        return self._swap_total_kb > 0

    def swap_total_kb(self) -> int:
        return self._swap_total_kb

    def _zram_compression_ratio(self) -> float:
        """
        Physical memory held by zram divided by swap in use.

        Zram devices are numbered contiguously, so the scan stops at the
        first missing one. Returns 0.0 when swap is disabled, no zram
        memory is in use, or no swap is in use.
        """
        if not self.swap_enabled:
            return 0.0

        zram_total = 0
        for index in range(MAX_ZRAM_DEVICES):
            mm_stat = self.paths.zram_mm_stat(index)
            if not mm_stat.parent.exists():
                break
            try:
                with open(mm_stat, "r") as f:
                    fields = f.readline().split()
            except OSError:
                continue
            try:
                # orig_data_size compr_data_size mem_used_total ...
                zram_total += int(fields[2])
            except (IndexError, ValueError):
                logger.error(f"Malformed mm_stat file {mm_stat}")

        if zram_total == 0:
            return 0.0

        swap_used = MemInfo(self.paths.meminfo).swap_used
        if swap_used <= 0:
            return 0.0

        ratio = (zram_total // 1024) / swap_used
        logger.debug(f"Zram compression is {ratio:f}")
        return ratio

    def get_memory_usage(self) -> List[ProcessMemorySample]:
        """
        Sample every running process.

        Processes whose name cannot be read (kernel threads, or processes
        that exited mid-scan) are skipped.
        """
        pids = list_pids(self.paths.proc_root)
        if not pids:
            logger.warning("No PIDs found")
            return []

        samples = []
        for pid in sorted(pids):
            process = Process(pid, self.paths.proc_root)
            if not process.name:
                continue
            samples.append(self._sample(process))
        return samples

    def _sample(self, process: Process) -> ProcessMemorySample:
        smaps = Smaps(process.pid, self.paths.proc_root)
        return ProcessMemorySample(
            process=process,
            vss=smaps.vss,
            rss=smaps.rss,
            pss=smaps.pss,
            uss=smaps.uss,
            locked=smaps.locked,
            swap=smaps.swap,
            swap_pss=smaps.swap_pss,
            swap_zram=smaps.swap_pss * self.zram_compression_ratio,
        )
