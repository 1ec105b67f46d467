"""
Parser for /proc/meminfo.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from ..models.platform import DEFAULT_KERNEL_PATHS

logger = logging.getLogger(__name__)

# meminfo key -> attribute name
_FIELDS = {
    "MemTotal": "total",
    "MemFree": "free",
    "MemAvailable": "available",
    "Buffers": "buffers",
    "Cached": "cached",
    "Slab": "slab",
    "SReclaimable": "sreclaimable",
    "SUnreclaim": "sunreclaim",
    "SwapTotal": "swap_total",
    "SwapFree": "swap_free",
    "CmaTotal": "cma_total",
    "CmaFree": "cma_free",
}


class MemInfo:
    """
    Snapshot of /proc/meminfo, read once at construction.

    All values are in kB. If the file cannot be read every value is 0.
    ``used`` is ``total - (free + buffers + cached + sreclaimable)``; it
    stays 0 when ``total`` is smaller than ``free + buffers + cached + slab``,
    which only happens when the kernel reports inconsistent figures.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else DEFAULT_KERNEL_PATHS.meminfo

        self.total = 0
        self.free = 0
        self.available = 0
        self.used = 0
        self.buffers = 0
        self.cached = 0
        self.slab = 0
        self.sreclaimable = 0
        self.sunreclaim = 0
        self.swap_total = 0
        self.swap_free = 0
        self.cma_total = 0
        self.cma_free = 0

        self._parse()

    def _parse(self) -> None:
        try:
            with open(self.path, "r") as f:
                content = f.read()
        except OSError as e:
            logger.warning(f"Failed to open {self.path}: {e}")
            return

        for key, value in parse_meminfo(content).items():
            attr = _FIELDS.get(key)
            if attr is not None:
                setattr(self, attr, value)

        if self.total < self.free + self.buffers + self.cached + self.slab:
            logger.warning("MemTotal too small, something went wrong calculating memory")
            return

        self.used = self.total - (self.free + self.buffers + self.cached + self.sreclaimable)

    @property
    def swap_used(self) -> int:
        return self.swap_total - self.swap_free


def parse_meminfo(content: str) -> Dict[str, int]:
    """
    Parse meminfo-style ``Key:   value kB`` lines into a dict.

    Lines whose value is not an integer are skipped.
    """
    values = {}
    for line in content.splitlines():
        key, sep, rest = line.partition(":")
        if not sep:
            continue
        parts = rest.split()
        if not parts:
            continue
        try:
            values[key.strip()] = int(parts[0])
        except ValueError:
            continue
    return values
