"""
Parsers for vendor and optional kernel interfaces.

These files only exist on some platforms or kernel configurations
(debugfs CMA and GPU accounting, Amlogic DDR counters, Broadcom BMEM,
cgroup v1 memory controller). Parsers take file content and return plain
tuples; the ``read_*`` helpers wrap directory walks. Malformed lines are
skipped.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# systemd-created memory cgroups that are not containers
CGROUP_IGNORE_PATTERN = re.compile(r"(init.scope)|(.*.slice)|(.*.mount)|(.*.scope)")

_DRI_CLIENT_DIR_PATTERN = re.compile(r"^(\d+)-")
_DDR_BANDWIDTH_PATTERN = re.compile(r"Total bandwidth:\s*(\d+)\s*KB/s")
_SIZE_UNITS = {"KB": 1, "MB": 1024, "GB": 1024 * 1024}


def get_page_size() -> int:
    return os.sysconf("SC_PAGE_SIZE")


def _read_text(path: Path) -> str:
    with open(path, "r") as f:
        return f.read()


# --- CMA ---------------------------------------------------------------------


@dataclass
class CmaRegion:
    """One debugfs CMA region; sizes converted from pages to kB."""

    directory: str
    size_kb: float
    used_kb: float

    @property
    def unused_kb(self) -> float:
        return self.size_kb - self.used_kb


def read_cma_regions(cma_dir: Path, page_size: int) -> List[CmaRegion]:
    """
    Read every region under /sys/kernel/debug/cma.

    Raises:
        OSError: If the CMA debug directory cannot be listed
    """
    regions = []
    for entry in sorted(Path(cma_dir).iterdir()):
        if not entry.is_dir():
            continue
        try:
            count_pages = int(_read_text(entry / "count").split()[0])
            used_pages = int(_read_text(entry / "used").split()[0])
        except (OSError, ValueError, IndexError) as e:
            logger.warning(f"Failed to read CMA region {entry}: {e}")
            continue

        regions.append(CmaRegion(
            directory=entry.name,
            size_kb=count_pages * page_size / 1024,
            used_kb=used_pages * page_size / 1024,
        ))
    return regions


# --- GPU ---------------------------------------------------------------------


def parse_mali_amlogic(content: str) -> List[Tuple[int, int]]:
    """
    Parse Amlogic Mali ``gpu_memory`` rows into ``(pid, pages)`` pairs.

    Rows read ``<kctx hex> <pid> <used pages>``; header and separator
    lines are skipped.
    """
    usage = []
    for line in content.splitlines():
        tokens = line.split()
        if len(tokens) != 3:
            continue
        try:
            int(tokens[0], 16)
            usage.append((int(tokens[1]), int(tokens[2])))
        except ValueError:
            continue
    return usage


def parse_mali_realtek(content: str) -> List[Tuple[int, int]]:
    """
    Parse Realtek Mali ``gpu_memory`` rows into ``(pid, pages)`` pairs.

    Rows read ``kctx-0x<hex> <used pages> <pid>``.
    """
    usage = []
    for line in content.splitlines():
        tokens = line.split()
        if len(tokens) != 3 or not tokens[0].startswith("kctx-0x"):
            continue
        try:
            int(tokens[0][len("kctx-0x"):], 16)
            pages = int(tokens[1])
            pid = int(tokens[2])
        except ValueError:
            continue
        usage.append((pid, pages))
    return usage


def parse_dri_client(content: str) -> List[Tuple[str, float]]:
    """
    Parse a DRI debugfs ``client`` file into ``(command, virtual kB)`` pairs.

    Rows read ``<command> <objects> <size><KB|MB|GB> ...``. Rows with an
    unknown size unit are logged and skipped.
    """
    usage = []
    for line in content.splitlines():
        tokens = line.split()
        if len(tokens) < 3:
            continue
        try:
            int(tokens[1])
        except ValueError:
            continue

        size = tokens[2]
        unit = size[-2:]
        try:
            amount = int(size[:-2])
        except ValueError:
            continue
        if unit not in _SIZE_UNITS:
            logger.warning(f"Could not parse this line: '{line}'")
            continue
        usage.append((tokens[0], float(amount * _SIZE_UNITS[unit])))
    return usage


def read_dri_clients(dri_dir: Path) -> List[Tuple[int, float]]:
    """
    Walk ``<tid>-<hex>`` directories under the DRI debugfs root.

    Returns:
        ``(tid, kB)`` for every client row found

    Raises:
        OSError: If the DRI debug directory cannot be listed
    """
    usage = []
    for entry in sorted(Path(dri_dir).iterdir()):
        match = _DRI_CLIENT_DIR_PATTERN.match(entry.name)
        if not match or not entry.is_dir():
            continue
        tid = int(match.group(1))
        try:
            content = _read_text(entry / "client")
        except OSError:
            logger.warning(f"Could not open gpu client file {entry / 'client'}")
            continue
        for _, kb in parse_dri_client(content):
            usage.append((tid, kb))
    return usage


def tid_to_tgid(tid: int, proc_root: Path) -> int:
    """Thread group id (main PID) of a thread, or -1 if it cannot be found."""
    status_path = Path(proc_root) / str(tid) / "status"
    try:
        content = _read_text(status_path)
    except OSError:
        logger.warning(f"Failed to open file {status_path}")
        return -1

    for line in content.splitlines():
        if line.startswith("Tgid:"):
            try:
                return int(line.split()[1])
            except (IndexError, ValueError):
                return -1
    return -1


# --- DDR bandwidth -----------------------------------------------------------


def parse_ddr_bandwidth(content: str) -> List[int]:
    """Non-zero ``Total bandwidth: N KB/s`` readings, in KB/s."""
    readings = []
    for line in content.splitlines():
        match = _DDR_BANDWIDTH_PATTERN.search(line)
        if match:
            kbps = int(match.group(1))
            if kbps != 0:
                readings.append(kbps)
    return readings


def set_ddr_mode(mode_path: Path, enabled: bool) -> bool:
    """Enable or disable DDR bandwidth counters. Returns False on failure."""
    try:
        with open(mode_path, "w") as f:
            f.write("1" if enabled else "0")
        return True
    except OSError as e:
        logger.warning(f"Failed to write DDR mode to {mode_path}: {e}")
        return False


# --- Broadcom BMEM -----------------------------------------------------------


def parse_bmem(content: str) -> List[Tuple[str, float]]:
    """
    Parse /proc/brcm/core into ``(region, usage kB)`` pairs.

    Region rows carry the size in MB as the fifth token, the usage
    percentage as the seventh, a second percentage as the eighth and the
    region name as the ninth.
    """
    usage = []
    for line in content.splitlines():
        tokens = line.split()
        if len(tokens) < 9:
            continue
        if not tokens[6].endswith("%") or not tokens[7].endswith("%"):
            continue
        try:
            int(tokens[0])
            int(tokens[2])
            size_mb = int(tokens[4])
            usage_percent = int(tokens[6][:-1])
        except ValueError:
            continue
        usage.append((tokens[8], size_mb * (usage_percent / 100.0) * 1024))
    return usage


# --- cgroups -----------------------------------------------------------------


def read_container_memory(cgroup_dir: Path) -> Optional[Dict[str, float]]:
    """
    Memory usage in kB of every non-systemd memory cgroup.

    Returns:
        Mapping of cgroup name to usage, or None when the memory cgroup
        hierarchy is not mounted
    """
    cgroup_dir = Path(cgroup_dir)
    if not cgroup_dir.exists():
        return None

    usage = {}
    for entry in sorted(cgroup_dir.iterdir()):
        if not entry.is_dir() or CGROUP_IGNORE_PATTERN.fullmatch(entry.name):
            continue
        try:
            usage_bytes = int(_read_text(entry / "memory.usage_in_bytes").split()[0])
        except (OSError, ValueError, IndexError) as e:
            logger.warning(f"Failed to read memory usage of cgroup {entry.name}: {e}")
            continue
        usage[entry.name] = usage_bytes / 1024.0
    return usage
