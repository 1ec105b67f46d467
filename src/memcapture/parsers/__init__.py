"""
Kernel file parsers.

Each parser reads one kernel interface. Missing files degrade to zero or
"not collected" values instead of raising during collection.
"""

from .buddyinfo import ZoneFragmentation, calculate_fragmentation, parse_buddyinfo
from .meminfo import MemInfo, parse_meminfo
from .smaps import Smaps, SmapsField, parse_smaps_line
from .vendor import (
    CmaRegion,
    get_page_size,
    parse_bmem,
    parse_ddr_bandwidth,
    parse_dri_client,
    parse_mali_amlogic,
    parse_mali_realtek,
    read_cma_regions,
    read_container_memory,
    read_dri_clients,
    set_ddr_mode,
    tid_to_tgid,
)

__all__ = [
    "ZoneFragmentation",
    "calculate_fragmentation",
    "parse_buddyinfo",
    "MemInfo",
    "parse_meminfo",
    "Smaps",
    "SmapsField",
    "parse_smaps_line",
    "CmaRegion",
    "get_page_size",
    "parse_bmem",
    "parse_ddr_bandwidth",
    "parse_dri_client",
    "parse_mali_amlogic",
    "parse_mali_realtek",
    "read_cma_regions",
    "read_container_memory",
    "read_dri_clients",
    "set_ddr_mode",
    "tid_to_tgid",
]
