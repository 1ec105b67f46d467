"""
Parser for /proc/buddyinfo and the fragmentation index derived from it.

Each row reads ``Node 0, zone <Zone> <free blocks of order 0> ...``. A
free block of order ``o`` holds ``2**o`` pages.
"""

import logging
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

HEADER_TOKENS = 4


@dataclass
class ZoneFragmentation:
    """
    Free block counts and fragmentation of one buddy allocator zone.

    ``fragmentation[i]`` is the fraction (0.0-1.0) of free pages that sit
    in blocks smaller than order ``i``, i.e. that cannot satisfy an
    order-``i`` allocation.
    """

    zone: str
    free_pages: List[int]
    fragmentation: List[float]


def calculate_fragmentation(free_pages: List[int]) -> List[float]:
    """
    Fragmentation fraction per order from per-order free block counts.

    A zone without any free pages reports 0.0 for every order.
    """
    pages_per_order = [(2 ** order) * count for order, count in enumerate(free_pages)]
    total = sum(pages_per_order)
    if total == 0:
        return [0.0] * len(free_pages)

    fragmentation = []
    suitable = total
    for order_pages in pages_per_order:
        # suitable: pages in blocks of this order or larger
        fragmentation.append((total - suitable) / total)
        suitable -= order_pages
    return fragmentation


def parse_buddyinfo(content: str, expected_columns: int) -> List[ZoneFragmentation]:
    """
    Parse buddyinfo content into per-zone fragmentation data.

    Rows whose token count differs from ``expected_columns`` (or whose
    counts are not integers) are logged and skipped.
    """
    zones = []
    for line in content.splitlines():
        tokens = line.split()
        if not tokens:
            continue

        if len(tokens) != expected_columns:
            logger.warning(
                f"Failed to parse buddyinfo - invalid number of columns "
                f"(got {len(tokens)}, expected {expected_columns})"
            )
            continue

        try:
            free_pages = [int(token) for token in tokens[HEADER_TOKENS:]]
        except ValueError:
            logger.warning(f"Failed to parse buddyinfo line: '{line}'")
            continue

        zones.append(ZoneFragmentation(
            zone=tokens[3],
            free_pages=free_pages,
            fragmentation=calculate_fragmentation(free_pages),
        ))
    return zones
