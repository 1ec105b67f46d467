"""
Streaming statistics for sampled quantities.

Every observed value (a process PSS, a CMA region's usage, the free pages
of a buddy zone at a given order...) is reduced on the fly to a running
minimum, maximum and average. Individual samples are never retained.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Optional


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves rounded away from zero."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


@dataclass
class StatAccumulator:
    """
    Running min/max/average of a named quantity.

    ``min`` and ``max`` are ``None`` until the first data point is added;
    ``average`` is 0.0 in that state. Adding a point is O(1).
    """

    name: str
    count: int = 0
    total: float = 0.0
    average: float = 0.0
    min: Optional[float] = field(default=None)
    max: Optional[float] = field(default=None)

    def add_data_point(self, value: float) -> None:
        if self.min is None or value < self.min:
            self.min = value
        if self.max is None or value > self.max:
            self.max = value

        self.total += value
        self.count += 1
        self.average = self.total / self.count

    @property
    def min_rounded(self) -> int:
        return round_half_away(self.min) if self.min is not None else 0

    @property
    def max_rounded(self) -> int:
        return round_half_away(self.max) if self.max is not None else 0

    @property
    def average_rounded(self) -> int:
        return round_half_away(self.average)

    def to_dict(self) -> Dict[str, int]:
        """Rounded view used by the report."""
        return {
            "min": self.min_rounded,
            "max": self.max_rounded,
            "average": self.average_rounded,
        }
