"""
Report assembly.

Metrics push their reduced statistics here once collection has stopped.
The generator builds a JSON-serialisable document with four sections:

- ``processes``: one entry per process, sorted by average PSS descending
- ``data``: named datasets (tables) of literal and statistic columns
- ``grandTotal``: Linux "used" memory and the accumulated estimate, in MB
- ``metadata``: device and run information, filled in by ``get_json``
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..models.measurements import ProcessMeasurement
from ..models.statistics import StatAccumulator
from ..system.metadata import Metadata

logger = logging.getLogger(__name__)

RowValue = Union[str, StatAccumulator]
Row = Mapping[str, RowValue]


class ReportGenerator:
    """Accumulates datasets and process tables into one report document."""

    def __init__(self, metadata: Optional[Metadata] = None):
        self.metadata = metadata or Metadata()
        self._processes: List[Dict[str, Any]] = []
        self._datasets: List[Dict[str, Any]] = []
        self._linux_usage_mb = 0.0
        self._calculated_usage_mb = 0.0
        self._swap_enabled: Optional[bool] = None

    def add_dataset(self, name: str, rows: Sequence[Row]) -> None:
        """
        Record a named table.

        Each row maps a column name to either a literal string or a
        StatAccumulator; accumulators are stored as rounded
        ``{"Min", "Max", "Average"}`` and listed in the column order as
        ``"<column> (Min)"``, ``"<column> (Max)"``, ``"<column> (Average)"``.
        The column order is taken from the first row. An empty row list
        records nothing.
        """
        if not rows:
            return

        column_order: List[str] = []
        data = []
        for index, row in enumerate(rows):
            entry: Dict[str, Any] = {}
            for column, value in row.items():
                if isinstance(value, StatAccumulator):
                    entry[column] = {
                        "Min": value.min_rounded,
                        "Max": value.max_rounded,
                        "Average": value.average_rounded,
                    }
                    if index == 0:
                        column_order.extend(
                            [f"{column} (Min)", f"{column} (Max)", f"{column} (Average)"]
                        )
                else:
                    entry[column] = str(value)
                    if index == 0:
                        column_order.append(column)
            data.append(entry)

        self._datasets.append({
            "name": name,
            "data": data,
            "_columnOrder": column_order,
        })
        logger.debug(f"Recorded dataset '{name}' with {len(data)} rows")

    def add_processes(self, measurements: List[ProcessMeasurement]) -> None:
        """Record per-process statistics, largest average PSS first."""
        ordered = sorted(measurements, key=lambda m: m.pss.average_rounded, reverse=True)

        for measurement in ordered:
            process = measurement.process
            self._processes.append({
                "pid": process.pid,
                "ppid": process.ppid,
                "name": process.name,
                "cmdline": process.cmdline,
                "systemdService": process.systemd_service or "",
                "container": process.container or "",
                "rss": measurement.rss.to_dict(),
                "pss": measurement.pss.to_dict(),
                "uss": measurement.uss.to_dict(),
                "vss": measurement.vss.to_dict(),
                "swap": measurement.swap.to_dict(),
                "swapPss": measurement.swap_pss.to_dict(),
                "swapZram": measurement.swap_zram.to_dict(),
                "locked": measurement.locked.to_dict(),
            })

    def add_to_accumulated_memory_usage(self, value_kb: float) -> None:
        self._calculated_usage_mb += value_kb / 1024.0

    def set_average_linux_memory_usage(self, value_kb: float) -> None:
        self._linux_usage_mb = value_kb / 1024.0

    def set_swap_enabled(self, enabled: bool) -> None:
        self._swap_enabled = enabled

    @property
    def calculated_usage_mb(self) -> float:
        return self._calculated_usage_mb

    @property
    def linux_usage_mb(self) -> float:
        return self._linux_usage_mb

    def get_json(self) -> Dict[str, Any]:
        """The complete report, with metadata gathered now."""
        return {
            "processes": list(self._processes),
            "data": list(self._datasets),
            "grandTotal": {
                "linuxUsage": self._linux_usage_mb,
                "calculatedUsage": self._calculated_usage_mb,
            },
            "metadata": self.metadata.to_dict(swap_enabled=self._swap_enabled),
        }
