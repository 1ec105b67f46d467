"""
Per-process memory metric.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..models.measurements import ProcessMeasurement
from ..models.platform import DEFAULT_KERNEL_PATHS, KernelPaths
from ..reporting.report_generator import ReportGenerator
from ..system.processes import Process
from ..system.procrank import Procrank
from .base import AbstractMetric
from .scheduler import CancellationToken

logger = logging.getLogger(__name__)


class ProcessMetric(AbstractMetric):
    """
    Tracks PSS, RSS, USS, VSS, swap and locked memory of every process.

    Each pass samples all processes once. Samples won't catch every
    spike, but over a capture the running averages settle. Processes are
    keyed by identity (pid and command line), so a recycled pid starts a
    new entry.
    """

    def __init__(
        self,
        report_generator: ReportGenerator,
        cancel_token: Optional[CancellationToken] = None,
        paths: Optional[KernelPaths] = None,
    ):
        super().__init__(report_generator, cancel_token)
        self.paths = paths or DEFAULT_KERNEL_PATHS
        self._measurements: Dict[Process, ProcessMeasurement] = {}

    @property
    def measurements(self) -> List[ProcessMeasurement]:
        return list(self._measurements.values())

    def collect_data(self) -> None:
        procrank = Procrank(self.paths)

        for sample in procrank.get_memory_usage():
            measurement = self._measurements.get(sample.process)
            if measurement is None:
                measurement = ProcessMeasurement(sample.process)
                self._measurements[sample.process] = measurement
            measurement.add_sample(sample)

        for measurement in self._measurements.values():
            measurement.process.update_alive_status()

    def deduplicate(self) -> int:
        """
        Collapse repeated short-lived processes.

        A script that runs ``sleep 10`` once a minute leaves one dead entry
        per invocation. Dead entries sharing command line and parent pid
        are reduced to the one with the highest average PSS (the first seen
        wins a tie). Live processes are never removed.

        Returns:
            Number of entries removed
        """
        groups: Dict[Tuple[str, int], List[ProcessMeasurement]] = {}
        for measurement in self._measurements.values():
            process = measurement.process
            if process.is_dead:
                groups.setdefault((process.cmdline, process.ppid), []).append(measurement)

        duplicates = {key: group for key, group in groups.items() if len(group) > 1}
        if not duplicates:
            return 0

        logger.info(f"{len(duplicates)} Duplicates")
        removed = 0
        for (cmdline, _), group in duplicates.items():
            keep = group[0]
            for candidate in group[1:]:
                if candidate.pss.average > keep.pss.average:
                    keep = candidate

            logger.info(f"Removing {len(group) - 1} duplicates for {cmdline}")
            for measurement in group:
                if measurement is not keep:
                    del self._measurements[measurement.process]
                    removed += 1
        return removed

    def _save_results(self) -> None:
        self.deduplicate()

        measurements = self.measurements
        self.report_generator.add_processes(measurements)

        pss_sum = 0.0
        for measurement in measurements:
            pss_sum += measurement.pss.average
        self.report_generator.add_to_accumulated_memory_usage(pss_sum)
