"""
Capture orchestration.

The CaptureRunner drives one capture: it starts every metric on a shared
cancellation token, waits for the capture window (or a cancellation),
stops the metrics, flushes their statistics into the report and
persists it.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config.storage_config import StorageConfig
from ..metrics.base import AbstractMetric
from ..metrics.memory_metric import MemoryMetric
from ..metrics.process_metric import ProcessMetric
from ..metrics.scheduler import CancellationToken
from ..models.platform import DEFAULT_KERNEL_PATHS, KernelPaths, PlatformProfile
from ..reporting.report_generator import ReportGenerator
from ..storage.data_manager import ReportStorageManager
from ..system.metadata import Metadata
from ..system.procrank import Procrank

logger = logging.getLogger(__name__)


class CaptureRunner:
    """
    Runs a single memory capture.

    Args:
        profile: Platform the capture runs on
        duration: Length of the capture window in seconds
        interval: Seconds between collection passes
        output_dir: Directory receiving the report
        storage_config: How the report is persisted
        paths: Kernel file roots (defaults to /proc and /sys)
        metadata: Run metadata source
        stop_timeout: Upper bound in seconds on waiting for each metric to stop
    """

    def __init__(
        self,
        profile: PlatformProfile,
        duration: float,
        interval: float,
        output_dir: Path,
        storage_config: Optional[StorageConfig] = None,
        paths: Optional[KernelPaths] = None,
        metadata: Optional[Metadata] = None,
        stop_timeout: Optional[float] = None,
    ):
        self.profile = profile
        self.duration = duration
        self.interval = interval
        self.output_dir = Path(output_dir)
        self.storage_config = storage_config or StorageConfig()
        self.paths = paths or DEFAULT_KERNEL_PATHS
        self.metadata = metadata or Metadata()
        self.stop_timeout = stop_timeout

        self.cancel_token = CancellationToken()
        self.report_generator = ReportGenerator(self.metadata)
        self.metrics: List[AbstractMetric] = [
            ProcessMetric(self.report_generator, self.cancel_token, self.paths),
            MemoryMetric(self.report_generator, self.profile, self.cancel_token, self.paths),
        ]
        self.early_termination = False

    def request_shutdown(self) -> None:
        """End the capture window early. Safe to call from a signal handler."""
        self.cancel_token.cancel()

    def run(self) -> Dict[str, Any]:
        """
        Perform the capture and save the report.

        Returns:
            The report document
        """
        logger.info(f"** About to start memory capture for {self.duration} seconds **")
        logger.info(f"Will save report to {self.output_dir}")

        start = time.monotonic()
        stalled: List[AbstractMetric] = []
        try:
            for metric in self.metrics:
                metric.start_collection(self.interval)

            self.early_termination = self.cancel_token.wait(self.duration)
            if not self.early_termination:
                logger.info(f"Stopping after {self.duration} seconds - completed full capture")

            self.metadata.set_duration(int(time.monotonic() - start))

            for metric in self.metrics:
                if not metric.stop_collection(self.stop_timeout):
                    stalled.append(metric)

            for metric in self.metrics:
                if metric in stalled:
                    logger.error(
                        f"{metric.name} did not stop within {self.stop_timeout}s, "
                        "its results are left out of the report"
                    )
                    continue
                metric.save_results()
        finally:
            for metric in self.metrics:
                # A stalled worker has already used up its stop timeout
                metric.close(0 if metric in stalled else self.stop_timeout)

        self.report_generator.set_swap_enabled(Procrank(self.paths).swap_enabled)
        report = self.report_generator.get_json()

        storage = ReportStorageManager(self.output_dir, self.storage_config)
        for path in storage.save_report(report):
            logger.info(f"Saved report data to {path}")

        return report
