"""
Defines the abstract class for metrics.

A metric samples one category of memory data on a periodic worker and,
once stopped, flushes its reduced statistics into a ReportGenerator.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..reporting.report_generator import ReportGenerator
from .scheduler import CancellationToken, CollectionState, PeriodicCollector

logger = logging.getLogger(__name__)


class AbstractMetric(ABC):
    """
    Abstract base class for metrics.

    Subclasses implement ``collect_data`` (one full collection pass, run
    on the worker thread) and ``_save_results`` (flush to the report).
    Results are owned by the worker until ``stop_collection`` returns, so
    ``save_results`` refuses to run while collection is active.
    """

    def __init__(
        self,
        report_generator: ReportGenerator,
        cancel_token: Optional[CancellationToken] = None,
    ):
        self.report_generator = report_generator
        self._collector = PeriodicCollector(
            self.__class__.__name__, self.collect_data, cancel_token
        )
        logger.debug(f"Initialized {self.__class__.__name__}")

    @property
    def name(self) -> str:
        return self._collector.name

    @property
    def state(self) -> CollectionState:
        return self._collector.state

    @property
    def is_collecting(self) -> bool:
        return self._collector.is_active

    def start_collection(self, period: float) -> None:
        """Start collecting every ``period`` seconds."""
        self._collector.start(period)

    def stop_collection(self, timeout: Optional[float] = None) -> bool:
        """Stop collecting and wait for any in-flight pass to finish."""
        return self._collector.stop(timeout)

    def save_results(self) -> None:
        """
        Flush collected statistics into the report.

        Raises:
            RuntimeError: If collection is still running
        """
        if self._collector.is_active:
            raise RuntimeError(
                f"{self.name}: save_results() called while collection is active"
            )
        self._save_results()

    def close(self, timeout: Optional[float] = None) -> None:
        """
        Stop collection if still running and release platform resources.

        ``timeout`` bounds the wait for a worker that is still running.
        """
        if self._collector.is_active:
            self.stop_collection(timeout)

    @abstractmethod
    def collect_data(self) -> None:
        """Run one complete collection pass."""
        pass

    @abstractmethod
    def _save_results(self) -> None:
        pass
