"""
Signal handling for a capture run.

SIGINT and SIGTERM end the capture window early: the shared cancellation
token is cancelled, in-progress collection passes finish, and the report
is still saved.
"""

import logging
import signal
from typing import Any

from ..metrics.scheduler import CancellationToken

logger = logging.getLogger(__name__)


class SignalHandler:
    """
    Installs SIGINT/SIGTERM handlers that cancel a CancellationToken, and
    restores the previous handlers afterwards.
    """

    def __init__(self, cancel_token: CancellationToken):
        self.cancel_token = cancel_token
        self._original_sigint_handler = None
        self._original_sigterm_handler = None
        self._signal_handlers_set = False

    def setup_signal_handlers(self) -> None:
        try:
            self._original_sigint_handler = signal.signal(signal.SIGINT, self._handle_signal)
            self._original_sigterm_handler = signal.signal(signal.SIGTERM, self._handle_signal)
            self._signal_handlers_set = True
            logger.debug("Signal handlers set up for capture")
        except ValueError as e:
            # signal.signal() only works in the main thread
            logger.warning(f"Failed to set up signal handlers: {e}")

    def cleanup_signal_handlers(self) -> None:
        """Restore original signal handlers."""
        if not self._signal_handlers_set:
            return

        try:
            if self._original_sigint_handler is not None:
                signal.signal(signal.SIGINT, self._original_sigint_handler)
            if self._original_sigterm_handler is not None:
                signal.signal(signal.SIGTERM, self._original_sigterm_handler)
            logger.debug("Signal handlers restored")
        except ValueError as e:
            logger.warning(f"Failed to restore signal handlers: {e}")
        finally:
            self._signal_handlers_set = False

    def _handle_signal(self, signum: int, frame: Any) -> None:
        if self.cancel_token.is_cancelled:
            logger.warning("Shutdown already in progress. Please be patient.")
            return

        logger.info(
            f"Signal {signum} ({signal.strsignal(signum)}) received. Stopping and saving report!"
        )
        self.cancel_token.cancel()
        logger.info("Waiting for in-progress data collection to complete")

    def __enter__(self) -> "SignalHandler":
        self.setup_signal_handlers()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup_signal_handlers()
