"""
Cancellable periodic execution.

A ``PeriodicCollector`` owns one worker thread that runs a callback, then
sleeps for the collection period, until asked to stop. The sleep is an
interruptible wait on a condition variable measured against the monotonic
clock, so a stop request takes effect immediately and wall-clock changes
do not stretch or shorten the period.

A ``CancellationToken`` is shared between all collectors of a capture and
the code waiting for the capture window to elapse; cancelling it (from a
signal handler, for instance) stops every linked collector at once.
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class CollectionState(Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    STOP_REQUESTED = "stop_requested"
    STOPPED = "stopped"


class CancellationToken:
    """
    One-shot, thread-safe cancellation flag with stop callbacks.

    ``cancel()`` only sets flags and notifies waiters; it never joins a
    thread, so it is safe to call from a signal handler.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.RLock()
        self._callbacks: List[Callable[[], None]] = []

    def register(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` on cancellation (immediately if already cancelled)."""
        with self._lock:
            self._callbacks.append(callback)
            cancelled = self._event.is_set()
        if cancelled:
            callback()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until cancelled or ``timeout`` seconds have elapsed.

        Returns:
            True if the token was cancelled
        """
        if timeout is None:
            self._event.wait()
            return True

        deadline = time.monotonic() + timeout
        while not self._event.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            self._event.wait(remaining)
        return self._event.is_set()


class PeriodicCollector:
    """
    Runs ``callback`` every ``period`` seconds on a dedicated thread.

    States move IDLE -> COLLECTING -> STOP_REQUESTED -> STOPPED; a stopped
    collector may be started again. Each pass runs to completion: a stop
    request is honoured between passes, or immediately while waiting.
    Exceptions raised by a pass are logged and the next pass still runs.
    """

    def __init__(
        self,
        name: str,
        callback: Callable[[], None],
        cancel_token: Optional[CancellationToken] = None,
    ):
        self.name = name
        self._callback = callback
        self._cancel_token = cancel_token
        # Reentrant so request_stop() can run in a signal handler on a
        # thread that already holds the lock.
        self._condition = threading.Condition(threading.RLock())
        self._stop_requested = False
        self._state = CollectionState.IDLE
        self._thread: Optional[threading.Thread] = None
        self.passes_completed = 0

        if cancel_token is not None:
            cancel_token.register(self.request_stop)

    @property
    def state(self) -> CollectionState:
        with self._condition:
            return self._state

    @property
    def is_active(self) -> bool:
        """True while the worker thread may still be running a pass."""
        with self._condition:
            if self._state in (CollectionState.COLLECTING, CollectionState.STOP_REQUESTED):
                return True
        return self._thread is not None and self._thread.is_alive()

    def start(self, period: float) -> None:
        """
        Start periodic collection.

        Raises:
            ValueError: If ``period`` is not positive
            RuntimeError: If collection is already running
        """
        if period <= 0:
            raise ValueError(f"Collection period must be positive, got {period}")

        with self._condition:
            if self.is_active:
                raise RuntimeError(f"{self.name} is already collecting")
            self._stop_requested = (
                self._cancel_token is not None and self._cancel_token.is_cancelled
            )
            self._state = CollectionState.COLLECTING
            self._thread = threading.Thread(
                target=self._collection_loop,
                args=(period,),
                name=f"{self.name}-collector",
                daemon=True,
            )
            self._thread.start()
        logger.info(f"{self.name} collection started with period {period}s")

    def request_stop(self) -> None:
        """Ask the worker to exit after the current pass. Does not block."""
        with self._condition:
            self._stop_requested = True
            if self._state is CollectionState.COLLECTING:
                self._state = CollectionState.STOP_REQUESTED
            self._condition.notify_all()

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Request a stop and wait for the worker thread to exit.

        A collector that was never started is left untouched.

        Returns:
            True if the worker has exited (or never ran)
        """
        if self._thread is None:
            return True

        self.request_stop()
        if self._thread.is_alive():
            logger.info(f"Waiting for {self.name} collection thread to terminate")
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"{self.name} collection thread did not stop within {timeout}s")
                return False
        return True

    def _collection_loop(self, period: float) -> None:
        try:
            while True:
                start = time.monotonic()
                try:
                    self._callback()
                except Exception as e:
                    logger.error(f"{self.name} collection pass failed: {e}", exc_info=True)
                self.passes_completed += 1

                elapsed_ms = int((time.monotonic() - start) * 1000)
                logger.info(f"{self.name} completed in {elapsed_ms} ms")

                if not self._wait_for_next_pass(period):
                    break
        finally:
            with self._condition:
                self._state = CollectionState.STOPPED
            logger.info(f"{self.name} collection thread quit")

    def _wait_for_next_pass(self, period: float) -> bool:
        """Sleep ``period`` seconds unless stopped. Returns False when stopped."""
        deadline = time.monotonic() + period
        with self._condition:
            while not self._stop_requested:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return True
                self._condition.wait(remaining)
            return False
