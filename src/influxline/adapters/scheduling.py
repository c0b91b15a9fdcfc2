"""Background scheduler invoking a reporter at a fixed period.

Ticks run one at a time on a single daemon thread, so they never overlap.
A tick that runs longer than the period delays the next one; missed ticks
are not made up.
"""

import logging
import threading
import time
from types import TracebackType
from typing import Protocol

logger = logging.getLogger(__name__)


class Reportable(Protocol):
    """Anything with a no-argument report tick, e.g. LineProtocolReporter."""

    def report_registry(self) -> None: ...


class ScheduledReporter:
    """Run ``reporter.report_registry()`` every ``period`` seconds.

    Args:
        reporter: The reporter to tick.
        period: Seconds between the starts of consecutive ticks.
        report_on_stop: Run one final tick when stopped.
        name: Name of the background thread.

    Example:
        ```python
        with ScheduledReporter(reporter, period=10.0):
            run_application()
        ```
    """

    def __init__(
        self,
        reporter: Reportable,
        period: float,
        report_on_stop: bool = False,
        name: str = "influxline-reporter",
    ) -> None:
        if period <= 0:
            raise ValueError("period must be positive")
        self._reporter = reporter
        self._period = period
        self._report_on_stop = report_on_stop
        self._name = name
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._ticks = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def ticks(self) -> int:
        """Number of ticks run so far."""
        return self._ticks

    def start(self) -> None:
        """Start the background thread.

        Raises:
            RuntimeError: If the scheduler is already running.
        """
        with self._lock:
            if self.running:
                raise RuntimeError("reporter already started")
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Signal the thread to stop and wait for it to finish.

        If the thread is still inside a tick when ``timeout`` expires, the
        scheduler stays marked as running and the final tick is skipped;
        call ``stop()`` again to finish the shutdown.
        """
        with self._lock:
            thread = self._thread
            self._stop_event.set()
        if thread is not None:
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(
                    "Reporter thread '%s' still running after %s seconds, "
                    "skipping final tick",
                    self._name,
                    timeout,
                )
                return
        if self._report_on_stop:
            self._tick()
        with self._lock:
            if self._thread is thread:
                self._thread = None

    def _tick(self) -> None:
        try:
            self._reporter.report_registry()
        except Exception:
            logger.warning("Reporting tick failed", exc_info=True)
        self._ticks += 1

    def _run(self) -> None:
        next_run = time.monotonic() + self._period
        while not self._stop_event.wait(max(0.0, next_run - time.monotonic())):
            self._tick()
            # skip ticks that a slow report ran past
            now = time.monotonic()
            next_run += self._period
            if next_run < now:
                next_run = now + self._period - (now - next_run) % self._period

    def __enter__(self) -> "ScheduledReporter":
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.stop()
