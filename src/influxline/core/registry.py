"""Registry of named metrics, the reporter's default metrics source."""

import threading
from collections.abc import Callable
from typing import Any, TypeVar

from influxline.core.exceptions import DuplicateMetricError
from influxline.core.metrics import Counter, Gauge, Histogram, Meter, Metric, Timer

M = TypeVar("M", Counter, Gauge, Histogram, Meter, Timer)


class MetricRegistry:
    """Thread-safe collection of metrics keyed by unique name.

    Implements MetricsSourcePort: the per-kind accessors return plain dicts
    sorted by metric name so reports are reproducible.

    Example:
        ```python
        registry = MetricRegistry()
        requests = registry.meter("http.requests")
        requests.mark()
        with registry.timer("db.query").time():
            ...
        ```
    """

    def __init__(self) -> None:
        self._metrics: dict[str, Metric] = {}
        self._lock = threading.Lock()

    @staticmethod
    def name(*parts: str | None) -> str:
        """Join the non-empty name parts with dots.

        ``MetricRegistry.name("http", None, "requests")`` is ``"http.requests"``.
        """
        return ".".join(part for part in parts if part)

    def register(self, name: str, metric: M) -> M:
        """Register a metric under a new name.

        Raises:
            DuplicateMetricError: If the name is already registered.
            ValueError: If the name is empty.
        """
        if not name:
            raise ValueError("metric name must not be empty")
        with self._lock:
            if name in self._metrics:
                raise DuplicateMetricError(f"A metric named {name} already exists")
            self._metrics[name] = metric
        return metric

    def _get_or_add(self, name: str, kind: type[M], factory: Callable[[], M]) -> M:
        if not name:
            raise ValueError("metric name must not be empty")
        with self._lock:
            existing = self._metrics.get(name)
            if existing is None:
                created = factory()
                self._metrics[name] = created
                return created
        if not isinstance(existing, kind):
            raise DuplicateMetricError(
                f"{name} is already used for a different type of metric"
            )
        return existing

    def counter(self, name: str) -> Counter:
        """Return the counter registered under name, creating it if needed."""
        return self._get_or_add(name, Counter, Counter)

    def histogram(self, name: str) -> Histogram:
        """Return the histogram registered under name, creating it if needed."""
        return self._get_or_add(name, Histogram, Histogram)

    def meter(self, name: str) -> Meter:
        """Return the meter registered under name, creating it if needed."""
        return self._get_or_add(name, Meter, Meter)

    def timer(self, name: str) -> Timer:
        """Return the timer registered under name, creating it if needed."""
        return self._get_or_add(name, Timer, Timer)

    def gauge(self, name: str, callback: Callable[[], Any]) -> Gauge:
        """Return the gauge registered under name, creating it from callback if needed."""
        return self._get_or_add(name, Gauge, lambda: Gauge(callback))

    def remove(self, name: str) -> bool:
        """Remove a metric.

        Returns:
            True if a metric was removed, False if the name was unknown.
        """
        with self._lock:
            return self._metrics.pop(name, None) is not None

    @property
    def names(self) -> list[str]:
        """All registered names in ascending order."""
        with self._lock:
            return sorted(self._metrics)

    def _of_kind(self, kind: type[M]) -> dict[str, M]:
        with self._lock:
            items = [(n, m) for n, m in self._metrics.items() if isinstance(m, kind)]
        return dict(sorted(items, key=lambda item: item[0]))

    def gauges(self) -> dict[str, Gauge]:
        return self._of_kind(Gauge)

    def counters(self) -> dict[str, Counter]:
        return self._of_kind(Counter)

    def histograms(self) -> dict[str, Histogram]:
        return self._of_kind(Histogram)

    def meters(self) -> dict[str, Meter]:
        return self._of_kind(Meter)

    def timers(self) -> dict[str, Timer]:
        return self._of_kind(Timer)
