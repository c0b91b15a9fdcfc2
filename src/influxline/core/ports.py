"""Port interfaces for the reporter's collaborators.

These protocols define the contracts that writers, metric sources and
filters must implement. The reporter depends only on these interfaces,
not on concrete implementations.
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from influxline.core.metrics import Counter, Gauge, Histogram, Meter, Timer


@runtime_checkable
class WriterPort(Protocol):
    """Port for delivering a payload to the time-series store.

    Adapters implementing this protocol perform one write per call.
    Examples: HttpWriter, InMemoryWriter.
    """

    def write(
        self, payload: str, database: str, retention_policy: str | None = None
    ) -> None:
        """Write a line protocol payload.

        Args:
            payload: One or more newline-terminated lines.
            database: Target database name.
            retention_policy: Target retention policy; None or "default"
                means the database's default policy.

        Raises:
            WriteError: If the store did not accept the payload.
        """
        ...


@runtime_checkable
class MetricsSourcePort(Protocol):
    """Port for a source of named metrics, grouped by kind.

    Each accessor returns a mapping of metric name to metric, sorted by name.
    Examples: MetricRegistry.
    """

    def gauges(self) -> Mapping[str, Gauge]: ...

    def counters(self) -> Mapping[str, Counter]: ...

    def histograms(self) -> Mapping[str, Histogram]: ...

    def meters(self) -> Mapping[str, Meter]: ...

    def timers(self) -> Mapping[str, Timer]: ...


@runtime_checkable
class MetricFilter(Protocol):
    """Port for deciding which metrics are reported."""

    def matches(self, name: str, metric: Any) -> bool:
        """Return True if the named metric should be reported."""
        ...
