"""Reporter turning metric snapshots into one line protocol payload per tick.

Each call to ``report()`` is one tick: every accepted metric becomes one
line, all lines share the static tags and a single timestamp, and the whole
payload is handed to the writer in one write. A failed write is logged and
dropped; it never propagates to the caller.
"""

import io
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from influxline.core.encoding.line_protocol import encode_into
from influxline.core.filters import ALL, as_filter
from influxline.core.metrics import Counter, Gauge, Histogram, Meter, Snapshot, Timer
from influxline.core.models import ReportResult
from influxline.core.ports import MetricFilter, MetricsSourcePort, WriterPort
from influxline.core.units import TimeUnit

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_POLICY = "default"


@dataclass(frozen=True)
class ReporterConfig:
    """Configuration for a LineProtocolReporter.

    Attributes:
        database: Target database name (required).
        retention_policy: Target retention policy. "default" (the default)
            means the database's default policy.
        rate_unit: Unit meter and timer rates are reported in (default:
            events per second).
        duration_unit: Unit timer durations are reported in (default:
            milliseconds).
        tags: Static tags attached to every line, e.g. host or service.
        filter: Decides which metrics are reported (default: all). A plain
            ``(name, metric) -> bool`` callable is accepted too.
    """

    database: str
    retention_policy: str = DEFAULT_RETENTION_POLICY
    rate_unit: TimeUnit = TimeUnit.SECONDS
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS
    tags: Mapping[str, str] = field(default_factory=dict)
    filter: MetricFilter | Callable[[str, Any], bool] = ALL

    # tags are held in an unhashable read-only mapping
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if not self.database:
            raise ValueError("database must not be empty")
        if not isinstance(self.rate_unit, TimeUnit):
            raise ValueError(f"rate_unit must be a TimeUnit, got {self.rate_unit!r}")
        if not isinstance(self.duration_unit, TimeUnit):
            raise ValueError(
                f"duration_unit must be a TimeUnit, got {self.duration_unit!r}"
            )
        for key, value in self.tags.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValueError(f"tag {key!r}={value!r} must map text to text")
        object.__setattr__(self, "tags", MappingProxyType(dict(sorted(self.tags.items()))))
        object.__setattr__(self, "filter", as_filter(self.filter))


class LineProtocolReporter:
    """Reports the metrics of one tick to a writer as line protocol.

    Args:
        writer: Destination for the payload.
        config: Database, units, static tags and filter.
        source: Metrics source used by ``report_registry()``.

    Example:
        ```python
        registry = MetricRegistry()
        reporter = LineProtocolReporter(
            HttpWriter("http://localhost:8086"),
            ReporterConfig(database="metrics", tags={"host": "server01"}),
            source=registry,
        )
        reporter.report_registry()
        ```
    """

    def __init__(
        self,
        writer: WriterPort,
        config: ReporterConfig,
        source: MetricsSourcePort | None = None,
    ) -> None:
        self._writer = writer
        self._config = config
        self._source = source
        self._max_payload_size = 0
        self._last_report: ReportResult | None = None

    @property
    def config(self) -> ReporterConfig:
        return self._config

    @property
    def max_payload_size(self) -> int:
        """Largest payload produced by any tick so far; never decreases."""
        return self._max_payload_size

    @property
    def last_report(self) -> ReportResult | None:
        """Outcome of the most recent tick, None before the first one."""
        return self._last_report

    def report_registry(self) -> None:
        """Report every metric currently held by the configured source.

        Raises:
            RuntimeError: If the reporter was created without a source.
        """
        if self._source is None:
            raise RuntimeError("reporter has no metrics source")
        self.report(
            gauges=self._source.gauges(),
            counters=self._source.counters(),
            histograms=self._source.histograms(),
            meters=self._source.meters(),
            timers=self._source.timers(),
        )

    def report(
        self,
        gauges: Mapping[str, Gauge] | None = None,
        counters: Mapping[str, Counter] | None = None,
        histograms: Mapping[str, Histogram] | None = None,
        meters: Mapping[str, Meter] | None = None,
        timers: Mapping[str, Timer] | None = None,
    ) -> None:
        """Encode one tick of metrics and write it as a single payload.

        Metrics are processed by kind (gauges, counters, histograms,
        meters, timers) and by ascending name within a kind.
        """
        timestamp = time.time_ns() // 1_000_000
        buffer = io.StringIO()
        lines = 0
        metric_filter: MetricFilter = self._config.filter  # type: ignore[assignment]

        for kind, metrics, derive in (
            ("gauge", gauges, self._gauge_fields),
            ("counter", counters, self._counter_fields),
            ("histogram", histograms, self._histogram_fields),
            ("meter", meters, self._meter_fields),
            ("timer", timers, self._timer_fields),
        ):
            for name, metric in sorted((metrics or {}).items(), key=lambda item: item[0]):
                if not metric_filter.matches(name, metric):
                    continue
                try:
                    fields = derive(name, metric)
                except Exception:
                    logger.warning(
                        "Failed to derive fields for %s '%s'", kind, name, exc_info=True
                    )
                    continue
                if fields is None:
                    continue
                if encode_into(buffer, name, fields, self._config.tags, timestamp):
                    lines += 1
                else:
                    logger.debug("No line encoded for %s '%s'", kind, name)

        payload = buffer.getvalue()
        self._max_payload_size = max(self._max_payload_size, len(payload))

        if not payload:
            logger.debug("Nothing to report at %d", timestamp)
            self._last_report = ReportResult(timestamp, 0, 0, written=False)
            return

        logger.debug("Payload:\n%s", payload)
        try:
            self._writer.write(
                payload, self._config.database, self._config.retention_policy
            )
        except Exception as exc:
            # @tra: Reporter.WriteFailure.Logged
            logger.warning(
                "Failed to send %d metric lines to database '%s'",
                lines,
                self._config.database,
                exc_info=True,
            )
            self._last_report = ReportResult(
                timestamp, lines, len(payload), written=False, error=str(exc)
            )
            return
        self._last_report = ReportResult(timestamp, lines, len(payload), written=True)

    def _gauge_fields(self, name: str, gauge: Gauge) -> dict[str, Any] | None:
        try:
            value = gauge.value
        except Exception:
            logger.warning("Gauge '%s' failed to produce a value", name, exc_info=True)
            return None
        return {"value": value}

    def _counter_fields(self, name: str, counter: Counter) -> dict[str, Any]:
        return {"count": counter.count}

    def _histogram_fields(self, name: str, histogram: Histogram) -> dict[str, Any]:
        return _distribution(histogram.snapshot(), float, count=histogram.count)

    def _meter_fields(self, name: str, meter: Meter | Timer) -> dict[str, Any]:
        rate = self._config.rate_unit.convert_rate
        return {
            "count": meter.count,
            "mean-rate": rate(meter.mean_rate),
            "1-min-rate": rate(meter.one_minute_rate),
            "5-min-rate": rate(meter.five_minute_rate),
            "15-min-rate": rate(meter.fifteen_minute_rate),
        }

    def _timer_fields(self, name: str, timer: Timer) -> dict[str, Any]:
        fields = self._meter_fields(name, timer)
        fields.update(
            _distribution(timer.snapshot(), self._config.duration_unit.convert_duration)
        )
        return fields


def _distribution(
    snapshot: Snapshot,
    convert: Callable[[float], float],
    count: int | None = None,
) -> dict[str, Any]:
    """Distribution statistics of a snapshot, converted to the reported unit."""
    fields: dict[str, Any] = {
        "min": convert(snapshot.min),
        "max": convert(snapshot.max),
        "mean": convert(snapshot.mean),
        "median": convert(snapshot.median),
        "std-dev": convert(snapshot.std_dev),
    }
    if count is not None:
        fields["count"] = count
    fields["75-percentile"] = convert(snapshot.p75)
    fields["95-percentile"] = convert(snapshot.p95)
    fields["98-percentile"] = convert(snapshot.p98)
    fields["99-percentile"] = convert(snapshot.p99)
    fields["999-percentile"] = convert(snapshot.p999)
    return fields
