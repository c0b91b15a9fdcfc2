"""influxline: report in-process metrics to a time-series store as line protocol.

Example:
    ```python
    from influxline import (
        HttpWriter,
        LineProtocolReporter,
        MetricRegistry,
        ReporterConfig,
        ScheduledReporter,
    )

    registry = MetricRegistry()
    reporter = LineProtocolReporter(
        HttpWriter("http://localhost:8086"),
        ReporterConfig(database="metrics", tags={"host": "server01"}),
        source=registry,
    )
    with ScheduledReporter(reporter, period=10.0):
        registry.counter("jobs.processed").inc()
    ```
"""

from influxline.adapters.scheduling import ScheduledReporter
from influxline.adapters.writers import HttpWriter, InMemoryWriter, WriteRequest
from influxline.core.encoding.line_protocol import encode, encode_into
from influxline.core.exceptions import (
    DuplicateMetricError,
    InfluxLineError,
    UnsupportedFieldValueError,
    WriteError,
)
from influxline.core.filters import ALL, GlobFilter, PrefixFilter
from influxline.core.metrics import (
    Counter,
    Gauge,
    Histogram,
    Meter,
    SlidingWindowReservoir,
    Snapshot,
    Timer,
    UniformReservoir,
)
from influxline.core.models import (
    BooleanValue,
    FieldValue,
    FloatValue,
    IntegerValue,
    ReportResult,
    StringValue,
    field_value,
)
from influxline.core.ports import MetricFilter, MetricsSourcePort, WriterPort
from influxline.core.registry import MetricRegistry
from influxline.core.reporter import LineProtocolReporter, ReporterConfig
from influxline.core.units import Precision, TimeUnit

__all__ = [
    "ALL",
    "BooleanValue",
    "Counter",
    "DuplicateMetricError",
    "FieldValue",
    "FloatValue",
    "Gauge",
    "GlobFilter",
    "Histogram",
    "HttpWriter",
    "InMemoryWriter",
    "InfluxLineError",
    "IntegerValue",
    "LineProtocolReporter",
    "Meter",
    "MetricFilter",
    "MetricRegistry",
    "MetricsSourcePort",
    "Precision",
    "PrefixFilter",
    "ReportResult",
    "ReporterConfig",
    "ScheduledReporter",
    "SlidingWindowReservoir",
    "Snapshot",
    "StringValue",
    "TimeUnit",
    "Timer",
    "UniformReservoir",
    "UnsupportedFieldValueError",
    "WriteError",
    "WriteRequest",
    "WriterPort",
    "encode",
    "encode_into",
    "field_value",
]
