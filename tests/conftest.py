"""Shared test fixtures for all test modules."""

import time

import pytest

from influxline.adapters.writers.in_memory import InMemoryWriter
from influxline.core.registry import MetricRegistry
from influxline.core.reporter import LineProtocolReporter, ReporterConfig

# Timestamp used across tests, milliseconds since the epoch
TIMESTAMP = 1484385081215


class FakeClock:
    """Manually advanced monotonic clock returning seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake monotonic clock for meters and timers."""
    return FakeClock()


@pytest.fixture
def fixed_time(monkeypatch: pytest.MonkeyPatch) -> int:
    """Freeze wall-clock time at TIMESTAMP and return it in milliseconds."""
    monkeypatch.setattr(time, "time_ns", lambda: TIMESTAMP * 1_000_000)
    return TIMESTAMP


@pytest.fixture
def writer() -> InMemoryWriter:
    """Provide an empty in-memory writer."""
    return InMemoryWriter()


@pytest.fixture
def registry() -> MetricRegistry:
    """Provide an empty metric registry."""
    return MetricRegistry()


@pytest.fixture
def reporter_factory(writer: InMemoryWriter, registry: MetricRegistry):
    """Factory fixture creating reporters bound to the shared writer and registry.

    Usage:
        def test_something(reporter_factory):
            reporter = reporter_factory(tags={"host": "server01"})
    """

    def _create(**config_kwargs: object) -> LineProtocolReporter:
        config_kwargs.setdefault("database", "metrics")
        config = ReporterConfig(**config_kwargs)  # type: ignore[arg-type]
        return LineProtocolReporter(writer, config, source=registry)

    return _create
