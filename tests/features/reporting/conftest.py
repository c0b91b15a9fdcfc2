"""BDD step definitions for reporting features."""

import time
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from influxline.adapters.writers.in_memory import InMemoryWriter
from influxline.core.exceptions import WriteError
from influxline.core.filters import GlobFilter
from influxline.core.registry import MetricRegistry
from influxline.core.reporter import LineProtocolReporter, ReporterConfig


@dataclass
class ReportingScenarioContext:
    """Shared state between steps in a reporting scenario."""

    registry: MetricRegistry = field(default_factory=MetricRegistry)
    store: InMemoryWriter = field(default_factory=InMemoryWriter)
    reporter: LineProtocolReporter | None = None
    error: Exception | None = None


@pytest.fixture
def ctx() -> ReportingScenarioContext:
    """Fresh scenario context for each test."""
    return ReportingScenarioContext()


def _reporter(ctx: ReportingScenarioContext, config: ReporterConfig) -> None:
    ctx.reporter = LineProtocolReporter(ctx.store, config, source=ctx.registry)


# === Background Steps ===
@given("an empty metric registry")
def step_registry(ctx: ReportingScenarioContext) -> None:
    ctx.registry = MetricRegistry()


@given("an in-memory store")
def step_store(ctx: ReportingScenarioContext) -> None:
    ctx.store = InMemoryWriter()


@given(parsers.parse("the wall clock reads {millis:d} ms"))
def step_wall_clock(monkeypatch: pytest.MonkeyPatch, millis: int) -> None:
    monkeypatch.setattr(time, "time_ns", lambda: millis * 1_000_000)


# === Metric Steps ===
@given(parsers.parse('a counter "{name}" incremented {n:d} times'))
def step_counter(ctx: ReportingScenarioContext, name: str, n: int) -> None:
    ctx.registry.counter(name).inc(n)


@given(parsers.parse('a gauge "{name}" reading {reading}'))
def step_gauge(ctx: ReportingScenarioContext, name: str, reading: str) -> None:
    value = float(reading)
    ctx.registry.gauge(name, lambda: value)


@given(parsers.parse('a histogram "{name}" updated with {value:d}'))
def step_histogram(ctx: ReportingScenarioContext, name: str, value: int) -> None:
    ctx.registry.histogram(name).update(value)


# === Reporter Steps ===
@given(parsers.re(r'a reporter for database "(?P<database>[^"]+)"$'))
def step_reporter(ctx: ReportingScenarioContext, database: str) -> None:
    _reporter(ctx, ReporterConfig(database=database))


@given(
    parsers.re(
        r'a reporter for database "(?P<database>[^"]+)" '
        r'tagged (?P<key>[^=]+)="(?P<value>[^"]*)"$'
    )
)
def step_tagged_reporter(
    ctx: ReportingScenarioContext, database: str, key: str, value: str
) -> None:
    _reporter(ctx, ReporterConfig(database=database, tags={key: value}))


@given(
    parsers.re(
        r'a reporter for database "(?P<database>[^"]+)" '
        r'reporting only "(?P<pattern>[^"]+)"$'
    )
)
def step_filtered_reporter(
    ctx: ReportingScenarioContext, database: str, pattern: str
) -> None:
    _reporter(ctx, ReporterConfig(database=database, filter=GlobFilter(include=[pattern])))


@given(parsers.parse("the store rejects writes with status {status:d}"))
def step_store_rejects(ctx: ReportingScenarioContext, status: int) -> None:
    ctx.store.fail_with = WriteError(
        f"Server responded with: {status} Internal Server Error", status_code=status
    )


@when("the reporter ticks")
def step_tick(ctx: ReportingScenarioContext) -> None:
    assert ctx.reporter is not None
    try:
        ctx.reporter.report_registry()
    except Exception as exc:
        ctx.error = exc


# === Outcome Steps ===
@then(parsers.parse('the store receives {n:d} write for database "{database}"'))
def step_writes(ctx: ReportingScenarioContext, n: int, database: str) -> None:
    assert len(ctx.store.requests) == n
    assert all(request.database == database for request in ctx.store.requests)


@then("the store receives no write")
def step_no_write(ctx: ReportingScenarioContext) -> None:
    assert ctx.store.requests == []


@then(parsers.parse('the payload is "{line}"'))
def step_payload_is(ctx: ReportingScenarioContext, line: str) -> None:
    assert ctx.store.last is not None
    assert ctx.store.last.payload == line + "\n"


@then(parsers.parse("the payload has {n:d} lines"))
def step_payload_lines(ctx: ReportingScenarioContext, n: int) -> None:
    assert ctx.store.last is not None
    assert len(ctx.store.last.lines) == n


@then(parsers.parse("every line ends with {timestamp:d}"))
def step_lines_end_with(ctx: ReportingScenarioContext, timestamp: int) -> None:
    assert ctx.store.last is not None
    assert all(line.endswith(f" {timestamp}") for line in ctx.store.last.lines)


@then("the tick completes without an error")
def step_no_error(ctx: ReportingScenarioContext) -> None:
    assert ctx.error is None


@then(parsers.parse('the last report records the failure "{message}"'))
def step_failure_recorded(ctx: ReportingScenarioContext, message: str) -> None:
    assert ctx.reporter is not None
    report = ctx.reporter.last_report
    assert report is not None
    assert report.written is False
    assert report.error is not None and report.error.startswith(message)
