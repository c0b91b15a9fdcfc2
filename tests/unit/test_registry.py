"""Tests for the metric registry."""

import pytest

from influxline.core.exceptions import DuplicateMetricError, InfluxLineError
from influxline.core.metrics import Counter, Gauge, Histogram, Meter, Timer
from influxline.core.registry import MetricRegistry

pytestmark = [pytest.mark.metrics, pytest.mark.tier(0)]


class TestNames:
    """Tests for dotted name building."""

    def test_name_joins_parts_with_dots(self) -> None:
        assert MetricRegistry.name("http", "requests", "total") == "http.requests.total"

    def test_name_skips_empty_parts(self) -> None:
        """None and empty parts are left out."""
        assert MetricRegistry.name("http", None, "", "requests") == "http.requests"


class TestGetOrCreate:
    """Tests for the per-kind get-or-create accessors."""

    def test_same_name_returns_same_metric(self, registry: MetricRegistry) -> None:
        """A second lookup returns the instance created by the first."""
        assert registry.counter("jobs") is registry.counter("jobs")
        assert registry.timer("db.query") is registry.timer("db.query")

    @pytest.mark.parametrize(
        ("accessor", "kind"),
        [
            ("counter", Counter),
            ("histogram", Histogram),
            ("meter", Meter),
            ("timer", Timer),
        ],
    )
    def test_accessor_creates_requested_kind(
        self, registry: MetricRegistry, accessor: str, kind: type
    ) -> None:
        assert isinstance(getattr(registry, accessor)("m"), kind)

    def test_gauge_uses_first_callback(self, registry: MetricRegistry) -> None:
        """An existing gauge keeps its original callback."""
        first = registry.gauge("queue.size", lambda: 1)
        second = registry.gauge("queue.size", lambda: 2)

        assert first is second
        assert second.value == 1

    def test_name_used_by_other_kind_raises(self, registry: MetricRegistry) -> None:
        """A name cannot be reused for a different metric kind."""
        registry.counter("jobs")

        with pytest.raises(DuplicateMetricError, match="different type"):
            registry.meter("jobs")

    def test_empty_name_is_rejected(self, registry: MetricRegistry) -> None:
        with pytest.raises(ValueError, match="empty"):
            registry.counter("")


class TestRegister:
    """Tests for explicit registration."""

    def test_register_returns_the_metric(self, registry: MetricRegistry) -> None:
        counter = Counter()

        assert registry.register("jobs", counter) is counter
        assert registry.counter("jobs") is counter

    def test_register_duplicate_raises(self, registry: MetricRegistry) -> None:
        """Registering a taken name raises, whatever the kind."""
        registry.register("jobs", Counter())

        with pytest.raises(DuplicateMetricError, match="already exists"):
            registry.register("jobs", Counter())

    def test_duplicate_error_is_value_error(self, registry: MetricRegistry) -> None:
        registry.register("jobs", Counter())

        with pytest.raises(ValueError):
            registry.register("jobs", Meter())
        with pytest.raises(InfluxLineError):
            registry.register("jobs", Meter())


class TestRemoveAndListing:
    """Tests for removal and per-kind listings."""

    def test_remove_reports_whether_metric_existed(
        self, registry: MetricRegistry
    ) -> None:
        registry.counter("jobs")

        assert registry.remove("jobs") is True
        assert registry.remove("jobs") is False
        assert registry.names == []

    def test_removed_name_can_be_reused(self, registry: MetricRegistry) -> None:
        """After removal the name is free for another kind."""
        registry.counter("jobs")
        registry.remove("jobs")

        assert isinstance(registry.meter("jobs"), Meter)

    def test_names_are_sorted(self, registry: MetricRegistry) -> None:
        registry.meter("b")
        registry.counter("c")
        registry.timer("a")

        assert registry.names == ["a", "b", "c"]

    def test_kind_accessors_are_sorted_and_separated(
        self, registry: MetricRegistry
    ) -> None:
        """Each accessor returns only its kind, ordered by name."""
        registry.counter("zeta")
        registry.counter("alpha")
        registry.meter("middle")
        registry.gauge("g", lambda: 0)

        assert list(registry.counters()) == ["alpha", "zeta"]
        assert list(registry.meters()) == ["middle"]
        assert list(registry.gauges()) == ["g"]
        assert isinstance(registry.gauges()["g"], Gauge)
        assert registry.histograms() == {}
        assert registry.timers() == {}
