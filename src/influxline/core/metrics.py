"""In-process metric kinds: counters, gauges, histograms, meters and timers.

All metric kinds are safe to update from several threads. Reading a
histogram or timer returns an immutable Snapshot of the sampled values.
"""

import math
import random
import threading
import time
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

DEFAULT_RESERVOIR_SIZE = 1028

# Moving averages are advanced in fixed steps of this many seconds
TICK_INTERVAL = 5.0


class Counter:
    """An incrementing and decrementing integer count."""

    def __init__(self) -> None:
        self._count = 0
        self._lock = threading.Lock()

    def inc(self, n: int = 1) -> None:
        """Increment the count by n."""
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        """Decrement the count by n."""
        with self._lock:
            self._count -= n

    @property
    def count(self) -> int:
        return self._count


class Gauge:
    """A metric whose reading is produced on demand by a callback.

    The reading may be any value; readings that cannot be represented as a
    line protocol field are skipped when reported.
    """

    def __init__(self, callback: Callable[[], Any]) -> None:
        self._callback = callback

    @property
    def value(self) -> Any:
        return self._callback()


class Snapshot:
    """A statistical view of the values sampled by a histogram or timer.

    Args:
        values: The sampled values, in any order.
    """

    def __init__(self, values: Iterable[float]) -> None:
        self._values = sorted(values)

    @property
    def values(self) -> list[float]:
        """Sampled values in ascending order."""
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def value(self, quantile: float) -> float:
        """Return the value at the given quantile.

        Interpolates linearly between the two closest samples at position
        ``quantile * (n + 1)``.

        Raises:
            ValueError: If quantile is outside [0, 1] or NaN.
        """
        if not 0.0 <= quantile <= 1.0:
            raise ValueError(f"{quantile} is not in [0..1]")
        if not self._values:
            return 0.0

        n = len(self._values)
        pos = quantile * (n + 1)
        index = int(pos)
        if index < 1:
            return float(self._values[0])
        if index >= n:
            return float(self._values[-1])
        lower = self._values[index - 1]
        upper = self._values[index]
        return float(lower + (pos - math.floor(pos)) * (upper - lower))

    @property
    def min(self) -> float:
        return float(self._values[0]) if self._values else 0.0

    @property
    def max(self) -> float:
        return float(self._values[-1]) if self._values else 0.0

    @property
    def mean(self) -> float:
        if not self._values:
            return 0.0
        n = len(self._values)
        try:
            return math.fsum(self._values) / n
        except OverflowError:
            # the exact sum leaves the float range, the mean does not
            return math.fsum(v / n for v in self._values)
        except ValueError:
            # both infinities were sampled
            return math.nan

    @property
    def std_dev(self) -> float:
        """Sample standard deviation, zero for fewer than two samples.

        Returns infinity when the squared deviations leave the float range.
        """
        n = len(self._values)
        if n <= 1:
            return 0.0
        mean = self.mean
        try:
            variance = math.fsum((v - mean) ** 2 for v in self._values) / (n - 1)
        except OverflowError:
            return math.inf
        return math.sqrt(variance)

    @property
    def median(self) -> float:
        return self.value(0.5)

    @property
    def p75(self) -> float:
        return self.value(0.75)

    @property
    def p95(self) -> float:
        return self.value(0.95)

    @property
    def p98(self) -> float:
        return self.value(0.98)

    @property
    def p99(self) -> float:
        return self.value(0.99)

    @property
    def p999(self) -> float:
        return self.value(0.999)


class Reservoir(Protocol):
    """Bounded sample store backing a histogram."""

    def update(self, value: float) -> None: ...

    def snapshot(self) -> Snapshot: ...


class UniformReservoir:
    """Keeps a uniform random sample of every value ever recorded.

    Uses Vitter's algorithm R, so each recorded value has the same
    probability of being in the sample.

    Args:
        size: Maximum number of samples kept.
        rng: Random source, injectable for deterministic tests.
    """

    def __init__(
        self, size: int = DEFAULT_RESERVOIR_SIZE, rng: random.Random | None = None
    ) -> None:
        if size <= 0:
            raise ValueError("size must be positive")
        self._size = size
        self._rng = rng or random.Random()
        self._values: list[float] = []
        self._count = 0
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._count += 1
            if self._count <= self._size:
                self._values.append(value)
                return
            r = self._rng.randrange(self._count)
            if r < self._size:
                self._values[r] = value

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot(self._values)


class SlidingWindowReservoir:
    """Keeps the most recent ``size`` values."""

    def __init__(self, size: int = DEFAULT_RESERVOIR_SIZE) -> None:
        if size <= 0:
            raise ValueError("size must be positive")
        self._values: deque[float] = deque(maxlen=size)
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._values.append(value)

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot(self._values)


class Histogram:
    """Measures the distribution of recorded values.

    Args:
        reservoir: Sample store; defaults to a UniformReservoir.
    """

    def __init__(self, reservoir: Reservoir | None = None) -> None:
        self._reservoir = reservoir if reservoir is not None else UniformReservoir()
        self._count = 0
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        """Record a value."""
        with self._lock:
            self._count += 1
        self._reservoir.update(value)

    @property
    def count(self) -> int:
        """Number of values recorded, including those evicted from the sample."""
        return self._count

    def snapshot(self) -> Snapshot:
        return self._reservoir.snapshot()


class EWMA:
    """Exponentially weighted moving average of an event rate.

    Events are accumulated by ``update()`` and folded into the average once
    per ``TICK_INTERVAL`` by ``tick()``.

    Args:
        minutes: Averaging window, e.g. 1, 5 or 15.
    """

    def __init__(self, minutes: float) -> None:
        self._alpha = 1.0 - math.exp(-TICK_INTERVAL / 60.0 / minutes)
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False

    def update(self, n: int) -> None:
        self._uncounted += n

    def tick(self) -> None:
        count, self._uncounted = self._uncounted, 0
        instant_rate = count / TICK_INTERVAL
        if self._initialized:
            self._rate += self._alpha * (instant_rate - self._rate)
        else:
            self._rate = instant_rate
            self._initialized = True

    @property
    def rate(self) -> float:
        """Current average in events per second."""
        return self._rate


class Meter:
    """Measures the rate at which events occur.

    Rates are reported in events per second: the mean rate since creation
    and 1, 5 and 15 minute exponentially weighted moving averages.

    Args:
        clock: Monotonic clock returning seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._count = 0
        self._start = clock()
        self._last_tick = self._start
        self._m1 = EWMA(1)
        self._m5 = EWMA(5)
        self._m15 = EWMA(15)
        self._lock = threading.Lock()

    def mark(self, n: int = 1) -> None:
        """Record the occurrence of n events."""
        with self._lock:
            self._tick_if_necessary()
            self._count += n
            for average in (self._m1, self._m5, self._m15):
                average.update(n)

    def _tick_if_necessary(self) -> None:
        now = self._clock()
        age = now - self._last_tick
        if age <= TICK_INTERVAL:
            return
        self._last_tick = now - age % TICK_INTERVAL
        for _ in range(int(age // TICK_INTERVAL)):
            for average in (self._m1, self._m5, self._m15):
                average.tick()

    def _ticked_rate(self, average: EWMA) -> float:
        with self._lock:
            self._tick_if_necessary()
            return average.rate

    @property
    def count(self) -> int:
        return self._count

    @property
    def mean_rate(self) -> float:
        if self._count == 0:
            return 0.0
        elapsed = self._clock() - self._start
        if elapsed <= 0:
            return 0.0
        return self._count / elapsed

    @property
    def one_minute_rate(self) -> float:
        return self._ticked_rate(self._m1)

    @property
    def five_minute_rate(self) -> float:
        return self._ticked_rate(self._m5)

    @property
    def fifteen_minute_rate(self) -> float:
        return self._ticked_rate(self._m15)


class Timer:
    """A meter of event rate plus a histogram of event durations.

    Durations are recorded in nanoseconds.

    Args:
        reservoir: Sample store for durations.
        clock: Monotonic clock returning seconds, used by the meter.
    """

    def __init__(
        self,
        reservoir: Reservoir | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._meter = Meter(clock)
        self._histogram = Histogram(reservoir)

    def update(self, duration_ns: int) -> None:
        """Record one event of the given duration; negative durations are ignored."""
        if duration_ns < 0:
            return
        self._histogram.update(duration_ns)
        self._meter.mark()

    @contextmanager
    def time(self) -> Iterator[None]:
        """Time the enclosed block and record its duration."""
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            self.update(time.perf_counter_ns() - start)

    @property
    def count(self) -> int:
        return self._histogram.count

    def snapshot(self) -> Snapshot:
        return self._histogram.snapshot()

    @property
    def mean_rate(self) -> float:
        return self._meter.mean_rate

    @property
    def one_minute_rate(self) -> float:
        return self._meter.one_minute_rate

    @property
    def five_minute_rate(self) -> float:
        return self._meter.five_minute_rate

    @property
    def fifteen_minute_rate(self) -> float:
        return self._meter.fifteen_minute_rate


Metric = Counter | Gauge | Histogram | Meter | Timer
