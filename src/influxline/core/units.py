"""Time units for rate and duration conversion, and write precisions."""

from enum import Enum


class TimeUnit(Enum):
    """A unit of time, valued in nanoseconds."""

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60 * 1_000_000_000
    HOURS = 60 * 60 * 1_000_000_000
    DAYS = 24 * 60 * 60 * 1_000_000_000

    @property
    def nanos(self) -> int:
        """Length of one unit in nanoseconds."""
        return self.value

    @property
    def seconds(self) -> float:
        """Length of one unit in seconds."""
        return self.value / TimeUnit.SECONDS.value

    def convert_rate(self, per_second: float) -> float:
        """Convert an events-per-second rate into events per this unit."""
        return per_second * self.seconds

    def convert_duration(self, nanoseconds: float) -> float:
        """Convert a duration in nanoseconds into this unit."""
        return nanoseconds / self.value


class Precision(Enum):
    """Timestamp precisions accepted by the store's write endpoint."""

    NANOSECONDS = "n"
    MICROSECONDS = "u"
    MILLISECONDS = "ms"
    SECONDS = "s"
    MINUTES = "m"
    HOURS = "h"
