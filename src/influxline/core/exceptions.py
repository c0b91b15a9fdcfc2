"""Exception hierarchy for influxline.

Every influxline exception inherits from InfluxLineError so callers can
catch the base class for broad error handling.
"""


class InfluxLineError(Exception):
    """Base exception for all influxline errors."""


class UnsupportedFieldValueError(InfluxLineError, TypeError):
    """A value cannot be represented as a line protocol field.

    Raised at the boundary where raw readings are converted into field
    values. The encoder catches it and skips the affected line.
    """

    def __init__(self, value: object, reason: str) -> None:
        super().__init__(f"unsupported field value {value!r}: {reason}")
        self.value = value
        self.reason = reason


class WriteError(InfluxLineError):
    """Writing a payload to the time-series store failed.

    Attributes:
        status_code: HTTP status returned by the store, or None when the
            request never produced a response (connection refused, timeout).
        body: Response body returned by the store, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DuplicateMetricError(InfluxLineError, ValueError):
    """A metric name is already registered."""
