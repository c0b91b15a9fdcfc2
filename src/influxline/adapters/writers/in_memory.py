"""In-memory writer adapter."""

from dataclasses import dataclass

from influxline.core.exceptions import WriteError


@dataclass(frozen=True)
class WriteRequest:
    """A payload accepted by InMemoryWriter, with its destination."""

    payload: str
    database: str
    retention_policy: str | None

    @property
    def lines(self) -> list[str]:
        """The payload split into lines, without terminators."""
        return self.payload.splitlines()


class InMemoryWriter:
    """In-memory implementation of WriterPort.

    Records every write in a list. Suitable for testing and local
    development where no store is running.

    Args:
        fail_with: If set, every write raises this error instead of being
            recorded. Can be changed between writes.
    """

    def __init__(self, fail_with: WriteError | None = None) -> None:
        self.fail_with = fail_with
        self._requests: list[WriteRequest] = []

    def write(
        self, payload: str, database: str, retention_policy: str | None = None
    ) -> None:
        """Record a write, or raise the configured error."""
        if self.fail_with is not None:
            raise self.fail_with
        self._requests.append(WriteRequest(payload, database, retention_policy))

    @property
    def requests(self) -> list[WriteRequest]:
        """All recorded writes, oldest first."""
        return list(self._requests)

    @property
    def last(self) -> WriteRequest | None:
        return self._requests[-1] if self._requests else None

    def clear(self) -> None:
        self._requests.clear()
