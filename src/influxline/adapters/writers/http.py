"""HTTP writer posting line protocol payloads to the store's /write endpoint.

Status codes returned by the write endpoint:

- 204 No Content / 200 OK: success.
- 400 Bad Request: line protocol syntax error, or a value written to a
  field that previously accepted a different type.
- 404 Not Found: the database does not exist.
- 500 Internal Server Error: overloaded or impaired, or the retention
  policy does not exist.
"""

import logging

import httpx

from influxline.core.exceptions import WriteError
from influxline.core.units import Precision

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/influxdb-line; charset=utf-8"

_SUCCESS_CODES = frozenset({200, 204})


def _is_default_policy(retention_policy: str | None) -> bool:
    return retention_policy is None or retention_policy.lower() == "default"


class HttpWriter:
    """Writes payloads with one HTTP POST each.

    Implements WriterPort. Timestamps are sent at millisecond precision.

    Args:
        url: Base URL of the store, e.g. ``http://localhost:8086``.
        username: Optional user for HTTP basic auth.
        password: Optional password for HTTP basic auth.
        connect_timeout: Seconds to wait for a connection.
        read_timeout: Seconds to wait for the response.
        client: Optional preconfigured httpx.Client. A client passed in is
            not closed by ``close()``.
    """

    precision = Precision.MILLISECONDS

    def __init__(
        self,
        url: str,
        username: str | None = None,
        password: str | None = None,
        connect_timeout: float = 5.0,
        read_timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not url:
            raise ValueError("url must not be empty")
        if connect_timeout <= 0 or read_timeout <= 0:
            raise ValueError("timeouts must be positive")
        if (username is None) != (password is None):
            raise ValueError("username and password must be given together")
        self._write_url = url.rstrip("/") + "/write"
        self._auth = (username, password) if username is not None else None
        self._timeout = httpx.Timeout(
            read_timeout, connect=connect_timeout, read=read_timeout
        )
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client()

    @property
    def write_url(self) -> str:
        return self._write_url

    def _params(self, database: str, retention_policy: str | None) -> dict[str, str]:
        params = {"db": database, "precision": self.precision.value}
        # @tra: Writer.Http.DefaultRetentionPolicyOmitted
        if not _is_default_policy(retention_policy):
            params["rp"] = retention_policy  # type: ignore[assignment]
        return params

    def write(
        self, payload: str, database: str, retention_policy: str | None = None
    ) -> None:
        """POST the payload to the write endpoint.

        Raises:
            WriteError: On a transport failure or any status other than
                200 or 204.
        """
        try:
            response = self._client.post(
                self._write_url,
                params=self._params(database, retention_policy),
                content=payload.encode("utf-8"),
                headers={"Content-Type": CONTENT_TYPE},
                auth=self._auth if self._auth is not None else httpx.USE_CLIENT_DEFAULT,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise WriteError(f"Write to {self._write_url} failed: {exc}") from exc

        if response.status_code not in _SUCCESS_CODES:
            body = response.text
            logger.debug("Response body: %s", body)
            raise WriteError(
                f"Server responded with: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=body,
            )

    def close(self) -> None:
        """Close the underlying HTTP client if this writer created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpWriter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
