"""Core domain models for line protocol data.

A field value is one of exactly four variants. Raw readings coming from
metric snapshots are converted with ``field_value()``, which is the only
place where unsupported Python values are rejected.
"""

import decimal
import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass

from influxline.core.exceptions import UnsupportedFieldValueError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class IntegerValue:
    """A signed 64-bit integer field value."""

    value: int


@dataclass(frozen=True)
class FloatValue:
    """A finite floating-point field value."""

    value: float


@dataclass(frozen=True)
class BooleanValue:
    """A boolean field value."""

    value: bool


@dataclass(frozen=True)
class StringValue:
    """A text field value."""

    value: str


FieldValue = IntegerValue | FloatValue | BooleanValue | StringValue

_VARIANTS = (IntegerValue, FloatValue, BooleanValue, StringValue)


def field_value(raw: object) -> FieldValue:
    """Convert a raw reading into a field value.

    Args:
        raw: A bool, integral number, real number, Decimal, str, or an
            existing field value.

    Returns:
        The matching field value variant.

    Raises:
        UnsupportedFieldValueError: If the value has any other type, is a
            non-finite float, or is an integer outside the signed 64-bit range.
    """
    if isinstance(raw, _VARIANTS):
        return raw
    # bool must be checked before Integral, bool subclasses int
    if isinstance(raw, bool):
        return BooleanValue(raw)
    if isinstance(raw, numbers.Integral):
        as_int = int(raw)
        if not INT64_MIN <= as_int <= INT64_MAX:
            raise UnsupportedFieldValueError(raw, "integer out of int64 range")
        return IntegerValue(as_int)
    if isinstance(raw, (numbers.Real, decimal.Decimal)):
        try:
            as_float = float(raw)
        except (ValueError, OverflowError) as exc:
            # signaling NaN decimals, rationals beyond the float range
            raise UnsupportedFieldValueError(
                raw, f"not representable as float ({exc})"
            ) from exc
        if not math.isfinite(as_float):
            raise UnsupportedFieldValueError(raw, "float must be finite")
        return FloatValue(as_float)
    if isinstance(raw, str):
        return StringValue(raw)
    raise UnsupportedFieldValueError(raw, f"type {type(raw).__name__} not supported")


def field_set(fields: Mapping[str, object]) -> dict[str, FieldValue]:
    """Convert every value of a raw field mapping, preserving key order.

    Raises:
        UnsupportedFieldValueError: If any single value is unsupported.
    """
    return {key: field_value(raw) for key, raw in fields.items()}


@dataclass(frozen=True)
class ReportResult:
    """Outcome of one reporting tick.

    Attributes:
        timestamp: Milliseconds since the epoch shared by every line.
        lines: Number of lines encoded into the payload.
        payload_size: Length of the payload in characters.
        written: True if the writer accepted the payload.
        error: String form of the write error, if the write failed.
    """

    timestamp: int
    lines: int
    payload_size: int
    written: bool
    error: str | None = None
