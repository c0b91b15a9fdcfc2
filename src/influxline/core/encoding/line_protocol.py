"""Line protocol encoder for metric measurements.

Renders one measurement per line::

    measurement[,tag=value...] field=value[,field=value...] timestamp

Unencodable input (no fields, an unsupported value type, a non-finite
float) produces no output at all. Rejection applies to the whole line.
"""

import io
import logging
from collections.abc import Mapping

from influxline.core.exceptions import UnsupportedFieldValueError
from influxline.core.models import (
    BooleanValue,
    FieldValue,
    FloatValue,
    IntegerValue,
    StringValue,
    field_set,
)

logger = logging.getLogger(__name__)

_MEASUREMENT_ESCAPES = str.maketrans({",": "\\,", " ": "\\ "})
_KEY_ESCAPES = str.maketrans({",": "\\,", "=": "\\=", " ": "\\ "})
_STRING_ESCAPES = str.maketrans({'"': '\\"'})


def escape_measurement(measurement: str) -> str:
    """Escape commas and spaces in a measurement name."""
    return measurement.translate(_MEASUREMENT_ESCAPES)


def escape_key(key: str) -> str:
    """Escape commas, equals signs and spaces in a tag key, tag value or field key."""
    return key.translate(_KEY_ESCAPES)


def format_field_value(value: FieldValue) -> str:
    """Render a field value in its wire form.

    Floats use the shortest representation that round-trips to the same
    value, integers carry an ``i`` suffix, booleans are ``true``/``false``
    and strings are double-quoted with inner quotes escaped.
    """
    match value:
        case FloatValue(number):
            return repr(number)
        case IntegerValue(number):
            return f"{number}i"
        case BooleanValue(flag):
            return "true" if flag else "false"
        case StringValue(text):
            return f'"{text.translate(_STRING_ESCAPES)}"'
    raise UnsupportedFieldValueError(value, "not a field value")


def encode_into(
    buffer: io.StringIO,
    measurement: str,
    fields: Mapping[str, object],
    tags: Mapping[str, str],
    timestamp: int,
) -> bool:
    """Append one encoded line to an existing buffer.

    The buffer is never truncated or cleared. Nothing is appended when the
    field set is empty or contains a value that cannot be encoded.

    Args:
        buffer: Destination buffer.
        measurement: Measurement name.
        fields: Field key to value. Raw readings are converted with
            ``field_value()``; values may also already be field values.
        tags: Tag key to tag value; rendered in ascending key order.
        timestamp: Timestamp written verbatim at the end of the line.

    Returns:
        True if a line was appended, False if the measurement was skipped.
    """
    # @tra: Encoder.Skip.EmptyFields
    if not fields:
        logger.debug("Skipping measurement '%s' because no field given", measurement)
        return False
    # @tra: Encoder.Skip.InvalidValue
    try:
        values = field_set(fields)
    except UnsupportedFieldValueError as exc:
        logger.debug(
            "Skipping measurement '%s' because of an invalid field value (%s). Fields: %r",
            measurement,
            exc.reason,
            dict(fields),
        )
        return False

    parts = [escape_measurement(measurement)]
    # @tra: Encoder.Tags.SortedByKey
    for key, value in sorted(tags.items()):
        parts.append(f",{escape_key(key)}={escape_key(value)}")
    parts.append(" ")
    parts.append(
        ",".join(
            f"{escape_key(key)}={format_field_value(value)}"
            for key, value in values.items()
        )
    )
    parts.append(f" {timestamp}\n")

    buffer.write("".join(parts))
    return True


def encode(
    measurement: str,
    fields: Mapping[str, object],
    tags: Mapping[str, str],
    timestamp: int,
) -> str:
    """Encode a single measurement to a line protocol line.

    Returns:
        The line including its trailing newline, or an empty string if the
        measurement could not be encoded.
    """
    buffer = io.StringIO()
    encode_into(buffer, measurement, fields, tags, timestamp)
    return buffer.getvalue()
