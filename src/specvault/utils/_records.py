# pyright: reportAny=false, reportExplicitAny=false
"""JSON record encoding and timestamps.

Metadata records are stored as indented JSON with sorted keys so that files
diff cleanly under version control.
"""

from typing import Any

import orjson
import pendulum

from specvault.exceptions import ValidationError

__all__ = ["decode_record", "encode_record", "parse_timestamp"]


def encode_record(data: dict[str, Any]) -> bytes:
    """Serialize a record as indented JSON with sorted keys."""
    return orjson.dumps(data, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)


def decode_record(content: bytes, *, key: str) -> dict[str, Any]:
    """Parse a JSON record.

    Args:
        content: Raw bytes read from storage.
        key: Storage key the bytes came from, for error context.

    Returns:
        The parsed record.

    Raises:
        ValidationError: If the content is not a JSON object.
    """
    try:
        data = orjson.loads(content)
    except orjson.JSONDecodeError as e:
        msg = f"Invalid JSON in {key}: {e}"
        raise ValidationError(msg, field=key, expected="JSON object", rule="json") from e

    if not isinstance(data, dict):
        msg = f"Expected JSON object in {key}, got {type(data).__name__}"
        raise ValidationError(
            msg,
            field=key,
            expected="JSON object",
            received=type(data).__name__,
            rule="json",
        )
    return data


def parse_timestamp(value: str) -> pendulum.DateTime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    try:
        parsed = pendulum.parse(value, tz="UTC")
    except (ValueError, TypeError) as e:
        msg = f"Invalid timestamp: {value!r}"
        raise ValidationError(
            msg, field="timestamp", received=value, rule="datetime"
        ) from e
    if not isinstance(parsed, pendulum.DateTime):
        msg = f"Expected a date-time, got {value!r}"
        raise ValidationError(msg, field="timestamp", received=value, rule="datetime")
    return parsed
