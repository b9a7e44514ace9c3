"""Name validation, escaping, and literal rendering helpers."""

from __future__ import annotations

import json
import math
import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pilosa_orm._constants import (
    MAX_FIELD_NAME_LENGTH,
    MAX_INDEX_NAME_LENGTH,
    MAX_LABEL_LENGTH,
    TIME_FORMAT,
)
from pilosa_orm._errors import (
    ERR_MSG_INVALID_ARGUMENT,
    ERR_MSG_INVALID_ATTRIBUTE_VALUE,
    ERR_MSG_INVALID_FIELD_NAME,
    ERR_MSG_INVALID_FILTER_VALUE,
    ERR_MSG_INVALID_INDEX_NAME,
    ERR_MSG_INVALID_LABEL,
    InvalidNameError,
    SerializationError,
)

INDEX_NAME_RE = re.compile(r"^[a-z][a-z0-9_-]*$")
FIELD_NAME_RE = re.compile(r"^[a-z][a-z0-9_-]*$")
LABEL_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")


def _validate(
    name: str, pattern: re.Pattern[str], max_length: int, message: str, kind: str
) -> None:
    if not isinstance(name, str):
        raise InvalidNameError(message, f"{kind} must be a string, got {type(name).__name__}")
    if len(name) > max_length:
        raise InvalidNameError(
            message,
            f"{kind} '{name}' exceeds {max_length} characters",
        )
    if not pattern.match(name):
        raise InvalidNameError(
            message,
            f"{kind} '{name}' does not match {pattern.pattern}",
        )


def validate_index_name(name: str) -> None:
    """Validate an index name."""
    _validate(name, INDEX_NAME_RE, MAX_INDEX_NAME_LENGTH, ERR_MSG_INVALID_INDEX_NAME, "index name")


def validate_field_name(name: str) -> None:
    """Validate a field name."""
    _validate(name, FIELD_NAME_RE, MAX_FIELD_NAME_LENGTH, ERR_MSG_INVALID_FIELD_NAME, "field name")


def validate_label(label: str) -> None:
    """Validate an attribute label (attribute key or TopN filter field)."""
    _validate(label, LABEL_RE, MAX_LABEL_LENGTH, ERR_MSG_INVALID_LABEL, "label")


def format_timestamp(timestamp: datetime) -> str:
    if not isinstance(timestamp, datetime):
        raise SerializationError(
            ERR_MSG_INVALID_ARGUMENT,
            f"timestamp must be a datetime, got {type(timestamp).__name__}",
        )
    return timestamp.strftime(TIME_FORMAT)


def check_id(value: Any, kind: str = "id") -> int:
    """Return ``value`` if it is a non-negative integer row or column id."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SerializationError(
            ERR_MSG_INVALID_ARGUMENT,
            f"{kind} must be a non-negative integer, got {value!r}",
        )
    return value


def check_int(value: Any, kind: str = "value") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SerializationError(
            ERR_MSG_INVALID_ARGUMENT,
            f"{kind} must be an integer, got {value!r}",
        )
    return value


def _escape(value: str, quote: str) -> str:
    # Backslashes first, so escaped quotes are not doubled.
    return value.replace("\\", "\\\\").replace(quote, "\\" + quote)


def quote_key(key: str) -> str:
    """Render a row or column key as a single-quoted PQL string."""
    if not isinstance(key, str):
        raise SerializationError(
            ERR_MSG_INVALID_ARGUMENT,
            f"key must be a string, got {type(key).__name__}",
        )
    return "'" + _escape(key, "'") + "'"


def render_attribute_value(value: Any) -> str:
    """Render a scalar attribute value.

    Strings are double-quoted with embedded backslashes and double quotes
    escaped. ``bool`` is checked before ``int`` since it is an ``int``
    subclass.
    """
    if isinstance(value, str):
        return '"' + _escape(value, '"') + '"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return repr(value)
    if isinstance(value, float) and math.isfinite(value):
        return repr(value)
    raise SerializationError(
        ERR_MSG_INVALID_ATTRIBUTE_VALUE,
        f"unsupported attribute value type {type(value).__name__}: {value!r}",
    )


def create_attributes_string(attrs: Mapping[str, Any]) -> str:
    """Render an attribute mapping as ``key=value`` pairs in sorted key order."""
    for key in attrs:
        validate_label(key)
    return ", ".join(
        f"{key}={render_attribute_value(attrs[key])}" for key in sorted(attrs)
    )


def encode_filter_values(values: Iterable[Any]) -> str:
    """Encode TopN filter values as a compact JSON list."""
    try:
        return json.dumps(list(values), separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(
            ERR_MSG_INVALID_FILTER_VALUE,
            f"cannot encode filter values: {e}",
            wrapped=e,
        ) from e
