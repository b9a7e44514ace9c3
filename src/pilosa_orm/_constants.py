"""Naming limits and formats for PQL serialization."""

TIME_FORMAT = "%Y-%m-%dT%H:%M"
"""Timestamp format used in SetBit and Range queries (minute precision)."""

MAX_INDEX_NAME_LENGTH = 64
"""Maximum index name length accepted by the server."""

MAX_FIELD_NAME_LENGTH = 64
"""Maximum field name length accepted by the server."""

MAX_LABEL_LENGTH = 64
"""Maximum attribute label length."""
