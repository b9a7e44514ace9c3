"""pilosa_orm - Model a Pilosa schema and build PQL queries."""

from __future__ import annotations

try:
    from pilosa_orm._version import __version__
except ModuleNotFoundError:  # editable install without VCS metadata
    __version__ = "0.0.0.dev0"

from pilosa_orm._errors import (
    ArityError,
    InvalidFieldOptionError,
    InvalidNameError,
    PilosaError,
    PQLSyntaxError,
    SerializationError,
)
from pilosa_orm.options import (
    CacheType,
    FieldOption,
    FieldOptions,
    FieldType,
    TimeQuantum,
    opt_field_cache_size,
    opt_field_int,
    opt_field_time,
)
from pilosa_orm.pql import parse, referenced_frames
from pilosa_orm.query import PQLBaseQuery, PQLBatchQuery, PQLBitmapQuery, PQLQuery
from pilosa_orm.schema import Field, Index, Schema, diff

__all__ = [
    "diff",
    "parse",
    "referenced_frames",
    "opt_field_cache_size",
    "opt_field_int",
    "opt_field_time",
    "Schema",
    "Index",
    "Field",
    "FieldOptions",
    "FieldOption",
    "FieldType",
    "CacheType",
    "TimeQuantum",
    "PQLQuery",
    "PQLBaseQuery",
    "PQLBitmapQuery",
    "PQLBatchQuery",
    "PilosaError",
    "InvalidNameError",
    "InvalidFieldOptionError",
    "ArityError",
    "SerializationError",
    "PQLSyntaxError",
]
