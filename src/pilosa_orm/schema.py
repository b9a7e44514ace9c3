"""Schema model: Schema -> Index -> Field, with copy and diff semantics.

Indexes and fields are created on first lookup and live for the lifetime
of their owner. ``indexes()``, ``fields()`` and ``copy()`` hand out deep,
independent snapshots.

Nothing here is thread safe. Callers sharing a Schema across threads
must synchronize, or pass around copies.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from pilosa_orm._errors import ArityError, PilosaError
from pilosa_orm._utils import (
    check_id,
    check_int,
    create_attributes_string,
    encode_filter_values,
    format_timestamp,
    quote_key,
    validate_field_name,
    validate_index_name,
    validate_label,
)
from pilosa_orm.options import FieldOptionArg, FieldOptions
from pilosa_orm.query import PQLBaseQuery, PQLBatchQuery, PQLBitmapQuery, PQLQuery

logger = logging.getLogger(__name__)


def _call(name: str, *args: str) -> str:
    """Render ``name(arg, ...)``, skipping empty arguments."""
    return f"{name}({', '.join(arg for arg in args if arg)})"


def _bitmap_arg(bitmap: PQLBitmapQuery | None) -> str:
    if bitmap is None:
        return ""
    if bitmap.error is not None:
        raise bitmap.error
    return bitmap.serialize()


class Schema:
    """The indexes known to a client."""

    def __init__(self) -> None:
        self._indexes: dict[str, Index] = {}

    def index(self, name: str) -> Index:
        """Return the index called ``name``, creating it if necessary.

        Raises:
            InvalidNameError: If ``name`` is not a valid index name.
        """
        existing = self._indexes.get(name)
        if existing is not None:
            return existing
        index = Index(name)
        self._indexes[name] = index
        logger.debug("created index %r", name)
        return index

    def indexes(self) -> dict[str, Index]:
        """Return copies of the indexes, keyed by name."""
        return {name: index.copy() for name, index in self._indexes.items()}

    def copy(self) -> Schema:
        schema = Schema()
        schema._indexes = self.indexes()
        return schema

    def diff(self, other: Schema) -> Schema:
        """Return the part of this schema that is missing from ``other``.

        Indexes absent from ``other`` are copied whole. For indexes present
        in both, only the missing fields are copied; an index with no
        missing fields is left out.
        """
        result = Schema()
        for name, index in self._indexes.items():
            other_index = other._indexes.get(name)
            if other_index is None:
                result._indexes[name] = index.copy()
                continue
            result_index = Index(name)
            for field_name, field in index._fields.items():
                if field_name not in other_index._fields:
                    result_index._fields[field_name] = field._copy_to(result_index)
            if result_index._fields:
                result._indexes[name] = result_index
        logger.debug(
            "schema diff: %d index(es) missing from other schema", len(result._indexes)
        )
        return result

    def __len__(self) -> int:
        return len(self._indexes)

    def __contains__(self, name: object) -> bool:
        return name in self._indexes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self._indexes == other._indexes

    def __repr__(self) -> str:
        return f"Schema({self._indexes!r})"


def diff(schema: Schema, other: Schema) -> Schema:
    """Return the part of ``schema`` that is missing from ``other``."""
    return schema.diff(other)


class Index:
    """A data namespace. Column attributes are global to the index.

    Cross-index queries are not possible.
    """

    def __init__(self, name: str) -> None:
        validate_index_name(name)
        self._name = name
        self._fields: dict[str, Field] = {}

    @property
    def name(self) -> str:
        return self._name

    def field(self, name: str, *options: FieldOptionArg) -> Field:
        """Return the field called ``name``, creating it if necessary.

        ``options`` apply only when the field is created; they are ignored
        when the field already exists.

        Raises:
            InvalidNameError: If ``name`` is not a valid field name.
            InvalidFieldOptionError: If ``options`` is malformed.
        """
        existing = self._fields.get(name)
        if existing is not None:
            return existing
        validate_field_name(name)
        field_options = FieldOptions()
        field_options.add_options(*options)
        field = Field(name, self, field_options.with_defaults())
        self._fields[name] = field
        logger.debug("created field %r in index %r: %s", name, self._name, field_options)
        return field

    def fields(self) -> dict[str, Field]:
        """Return copies of the fields, keyed by name."""
        return {name: field.copy() for name, field in self._fields.items()}

    def copy(self) -> Index:
        index = Index(self._name)
        for name, field in self._fields.items():
            index._fields[name] = field._copy_to(index)
        return index

    # --- Queries ---

    def raw_query(self, query: str) -> PQLBaseQuery:
        """Wrap ``query`` as is. The text is not validated."""
        return PQLBaseQuery(query, self)

    def batch_query(self, *queries: PQLQuery) -> PQLBatchQuery:
        return PQLBatchQuery(self, *queries)

    def union(self, *bitmaps: PQLBitmapQuery) -> PQLBitmapQuery:
        """Logical OR of the given bitmaps."""
        return self._bitmap_operation("Union", bitmaps)

    def intersect(self, *bitmaps: PQLBitmapQuery) -> PQLBitmapQuery:
        """Logical AND of the given bitmaps. Requires at least one."""
        if len(bitmaps) < 1:
            return PQLBitmapQuery(
                "", self, ArityError("Intersect operation requires at least 1 bitmap")
            )
        return self._bitmap_operation("Intersect", bitmaps)

    def difference(self, *bitmaps: PQLBitmapQuery) -> PQLBitmapQuery:
        """Bits of the first bitmap without the bits of the others. Requires at least one."""
        if len(bitmaps) < 1:
            return PQLBitmapQuery(
                "", self, ArityError("Difference operation requires at least 1 bitmap")
            )
        return self._bitmap_operation("Difference", bitmaps)

    def xor(self, *bitmaps: PQLBitmapQuery) -> PQLBitmapQuery:
        """Requires at least two bitmaps."""
        if len(bitmaps) < 2:
            return PQLBitmapQuery(
                "", self, ArityError("Xor operation requires at least 2 bitmaps")
            )
        return self._bitmap_operation("Xor", bitmaps)

    def count(self, bitmap: PQLBitmapQuery) -> PQLBaseQuery:
        """Number of set bits in ``bitmap``."""
        if bitmap.error is not None:
            return PQLBaseQuery("", self, bitmap.error)
        return PQLBaseQuery(f"Count({bitmap.serialize()})", self)

    def set_column_attrs(self, column_id: int, attrs: Mapping[str, Any]) -> PQLBaseQuery:
        """Associate key/value pairs with a column.

        Values may be ``str``, ``int``, ``float`` or ``bool``. An empty
        mapping renders no attribute arguments.
        """
        try:
            pql = _call(
                "SetColumnAttrs",
                f"col={check_id(column_id, 'column id')}",
                create_attributes_string(attrs),
            )
        except PilosaError as e:
            return PQLBaseQuery("", self, e)
        return PQLBaseQuery(pql, self)

    def _bitmap_operation(
        self, name: str, bitmaps: tuple[PQLBitmapQuery, ...]
    ) -> PQLBitmapQuery:
        args = []
        for bitmap in bitmaps:
            if bitmap.error is not None:
                return PQLBitmapQuery("", self, bitmap.error)
            args.append(bitmap.serialize())
        return PQLBitmapQuery(f"{name}({', '.join(args)})", self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Index):
            return NotImplemented
        return self._name == other._name and self._fields == other._fields

    def __repr__(self) -> str:
        return f"Index(name={self._name!r}, fields={list(self._fields)!r})"


class Field:
    """A row partition within an index, like a table within a database.

    Row attributes are namespaced at the field level. Fields are created
    with :meth:`Index.field`.
    """

    def __init__(self, name: str, index: Index, options: FieldOptions | None = None) -> None:
        self._name = name
        # Only read for its name and to tag queries.
        self._index = index
        self._options = options if options is not None else FieldOptions()

    @property
    def name(self) -> str:
        return self._name

    @property
    def index_name(self) -> str:
        return self._index.name

    @property
    def options(self) -> FieldOptions:
        return self._options.with_defaults()

    def copy(self) -> Field:
        return self._copy_to(self._index)

    def _copy_to(self, index: Index) -> Field:
        return Field(self._name, index, self._options.with_defaults())

    # --- Bitmap queries ---

    def bitmap(self, row_id: int) -> PQLBitmapQuery:
        """Bits set in row ``row_id``, along with the row's attributes."""
        return self._bitmap_query(
            lambda: f"Bitmap(row={check_id(row_id, 'row id')}, frame='{self._name}')"
        )

    def bitmap_k(self, row_key: str) -> PQLBitmapQuery:
        """Like :meth:`bitmap`, with a string row key."""
        return self._bitmap_query(
            lambda: f"Bitmap(row={quote_key(row_key)}, frame='{self._name}')"
        )

    def top_n(self, n: int, bitmap: PQLBitmapQuery | None = None) -> PQLBitmapQuery:
        """Top ``n`` rows by bit count, optionally within ``bitmap``."""
        return self._bitmap_query(
            lambda: _call(
                "TopN", _bitmap_arg(bitmap), f"frame='{self._name}'", f"n={check_id(n, 'n')}"
            )
        )

    def filter_field_top_n(
        self,
        n: int,
        bitmap: PQLBitmapQuery | None,
        field: str,
        *values: Any,
    ) -> PQLBitmapQuery:
        """Top ``n`` rows whose attribute ``field`` has one of ``values``."""

        def render() -> str:
            bitmap_arg = _bitmap_arg(bitmap)
            validate_label(field)
            return _call(
                "TopN",
                bitmap_arg,
                f"frame='{self._name}'",
                f"n={check_id(n, 'n')}",
                f"field='{field}'",
                f"filters={encode_filter_values(values)}",
            )

        return self._bitmap_query(render)

    def range(self, row_id: int, start: datetime, end: datetime) -> PQLBitmapQuery:
        """Bits of row ``row_id`` set with timestamps between ``start`` and ``end``."""
        return self._bitmap_query(
            lambda: self._range(str(check_id(row_id, "row id")), start, end)
        )

    def range_k(self, row_key: str, start: datetime, end: datetime) -> PQLBitmapQuery:
        return self._bitmap_query(lambda: self._range(quote_key(row_key), start, end))

    # --- Int field conditions ---

    def lt(self, n: int) -> PQLBitmapQuery:
        return self._binary_operation("<", n)

    def lte(self, n: int) -> PQLBitmapQuery:
        return self._binary_operation("<=", n)

    def gt(self, n: int) -> PQLBitmapQuery:
        return self._binary_operation(">", n)

    def gte(self, n: int) -> PQLBitmapQuery:
        return self._binary_operation(">=", n)

    def equals(self, n: int) -> PQLBitmapQuery:
        return self._binary_operation("==", n)

    def not_equals(self, n: int) -> PQLBitmapQuery:
        return self._binary_operation("!=", n)

    def not_null(self) -> PQLBitmapQuery:
        return self._bitmap_query(lambda: f"Range({self._name} != null)")

    def between(self, a: int, b: int) -> PQLBitmapQuery:
        """Inclusive range ``[a, b]``."""
        return self._bitmap_query(
            lambda: f"Range({self._name} >< [{check_int(a)},{check_int(b)}])"
        )

    # --- Aggregates ---

    def sum(self, bitmap: PQLBitmapQuery | None = None) -> PQLBaseQuery:
        return self._value_query("Sum", bitmap)

    def min(self, bitmap: PQLBitmapQuery | None = None) -> PQLBaseQuery:
        return self._value_query("Min", bitmap)

    def max(self, bitmap: PQLBitmapQuery | None = None) -> PQLBaseQuery:
        return self._value_query("Max", bitmap)

    # --- Mutations ---

    def set_bit(
        self, row_id: int, column_id: int, timestamp: datetime | None = None
    ) -> PQLBaseQuery:
        """Set the bit at (``row_id``, ``column_id``)."""
        return self._base_query(
            lambda: self._bit_call(
                "SetBit",
                str(check_id(row_id, "row id")),
                str(check_id(column_id, "column id")),
                timestamp,
            )
        )

    def set_bit_k(
        self, row_key: str, column_key: str, timestamp: datetime | None = None
    ) -> PQLBaseQuery:
        return self._base_query(
            lambda: self._bit_call("SetBit", quote_key(row_key), quote_key(column_key), timestamp)
        )

    def clear_bit(self, row_id: int, column_id: int) -> PQLBaseQuery:
        """Clear the bit at (``row_id``, ``column_id``)."""
        return self._base_query(
            lambda: self._bit_call(
                "ClearBit",
                str(check_id(row_id, "row id")),
                str(check_id(column_id, "column id")),
            )
        )

    def clear_bit_k(self, row_key: str, column_key: str) -> PQLBaseQuery:
        return self._base_query(
            lambda: self._bit_call("ClearBit", quote_key(row_key), quote_key(column_key))
        )

    def set_row_attrs(self, row_id: int, attrs: Mapping[str, Any]) -> PQLBaseQuery:
        """Associate key/value pairs with a row of this field.

        Values may be ``str``, ``int``, ``float`` or ``bool``. An empty
        mapping renders no attribute arguments.
        """
        return self._base_query(
            lambda: self._row_attrs(str(check_id(row_id, "row id")), attrs)
        )

    def set_row_attrs_k(self, row_key: str, attrs: Mapping[str, Any]) -> PQLBaseQuery:
        return self._base_query(lambda: self._row_attrs(quote_key(row_key), attrs))

    def set_int_value(self, column_id: int, value: int) -> PQLBaseQuery:
        return self._base_query(
            lambda: f"SetValue(col={check_id(column_id, 'column id')}, "
            f"{self._name}={check_int(value)})"
        )

    def set_int_value_k(self, column_key: str, value: int) -> PQLBaseQuery:
        return self._base_query(
            lambda: f"SetValue(col={quote_key(column_key)}, {self._name}={check_int(value)})"
        )

    # --- Helpers ---

    def _bitmap_query(self, render: Callable[[], str]) -> PQLBitmapQuery:
        try:
            return PQLBitmapQuery(render(), self._index)
        except PilosaError as e:
            return PQLBitmapQuery("", self._index, e)

    def _base_query(self, render: Callable[[], str]) -> PQLBaseQuery:
        try:
            return PQLBaseQuery(render(), self._index)
        except PilosaError as e:
            return PQLBaseQuery("", self._index, e)

    def _binary_operation(self, op: str, n: int) -> PQLBitmapQuery:
        return self._bitmap_query(lambda: f"Range({self._name} {op} {check_int(n)})")

    def _value_query(self, op: str, bitmap: PQLBitmapQuery | None) -> PQLBaseQuery:
        return self._base_query(
            lambda: _call(op, _bitmap_arg(bitmap), f"field='{self._name}'")
        )

    def _range(self, row: str, start: datetime, end: datetime) -> str:
        return _call(
            "Range",
            f"row={row}",
            f"frame='{self._name}'",
            f"start='{format_timestamp(start)}'",
            f"end='{format_timestamp(end)}'",
        )

    def _bit_call(
        self, name: str, row: str, column: str, timestamp: datetime | None = None
    ) -> str:
        ts = "" if timestamp is None else f"timestamp='{format_timestamp(timestamp)}'"
        return _call(name, f"row={row}", f"frame='{self._name}'", f"col={column}", ts)

    def _row_attrs(self, row: str, attrs: Mapping[str, Any]) -> str:
        return _call(
            "SetRowAttrs", f"row={row}", f"frame='{self._name}'", create_attributes_string(attrs)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return (
            self._name == other._name
            and self.index_name == other.index_name
            and self._options == other._options
        )

    def __repr__(self) -> str:
        return (
            f"Field(name={self._name!r}, index={self.index_name!r}, "
            f"options={self._options!r})"
        )
