"""Field options: types, cache policy, integer range, and time quantum."""

from __future__ import annotations

import enum
import json
from collections.abc import Callable
from dataclasses import dataclass, fields, replace
from typing import Any, Union

from pilosa_orm._errors import ERR_MSG_INVALID_FIELD_OPTION, InvalidFieldOptionError


class FieldType(enum.StrEnum):
    DEFAULT = ""
    SET = "set"
    INT = "int"
    TIME = "time"


class CacheType(enum.StrEnum):
    DEFAULT = ""
    LRU = "lru"
    RANKED = "ranked"
    NONE = "none"


class TimeQuantum(enum.StrEnum):
    """Granularity of timestamped data for time fields."""

    NONE = ""
    YEAR = "Y"
    MONTH = "M"
    DAY = "D"
    HOUR = "H"
    YEAR_MONTH = "YM"
    MONTH_DAY = "MD"
    DAY_HOUR = "DH"
    YEAR_MONTH_DAY = "YMD"
    MONTH_DAY_HOUR = "MDH"
    YEAR_MONTH_DAY_HOUR = "YMDH"


@dataclass
class FieldOptions:
    """Options of a single field.

    Zero values are the defaults. ``min``/``max`` are meaningful only for
    int fields and ``time_quantum`` only for time fields; the inactive
    attributes are kept but not serialized.
    """

    field_type: FieldType = FieldType.DEFAULT
    time_quantum: TimeQuantum = TimeQuantum.NONE
    cache_type: CacheType = CacheType.DEFAULT
    cache_size: int = 0
    min: int = 0
    max: int = 0

    def with_defaults(self) -> FieldOptions:
        """Return a copy so the stored options are independent of the caller's."""
        return replace(self)

    def add_options(self, *options: FieldOptionArg) -> None:
        """Fold ``options`` onto these options, left to right.

        Each element is one of:

        - ``None``: a no-op, allowed only in first position.
        - a :class:`FieldOptions`: replaces all state, allowed only in first
          position.
        - a :class:`FieldType`, :class:`CacheType` or :class:`TimeQuantum`:
          sets that single attribute.
        - a setter such as :func:`opt_field_int`.

        The fold is atomic: on error nothing is applied.

        Raises:
            InvalidFieldOptionError: If an element is misplaced or unrecognized,
                or a setter rejects its value.
        """
        staged = replace(self)
        for i, option in enumerate(options):
            if option is None:
                if i != 0:
                    raise InvalidFieldOptionError(
                        ERR_MSG_INVALID_FIELD_OPTION,
                        f"None is only allowed as the first option, found at position {i}",
                    )
                continue
            if isinstance(option, FieldOptions):
                if i != 0:
                    raise InvalidFieldOptionError(
                        ERR_MSG_INVALID_FIELD_OPTION,
                        f"FieldOptions is only allowed as the first option, found at position {i}",
                    )
                staged = replace(option)
            elif isinstance(option, FieldType):
                staged.field_type = option
            elif isinstance(option, TimeQuantum):
                staged.time_quantum = option
            elif isinstance(option, CacheType):
                staged.cache_type = option
            elif callable(option) and not isinstance(option, type):
                try:
                    option(staged)
                except (TypeError, ValueError) as e:
                    raise InvalidFieldOptionError(
                        ERR_MSG_INVALID_FIELD_OPTION,
                        f"option at position {i} failed: {e}",
                        wrapped=e,
                    ) from e
            else:
                raise InvalidFieldOptionError(
                    ERR_MSG_INVALID_FIELD_OPTION,
                    f"unrecognized option at position {i}: {option!r}",
                )
        for f in fields(self):
            setattr(self, f.name, getattr(staged, f.name))

    def to_dict(self) -> dict[str, Any]:
        """Structured form with only non-default attributes."""
        opts: dict[str, Any] = {}
        if self.field_type == FieldType.INT:
            opts["min"] = self.min
            opts["max"] = self.max
        elif self.field_type == FieldType.TIME:
            opts["timeQuantum"] = str(self.time_quantum)
        if self.field_type != FieldType.DEFAULT:
            opts["type"] = str(self.field_type)
        if self.cache_type != CacheType.DEFAULT:
            opts["cacheType"] = str(self.cache_type)
        if self.cache_size != 0:
            opts["cacheSize"] = self.cache_size
        return {"options": opts}

    def to_json(self) -> str:
        # Keys are sorted so equal options always encode identically.
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    def __str__(self) -> str:
        return self.to_json()


FieldOption = Callable[[FieldOptions], None]
"""Setter that updates a single aspect of a :class:`FieldOptions`."""

FieldOptionArg = Union[FieldOptions, FieldType, CacheType, TimeQuantum, FieldOption, None]


def opt_field_cache_size(size: int) -> FieldOption:
    """Set the cache size. ``0`` leaves it unset."""

    def setter(options: FieldOptions) -> None:
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise InvalidFieldOptionError(
                ERR_MSG_INVALID_FIELD_OPTION,
                f"cache size must be a non-negative integer, got {size!r}",
            )
        options.cache_size = size

    return setter


def opt_field_int(min: int, max: int) -> FieldOption:
    """Make the field an int field with the inclusive range ``[min, max]``."""

    def setter(options: FieldOptions) -> None:
        if min > max:
            raise InvalidFieldOptionError(
                ERR_MSG_INVALID_FIELD_OPTION,
                f"int field min {min} is greater than max {max}",
            )
        options.field_type = FieldType.INT
        options.min = min
        options.max = max

    return setter


def opt_field_time(quantum: TimeQuantum) -> FieldOption:
    """Make the field a time field with the given quantum."""

    def setter(options: FieldOptions) -> None:
        try:
            time_quantum = TimeQuantum(quantum)
        except ValueError as e:
            raise InvalidFieldOptionError(
                ERR_MSG_INVALID_FIELD_OPTION,
                f"unknown time quantum: {quantum!r}",
                wrapped=e,
            ) from e
        options.field_type = FieldType.TIME
        options.time_quantum = time_quantum

    return setter
