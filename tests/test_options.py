"""Field option tests."""

import json

import pytest

from pilosa_orm._errors import InvalidFieldOptionError
from pilosa_orm.options import (
    CacheType,
    FieldOptions,
    FieldType,
    TimeQuantum,
    opt_field_cache_size,
    opt_field_int,
    opt_field_time,
)


class TestAddOptions:
    def test_defaults(self):
        options = FieldOptions()
        options.add_options()
        assert options == FieldOptions()
        assert options.field_type == FieldType.DEFAULT
        assert options.cache_size == 0

    def test_none_first_is_noop(self):
        options = FieldOptions()
        options.add_options(None, CacheType.LRU)
        assert options.cache_type == CacheType.LRU

    def test_none_after_first_rejected(self):
        options = FieldOptions()
        with pytest.raises(InvalidFieldOptionError):
            options.add_options(CacheType.LRU, None)

    def test_full_options_first_replaces(self):
        options = FieldOptions(cache_size=10)
        options.add_options(FieldOptions(cache_type=CacheType.RANKED), opt_field_cache_size(500))
        assert options == FieldOptions(cache_type=CacheType.RANKED, cache_size=500)

    def test_full_options_after_first_rejected(self):
        options = FieldOptions()
        with pytest.raises(InvalidFieldOptionError):
            options.add_options(CacheType.LRU, FieldOptions())

    def test_bare_enums(self):
        options = FieldOptions()
        options.add_options(FieldType.SET, CacheType.NONE, TimeQuantum.YEAR_MONTH)
        assert options.field_type == FieldType.SET
        assert options.cache_type == CacheType.NONE
        assert options.time_quantum == TimeQuantum.YEAR_MONTH

    def test_later_options_win(self):
        options = FieldOptions()
        options.add_options(CacheType.LRU, CacheType.RANKED)
        assert options.cache_type == CacheType.RANKED

    @pytest.mark.parametrize("bad", ["int", 42, 1.5, ["lru"], str, dict, int, FieldOptions])
    def test_unrecognized_rejected(self, bad):
        options = FieldOptions()
        with pytest.raises(InvalidFieldOptionError):
            options.add_options(bad)

    def test_setter_type_error_wrapped(self):
        def needs_two_args(options, extra):
            pass

        with pytest.raises(InvalidFieldOptionError) as exc_info:
            FieldOptions().add_options(needs_two_args)
        assert isinstance(exc_info.value.wrapped, TypeError)

    def test_failure_leaves_options_untouched(self):
        options = FieldOptions(cache_size=7)
        with pytest.raises(InvalidFieldOptionError):
            options.add_options(CacheType.LRU, opt_field_int(0, 10), "bogus")
        assert options == FieldOptions(cache_size=7)

    def test_with_defaults_is_a_copy(self):
        options = FieldOptions(cache_size=10)
        copied = options.with_defaults()
        assert copied == options
        assert copied is not options
        copied.cache_size = 20
        assert options.cache_size == 10


class TestSetters:
    def test_cache_size(self):
        options = FieldOptions()
        options.add_options(opt_field_cache_size(1000))
        assert options.cache_size == 1000

    @pytest.mark.parametrize("size", [-1, 1.5, True])
    def test_cache_size_invalid(self, size):
        with pytest.raises(InvalidFieldOptionError):
            FieldOptions().add_options(opt_field_cache_size(size))

    def test_int(self):
        options = FieldOptions()
        options.add_options(opt_field_int(-10, 100))
        assert options.field_type == FieldType.INT
        assert (options.min, options.max) == (-10, 100)

    def test_int_min_greater_than_max(self):
        with pytest.raises(InvalidFieldOptionError):
            FieldOptions().add_options(opt_field_int(10, 0))

    def test_time(self):
        options = FieldOptions()
        options.add_options(opt_field_time(TimeQuantum.YEAR_MONTH_DAY))
        assert options.field_type == FieldType.TIME
        assert options.time_quantum == TimeQuantum.YEAR_MONTH_DAY

    def test_time_from_string_value(self):
        options = FieldOptions()
        options.add_options(opt_field_time("DH"))
        assert options.time_quantum == TimeQuantum.DAY_HOUR

    def test_time_unknown_quantum(self):
        with pytest.raises(InvalidFieldOptionError):
            FieldOptions().add_options(opt_field_time("W"))

    def test_custom_setter(self):
        def big_cache(options):
            options.cache_size = 50000

        options = FieldOptions()
        options.add_options(big_cache)
        assert options.cache_size == 50000


class TestTimeQuantum:
    def test_eleven_granularities(self):
        assert [q.value for q in TimeQuantum] == [
            "", "Y", "M", "D", "H", "YM", "MD", "DH", "YMD", "MDH", "YMDH",
        ]


class TestSerialization:
    def test_default(self):
        assert str(FieldOptions()) == '{"options":{}}'

    def test_int(self):
        options = FieldOptions()
        options.add_options(opt_field_int(-10, 100))
        assert options.to_json() == '{"options":{"max":100,"min":-10,"type":"int"}}'

    def test_time(self):
        options = FieldOptions()
        options.add_options(opt_field_time(TimeQuantum.YEAR_MONTH_DAY_HOUR))
        assert options.to_dict() == {"options": {"timeQuantum": "YMDH", "type": "time"}}

    def test_inactive_attributes_not_rendered(self):
        options = FieldOptions(field_type=FieldType.SET, min=1, max=5, time_quantum=TimeQuantum.DAY)
        assert options.to_dict() == {"options": {"type": "set"}}

    def test_cache(self):
        options = FieldOptions()
        options.add_options(CacheType.RANKED, opt_field_cache_size(1000))
        assert str(options) == '{"options":{"cacheSize":1000,"cacheType":"ranked"}}'

    def test_deterministic(self):
        a = FieldOptions()
        a.add_options(opt_field_cache_size(10), CacheType.LRU, opt_field_int(0, 9))
        b = FieldOptions()
        b.add_options(opt_field_int(0, 9), CacheType.LRU, opt_field_cache_size(10))
        assert a.to_json() == b.to_json()
        assert json.loads(a.to_json()) == a.to_dict()
