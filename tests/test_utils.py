"""Utility function tests."""

from datetime import datetime

import pytest

from pilosa_orm._errors import InvalidNameError, SerializationError
from pilosa_orm._utils import (
    check_id,
    check_int,
    create_attributes_string,
    encode_filter_values,
    format_timestamp,
    quote_key,
    render_attribute_value,
    validate_field_name,
    validate_index_name,
    validate_label,
)


class TestValidateIndexName:
    @pytest.mark.parametrize("name", ["a", "repository", "repo-1", "my_index", "a" * 64])
    def test_valid(self, name):
        validate_index_name(name)

    @pytest.mark.parametrize(
        "name", ["", "Repository", "1repo", "_repo", "repo name", "repo$", "a" * 65]
    )
    def test_invalid(self, name):
        with pytest.raises(InvalidNameError):
            validate_index_name(name)

    def test_non_string(self):
        with pytest.raises(InvalidNameError):
            validate_index_name(42)


class TestValidateFieldName:
    def test_valid(self):
        validate_field_name("stargazer")

    def test_uppercase_rejected(self):
        with pytest.raises(InvalidNameError):
            validate_field_name("Stargazer")

    def test_too_long(self):
        with pytest.raises(InvalidNameError):
            validate_field_name("f" * 65)


class TestValidateLabel:
    @pytest.mark.parametrize("label", ["a", "Label", "active-user", "x_1"])
    def test_valid(self, label):
        validate_label(label)

    @pytest.mark.parametrize("label", ["", "1abc", "a b", "a.b", "x" * 65])
    def test_invalid(self, label):
        with pytest.raises(InvalidNameError):
            validate_label(label)


class TestFormatTimestamp:
    def test_minute_precision(self):
        assert format_timestamp(datetime(2017, 4, 24, 12, 14, 59)) == "2017-04-24T12:14"

    def test_zero_padding(self):
        assert format_timestamp(datetime(2003, 1, 2, 3, 4)) == "2003-01-02T03:04"


class TestQuoteKey:
    def test_plain(self):
        assert quote_key("foo") == "'foo'"

    def test_single_quote_escaped(self):
        assert quote_key("it's") == "'it\\'s'"


class TestRenderAttributeValue:
    def test_string(self):
        assert render_attribute_value("foo") == '"foo"'

    def test_string_with_quote(self):
        assert render_attribute_value('say "hi"') == '"say \\"hi\\""'

    def test_bool(self):
        assert render_attribute_value(True) == "true"
        assert render_attribute_value(False) == "false"

    def test_int(self):
        assert render_attribute_value(-7) == "-7"

    def test_float(self):
        assert render_attribute_value(1.5) == "1.5"

    @pytest.mark.parametrize("value", [None, [1], {"a": 1}, float("nan"), float("inf")])
    def test_unsupported(self, value):
        with pytest.raises(SerializationError):
            render_attribute_value(value)


class TestCreateAttributesString:
    def test_sorted_keys(self):
        assert create_attributes_string({"b": 1, "a": 2}) == "a=2, b=1"

    def test_mixed_values(self):
        result = create_attributes_string({"quote": '"Don\'t!"', "active": True, "x": 1.5})
        assert result == 'active=true, quote="\\"Don\'t!\\"", x=1.5'

    def test_empty(self):
        assert create_attributes_string({}) == ""

    def test_invalid_key(self):
        with pytest.raises(InvalidNameError):
            create_attributes_string({"bad key": 1})


class TestEncodeFilterValues:
    def test_compact_json(self):
        assert encode_filter_values(["go", 1, True]) == '["go",1,true]'

    def test_empty(self):
        assert encode_filter_values([]) == "[]"

    def test_unencodable(self):
        with pytest.raises(SerializationError) as exc_info:
            encode_filter_values([object()])
        assert isinstance(exc_info.value.wrapped, TypeError)


class TestBackslashEscaping:
    def test_key_trailing_backslash(self):
        assert quote_key("a\\") == "'a\\\\'"

    def test_key_backslash_before_quote(self):
        assert quote_key("a\\'") == "'a\\\\\\''"

    def test_value_trailing_backslash(self):
        assert render_attribute_value("x\\") == '"x\\\\"'

    def test_value_backslash_and_quote(self):
        assert render_attribute_value('\\"') == '"\\\\\\""'

    def test_key_not_a_string(self):
        with pytest.raises(SerializationError):
            quote_key(5)


class TestCheckId:
    @pytest.mark.parametrize("value", [0, 1, 2**64 - 1])
    def test_valid(self, value):
        assert check_id(value) == value

    @pytest.mark.parametrize("value", [-1, True, 1.0, "1", "1, frame='other'", None])
    def test_invalid(self, value):
        with pytest.raises(SerializationError):
            check_id(value)


class TestCheckInt:
    def test_negative_allowed(self):
        assert check_int(-5) == -5

    @pytest.mark.parametrize("value", [False, 2.5, "3"])
    def test_invalid(self, value):
        with pytest.raises(SerializationError):
            check_int(value)


class TestFormatTimestampType:
    def test_not_a_datetime(self):
        with pytest.raises(SerializationError):
            format_timestamp("2017-04-24T12:14")
