"""
Tests for coercions and value-transforming validators.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from eskema.expectation import ExpectationCodes
from eskema.predicates import IS_INT, IS_NULL, IS_STRING, is_eq, is_gte, length
from eskema.structure import eskema, list_each
from eskema.transformers import (
    MAX_SAFE_INT,
    collapse_whitespace,
    default_to,
    flatten_keys,
    get_field,
    pick_keys,
    pluck_key,
    split,
    to_bool,
    to_bool_lenient,
    to_bool_strict,
    to_date_only,
    to_datetime,
    to_float,
    to_int,
    to_int_safe,
    to_int_strict,
    to_json,
    to_lower,
    to_number,
    to_str,
    to_upper,
    transform,
    trim,
)


class TestNumericCoercions:
    """Test int, float and number coercions."""

    @pytest.mark.parametrize(
        "value, expected",
        [("42", 42), (" 7 ", 7), ("-3", -3), (3.9, 3), (5, 5)],
    )
    def test_to_int(self, value, expected):
        """Test accepted inputs and their converted values."""
        result = to_int().validate(value)
        assert result.is_valid
        assert result.value == expected
        assert type(result.value) is int

    def test_to_int_rejects_at_guard(self):
        """Test unconvertible input never reaches int()."""
        result = to_int().validate("abc")
        assert [e.message for e in result.expectations] == [
            "int",
            "number",
            "a valid formatted int string",
        ]
        assert result.first_expectation.code == ExpectationCodes.TYPE_MISMATCH

    def test_to_int_rejects_bool(self):
        """Test bools are not numbers."""
        assert to_int().validate(True).is_not_valid

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_to_int_conversion_failure(self, value):
        """Test values passing the guard but failing conversion."""
        exp = to_int().validate(value).first_expectation
        assert exp.code == ExpectationCodes.VALUE_COERCION_FAILED
        assert exp.message == "a value convertible to int"

    def test_to_int_with_child(self):
        """Test the child validates the converted value."""
        at_least_ten = to_int(is_gte(10))
        assert at_least_ten.validate("42").value == 42
        exp = at_least_ten.validate("5").first_expectation
        assert exp.value == 5
        assert exp.message == "greater than or equal to 10"

    def test_to_int_message(self):
        """Test a coercion message replaces the failure."""
        exp = to_int(message="a whole number").validate("x").first_expectation
        assert exp.message == "a whole number"
        assert exp.code == ExpectationCodes.TYPE_MISMATCH

    def test_to_int_strict(self):
        """Test the strict variant rejects floats."""
        assert to_int_strict().validate("12").value == 12
        assert to_int_strict().validate(3.5).is_not_valid

    def test_to_int_safe(self):
        """Test the safe variant stays within the 53-bit integer range."""
        assert to_int_safe().validate("9007199254740991").value == MAX_SAFE_INT
        assert to_int_safe().validate("-9007199254740991").is_valid
        assert to_int_safe().validate("1.0").is_not_valid

        exp = to_int_safe().validate("9007199254740992").first_expectation
        assert exp.code == ExpectationCodes.VALUE_RANGE_OUT_OF_BOUNDS
        assert exp.value == MAX_SAFE_INT + 1

    def test_to_int_safe_with_child(self):
        """Test the child sees the converted int and messages override failures."""
        assert to_int_safe(is_eq(10)).validate("10").is_valid
        assert to_int_safe(is_eq(10)).validate("11").is_not_valid
        exp = to_int_safe(is_gte(10), message="int safe msg").validate("abc").first_expectation
        assert exp.message == "int safe msg"

    def test_to_float(self):
        """Test float coercion."""
        assert to_float().validate("3.14").value == 3.14
        result = to_float().validate(2)
        assert result.value == 2.0
        assert type(result.value) is float
        assert to_float().validate("x").is_not_valid

    def test_to_number(self):
        """Test int strings stay ints and other numbers become floats."""
        assert type(to_number().validate("12").value) is int
        assert to_number().validate("1.5").value == 1.5
        assert to_number().validate(7).value == 7
        assert to_number().validate("x").is_not_valid


class TestBoolCoercions:
    """Test bool coercions."""

    @pytest.mark.parametrize(
        "value, expected",
        [("true", True), ("FALSE", False), (1, True), (0, False), (True, True)],
    )
    def test_to_bool(self, value, expected):
        """Test accepted inputs."""
        assert to_bool().validate(value).value is expected

    @pytest.mark.parametrize("value", ["yes", 2, None])
    def test_to_bool_rejects(self, value):
        """Test rejected inputs."""
        assert to_bool().validate(value).is_not_valid

    def test_to_bool_strict(self):
        """Test only exact lowercase strings are accepted."""
        assert to_bool_strict().validate("true").value is True
        assert to_bool_strict().validate("TRUE").is_not_valid
        assert to_bool_strict().validate(1).is_not_valid

    @pytest.mark.parametrize(
        "value, expected",
        [("yes", True), ("Off", False), ("y", True), ("N", False), ("1", True), (0, False)],
    )
    def test_to_bool_lenient(self, value, expected):
        """Test lenient spellings."""
        assert to_bool_lenient().validate(value).value is expected

    def test_to_bool_lenient_rejects(self):
        """Test unknown words are rejected."""
        result = to_bool_lenient().validate("maybe")
        assert "a boolean-like string" in [e.message for e in result.expectations]


class TestOtherCoercions:
    """Test string, datetime and JSON coercions."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (5, "5"),
            ({"a": 1}, '{"a": 1}'),
            ([1, 2], "[1, 2]"),
            (True, "true"),
            (b"raw", "raw"),
            (date(2024, 1, 15), "2024-01-15"),
        ],
    )
    def test_to_str(self, value, expected):
        """Test values render as strings."""
        assert to_str().validate(value).value == expected

    def test_to_str_rejects_none(self):
        """Test None has no string form."""
        assert to_str().validate(None).first_expectation.message == "a non-null value"

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2024-01-15", datetime(2024, 1, 15)),
            ("2024-01-15T10:30:00", datetime(2024, 1, 15, 10, 30)),
            ("2024/01/15", datetime(2024, 1, 15)),
            (date(2024, 1, 15), datetime(2024, 1, 15)),
            (datetime(2024, 1, 15, 8), datetime(2024, 1, 15, 8)),
        ],
    )
    def test_to_datetime(self, value, expected):
        """Test date strings and date objects."""
        assert to_datetime().validate(value).value == expected

    def test_to_datetime_with_offset(self):
        """Test ISO 8601 offsets produce aware datetimes."""
        value = to_datetime().validate("2024-01-15T10:30:00+02:00").value
        assert value.utcoffset() == timedelta(hours=2)
        assert value.astimezone(timezone.utc).hour == 8

    def test_to_datetime_failures(self):
        """Test unparseable strings and wrong types."""
        assert (
            to_datetime().validate("not a date").first_expectation.code
            == ExpectationCodes.VALUE_COERCION_FAILED
        )
        assert to_datetime().validate(123).first_expectation.code == ExpectationCodes.TYPE_MISMATCH

    @pytest.mark.parametrize(
        "value",
        [
            "2024-01-15",
            " 2024-01-15T10:30:00 ",
            date(2024, 1, 15),
            datetime(2024, 1, 15, 23, 59, 59, 5),
        ],
    )
    def test_to_date_only(self, value):
        """Test dates are truncated to midnight."""
        assert to_date_only().validate(value).value == datetime(2024, 1, 15)

    def test_to_date_only_keeps_offset(self):
        """Test an aware datetime keeps its offset at midnight."""
        value = to_date_only().validate("2024-01-15T10:30:00+02:00").value
        assert value == datetime(2024, 1, 15, tzinfo=timezone(timedelta(hours=2)))

    def test_to_date_only_failures(self):
        """Test impossible dates and wrong types."""
        assert (
            to_date_only().validate("2024-02-30").first_expectation.code
            == ExpectationCodes.VALUE_COERCION_FAILED
        )
        assert to_date_only().validate(5).first_expectation.code == ExpectationCodes.TYPE_MISMATCH

    def test_to_json(self):
        """Test JSON decoding."""
        assert to_json().validate('{"a": 1}').value == {"a": 1}
        assert to_json().validate("[1, 2]").value == [1, 2]
        assert to_json().validate({"a": 1}).value == {"a": 1}
        assert (
            to_json().validate("{bad").first_expectation.code
            == ExpectationCodes.VALUE_COERCION_FAILED
        )
        assert to_json().validate(5).is_not_valid


class TestStringTransformers:
    """Test string normalizers."""

    def test_trim(self):
        """Test whitespace is stripped before the child runs."""
        assert trim(IS_STRING).validate("  hi ").value == "hi"
        assert trim(length([is_gte(2)])).validate("  a  ").is_not_valid

    def test_case(self):
        """Test case normalization."""
        assert to_lower().validate("ADMIN").value == "admin"
        assert to_upper(is_eq("EU")).validate("eu").is_valid

    def test_collapse_whitespace(self):
        """Test runs of whitespace collapse to single spaces."""
        assert collapse_whitespace().validate(" a   b\n c ").value == "a b c"

    def test_non_string(self):
        """Test normalizers require strings."""
        assert trim().validate(5).first_expectation.message == "str"

    def test_split(self):
        """Test strings split into a list of parts."""
        assert split(",").validate("a,b,,c").value == ["a", "b", "", "c"]
        assert split(",").validate(5).first_expectation.message == "str"

    def test_split_with_child(self):
        """Test the child validates the parts with their indexes."""
        ports = split(",", list_each(to_int(is_gte(0))))
        assert ports.validate("80,443").is_valid
        assert ports.validate("80,x").first_expectation.path == "[1]"

    def test_split_empty_separator(self):
        """Test an empty separator is a conversion failure."""
        exp = split("").validate("abc").first_expectation
        assert exp.code == ExpectationCodes.VALUE_COERCION_FAILED


class TestMapTransformers:
    """Test map pivots."""

    def test_pick_keys(self):
        """Test only the requested keys are kept."""
        assert pick_keys(["a", "b"]).validate({"a": 1, "c": 3}).value == {"a": 1}

    def test_pluck_key(self):
        """Test the value under a key is validated."""
        user = pluck_key("user", eskema({"name": IS_STRING}))
        assert user.validate({"user": {"name": "ada"}}).is_valid
        assert user.validate({"user": {"name": 1}}).first_expectation.path == ".name"

    def test_pluck_missing_key(self):
        """Test a missing key is reported."""
        exp = pluck_key("user").validate({}).first_expectation
        assert exp.code == ExpectationCodes.STRUCTURE_MISSING_KEY
        assert exp.message == "a dict containing key: user"

    def test_pluck_none_value(self):
        """Test a stored None is a legitimate value."""
        assert pluck_key("a", IS_NULL).validate({"a": None}).is_valid

    def test_flatten_keys(self):
        """Test nested maps flatten with the delimiter."""
        nested = {"a": {"b": 1, "c": {"d": 2}}, "e": 3}
        assert flatten_keys().validate(nested).value == {"a.b": 1, "a.c.d": 2, "e": 3}
        assert flatten_keys("/").validate(nested).value == {"a/b": 1, "a/c/d": 2, "e": 3}

    def test_get_field(self):
        """Test a field is validated and reported under its path."""
        name = get_field("name", IS_STRING)
        assert name.validate({"name": "ada"}).value == "ada"

        exp = name.validate({"name": 1}).first_expectation
        assert exp.path == ".name"
        assert exp.message == "str"

        assert (
            name.validate({}).first_expectation.code == ExpectationCodes.VALUE_CONTAINS_MISSING
        )
        assert name.validate([]).first_expectation.message == "dict"

    def test_get_field_nested(self):
        """Test nested fields compose their paths."""
        city = get_field("user", get_field("city", IS_STRING))
        assert city.validate({"user": {"city": 1}}).first_expectation.path == ".user.city"

    def test_transform(self):
        """Test arbitrary transformations."""
        assert transform(lambda value: value * 2, is_eq(4)).validate(2).is_valid
        assert transform(len).validate("abc").value == 3


class TestDefaultTo:
    """Test substituting defaults for missing values."""

    def test_replaces_none(self):
        """Test None and absent values become the default."""
        port = default_to(8080, IS_INT)
        assert port.validate(None).value == 8080
        assert port.validate(None, exists=False).value == 8080
        assert port.validate(22).value == 22
        assert port.validate("x").is_not_valid

    def test_in_schema(self):
        """Test a defaulted field accepts a missing key and a stored None."""
        schema = eskema({"port": default_to(8080, IS_INT)})
        assert schema.validate({}).is_valid
        assert schema.validate({"port": None}).is_valid
        assert schema.validate({"port": "x"}).first_expectation.path == ".port"

    def test_message(self):
        """Test the message override keeps the child's code."""
        exp = default_to(0, IS_STRING, message="need text").validate(None).first_expectation
        assert exp.message == "need text"
        assert exp.code == ExpectationCodes.TYPE_MISMATCH
