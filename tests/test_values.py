"""Tests for runtime values and their operators."""

import math
from datetime import date, datetime, timedelta

import pytest

from obsidian_bases.errors import (
    InvalidComparison,
    InvalidOperation,
    InvalidUnary,
    ValueOperationError,
)
from obsidian_bases.values import (
    I64_MAX,
    I64_MIN,
    NULL,
    BooleanValue,
    DateValue,
    DurationValue,
    LinkValue,
    ListValue,
    NumberValue,
    ObjectValue,
    StringValue,
    sort_compare,
    to_value,
)


# =============================================================================
# Arithmetic
# =============================================================================


class TestNumberArithmetic:
    def test_integer_addition_stays_integer(self):
        result = NumberValue(2).add(NumberValue(3))

        assert result == NumberValue(5)
        assert isinstance(result.value, int)

    def test_overflow_widens_to_float(self):
        result = NumberValue(I64_MAX).add(NumberValue(1))

        assert isinstance(result.value, float)
        assert result.value == float(I64_MAX) + 1.0

    def test_multiplication_overflow_widens(self):
        result = NumberValue(I64_MAX).mul(NumberValue(2))

        assert isinstance(result.value, float)

    def test_mixed_arithmetic_is_float(self):
        assert NumberValue(1).add(NumberValue(0.5)) == NumberValue(1.5)

    def test_even_division_stays_integer(self):
        result = NumberValue(6).div(NumberValue(3))

        assert result == NumberValue(2)
        assert isinstance(result.value, int)

    def test_uneven_division_is_float(self):
        assert NumberValue(7).div(NumberValue(2)) == NumberValue(3.5)

    @pytest.mark.parametrize("zero", [0, 0.0])
    def test_division_by_zero(self, zero):
        with pytest.raises(InvalidOperation):
            NumberValue(1).div(NumberValue(zero))

    def test_remainder_truncates(self):
        assert NumberValue(7).rem(NumberValue(3)) == NumberValue(1)
        assert NumberValue(-7).rem(NumberValue(3)) == NumberValue(-1)
        assert NumberValue(7.5).rem(NumberValue(2)) == NumberValue(1.5)

    def test_remainder_by_zero(self):
        with pytest.raises(InvalidOperation):
            NumberValue(5).rem(NumberValue(0))

    def test_negate(self):
        assert NumberValue(5).negate() == NumberValue(-5)
        assert isinstance(NumberValue(I64_MIN).negate().value, float)

    def test_negate_string_fails(self):
        with pytest.raises(InvalidUnary):
            StringValue("a").negate()


class TestOtherArithmetic:
    def test_string_concatenation(self):
        assert StringValue("a").add(StringValue("b")) == StringValue("ab")

    def test_date_plus_duration(self):
        start = DateValue(datetime(2024, 1, 1))
        day = DurationValue(timedelta(days=1))

        assert start.add(day) == DateValue(datetime(2024, 1, 2))
        assert day.add(start) == DateValue(datetime(2024, 1, 2))
        assert start.sub(day) == DateValue(datetime(2023, 12, 31))

    def test_date_minus_date(self):
        result = DateValue(datetime(2024, 1, 3)).sub(DateValue(datetime(2024, 1, 1)))

        assert result == DurationValue(timedelta(days=2))

    def test_duration_arithmetic(self):
        hour = DurationValue(timedelta(hours=1))

        assert hour.add(hour) == DurationValue(timedelta(hours=2))
        assert hour.sub(hour) == DurationValue(timedelta())

    def test_type_error_names_both_operands(self):
        with pytest.raises(InvalidOperation) as exc_info:
            BooleanValue(True).sub(DurationValue(timedelta(days=1)))

        assert exc_info.value.left == "boolean"
        assert exc_info.value.right == "duration"

    def test_date_out_of_range(self):
        with pytest.raises(ValueOperationError):
            DateValue(datetime(9999, 12, 31)).add(DurationValue(timedelta(days=2)))


# =============================================================================
# Comparison and equality
# =============================================================================


class TestComparison:
    def test_same_kind(self):
        assert NumberValue(1).compare(NumberValue(2)) == -1
        assert StringValue("b").compare(StringValue("a")) == 1
        assert BooleanValue(False).compare(BooleanValue(True)) == -1
        assert NULL.compare(NULL) == 0

    def test_cross_type_fails(self):
        with pytest.raises(InvalidOperation):
            NumberValue(1).compare(StringValue("1"))

    def test_nan_fails(self):
        with pytest.raises(InvalidComparison):
            NumberValue(math.nan).compare(NumberValue(1))

    def test_nan_equals_nan(self):
        assert NumberValue(math.nan).equals(NumberValue(math.nan))

    def test_integer_equals_float(self):
        assert NumberValue(1).equals(NumberValue(1.0))

    def test_different_types_are_not_equal(self):
        assert not StringValue("1").equals(NumberValue(1))
        assert not NULL.equals(BooleanValue(False))

    def test_list_equality_is_structural(self):
        a = ListValue((NumberValue(1), StringValue("x")))
        b = ListValue([NumberValue(1.0), StringValue("x")])

        assert a.equals(b)

    def test_sort_compare_falls_back_to_type_name(self):
        assert sort_compare(NumberValue(5), StringValue("a")) == -1
        assert sort_compare(StringValue("a"), NumberValue(5)) == 1


# =============================================================================
# Truthiness and display
# =============================================================================


class TestTruthiness:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (NULL, False),
            (BooleanValue(True), True),
            (NumberValue(0), False),
            (NumberValue(math.nan), False),
            (NumberValue(-1), True),
            (StringValue(""), False),
            (StringValue("x"), True),
            (ListValue(()), False),
            (ObjectValue({}), False),
            (DurationValue(timedelta()), False),
            (DateValue(datetime(2024, 1, 1)), True),
            (LinkValue("a"), True),
        ],
    )
    def test_is_truthy(self, value, expected):
        assert value.is_truthy() is expected

    def test_logical_not(self):
        assert StringValue("").logical_not() == BooleanValue(True)
        assert BooleanValue(True).logical_not() == BooleanValue(False)


class TestDisplay:
    def test_numbers(self):
        assert NumberValue(2).display() == "2"
        assert NumberValue(2.0).display() == "2"
        assert NumberValue(2.5).display() == "2.5"
        assert NumberValue(math.nan).display() == "NaN"

    def test_composites(self):
        assert NULL.display() == "null"
        assert ListValue((StringValue("a"), NumberValue(1))).display() == "[a, 1]"
        assert LinkValue("Notes/A.md", "A").display() == "Notes/A.md|A"
        assert str(BooleanValue(False)) == "false"

    def test_durations(self):
        assert DurationValue(timedelta(days=1, hours=2, minutes=30)).display() == "P1DT2H30M"
        assert DurationValue(timedelta()).display() == "PT0S"
        assert DurationValue(timedelta(hours=-1)).display() == "-PT1H"

    def test_dates(self):
        assert DateValue(datetime(2024, 3, 5, 9, 30)).display() == "2024-03-05 09:30:00"


# =============================================================================
# Conversion from Python
# =============================================================================


class TestToValue:
    def test_scalars(self):
        assert to_value(None) == NULL
        assert to_value(True) == BooleanValue(True)
        assert to_value(3) == NumberValue(3)
        assert to_value("x") == StringValue("x")

    def test_date_becomes_midnight(self):
        assert to_value(date(2024, 5, 1)) == DateValue(datetime(2024, 5, 1))

    def test_nested(self):
        assert to_value({"a": [1, "x"]}) == ObjectValue(
            {"a": ListValue((NumberValue(1), StringValue("x")))}
        )
