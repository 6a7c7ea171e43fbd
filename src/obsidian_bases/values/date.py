"""Methods and fields available on datetime values."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from obsidian_bases.functions import (
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
    expect_count,
    expect_type,
)
from obsidian_bases.values.core import (
    BooleanValue,
    DateValue,
    NumberValue,
    StringValue,
    Value,
)
from obsidian_bases.values.moment_format import format_datetime


def _date(this: DateValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    midnight: datetime = this.value.replace(hour=0, minute=0, second=0, microsecond=0)
    return DateValue(midnight)


def _format(this: DateValue, args: Sequence[Value]) -> Value:
    expect_count(args, 1)
    pattern = expect_type(args, 0, StringValue, "string").value
    return StringValue(format_datetime(this.value, pattern))


def _time(this: DateValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return StringValue(this.value.strftime("%H:%M:%S"))


def _is_empty(this: DateValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return BooleanValue(False)


def _register_date_methods() -> None:
    methods = DateValue.methods
    DateValue.fields.update(
        {
            "year": lambda this: NumberValue(this.value.year),
            "month": lambda this: NumberValue(this.value.month),
            "day": lambda this: NumberValue(this.value.day),
            "hour": lambda this: NumberValue(this.value.hour),
            "minute": lambda this: NumberValue(this.value.minute),
            "second": lambda this: NumberValue(this.value.second),
            "millisecond": lambda this: NumberValue(this.value.microsecond // 1000),
        }
    )

    methods.register(
        FunctionDefinition(
            name="date",
            description="Returns the same day at midnight",
            category=FunctionCategory.DATE,
            parameters=[],
            return_type="datetime",
            examples=["now().date()"],
            implementation=_date,
        )
    )

    methods.register(
        FunctionDefinition(
            name="format",
            description="Formats the date with a moment.js pattern",
            category=FunctionCategory.DATE,
            parameters=[FunctionParameter("pattern", "string", "Format, e.g. YYYY-MM-DD")],
            return_type="string",
            examples=['file.mtime.format("YYYY-MM-DD")', 'due.format("dddd, MMMM D")'],
            implementation=_format,
        )
    )

    methods.register(
        FunctionDefinition(
            name="time",
            description="Returns the time of day as HH:MM:SS",
            category=FunctionCategory.DATE,
            parameters=[],
            return_type="string",
            implementation=_time,
        )
    )

    methods.register(
        FunctionDefinition(
            name="isEmpty",
            description="Always false; a date is never empty",
            category=FunctionCategory.DATE,
            parameters=[],
            return_type="boolean",
            implementation=_is_empty,
        )
    )


_register_date_methods()
