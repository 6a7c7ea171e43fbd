"""Built-in global functions for the Bases expression language.

This module registers the global functions with a FunctionRegistry.
``FunctionRegistry.global_functions()`` calls ``register_all_builtins`` the
first time the shared registry is requested.

Categories:
- Logic: if
- Date: now, today, duration, date
- Conversion: list, number, link
- Number: min, max
"""

from __future__ import annotations

import calendar
import math
import re
from datetime import date, datetime, time, timedelta
from typing import Sequence

from obsidian_bases.errors import CallError, IncorrectArgumentCount, IncorrectArgumentType
from obsidian_bases.functions import (
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
    FunctionRegistry,
    expect_count,
    expect_range,
    expect_type,
)
from obsidian_bases.values import (
    NULL,
    BooleanValue,
    DateValue,
    DurationValue,
    FileValue,
    LinkValue,
    ListValue,
    NullValue,
    NumberValue,
    StringValue,
    Value,
)

# Accepted by date(), tried in order.
DATETIME_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
]
DATE_FORMAT = "%Y-%m-%d"

_DURATION_COMPONENT = re.compile(r"\s*(-?(?:\d+(?:\.\d*)?|\.\d+))\s*([A-Za-z]+)")

# Units measured in days; the day count is truncated after scaling.
_DAY_UNITS = {
    "y": 365, "year": 365, "years": 365,
    "M": 30, "month": 30, "months": 30,
}
_UNITS = {
    "w": timedelta(weeks=1), "week": timedelta(weeks=1), "weeks": timedelta(weeks=1),
    "d": timedelta(days=1), "day": timedelta(days=1), "days": timedelta(days=1),
    "h": timedelta(hours=1), "hour": timedelta(hours=1), "hours": timedelta(hours=1),
    "m": timedelta(minutes=1), "minute": timedelta(minutes=1), "minutes": timedelta(minutes=1),
    "s": timedelta(seconds=1), "second": timedelta(seconds=1), "seconds": timedelta(seconds=1),
}

_INTEGER = re.compile(r"[+-]?\d+")


def register_all_builtins(registry: FunctionRegistry) -> None:
    """Register all built-in functions with ``registry``."""
    _register_logic_functions(registry)
    _register_date_functions(registry)
    _register_conversion_functions(registry)
    _register_number_functions(registry)


# -----------------------------------------------------------------------------
# Parsing helpers
# -----------------------------------------------------------------------------


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``"1d"``, ``"2h 30m"`` or ``"-1.5 weeks"``.

    Each component is truncated to a whole number of its unit.

    Raises:
        CallError: If the string is empty, has an unknown unit or trailing text
    """
    source = text.strip()
    if not source:
        raise CallError("Empty duration string")

    components: list[tuple[float, str]] = []
    pos = 0
    while True:
        match = _DURATION_COMPONENT.match(source, pos)
        if match is None:
            break
        components.append((float(match.group(1)), match.group(2)))
        pos = match.end()

    if not components:
        raise CallError(f"Failed to parse duration '{source}': expected a number and a unit")
    remaining = source[pos:].strip()
    if remaining:
        raise CallError(f"Failed to parse duration '{source}': unexpected text: '{remaining}'")

    total = timedelta()
    try:
        for amount, unit in components:
            if unit in _DAY_UNITS:
                total += timedelta(days=int(amount * _DAY_UNITS[unit]))
            elif unit in _UNITS:
                total += _UNITS[unit] * int(amount)
            else:
                raise CallError(f"Unknown duration unit: {unit}")
    except OverflowError:
        raise CallError(f"Duration '{source}' is out of range") from None
    return total


def parse_datetime(text: str) -> datetime:
    """Parse a date string using the accepted formats, in order.

    Raises:
        CallError: If no format matches
    """
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    try:
        return datetime.combine(datetime.strptime(text, DATE_FORMAT).date(), time())
    except ValueError:
        pass
    raise CallError(
        f"Could not parse '{text}' as a date. Expected format: YYYY-MM-DD HH:mm:ss"
    )


def parse_number(text: str) -> int | float:
    """Parse a numeric string. Integers stay integers."""
    if text != text.strip() or "_" in text:
        raise CallError(f"Could not parse string '{text}' as a number")
    if _INTEGER.fullmatch(text):
        return int(text)
    try:
        return float(text)
    except ValueError as e:
        raise CallError(f"Could not parse string '{text}' as a number: {e}") from e


# -----------------------------------------------------------------------------
# Logic Functions
# -----------------------------------------------------------------------------


def _if(args: Sequence[Value]) -> Value:
    """Return ``then`` when ``cond`` is true, else ``else`` (default null)."""
    expect_range(args, 2, 3)
    condition = expect_type(args, 0, BooleanValue, "boolean")
    if condition.value:
        return args[1]
    return args[2] if len(args) > 2 else NULL


def _register_logic_functions(registry: FunctionRegistry) -> None:
    registry.register(
        FunctionDefinition(
            name="if",
            description="Returns one of two values depending on a boolean condition",
            category=FunctionCategory.LOGIC,
            parameters=[
                FunctionParameter("condition", "boolean", "Condition to test"),
                FunctionParameter("then", "any", "Value when the condition is true"),
                FunctionParameter(
                    "else", "any", "Value when the condition is false", required=False
                ),
            ],
            return_type="any",
            examples=[
                'if(status == "done", "Done", "Open")',
                "if(price > 100, price * 0.9, price)",
            ],
            implementation=_if,
        )
    )


# -----------------------------------------------------------------------------
# Date Functions
# -----------------------------------------------------------------------------


def _now(args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return DateValue(datetime.now())


def _today(args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return DateValue(datetime.combine(date.today(), time()))


def _duration(args: Sequence[Value]) -> Value:
    expect_range(args, 1, 1)
    text = expect_type(args, 0, StringValue, "string").value
    return DurationValue(parse_duration(text))


def _date(args: Sequence[Value]) -> Value:
    expect_range(args, 1, 1)
    text = expect_type(args, 0, StringValue, "string").value
    return DateValue(parse_datetime(text))


def _register_date_functions(registry: FunctionRegistry) -> None:
    registry.register(
        FunctionDefinition(
            name="now",
            description="Returns the current local date and time",
            category=FunctionCategory.DATE,
            parameters=[],
            return_type="datetime",
            examples=["file.mtime > now() - duration(\"7d\")"],
            implementation=_now,
        )
    )

    registry.register(
        FunctionDefinition(
            name="today",
            description="Returns today's date at midnight",
            category=FunctionCategory.DATE,
            parameters=[],
            return_type="datetime",
            examples=["due < today()"],
            implementation=_today,
        )
    )

    registry.register(
        FunctionDefinition(
            name="duration",
            description="Parses a duration such as 1d, 2h30m or 3 weeks",
            category=FunctionCategory.DATE,
            parameters=[FunctionParameter("value", "string", "Duration text")],
            return_type="duration",
            examples=['duration("1d")', 'now() + duration("2 weeks")'],
            implementation=_duration,
        )
    )

    registry.register(
        FunctionDefinition(
            name="date",
            description="Parses a date in YYYY-MM-DD [HH:mm[:ss]] form",
            category=FunctionCategory.DATE,
            parameters=[FunctionParameter("value", "string", "Date text")],
            return_type="datetime",
            examples=['date("2024-01-15")', 'date("2024-01-15 09:30")'],
            implementation=_date,
        )
    )


# -----------------------------------------------------------------------------
# Conversion Functions
# -----------------------------------------------------------------------------


def _list(args: Sequence[Value]) -> Value:
    """Wrap a value in a list; lists pass through unchanged."""
    expect_count(args, 1)
    item = args[0]
    if isinstance(item, ListValue):
        return item
    return ListValue((item,))


def _number(args: Sequence[Value]) -> Value:
    expect_count(args, 1)
    item = args[0]
    if isinstance(item, NumberValue):
        return item
    if isinstance(item, StringValue):
        return NumberValue(parse_number(item.value))
    if isinstance(item, BooleanValue):
        return NumberValue(1 if item.value else 0)
    if isinstance(item, DateValue):
        value = item.value
        return NumberValue(calendar.timegm(value.timetuple()) * 1000 + value.microsecond // 1000)
    if isinstance(item, DurationValue):
        micros = item.value // timedelta(microseconds=1)
        millis = abs(micros) // 1000
        return NumberValue(-millis if micros < 0 else millis)
    if isinstance(item, NullValue):
        raise IncorrectArgumentType(0, item.type_name, "non-null")
    raise IncorrectArgumentType(0, item.type_name, "number")


def _link(args: Sequence[Value]) -> Value:
    expect_range(args, 1, 2)
    target = args[0]
    if isinstance(target, StringValue):
        path = target.value
    elif isinstance(target, FileValue):
        path = str(target.path)
    else:
        raise IncorrectArgumentType(0, target.type_name, "string or file")
    display = expect_type(args, 1, StringValue, "string").value if len(args) > 1 else None
    return LinkValue(path, display)


def _register_conversion_functions(registry: FunctionRegistry) -> None:
    registry.register(
        FunctionDefinition(
            name="list",
            description="Wraps a value in a list unless it already is one",
            category=FunctionCategory.CONVERSION,
            parameters=[FunctionParameter("value", "any", "Value to wrap")],
            return_type="list",
            examples=["list(authors).join(\", \")"],
            implementation=_list,
        )
    )

    registry.register(
        FunctionDefinition(
            name="number",
            description=(
                "Converts a string, boolean, date (epoch milliseconds) or "
                "duration (milliseconds) to a number"
            ),
            category=FunctionCategory.CONVERSION,
            parameters=[FunctionParameter("value", "any", "Value to convert")],
            return_type="number",
            examples=['number("42")', "number(file.mtime)"],
            implementation=_number,
        )
    )

    registry.register(
        FunctionDefinition(
            name="link",
            description="Creates a link to a path or file",
            category=FunctionCategory.CONVERSION,
            parameters=[
                FunctionParameter("target", "string|file", "Path or file to link to"),
                FunctionParameter("display", "string", "Display text", required=False),
            ],
            return_type="link",
            examples=['link("Projects/Index")', 'link(file, "Open")'],
            implementation=_link,
        )
    )


# -----------------------------------------------------------------------------
# Number Functions
# -----------------------------------------------------------------------------


def _numbers(args: Sequence[Value]) -> list[int | float]:
    if not args:
        raise IncorrectArgumentCount(1, 0)
    return [expect_type(args, i, NumberValue, "number").value for i in range(len(args))]


def _pick(values: list[int | float], better) -> int | float:
    """Fold ``values`` with ``better``; NaN loses to any other number."""
    result = values[0]
    for value in values[1:]:
        if isinstance(result, float) and math.isnan(result):
            result = value
        elif isinstance(value, float) and math.isnan(value):
            continue
        elif better(value, result):
            result = value
    return result


def _min(args: Sequence[Value]) -> Value:
    return NumberValue(_pick(_numbers(args), lambda a, b: a < b))


def _max(args: Sequence[Value]) -> Value:
    return NumberValue(_pick(_numbers(args), lambda a, b: a > b))


def _register_number_functions(registry: FunctionRegistry) -> None:
    registry.register(
        FunctionDefinition(
            name="min",
            description="Returns the smallest of the given numbers",
            category=FunctionCategory.NUMBER,
            parameters=[FunctionParameter("values", "number", "Numbers", variadic=True)],
            return_type="number",
            examples=["min(estimate, 10)"],
            implementation=_min,
        )
    )

    registry.register(
        FunctionDefinition(
            name="max",
            description="Returns the largest of the given numbers",
            category=FunctionCategory.NUMBER,
            parameters=[FunctionParameter("values", "number", "Numbers", variadic=True)],
            return_type="number",
            examples=["max(priority, 1)"],
            implementation=_max,
        )
    )
