"""Methods available on number values.

- toFixed(precision): fixed-point string
- round(digits?): half away from zero, negative digits round to tens, hundreds...
- abs, ceil, floor
- isEmpty: zero (within epsilon) or NaN
"""

from __future__ import annotations

import math
import sys
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from obsidian_bases.errors import IncorrectArgumentCount
from obsidian_bases.functions import (
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
    expect_count,
    expect_type,
)
from obsidian_bases.values.core import (
    I64_MAX,
    I64_MIN,
    BooleanValue,
    NumberValue,
    StringValue,
    Value,
)

# Precision cap for toFixed; Python formats arbitrarily long fractions.
MAX_FIXED_PRECISION = 100


def as_int(value: int | float) -> int:
    """Truncate toward zero, saturating at the 64-bit bounds. NaN becomes 0."""
    if isinstance(value, int):
        return max(I64_MIN, min(I64_MAX, value))
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return I64_MAX if value > 0 else I64_MIN
    return max(I64_MIN, min(I64_MAX, int(value)))


def _integral(value: float) -> int | float:
    """Return an int for an integral float that fits 64 bits."""
    if math.isfinite(value) and value.is_integer() and I64_MIN <= value <= I64_MAX:
        return int(value)
    return value


def _half_away_from_zero(value: float) -> float:
    # Floats at or above 2**52 have no fractional part.
    if not math.isfinite(value) or abs(value) >= 2.0**52:
        return value
    return float(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


# -----------------------------------------------------------------------------
# Implementations
# -----------------------------------------------------------------------------


def _to_fixed(this: NumberValue, args: Sequence[Value]) -> Value:
    expect_count(args, 1)
    precision = expect_type(args, 0, NumberValue, "number").value
    precision = max(0, min(as_int(precision), MAX_FIXED_PRECISION))
    if isinstance(this.value, float) and math.isnan(this.value):
        return StringValue("NaN")
    return StringValue(f"{this.value:.{precision}f}")


def _round(this: NumberValue, args: Sequence[Value]) -> Value:
    digits = None
    if args:
        digits = as_int(expect_type(args, 0, NumberValue, "number").value)
    if len(args) > 1:
        raise IncorrectArgumentCount(1, len(args))

    value = this.value
    if isinstance(value, int) and (digits is None or digits >= 0):
        return this
    value = float(value)
    if digits is None or digits == 0:
        return NumberValue(_integral(_half_away_from_zero(value)))
    if digits > 0:
        multiplier = 10.0**min(digits, 308)
        return NumberValue(_half_away_from_zero(value * multiplier) / multiplier)
    multiplier = 10.0**min(-digits, 308)
    return NumberValue(_integral(_half_away_from_zero(value / multiplier) * multiplier))


def _abs(this: NumberValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    value = this.value
    if isinstance(value, int):
        result = abs(value)
        return NumberValue(result if result <= I64_MAX else float(result))
    return NumberValue(abs(value))


def _ceil(this: NumberValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    if isinstance(this.value, int) or not math.isfinite(this.value):
        return this
    return NumberValue(_integral(float(math.ceil(this.value))))


def _floor(this: NumberValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    if isinstance(this.value, int) or not math.isfinite(this.value):
        return this
    return NumberValue(_integral(float(math.floor(this.value))))


def _is_empty(this: NumberValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    value = this.value
    return BooleanValue(
        abs(value) <= sys.float_info.epsilon
        or (isinstance(value, float) and math.isnan(value))
    )


# -----------------------------------------------------------------------------
# Registration
# -----------------------------------------------------------------------------


def _register_number_methods() -> None:
    methods = NumberValue.methods

    methods.register(
        FunctionDefinition(
            name="toFixed",
            description="Formats the number with a fixed number of decimals",
            category=FunctionCategory.NUMBER,
            parameters=[FunctionParameter("precision", "number", "Digits after the point")],
            return_type="string",
            examples=["price.toFixed(2)"],
            implementation=_to_fixed,
        )
    )

    methods.register(
        FunctionDefinition(
            name="round",
            description="Rounds half away from zero, optionally to a number of digits",
            category=FunctionCategory.NUMBER,
            parameters=[
                FunctionParameter(
                    "digits", "number", "Decimal places, negative for tens", required=False
                )
            ],
            return_type="number",
            examples=["score.round()", "ratio.round(2)", "(1234).round(-2)"],
            implementation=_round,
        )
    )

    methods.register(
        FunctionDefinition(
            name="abs",
            description="Returns the absolute value",
            category=FunctionCategory.NUMBER,
            parameters=[],
            return_type="number",
            examples=["(a - b).abs()"],
            implementation=_abs,
        )
    )

    methods.register(
        FunctionDefinition(
            name="ceil",
            description="Rounds up to the nearest integer",
            category=FunctionCategory.NUMBER,
            parameters=[],
            return_type="number",
            implementation=_ceil,
        )
    )

    methods.register(
        FunctionDefinition(
            name="floor",
            description="Rounds down to the nearest integer",
            category=FunctionCategory.NUMBER,
            parameters=[],
            return_type="number",
            implementation=_floor,
        )
    )

    methods.register(
        FunctionDefinition(
            name="isEmpty",
            description="Returns true for zero or NaN",
            category=FunctionCategory.NUMBER,
            parameters=[],
            return_type="boolean",
            implementation=_is_empty,
        )
    )


_register_number_methods()
