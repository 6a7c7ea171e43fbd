"""Runtime values produced by evaluating Bases expressions.

Every variant is a frozen dataclass, so values are shared rather than copied
while an expression is evaluated. Each variant class owns a method registry
and a field table; ``value.call(name, args)`` and ``value.field(name)``
dispatch through them. The registries are filled in by the per-type modules
(``string``, ``number``, ``list``, ``date``, ``file``) when the package is
imported.

Numbers keep Python ``int`` or ``float`` internally but present as a single
``number`` type. Integer arithmetic widens to float once a result leaves the
signed 64-bit range.
"""

from __future__ import annotations

import math
import operator
import sys
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, ClassVar, Sequence

from obsidian_bases.errors import (
    InvalidComparison,
    InvalidOperation,
    InvalidUnary,
    ValueOperationError,
)
from obsidian_bases.functions import (
    FunctionCategory,
    FunctionDefinition,
    FunctionRegistry,
    expect_count,
)

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1

FieldGetter = Callable[[Any], "Value"]

# Methods every value understands (toString, isTruthy).
COMMON_METHODS = FunctionRegistry("value")


class Value:
    """Base class of the runtime value union."""

    type_name: ClassVar[str] = "value"
    methods: ClassVar[FunctionRegistry] = COMMON_METHODS
    fields: ClassVar[dict[str, FieldGetter]] = {}

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def call(self, name: str, args: Sequence[Value]) -> Value:
        """Invoke the method ``name`` on this value."""
        return self.methods.call(name, args, receiver=self)

    def field(self, name: str) -> Value | None:
        """Return the field ``name``, or None if this type has no such field."""
        getter = self.fields.get(name)
        if getter is None:
            return None
        return getter(self)

    def has_method(self, name: str) -> bool:
        return self.methods.is_registered(name)

    # -------------------------------------------------------------------------
    # Per-variant behavior (overridden by subclasses)
    # -------------------------------------------------------------------------

    def is_truthy(self) -> bool:
        return True

    def is_empty(self) -> bool:
        return False

    def display(self) -> str:
        raise NotImplementedError

    def to_python(self) -> Any:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.display()

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def compare(self, other: Value) -> int:
        """Order two values of the same kind, returning -1, 0 or 1."""
        if isinstance(self, NullValue) and isinstance(other, NullValue):
            return 0
        if isinstance(self, NumberValue) and isinstance(other, NumberValue):
            if math.isnan(self.value) or math.isnan(other.value):
                raise InvalidComparison(self.type_name, other.type_name)
            return _cmp(self.value, other.value)
        for cls in (StringValue, BooleanValue, DateValue, DurationValue):
            if isinstance(self, cls) and isinstance(other, cls):
                return _cmp(self.value, other.value)
        raise InvalidOperation("compare", self.type_name, other.type_name)

    def equals(self, other: Value) -> bool:
        """Structural equality. NaN is equal to NaN."""
        if isinstance(self, NumberValue) and isinstance(other, NumberValue):
            if math.isnan(self.value) and math.isnan(other.value):
                return True
            return self.value == other.value
        if isinstance(self, ListValue) and isinstance(other, ListValue):
            return len(self.items) == len(other.items) and all(
                a.equals(b) for a, b in zip(self.items, other.items)
            )
        if isinstance(self, ObjectValue) and isinstance(other, ObjectValue):
            if len(self.entries) != len(other.entries):
                return False
            return all(
                key in other.entries and value.equals(other.entries[key])
                for key, value in self.entries.items()
            )
        return self == other

    def add(self, other: Value) -> Value:
        if isinstance(self, StringValue) and isinstance(other, StringValue):
            return StringValue(self.value + other.value)
        if isinstance(self, DateValue) and isinstance(other, DurationValue):
            return DateValue(_shift(self.value, other.value))
        if isinstance(self, DurationValue) and isinstance(other, DateValue):
            return DateValue(_shift(other.value, self.value))
        if isinstance(self, DurationValue) and isinstance(other, DurationValue):
            return DurationValue(self.value + other.value)
        return self._arithmetic("add", operator.add, other)

    def sub(self, other: Value) -> Value:
        if isinstance(self, DateValue) and isinstance(other, DurationValue):
            return DateValue(_shift(self.value, -other.value))
        if isinstance(self, DateValue) and isinstance(other, DateValue):
            return DurationValue(self.value - other.value)
        if isinstance(self, DurationValue) and isinstance(other, DurationValue):
            return DurationValue(self.value - other.value)
        return self._arithmetic("sub", operator.sub, other)

    def mul(self, other: Value) -> Value:
        return self._arithmetic("mul", operator.mul, other)

    def div(self, other: Value) -> Value:
        left, right = self._numeric_pair("div", other)
        if right == 0:
            raise InvalidOperation("div", self.type_name, other.type_name)
        if isinstance(left, int) and isinstance(right, int):
            if left % right == 0:
                return NumberValue(_widen(left // right, float(left) / float(right)))
            return NumberValue(left / right)
        return NumberValue(float(left) / float(right))

    def rem(self, other: Value) -> Value:
        left, right = self._numeric_pair("mod", other)
        if right == 0:
            raise InvalidOperation("mod", self.type_name, other.type_name)
        if isinstance(left, int) and isinstance(right, int):
            remainder = abs(left) % abs(right)
            return NumberValue(-remainder if left < 0 else remainder)
        if math.isinf(left) or math.isnan(left) or math.isnan(right):
            return NumberValue(math.nan)
        return NumberValue(math.fmod(left, right))

    def negate(self) -> Value:
        if isinstance(self, NumberValue):
            if isinstance(self.value, int):
                return NumberValue(_widen(-self.value, -float(self.value)))
            return NumberValue(-self.value)
        if isinstance(self, DurationValue):
            return DurationValue(-self.value)
        raise InvalidUnary("neg", self.type_name)

    def logical_not(self) -> Value:
        if isinstance(self, BooleanValue):
            return BooleanValue(not self.value)
        return BooleanValue(not self.is_truthy())

    def length(self) -> int:
        if isinstance(self, StringValue):
            return len(self.value)
        if isinstance(self, ListValue):
            return len(self.items)
        if isinstance(self, ObjectValue):
            return len(self.entries)
        raise InvalidUnary("len", self.type_name)

    def contains(self, needle: Value) -> bool:
        if isinstance(self, ListValue):
            return any(item.equals(needle) for item in self.items)
        if isinstance(self, StringValue):
            return isinstance(needle, StringValue) and needle.value in self.value
        raise InvalidOperation("contains", self.type_name, needle.type_name)

    def _numeric_pair(self, op: str, other: Value) -> tuple[int | float, int | float]:
        if isinstance(self, NumberValue) and isinstance(other, NumberValue):
            return self.value, other.value
        raise InvalidOperation(op, self.type_name, other.type_name)

    def _arithmetic(
        self, op: str, fn: Callable[[Any, Any], Any], other: Value
    ) -> NumberValue:
        left, right = self._numeric_pair(op, other)
        if isinstance(left, int) and isinstance(right, int):
            return NumberValue(_widen(fn(left, right), fn(float(left), float(right))))
        return NumberValue(fn(float(left), float(right)))


# =============================================================================
# Variants
# =============================================================================


@dataclass(frozen=True)
class NullValue(Value):
    """The absence of a value."""

    type_name = "null"
    methods = FunctionRegistry("null", parent=COMMON_METHODS)
    fields = {}

    def is_truthy(self) -> bool:
        return False

    def is_empty(self) -> bool:
        return True

    def display(self) -> str:
        return "null"

    def to_python(self) -> None:
        return None


@dataclass(frozen=True)
class BooleanValue(Value):
    value: bool

    type_name = "boolean"
    methods = FunctionRegistry("boolean", parent=COMMON_METHODS)
    fields = {}

    def is_truthy(self) -> bool:
        return self.value

    def display(self) -> str:
        return "true" if self.value else "false"

    def to_python(self) -> bool:
        return self.value


@dataclass(frozen=True)
class NumberValue(Value):
    value: int | float

    type_name = "number"
    methods = FunctionRegistry("number", parent=COMMON_METHODS)
    fields = {}

    def is_truthy(self) -> bool:
        return not math.isnan(self.value) and self.value != 0

    def is_empty(self) -> bool:
        return math.isnan(self.value) or abs(self.value) <= sys.float_info.epsilon

    def display(self) -> str:
        return format_number(self.value)

    def to_python(self) -> int | float:
        return self.value


@dataclass(frozen=True)
class StringValue(Value):
    value: str

    type_name = "string"
    methods = FunctionRegistry("string", parent=COMMON_METHODS)
    fields = {}

    def is_truthy(self) -> bool:
        return self.value != ""

    def is_empty(self) -> bool:
        return self.value == ""

    def display(self) -> str:
        return self.value

    def to_python(self) -> str:
        return self.value


@dataclass(frozen=True)
class DateValue(Value):
    """A naive (local) date and time."""

    value: datetime

    type_name = "datetime"
    methods = FunctionRegistry("datetime", parent=COMMON_METHODS)
    fields = {}

    def display(self) -> str:
        return self.value.isoformat(sep=" ")

    def to_python(self) -> datetime:
        return self.value


@dataclass(frozen=True)
class DurationValue(Value):
    value: timedelta

    type_name = "duration"
    methods = FunctionRegistry("duration", parent=COMMON_METHODS)
    fields = {}

    def is_truthy(self) -> bool:
        return bool(self.value)

    def is_empty(self) -> bool:
        return not self.value

    def display(self) -> str:
        return format_duration(self.value)

    def to_python(self) -> timedelta:
        return self.value


@dataclass(frozen=True)
class ListValue(Value):
    items: tuple[Value, ...] = ()

    type_name = "list"
    methods = FunctionRegistry("list", parent=COMMON_METHODS)
    fields = {}

    def __post_init__(self):
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def is_truthy(self) -> bool:
        return len(self.items) > 0

    def is_empty(self) -> bool:
        return len(self.items) == 0

    def display(self) -> str:
        return "[" + ", ".join(item.display() for item in self.items) + "]"

    def to_python(self) -> list[Any]:
        return [item.to_python() for item in self.items]


@dataclass(frozen=True)
class ObjectValue(Value):
    """String-keyed map of values (e.g., nested frontmatter)."""

    entries: dict[str, Value]

    type_name = "object"
    methods = FunctionRegistry("object", parent=COMMON_METHODS)
    fields = {}

    def field(self, name: str) -> Value | None:
        return self.entries.get(name)

    def is_truthy(self) -> bool:
        return len(self.entries) > 0

    def is_empty(self) -> bool:
        return len(self.entries) == 0

    def display(self) -> str:
        rendered = sorted(f"{key}: {value.display()}" for key, value in self.entries.items())
        return "{" + ", ".join(rendered) + "}"

    def to_python(self) -> dict[str, Any]:
        return {key: value.to_python() for key, value in self.entries.items()}


@dataclass(frozen=True)
class LinkValue(Value):
    """A link to a note or file, with optional display text."""

    target: str
    display_text: str | None = None

    type_name = "link"
    methods = FunctionRegistry("link", parent=COMMON_METHODS)
    fields = {}

    def display(self) -> str:
        if self.display_text is None:
            return self.target
        return f"{self.target}|{self.display_text}"

    def to_python(self) -> str:
        return self.display()


NULL = NullValue()
TRUE = BooleanValue(True)
FALSE = BooleanValue(False)


# =============================================================================
# Helpers
# =============================================================================


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _widen(result: int, fallback: float) -> int | float:
    """Keep an integer result if it fits in 64 bits, else use the float one."""
    if I64_MIN <= result <= I64_MAX:
        return result
    return fallback


def _shift(value: datetime, delta: timedelta) -> datetime:
    try:
        return value + delta
    except OverflowError:
        raise ValueOperationError("resulting date is out of range") from None


def sort_compare(a: Value, b: Value) -> int:
    """Total ordering used for sorting mixed lists.

    Falls back to ordering by type name, then display string, when the two
    values cannot be compared directly.
    """
    try:
        return a.compare(b)
    except ValueOperationError:
        by_type = _cmp(a.type_name, b.type_name)
        if by_type != 0:
            return by_type
        return _cmp(a.display(), b.display())


def format_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_duration(value: timedelta) -> str:
    """ISO-8601 style rendering, e.g. ``P1DT2H30M``."""
    micros = value // timedelta(microseconds=1)
    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    days, micros = divmod(micros, 86_400_000_000)
    hours, micros = divmod(micros, 3_600_000_000)
    minutes, micros = divmod(micros, 60_000_000)
    seconds, micros = divmod(micros, 1_000_000)

    rendered = "P"
    if days:
        rendered += f"{days}D"
    clock = ""
    if hours:
        clock += f"{hours}H"
    if minutes:
        clock += f"{minutes}M"
    if seconds or micros:
        fraction = f".{micros:06d}".rstrip("0") if micros else ""
        clock += f"{seconds}{fraction}S"
    if clock:
        rendered += "T" + clock
    if rendered == "P":
        rendered = "PT0S"
    return sign + rendered


def to_value(obj: Any) -> Value:
    """Convert a plain Python object (e.g., parsed YAML) into a Value."""
    if obj is None:
        return NULL
    if isinstance(obj, Value):
        return obj
    if isinstance(obj, bool):
        return BooleanValue(obj)
    if isinstance(obj, (int, float)):
        return NumberValue(obj)
    if isinstance(obj, str):
        return StringValue(obj)
    if isinstance(obj, datetime):
        if obj.tzinfo is not None:
            obj = obj.astimezone().replace(tzinfo=None)
        return DateValue(obj)
    if isinstance(obj, date):
        return DateValue(datetime.combine(obj, time()))
    if isinstance(obj, timedelta):
        return DurationValue(obj)
    if isinstance(obj, dict):
        return ObjectValue({str(key): to_value(value) for key, value in obj.items()})
    if isinstance(obj, (list, tuple, set, frozenset)):
        return ListValue(tuple(to_value(item) for item in obj))
    return StringValue(str(obj))


# =============================================================================
# Methods shared by every value
# =============================================================================


def _to_string(this: Value, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return StringValue(this.display())


def _is_truthy(this: Value, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return BooleanValue(this.is_truthy())


COMMON_METHODS.register(
    FunctionDefinition(
        name="toString",
        description="Returns the display form of the value",
        category=FunctionCategory.CONVERSION,
        parameters=[],
        return_type="string",
        examples=["price.toString()"],
        implementation=_to_string,
    )
)

COMMON_METHODS.register(
    FunctionDefinition(
        name="isTruthy",
        description="Returns the truthiness of the value as a boolean",
        category=FunctionCategory.LOGIC,
        parameters=[],
        return_type="boolean",
        implementation=_is_truthy,
    )
)
