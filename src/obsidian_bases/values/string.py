"""Methods and fields available on string values.

Lengths and slice indices count characters (code points), not bytes.
"""

from __future__ import annotations

from typing import Sequence

from obsidian_bases.functions import (
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
    expect_count,
    expect_range,
    expect_type,
)
from obsidian_bases.values.core import (
    BooleanValue,
    ListValue,
    NumberValue,
    StringValue,
    Value,
)
from obsidian_bases.values.list import slice_bounds


def _single_string(args: Sequence[Value]) -> str:
    expect_count(args, 1)
    return expect_type(args, 0, StringValue, "string").value


def _all_strings(args: Sequence[Value]) -> list[str]:
    expect_range(args, 1)
    return [expect_type(args, i, StringValue, "string").value for i in range(len(args))]


# -----------------------------------------------------------------------------
# Implementations
# -----------------------------------------------------------------------------


def _contains(this: StringValue, args: Sequence[Value]) -> Value:
    return BooleanValue(_single_string(args) in this.value)


def _starts_with(this: StringValue, args: Sequence[Value]) -> Value:
    return BooleanValue(this.value.startswith(_single_string(args)))


def _ends_with(this: StringValue, args: Sequence[Value]) -> Value:
    return BooleanValue(this.value.endswith(_single_string(args)))


def _lower(this: StringValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return StringValue(this.value.lower())


def _upper(this: StringValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return StringValue(this.value.upper())


def _trim(this: StringValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return StringValue(this.value.strip())


def _split(this: StringValue, args: Sequence[Value]) -> Value:
    separator = _single_string(args)
    if separator == "":
        parts = ["", *this.value, ""]
    else:
        parts = this.value.split(separator)
    return ListValue(tuple(StringValue(part) for part in parts))


def _slice(this: StringValue, args: Sequence[Value]) -> Value:
    start, end = slice_bounds(len(this.value), args)
    return StringValue(this.value[start:end])


def _replace(this: StringValue, args: Sequence[Value]) -> Value:
    expect_count(args, 2)
    pattern = expect_type(args, 0, StringValue, "string").value
    replacement = expect_type(args, 1, StringValue, "string").value
    return StringValue(this.value.replace(pattern, replacement))


def _is_empty(this: StringValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return BooleanValue(this.value == "")


def _contains_all(this: StringValue, args: Sequence[Value]) -> Value:
    return BooleanValue(all(needle in this.value for needle in _all_strings(args)))


def _contains_any(this: StringValue, args: Sequence[Value]) -> Value:
    return BooleanValue(any(needle in this.value for needle in _all_strings(args)))


# -----------------------------------------------------------------------------
# Registration
# -----------------------------------------------------------------------------


def _register_string_methods() -> None:
    methods = StringValue.methods
    StringValue.fields["length"] = lambda this: NumberValue(len(this.value))

    methods.register(
        FunctionDefinition(
            name="contains",
            description="Returns true if the string contains the substring",
            category=FunctionCategory.STRING,
            parameters=[FunctionParameter("value", "string", "Substring to look for")],
            return_type="boolean",
            examples=['title.contains("draft")'],
            implementation=_contains,
        )
    )

    methods.register(
        FunctionDefinition(
            name="startsWith",
            description="Returns true if the string starts with the prefix",
            category=FunctionCategory.STRING,
            parameters=[FunctionParameter("prefix", "string", "The prefix")],
            return_type="boolean",
            examples=['file.name.startsWith("2024")'],
            implementation=_starts_with,
        )
    )

    methods.register(
        FunctionDefinition(
            name="endsWith",
            description="Returns true if the string ends with the suffix",
            category=FunctionCategory.STRING,
            parameters=[FunctionParameter("suffix", "string", "The suffix")],
            return_type="boolean",
            implementation=_ends_with,
        )
    )

    methods.register(
        FunctionDefinition(
            name="lower",
            description="Converts the string to lowercase",
            category=FunctionCategory.STRING,
            parameters=[],
            return_type="string",
            implementation=_lower,
        )
    )

    methods.register(
        FunctionDefinition(
            name="upper",
            description="Converts the string to uppercase",
            category=FunctionCategory.STRING,
            parameters=[],
            return_type="string",
            implementation=_upper,
        )
    )

    methods.register(
        FunctionDefinition(
            name="trim",
            description="Removes whitespace from both ends",
            category=FunctionCategory.STRING,
            parameters=[],
            return_type="string",
            implementation=_trim,
        )
    )

    methods.register(
        FunctionDefinition(
            name="split",
            description="Splits the string on a separator",
            category=FunctionCategory.STRING,
            parameters=[FunctionParameter("separator", "string", "Separator text")],
            return_type="list",
            examples=['"a,b,c".split(",")'],
            implementation=_split,
        )
    )

    methods.register(
        FunctionDefinition(
            name="slice",
            description="Returns the characters from start up to (not including) end",
            category=FunctionCategory.STRING,
            parameters=[
                FunctionParameter("start", "number", "First index, negative counts from the end"),
                FunctionParameter("end", "number", "End index (exclusive)", required=False),
            ],
            return_type="string",
            examples=["file.name.slice(0, 4)"],
            implementation=_slice,
        )
    )

    methods.register(
        FunctionDefinition(
            name="replace",
            description="Replaces every occurrence of a substring",
            category=FunctionCategory.STRING,
            parameters=[
                FunctionParameter("pattern", "string", "Text to replace"),
                FunctionParameter("replacement", "string", "Replacement text"),
            ],
            return_type="string",
            examples=['title.replace("-", " ")'],
            implementation=_replace,
        )
    )

    methods.register(
        FunctionDefinition(
            name="isEmpty",
            description="Returns true for the empty string",
            category=FunctionCategory.STRING,
            parameters=[],
            return_type="boolean",
            implementation=_is_empty,
        )
    )

    methods.register(
        FunctionDefinition(
            name="containsAll",
            description="Returns true if the string contains every substring",
            category=FunctionCategory.STRING,
            parameters=[FunctionParameter("values", "string", "Substrings", variadic=True)],
            return_type="boolean",
            implementation=_contains_all,
        )
    )

    methods.register(
        FunctionDefinition(
            name="containsAny",
            description="Returns true if the string contains at least one substring",
            category=FunctionCategory.STRING,
            parameters=[FunctionParameter("values", "string", "Substrings", variadic=True)],
            return_type="boolean",
            implementation=_contains_any,
        )
    )


_register_string_methods()
