"""Methods and fields available on list values."""

from __future__ import annotations

from functools import cmp_to_key
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
    NULL,
    BooleanValue,
    ListValue,
    NumberValue,
    StringValue,
    Value,
    sort_compare,
)
from obsidian_bases.values.number import as_int


def slice_bounds(length: int, args: Sequence[Value]) -> tuple[int, int]:
    """Resolve ``slice(start, end?)`` arguments to clamped ``(start, end)``.

    Negative indices count from the end. An inverted range yields
    ``end <= start`` and therefore an empty slice.
    """
    expect_range(args, 1, 2)

    def resolve(index: int) -> int:
        raw = as_int(expect_type(args, index, NumberValue, "number").value)
        if raw < 0:
            return max(length + raw, 0)
        return min(raw, length)

    start = resolve(0)
    end = resolve(1) if len(args) > 1 else length
    return start, max(start, end)


# -----------------------------------------------------------------------------
# Implementations
# -----------------------------------------------------------------------------


def _contains(this: ListValue, args: Sequence[Value]) -> Value:
    expect_count(args, 1)
    return BooleanValue(this.contains(args[0]))


def _join(this: ListValue, args: Sequence[Value]) -> Value:
    expect_count(args, 1)
    separator = expect_type(args, 0, StringValue, "string").value
    return StringValue(separator.join(item.display() for item in this.items))


def _is_empty(this: ListValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return BooleanValue(len(this.items) == 0)


def _contains_all(this: ListValue, args: Sequence[Value]) -> Value:
    expect_range(args, 1)
    return BooleanValue(all(this.contains(arg) for arg in args))


def _contains_any(this: ListValue, args: Sequence[Value]) -> Value:
    expect_range(args, 1)
    return BooleanValue(any(this.contains(arg) for arg in args))


def _reverse(this: ListValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return ListValue(tuple(reversed(this.items)))


def _sort(this: ListValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return ListValue(tuple(sorted(this.items, key=cmp_to_key(sort_compare))))


def _flat(this: ListValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    flattened: list[Value] = []
    for item in this.items:
        if isinstance(item, ListValue):
            flattened.extend(item.items)
        else:
            flattened.append(item)
    return ListValue(tuple(flattened))


def _unique(this: ListValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    seen: list[Value] = []
    for item in this.items:
        if not any(existing.equals(item) for existing in seen):
            seen.append(item)
    return ListValue(tuple(seen))


def _slice(this: ListValue, args: Sequence[Value]) -> Value:
    start, end = slice_bounds(len(this.items), args)
    return ListValue(this.items[start:end])


def _first(this: ListValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return this.items[0] if this.items else NULL


def _last(this: ListValue, args: Sequence[Value]) -> Value:
    expect_count(args, 0)
    return this.items[-1] if this.items else NULL


# -----------------------------------------------------------------------------
# Registration
# -----------------------------------------------------------------------------


def _register_list_methods() -> None:
    methods = ListValue.methods
    ListValue.fields["length"] = lambda this: NumberValue(len(this.items))

    methods.register(
        FunctionDefinition(
            name="contains",
            description="Returns true if any element equals the value",
            category=FunctionCategory.COLLECTION,
            parameters=[FunctionParameter("value", "any", "The value to look for")],
            return_type="boolean",
            examples=['tags.contains("project")'],
            implementation=_contains,
        )
    )

    methods.register(
        FunctionDefinition(
            name="join",
            description="Joins the display form of each element with a separator",
            category=FunctionCategory.COLLECTION,
            parameters=[FunctionParameter("separator", "string", "Text between elements")],
            return_type="string",
            examples=['authors.join(", ")'],
            implementation=_join,
        )
    )

    methods.register(
        FunctionDefinition(
            name="isEmpty",
            description="Returns true if the list has no elements",
            category=FunctionCategory.COLLECTION,
            parameters=[],
            return_type="boolean",
            implementation=_is_empty,
        )
    )

    methods.register(
        FunctionDefinition(
            name="containsAll",
            description="Returns true if every argument is an element of the list",
            category=FunctionCategory.COLLECTION,
            parameters=[FunctionParameter("values", "any", "Values to look for", variadic=True)],
            return_type="boolean",
            examples=['tags.containsAll("a", "b")'],
            implementation=_contains_all,
        )
    )

    methods.register(
        FunctionDefinition(
            name="containsAny",
            description="Returns true if at least one argument is an element of the list",
            category=FunctionCategory.COLLECTION,
            parameters=[FunctionParameter("values", "any", "Values to look for", variadic=True)],
            return_type="boolean",
            examples=['tags.containsAny("a", "b")'],
            implementation=_contains_any,
        )
    )

    methods.register(
        FunctionDefinition(
            name="reverse",
            description="Returns the elements in reverse order",
            category=FunctionCategory.COLLECTION,
            parameters=[],
            return_type="list",
            implementation=_reverse,
        )
    )

    methods.register(
        FunctionDefinition(
            name="sort",
            description="Returns the elements in ascending order",
            category=FunctionCategory.COLLECTION,
            parameters=[],
            return_type="list",
            implementation=_sort,
        )
    )

    methods.register(
        FunctionDefinition(
            name="flat",
            description="Flattens nested lists by one level",
            category=FunctionCategory.COLLECTION,
            parameters=[],
            return_type="list",
            implementation=_flat,
        )
    )

    methods.register(
        FunctionDefinition(
            name="unique",
            description="Removes duplicate elements, keeping the first occurrence",
            category=FunctionCategory.COLLECTION,
            parameters=[],
            return_type="list",
            implementation=_unique,
        )
    )

    methods.register(
        FunctionDefinition(
            name="slice",
            description="Returns the elements from start up to (not including) end",
            category=FunctionCategory.COLLECTION,
            parameters=[
                FunctionParameter("start", "number", "First index, negative counts from the end"),
                FunctionParameter("end", "number", "End index (exclusive)", required=False),
            ],
            return_type="list",
            examples=["items.slice(1)", "items.slice(0, -1)"],
            implementation=_slice,
        )
    )

    methods.register(
        FunctionDefinition(
            name="first",
            description="Returns the first element, or null if the list is empty",
            category=FunctionCategory.COLLECTION,
            parameters=[],
            return_type="any",
            implementation=_first,
        )
    )

    methods.register(
        FunctionDefinition(
            name="last",
            description="Returns the last element, or null if the list is empty",
            category=FunctionCategory.COLLECTION,
            parameters=[],
            return_type="any",
            implementation=_last,
        )
    )


_register_list_methods()
