"""
Runtime value model for Bases expressions.

Importing this package registers the per-type methods and fields
(string, number, list, datetime, file) on the value classes.

Usage:
    from obsidian_bases.values import StringValue

    StringValue("hello").call("upper", [])  # StringValue("HELLO")
"""

from obsidian_bases.values.core import (
    FALSE,
    I64_MAX,
    I64_MIN,
    NULL,
    TRUE,
    BooleanValue,
    DateValue,
    DurationValue,
    LinkValue,
    ListValue,
    NullValue,
    NumberValue,
    ObjectValue,
    StringValue,
    Value,
    format_duration,
    format_number,
    sort_compare,
    to_value,
)
from obsidian_bases.values import number, string, date  # noqa: F401  (method registration)
from obsidian_bases.values.list import slice_bounds
from obsidian_bases.values.file import FileMetadata, FileValue, Frontmatter
from obsidian_bases.values.moment_format import (
    MomentToken,
    MomentTokenKind,
    format_datetime,
    parse_moment_format,
    to_chrono_format,
)

__all__ = [
    # Values
    "Value",
    "NullValue",
    "StringValue",
    "NumberValue",
    "BooleanValue",
    "DateValue",
    "DurationValue",
    "ListValue",
    "ObjectValue",
    "FileValue",
    "LinkValue",
    "NULL",
    "TRUE",
    "FALSE",
    "I64_MAX",
    "I64_MIN",
    # Files
    "FileMetadata",
    "Frontmatter",
    # Helpers
    "to_value",
    "sort_compare",
    "format_number",
    "format_duration",
    "slice_bounds",
    # Moment formats
    "MomentToken",
    "MomentTokenKind",
    "parse_moment_format",
    "to_chrono_format",
    "format_datetime",
]
