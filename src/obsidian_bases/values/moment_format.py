"""Moment.js style date format strings.

Obsidian users write date formats the moment.js way (``YYYY-MM-DD``). This
module tokenizes such patterns, translates them to strftime-like codes
(``%Y-%m-%d``) and renders datetimes directly from the tokens, since Python's
``strftime`` lacks several of the codes (``%-d``, ``%3f``, ``%P``).

Text inside square brackets is copied verbatim: ``[Week] ww``.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class MomentTokenKind(Enum):
    LITERAL = "literal"
    YEAR_FOUR = "YYYY"
    YEAR_TWO = "YY"
    MONTH_FULL = "MMMM"
    MONTH_ABBREV = "MMM"
    MONTH_PADDED = "MM"
    MONTH_UNPADDED = "M"
    DAY_OF_YEAR = "DDD"
    DAY_PADDED = "DD"
    DAY_UNPADDED = "D"
    WEEKDAY_FULL = "dddd"
    WEEKDAY_ABBREV = "ddd"
    WEEKDAY_MIN = "dd"
    WEEKDAY_NUM = "d"
    HOUR24_PADDED = "HH"
    HOUR24_UNPADDED = "H"
    HOUR12_PADDED = "hh"
    HOUR12_UNPADDED = "h"
    MILLISECONDS = "SSS"
    SECOND_PADDED = "ss"
    SECOND_UNPADDED = "s"
    MINUTE_PADDED = "mm"
    MINUTE_UNPADDED = "m"
    AM_PM_UPPER = "A"
    AM_PM_LOWER = "a"
    TIMEZONE_NO_COLON = "ZZ"
    TIMEZONE_COLON = "Z"
    UNIX_SECONDS = "X"
    WEEK_OF_YEAR = "ww"
    QUARTER = "Q"


@dataclass(frozen=True)
class MomentToken:
    kind: MomentTokenKind
    text: str = ""


# Tried in order; within a leading letter the longer pattern comes first.
_PATTERNS: list[tuple[str, MomentTokenKind]] = [
    ("YYYY", MomentTokenKind.YEAR_FOUR),
    ("YY", MomentTokenKind.YEAR_TWO),
    ("MMMM", MomentTokenKind.MONTH_FULL),
    ("MMM", MomentTokenKind.MONTH_ABBREV),
    ("MM", MomentTokenKind.MONTH_PADDED),
    ("M", MomentTokenKind.MONTH_UNPADDED),
    ("DDDD", MomentTokenKind.DAY_OF_YEAR),
    ("DDD", MomentTokenKind.DAY_OF_YEAR),
    ("DD", MomentTokenKind.DAY_PADDED),
    ("D", MomentTokenKind.DAY_UNPADDED),
    ("dddd", MomentTokenKind.WEEKDAY_FULL),
    ("ddd", MomentTokenKind.WEEKDAY_ABBREV),
    ("dd", MomentTokenKind.WEEKDAY_MIN),
    ("d", MomentTokenKind.WEEKDAY_NUM),
    ("HH", MomentTokenKind.HOUR24_PADDED),
    ("H", MomentTokenKind.HOUR24_UNPADDED),
    ("hh", MomentTokenKind.HOUR12_PADDED),
    ("h", MomentTokenKind.HOUR12_UNPADDED),
    ("SSS", MomentTokenKind.MILLISECONDS),
    ("ss", MomentTokenKind.SECOND_PADDED),
    ("s", MomentTokenKind.SECOND_UNPADDED),
    ("mm", MomentTokenKind.MINUTE_PADDED),
    ("m", MomentTokenKind.MINUTE_UNPADDED),
    ("A", MomentTokenKind.AM_PM_UPPER),
    ("a", MomentTokenKind.AM_PM_LOWER),
    ("ZZ", MomentTokenKind.TIMEZONE_NO_COLON),
    ("Z", MomentTokenKind.TIMEZONE_COLON),
    ("X", MomentTokenKind.UNIX_SECONDS),
    ("ww", MomentTokenKind.WEEK_OF_YEAR),
    ("WW", MomentTokenKind.WEEK_OF_YEAR),
    ("Q", MomentTokenKind.QUARTER),
]

_CHRONO: dict[MomentTokenKind, str] = {
    MomentTokenKind.YEAR_FOUR: "%Y",
    MomentTokenKind.YEAR_TWO: "%y",
    MomentTokenKind.MONTH_FULL: "%B",
    MomentTokenKind.MONTH_ABBREV: "%b",
    MomentTokenKind.MONTH_PADDED: "%m",
    MomentTokenKind.MONTH_UNPADDED: "%-m",
    MomentTokenKind.DAY_OF_YEAR: "%j",
    MomentTokenKind.DAY_PADDED: "%d",
    MomentTokenKind.DAY_UNPADDED: "%-d",
    MomentTokenKind.WEEKDAY_FULL: "%A",
    MomentTokenKind.WEEKDAY_ABBREV: "%a",
    MomentTokenKind.WEEKDAY_MIN: "%a",
    MomentTokenKind.WEEKDAY_NUM: "%w",
    MomentTokenKind.HOUR24_PADDED: "%H",
    MomentTokenKind.HOUR24_UNPADDED: "%-H",
    MomentTokenKind.HOUR12_PADDED: "%I",
    MomentTokenKind.HOUR12_UNPADDED: "%-I",
    MomentTokenKind.MILLISECONDS: "%3f",
    MomentTokenKind.SECOND_PADDED: "%S",
    MomentTokenKind.SECOND_UNPADDED: "%-S",
    MomentTokenKind.MINUTE_PADDED: "%M",
    MomentTokenKind.MINUTE_UNPADDED: "%-M",
    MomentTokenKind.AM_PM_UPPER: "%p",
    MomentTokenKind.AM_PM_LOWER: "%P",
    MomentTokenKind.TIMEZONE_NO_COLON: "%z",
    MomentTokenKind.TIMEZONE_COLON: "%:z",
    MomentTokenKind.UNIX_SECONDS: "%s",
    MomentTokenKind.WEEK_OF_YEAR: "%W",
    MomentTokenKind.QUARTER: "Q",
}

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def parse_moment_format(pattern: str) -> list[MomentToken]:
    """Split a moment.js pattern into tokens.

    Unknown characters and bracketed text become LITERAL tokens, so every
    pattern tokenizes.
    """
    tokens: list[MomentToken] = []
    pos = 0
    while pos < len(pattern):
        for text, kind in _PATTERNS:
            if pattern.startswith(text, pos):
                tokens.append(MomentToken(kind))
                pos += len(text)
                break
        else:
            if pattern[pos] == "[":
                close = pattern.find("]", pos + 1)
                if close > pos + 1:
                    tokens.append(MomentToken(MomentTokenKind.LITERAL, pattern[pos + 1 : close]))
                    pos = close + 1
                    continue
            tokens.append(MomentToken(MomentTokenKind.LITERAL, pattern[pos]))
            pos += 1
    return tokens


def to_chrono_format(pattern: str) -> str:
    """Translate a moment.js pattern into strftime-style codes.

    Example:
        to_chrono_format("MMMM D, YYYY")  # "%B %-d, %Y"
    """
    parts = []
    for token in parse_moment_format(pattern):
        if token.kind is MomentTokenKind.LITERAL:
            parts.append(token.text.replace("%", "%%"))
        else:
            parts.append(_CHRONO[token.kind])
    return "".join(parts)


def format_datetime(value: datetime, pattern: str) -> str:
    """Render ``value`` with a moment.js pattern. Names are always English."""
    return "".join(_render(token, value) for token in parse_moment_format(pattern))


def _render(token: MomentToken, value: datetime) -> str:
    kind = token.kind
    if kind is MomentTokenKind.LITERAL:
        return token.text
    if kind is MomentTokenKind.YEAR_FOUR:
        return f"{value.year:04d}"
    if kind is MomentTokenKind.YEAR_TWO:
        return f"{value.year % 100:02d}"
    if kind is MomentTokenKind.MONTH_FULL:
        return MONTH_NAMES[value.month - 1]
    if kind is MomentTokenKind.MONTH_ABBREV:
        return MONTH_NAMES[value.month - 1][:3]
    if kind is MomentTokenKind.MONTH_PADDED:
        return f"{value.month:02d}"
    if kind is MomentTokenKind.MONTH_UNPADDED:
        return str(value.month)
    if kind is MomentTokenKind.DAY_OF_YEAR:
        return f"{value.timetuple().tm_yday:03d}"
    if kind is MomentTokenKind.DAY_PADDED:
        return f"{value.day:02d}"
    if kind is MomentTokenKind.DAY_UNPADDED:
        return str(value.day)
    if kind is MomentTokenKind.WEEKDAY_FULL:
        return WEEKDAY_NAMES[value.weekday()]
    if kind in (MomentTokenKind.WEEKDAY_ABBREV, MomentTokenKind.WEEKDAY_MIN):
        return WEEKDAY_NAMES[value.weekday()][:3]
    if kind is MomentTokenKind.WEEKDAY_NUM:
        return str((value.weekday() + 1) % 7)
    if kind is MomentTokenKind.HOUR24_PADDED:
        return f"{value.hour:02d}"
    if kind is MomentTokenKind.HOUR24_UNPADDED:
        return str(value.hour)
    if kind is MomentTokenKind.HOUR12_PADDED:
        return f"{value.hour % 12 or 12:02d}"
    if kind is MomentTokenKind.HOUR12_UNPADDED:
        return str(value.hour % 12 or 12)
    if kind is MomentTokenKind.MILLISECONDS:
        return f"{value.microsecond // 1000:03d}"
    if kind is MomentTokenKind.SECOND_PADDED:
        return f"{value.second:02d}"
    if kind is MomentTokenKind.SECOND_UNPADDED:
        return str(value.second)
    if kind is MomentTokenKind.MINUTE_PADDED:
        return f"{value.minute:02d}"
    if kind is MomentTokenKind.MINUTE_UNPADDED:
        return str(value.minute)
    if kind is MomentTokenKind.AM_PM_UPPER:
        return "AM" if value.hour < 12 else "PM"
    if kind is MomentTokenKind.AM_PM_LOWER:
        return "am" if value.hour < 12 else "pm"
    if kind is MomentTokenKind.TIMEZONE_NO_COLON:
        return value.strftime("%z")
    if kind is MomentTokenKind.TIMEZONE_COLON:
        offset = value.strftime("%z")
        return f"{offset[:3]}:{offset[3:5]}" if offset else ""
    if kind is MomentTokenKind.UNIX_SECONDS:
        return str(calendar.timegm(value.utctimetuple()))
    if kind is MomentTokenKind.WEEK_OF_YEAR:
        yday = value.timetuple().tm_yday - 1
        return f"{(yday + 7 - value.weekday()) // 7:02d}"
    # Quarter has no rendering; it stays a literal Q.
    return "Q"
