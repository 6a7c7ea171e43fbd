"""AST node types for Bases expressions.

Nodes are frozen dataclasses, so two trees compare equal when they have the
same shape and values.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PropertyNamespace(Enum):
    """Where a property reference is looked up."""

    NOTE = "note"
    FILE = "file"
    FORMULA = "formula"
    THIS = "this"


NAMESPACE_KEYWORDS = {ns.value: ns for ns in PropertyNamespace}


@dataclass(frozen=True)
class PropertyRef:
    """A dotted property reference such as ``note.status`` or ``file.name``."""

    namespace: PropertyNamespace
    path: tuple[str, ...]

    @classmethod
    def from_segments(cls, segments: list[str]) -> PropertyRef:
        """Build a reference from identifier segments.

        A single segment is always a note property, even when it spells a
        namespace keyword. Otherwise a leading namespace keyword selects the
        namespace and the rest becomes the path.
        """
        if len(segments) > 1 and segments[0] in NAMESPACE_KEYWORDS:
            return cls(NAMESPACE_KEYWORDS[segments[0]], tuple(segments[1:]))
        return cls(PropertyNamespace.NOTE, tuple(segments))

    def __str__(self) -> str:
        return ".".join([self.namespace.value, *self.path])


class BinaryOperator(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    EQ = "=="
    NE = "!="
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    AND = "&&"
    OR = "||"


class UnaryOperator(Enum):
    NOT = "!"
    NEG = "-"


# -----------------------------------------------------------------------------
# Expression nodes
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Expr:
    """Base class for expression nodes."""

    pass


@dataclass(frozen=True)
class String(Expr):
    value: str


@dataclass(frozen=True)
class Float(Expr):
    value: float


@dataclass(frozen=True)
class Integer(Expr):
    value: int


@dataclass(frozen=True)
class Boolean(Expr):
    value: bool


@dataclass(frozen=True)
class Null(Expr):
    pass


@dataclass(frozen=True)
class Property(Expr):
    """A property reference (e.g., status, file.name, formula.total)."""

    ref: PropertyRef


@dataclass(frozen=True)
class FunctionCall(Expr):
    """Global function call (e.g., now(), if(a, b, c))."""

    name: str
    args: tuple[Expr, ...] = ()


@dataclass(frozen=True)
class BinaryOp(Expr):
    op: BinaryOperator
    left: Expr
    right: Expr


@dataclass(frozen=True)
class UnaryOp(Expr):
    op: UnaryOperator
    operand: Expr


@dataclass(frozen=True)
class MemberAccess(Expr):
    """Field access on a computed value (e.g., (a + b).length)."""

    object: Expr
    member: str


@dataclass(frozen=True)
class MethodCall(Expr):
    """Method call on a value (e.g., file.name.lower())."""

    object: Expr
    method: str
    args: tuple[Expr, ...] = ()
