"""
Exceptions raised while parsing, preparing, and evaluating Bases expressions.

Hierarchy:
- BasesError
  - ParseError (LexerError)
  - FunctionError (IncorrectArgumentCount, IncorrectArgumentType, DoesNotExist, CallError)
  - ValueOperationError (ValueTypeError -> InvalidOperation / InvalidUnary,
    InvalidConversion, InvalidComparison)
  - SchemaError
  - PrepareError
"""

from enum import Enum


class BasesError(Exception):
    """Base exception for all Bases errors."""

    pass


# =============================================================================
# Parsing
# =============================================================================


class ErrorKind(Enum):
    """Failure categories reported by the parser."""

    DIGIT = "expected a number"
    IDENTIFIER = "expected an identifier or keyword"
    TOKEN = "unexpected token"
    CHARACTER = "unexpected character"
    EOF = "unexpected end of input"
    TRAILING = "unexpected content after expression"
    DEPTH = "expression nested too deeply"
    GENERIC = "parse error"


def byte_offset(source: str, index: int) -> int:
    """Convert a character index into a UTF-8 byte offset."""
    return len(source[:index].encode("utf-8"))


def describe_position(source: str, index: int) -> str:
    """Render a +/-10 character window around character ``index``.

    The reported position is the UTF-8 byte offset.
    """
    if index <= 0:
        return "at start of input"
    start = max(index - 10, 0)
    end = min(index + 10, len(source))
    return f"near position {byte_offset(source, index)}: '...{source[start:end]}...'"


class ParseError(BasesError):
    """Raised when an expression string cannot be parsed.

    Attributes:
        kind: Failure category
        position: UTF-8 byte offset into the source
        index: Character index into the source
        context: Human readable location, e.g. "near position 3: '...123abc...'"
        found: Offending character for CHARACTER errors
    """

    def __init__(
        self,
        kind: ErrorKind,
        index: int,
        source: str = "",
        found: str | None = None,
    ):
        self.kind = kind
        self.index = index
        self.position = byte_offset(source, index)
        self.source = source
        self.found = found
        self.context = describe_position(source, index)
        super().__init__(f"{self.message} {self.context}")

    @property
    def message(self) -> str:
        if self.kind is ErrorKind.CHARACTER and self.found:
            return f"{self.kind.value} found '{self.found}'"
        return self.kind.value


class LexerError(ParseError):
    """Raised when the source contains an invalid token."""

    pass


# =============================================================================
# Functions
# =============================================================================


class FunctionError(BasesError):
    """Base class for function registry and function call failures."""

    pass


class IncorrectArgumentCount(FunctionError):
    def __init__(self, expected: int, found: int):
        self.expected = expected
        self.found = found
        super().__init__(
            f"incorrect number of arguments, expected {expected}, got {found}"
        )


class IncorrectArgumentType(FunctionError):
    def __init__(self, index: int, found_type: str, expected_type: str):
        self.index = index
        self.found_type = found_type
        self.expected_type = expected_type
        super().__init__(
            f"incorrect argument type, argument at index {index} is type "
            f"{found_type}, expected {expected_type}"
        )


class DoesNotExist(FunctionError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"function {name} does not exist")


class CallError(FunctionError):
    """The function itself failed, as opposed to the registry rejecting the call."""

    pass


# =============================================================================
# Values
# =============================================================================


class ValueOperationError(BasesError):
    """Raised when an operation on runtime values fails."""

    pass


class ValueTypeError(ValueOperationError):
    """An operator was applied to operand types it does not support."""

    pass


class InvalidOperation(ValueTypeError):
    def __init__(self, op: str, left: str, right: str):
        self.op = op
        self.left = left
        self.right = right
        super().__init__(f"operation '{op}' is not supported for {left} and {right}")


class InvalidUnary(ValueTypeError):
    def __init__(self, op: str, operand: str):
        self.op = op
        self.operand = operand
        super().__init__(f"operation '{op}' is not supported for {operand}")


class InvalidConversion(ValueOperationError):
    def __init__(self, from_type: str, to_type: str):
        self.from_type = from_type
        self.to_type = to_type
        super().__init__(f"cannot convert {from_type} to {to_type}")


class InvalidComparison(ValueOperationError):
    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(f"cannot compare {left} with {right}")


# =============================================================================
# Documents
# =============================================================================


class SchemaError(BasesError):
    """Raised when a .base document does not match the expected structure."""

    pass


class PrepareError(BasesError):
    """Raised when a base file cannot be compiled into a PreparedBase."""

    pass
