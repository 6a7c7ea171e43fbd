"""Function registry for the Bases expression language.

Global functions are callable from expressions (e.g., `now()`, `duration("1d")`)
and every value type keeps its own registry of methods (e.g., `"a".upper()`).
Each function is registered with metadata for documentation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Sequence

from obsidian_bases.errors import (
    CallError,
    DoesNotExist,
    FunctionError,
    IncorrectArgumentCount,
    IncorrectArgumentType,
    ValueOperationError,
)

if TYPE_CHECKING:
    from obsidian_bases.values.core import Value


class FunctionCategory(Enum):
    """Categories for organizing functions in documentation."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    COLLECTION = "collection"
    FILE = "file"
    LOGIC = "logic"
    CONVERSION = "conversion"
    GENERAL = "general"


@dataclass
class FunctionParameter:
    """Definition of a function parameter.

    Attributes:
        name: Parameter name
        type: Expected type ("string", "number", "datetime", "any", ...)
        description: Human-readable description
        required: Whether this parameter is required
        variadic: If True, this parameter accepts multiple values
    """

    name: str
    type: str
    description: str
    required: bool = True
    variadic: bool = False


@dataclass
class FunctionDefinition:
    """Complete definition of an expression function or method.

    Attributes:
        name: Function name as used in expressions
        description: Human-readable description
        category: Category for documentation organization
        parameters: List of parameter definitions
        return_type: Type of the return value
        examples: Example expressions using this function
        implementation: The Python callable. Global functions take
            ``(args)``, methods take ``(receiver, args)``.
    """

    name: str
    description: str
    category: FunctionCategory
    parameters: list[FunctionParameter]
    return_type: str
    examples: list[str] = field(default_factory=list)
    implementation: Callable[..., Any] | None = None

    def signature(self) -> str:
        """Render a short call signature, e.g. ``slice(start, end?)``."""
        rendered = []
        for p in self.parameters:
            name = f"...{p.name}" if p.variadic else p.name
            rendered.append(name if p.required else f"{name}?")
        return f"{self.name}({', '.join(rendered)})"

    def to_dict(self) -> dict[str, Any]:
        """Export for documentation output."""
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "parameters": [
                {
                    "name": p.name,
                    "type": p.type,
                    "description": p.description,
                    "required": p.required,
                    "variadic": p.variadic,
                }
                for p in self.parameters
            ],
            "returnType": self.return_type,
            "examples": self.examples,
        }


class FunctionRegistry:
    """Name -> function mapping.

    A registry may have a parent; lookups that miss fall through to it. Value
    types use this to share common methods such as ``toString``.

    Example:
        registry = FunctionRegistry.global_functions()
        registry.call("max", [NumberValue(1), NumberValue(3)])  # NumberValue(3)
    """

    _global: FunctionRegistry | None = None

    def __init__(self, name: str = "global", parent: FunctionRegistry | None = None):
        self.name = name
        self.parent = parent
        self._functions: dict[str, FunctionDefinition] = {}

    @classmethod
    def global_functions(cls) -> FunctionRegistry:
        """Return the shared registry with every built-in global function."""
        if cls._global is None:
            from obsidian_bases.builtins import register_all_builtins

            registry = cls("global")
            register_all_builtins(registry)
            cls._global = registry
        return cls._global

    def register(self, func_def: FunctionDefinition) -> None:
        """Register a function definition."""
        self._functions[func_def.name] = func_def

    def get(self, name: str) -> FunctionDefinition:
        """Get a function definition by name.

        Raises:
            DoesNotExist: If no registry in the chain knows the name
        """
        if name in self._functions:
            return self._functions[name]
        if self.parent is not None:
            return self.parent.get(name)
        raise DoesNotExist(name)

    def is_registered(self, name: str) -> bool:
        """Check if a function is registered here or in a parent."""
        if name in self._functions:
            return True
        return self.parent is not None and self.parent.is_registered(name)

    def call(
        self,
        name: str,
        args: Sequence[Value],
        receiver: Value | None = None,
    ) -> Value:
        """Call a registered function.

        Args:
            name: Function name
            args: Evaluated arguments
            receiver: The value a method is invoked on, None for global functions

        Raises:
            DoesNotExist: If the function is not registered
            FunctionError: If the arguments are rejected or the call fails
        """
        func_def = self.get(name)
        if func_def.implementation is None:
            raise CallError(f"function {name} has no implementation")
        try:
            if receiver is None:
                return func_def.implementation(list(args))
            return func_def.implementation(receiver, list(args))
        except FunctionError:
            raise
        except ValueOperationError as e:
            raise CallError(f"{name}: {e}") from e

    def list_by_category(self, category: FunctionCategory) -> list[FunctionDefinition]:
        """List functions in a specific category."""
        return [f for f in self._functions.values() if f.category == category]

    def export_documentation(self) -> dict[str, Any]:
        """Export the registry grouped by category."""
        by_category: dict[str, list[dict[str, Any]]] = {}
        for func_def in self._functions.values():
            by_category.setdefault(func_def.category.value, []).append(func_def.to_dict())

        return {
            "registry": self.name,
            "functions": {name: f.to_dict() for name, f in self._functions.items()},
            "byCategory": by_category,
        }

    def __contains__(self, name: str) -> bool:
        return self.is_registered(name)

    def __len__(self) -> int:
        return len(self._functions)


# -----------------------------------------------------------------------------
# Argument helpers shared by global functions and value methods
# -----------------------------------------------------------------------------


def expect_count(args: Sequence[Value], expected: int) -> None:
    """Require exactly ``expected`` arguments."""
    if len(args) != expected:
        raise IncorrectArgumentCount(expected, len(args))


def expect_range(args: Sequence[Value], minimum: int, maximum: int | None = None) -> None:
    """Require between ``minimum`` and ``maximum`` arguments (inclusive)."""
    if len(args) < minimum:
        raise IncorrectArgumentCount(minimum, len(args))
    if maximum is not None and len(args) > maximum:
        raise IncorrectArgumentCount(maximum, len(args))


def expect_type(args: Sequence[Value], index: int, cls: type, expected_type: str) -> Any:
    """Return ``args[index]`` if it is an instance of ``cls``."""
    arg = args[index]
    if not isinstance(arg, cls):
        raise IncorrectArgumentType(index, arg.type_name, expected_type)
    return arg
