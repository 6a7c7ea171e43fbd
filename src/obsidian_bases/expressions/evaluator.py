"""Evaluator for Bases expressions.

Walks the AST and computes a Value against an evaluation context holding
the current file, its frontmatter properties, the base's formulas and the
embedding ("this") context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from obsidian_bases.errors import BasesError, FunctionError, ValueOperationError
from obsidian_bases.expressions.ast import (
    NAMESPACE_KEYWORDS,
    BinaryOp,
    BinaryOperator,
    Boolean,
    Expr,
    Float,
    FunctionCall,
    Integer,
    MemberAccess,
    MethodCall,
    Null,
    Property,
    PropertyNamespace,
    PropertyRef,
    String,
    UnaryOp,
    UnaryOperator,
)
from obsidian_bases.expressions.parser import parse
from obsidian_bases.functions import FunctionRegistry
from obsidian_bases.values import (
    NULL,
    BooleanValue,
    FileValue,
    NullValue,
    NumberValue,
    ObjectValue,
    StringValue,
    Value,
)

if TYPE_CHECKING:
    from obsidian_bases.schema.prepared import (
        PreparedAnd,
        PreparedExpr,
        PreparedFilter,
        PreparedNot,
        PreparedOr,
    )


# Limit on how deeply evaluation may recurse, formulas included.
MAX_EVALUATION_DEPTH = 200


class EvaluationError(BasesError):
    """Error during expression evaluation."""

    pass


@dataclass
class EvaluationContext:
    """Context for expression evaluation.

    Attributes:
        file: The file being evaluated, or None outside a vault
        note: Frontmatter properties of the file
        formulas: Parsed formulas of the base, by name
        this: Context of the file embedding the base, if any
        functions: Registry used for global function calls
    """

    file: FileValue | None = None
    note: dict[str, Value] = field(default_factory=dict)
    formulas: dict[str, Expr] = field(default_factory=dict)
    this: EvaluationContext | None = None
    functions: FunctionRegistry = field(default_factory=FunctionRegistry.global_functions)

    @classmethod
    def for_file(
        cls,
        file: FileValue,
        formulas: dict[str, Expr] | None = None,
        this: EvaluationContext | None = None,
    ) -> EvaluationContext:
        """Build a context whose note properties come from the file's frontmatter."""
        note = file.frontmatter.properties() if file.frontmatter is not None else {}
        return cls(file=file, note=note, formulas=dict(formulas or {}), this=this)


class Evaluator:
    """Evaluates expression AST against a context.

    Formula results are cached per evaluator, so one evaluator should be
    used per file.

    Usage:
        ctx = EvaluationContext(note={"status": StringValue("active")})
        evaluator = Evaluator(ctx)
        result = evaluator.evaluate(ast)
    """

    def __init__(self, context: EvaluationContext):
        self.context = context
        self._formula_cache: dict[str, Value] = {}
        self._formulas_in_progress: set[str] = set()
        self._depth = 0

    def evaluate(self, node: Expr) -> Value:
        """Evaluate an AST node and return the result.

        Raises:
            EvaluationError: If a function or operator fails; the original
                error is kept as ``__cause__``
        """
        method_name = f"_eval_{type(node).__name__.lower()}"
        method = getattr(self, method_name, None)

        if method is None:
            raise EvaluationError(f"Unknown node type: {type(node).__name__}")

        if self._depth >= MAX_EVALUATION_DEPTH:
            raise EvaluationError(
                f"Expression nested too deeply (more than {MAX_EVALUATION_DEPTH} levels)"
            )

        self._depth += 1
        try:
            return method(node)
        except (FunctionError, ValueOperationError) as e:
            raise EvaluationError(str(e)) from e
        except RecursionError as e:
            raise EvaluationError("Expression nested too deeply") from e
        finally:
            self._depth -= 1

    def evaluate_filter(self, node: PreparedFilter) -> bool:
        """Evaluate a prepared filter tree to a match decision."""
        method_name = f"_filter_{type(node).__name__.lower()}"
        method = getattr(self, method_name, None)

        if method is None:
            raise EvaluationError(f"Unknown filter type: {type(node).__name__}")

        return method(node)

    # -------------------------------------------------------------------------
    # Node type evaluators
    # -------------------------------------------------------------------------

    def _eval_string(self, node: String) -> Value:
        return StringValue(node.value)

    def _eval_float(self, node: Float) -> Value:
        return NumberValue(node.value)

    def _eval_integer(self, node: Integer) -> Value:
        return NumberValue(node.value)

    def _eval_boolean(self, node: Boolean) -> Value:
        return BooleanValue(node.value)

    def _eval_null(self, node: Null) -> Value:
        return NULL

    def _eval_property(self, node: Property) -> Value:
        return self.resolve(node.ref)

    def _eval_memberaccess(self, node: MemberAccess) -> Value:
        """Evaluate member access on a computed value."""
        return self._member(self.evaluate(node.object), node.member)

    def _eval_methodcall(self, node: MethodCall) -> Value:
        receiver = self.evaluate(node.object)
        args = [self.evaluate(arg) for arg in node.args]
        return receiver.call(node.method, args)

    def _eval_functioncall(self, node: FunctionCall) -> Value:
        args = [self.evaluate(arg) for arg in node.args]
        return self.context.functions.call(node.name, args)

    def _eval_binaryop(self, node: BinaryOp) -> Value:
        """Evaluate a binary operation."""
        op = node.op

        # Short-circuit evaluation for logical operators
        if op == BinaryOperator.AND:
            left = self.evaluate(node.left)
            if not left.is_truthy():
                return BooleanValue(False)
            return BooleanValue(self.evaluate(node.right).is_truthy())

        if op == BinaryOperator.OR:
            left = self.evaluate(node.left)
            if left.is_truthy():
                return BooleanValue(True)
            return BooleanValue(self.evaluate(node.right).is_truthy())

        left = self.evaluate(node.left)
        right = self.evaluate(node.right)

        if op == BinaryOperator.EQ:
            return BooleanValue(left.equals(right))
        if op == BinaryOperator.NE:
            return BooleanValue(not left.equals(right))
        if op == BinaryOperator.LT:
            return BooleanValue(left.compare(right) < 0)
        if op == BinaryOperator.LTE:
            return BooleanValue(left.compare(right) <= 0)
        if op == BinaryOperator.GT:
            return BooleanValue(left.compare(right) > 0)
        if op == BinaryOperator.GTE:
            return BooleanValue(left.compare(right) >= 0)

        if op == BinaryOperator.ADD:
            return left.add(right)
        if op == BinaryOperator.SUB:
            return left.sub(right)
        if op == BinaryOperator.MUL:
            return left.mul(right)
        if op == BinaryOperator.DIV:
            return left.div(right)
        if op == BinaryOperator.MOD:
            return left.rem(right)

        raise EvaluationError(f"Unknown operator: {op.value}")

    def _eval_unaryop(self, node: UnaryOp) -> Value:
        """Evaluate a unary operation."""
        operand = self.evaluate(node.operand)

        if node.op == UnaryOperator.NOT:
            return operand.logical_not()
        return operand.negate()

    # -------------------------------------------------------------------------
    # Property resolution
    # -------------------------------------------------------------------------

    def resolve(self, ref: PropertyRef) -> Value:
        """Resolve a property reference in this evaluator's context."""
        namespace, path = ref.namespace, list(ref.path)

        if namespace == PropertyNamespace.NOTE:
            first = path[0]
            if len(path) == 1 and first in NAMESPACE_KEYWORDS:
                return self._namespace_root(NAMESPACE_KEYWORDS[first])
            value = self.context.note.get(first, NULL)
            return self._walk(value, path[1:])

        if namespace == PropertyNamespace.FILE:
            base: Value = self.context.file if self.context.file is not None else NULL
            return self._walk(base, path)

        if namespace == PropertyNamespace.FORMULA:
            return self._walk(self._formula(path[0]), path[1:])

        # THIS: resolve against the embedding context
        embedding = self.context.this
        if embedding is None:
            return NULL
        outer = Evaluator(embedding)
        first = path[0]
        if first in NAMESPACE_KEYWORDS and first != PropertyNamespace.THIS.value:
            if len(path) == 1:
                return outer._namespace_root(NAMESPACE_KEYWORDS[first])
            return outer.resolve(PropertyRef(NAMESPACE_KEYWORDS[first], tuple(path[1:])))
        return outer.resolve(PropertyRef(PropertyNamespace.NOTE, tuple(path)))

    def _namespace_root(self, namespace: PropertyNamespace) -> Value:
        if namespace == PropertyNamespace.FILE:
            return self.context.file if self.context.file is not None else NULL
        if namespace == PropertyNamespace.NOTE:
            return ObjectValue(dict(self.context.note))
        if namespace == PropertyNamespace.FORMULA:
            return ObjectValue({name: self._formula(name) for name in self.context.formulas})
        embedding = self.context.this
        if embedding is None or embedding.file is None:
            return NULL
        return embedding.file

    def _formula(self, name: str) -> Value:
        """Evaluate a formula once, caching the result."""
        if name in self._formula_cache:
            return self._formula_cache[name]
        if name not in self.context.formulas:
            raise EvaluationError(f"Unknown formula '{name}'")
        if name in self._formulas_in_progress:
            raise EvaluationError(f"Circular reference in formula '{name}'")

        self._formulas_in_progress.add(name)
        try:
            value = self.evaluate(self.context.formulas[name])
        finally:
            self._formulas_in_progress.discard(name)

        self._formula_cache[name] = value
        return value

    def _walk(self, value: Value, path: list[str]) -> Value:
        for segment in path:
            value = self._member(value, segment)
        return value

    def _member(self, value: Value, name: str) -> Value:
        """Field, then object entry, then zero-argument method, else null."""
        if isinstance(value, NullValue):
            return NULL
        result = value.field(name)
        if result is not None:
            return result
        if isinstance(value, ObjectValue) and name in value.entries:
            return value.entries[name]
        if value.has_method(name):
            return value.call(name, [])
        return NULL

    # -------------------------------------------------------------------------
    # Filter evaluators
    # -------------------------------------------------------------------------

    def _filter_preparedand(self, node: PreparedAnd) -> bool:
        return all(self.evaluate_filter(child) for child in node.children)

    def _filter_preparedor(self, node: PreparedOr) -> bool:
        return any(self.evaluate_filter(child) for child in node.children)

    def _filter_preparednot(self, node: PreparedNot) -> bool:
        return not any(self.evaluate_filter(child) for child in node.children)

    def _filter_preparedexpr(self, node: PreparedExpr) -> bool:
        return self.evaluate(node.expr).is_truthy()


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------


def evaluate(expression: str | Expr, context: EvaluationContext | None = None) -> Value:
    """Evaluate an expression (source text or AST) against a context.

    Example:
        evaluate('"a,b".split(",").length')  # NumberValue(2)
    """
    ast = parse(expression) if isinstance(expression, str) else expression
    return Evaluator(context or EvaluationContext()).evaluate(ast)


def evaluate_filter(prepared_filter: PreparedFilter, context: EvaluationContext) -> bool:
    """Return whether ``context`` matches a prepared filter.

    And: all children match. Or: any child matches. Not: no child matches.
    An expression matches when its value is truthy.
    """
    return Evaluator(context).evaluate_filter(prepared_filter)
