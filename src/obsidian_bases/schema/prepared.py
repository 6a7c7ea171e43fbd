"""Prepared base files.

A PreparedBase mirrors a BaseFile with every expression string already
parsed, so queries never re-parse at evaluation time. Preparation is
all-or-nothing: the first bad expression aborts it with a PrepareError
naming where the expression lives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from obsidian_bases.errors import ParseError, PrepareError
from obsidian_bases.expressions.ast import Expr, Property, PropertyRef
from obsidian_bases.expressions.parser import parse_expression
from obsidian_bases.schema.types import (
    AndFilter,
    BaseFile,
    ExpressionFilter,
    FilterNode,
    NotFilter,
    OrFilter,
    PropertyConfig,
    SortField,
    View,
    ViewType,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Prepared filters
# =============================================================================


@dataclass(frozen=True)
class PreparedAnd:
    children: tuple[PreparedFilter, ...] = ()


@dataclass(frozen=True)
class PreparedOr:
    children: tuple[PreparedFilter, ...] = ()


@dataclass(frozen=True)
class PreparedNot:
    children: tuple[PreparedFilter, ...] = ()


@dataclass(frozen=True)
class PreparedExpr:
    expr: Expr


PreparedFilter = PreparedAnd | PreparedOr | PreparedNot | PreparedExpr


# =============================================================================
# Prepared views and bases
# =============================================================================


@dataclass
class PreparedView:
    type: ViewType
    name: str | None = None
    filters: PreparedFilter | None = None
    order: list[PropertyRef] = field(default_factory=list)
    limit: int | None = None
    sort: list[SortField] = field(default_factory=list)
    image: str | None = None
    column_size: dict[str, int] = field(default_factory=dict)


@dataclass
class PreparedBase:
    """A base file whose filters, formulas and order entries are parsed."""

    original: BaseFile
    filters: PreparedFilter | None = None
    formulas: dict[str, Expr] = field(default_factory=dict)
    properties: dict[str, PropertyConfig] = field(default_factory=dict)
    views: list[PreparedView] = field(default_factory=list)

    @classmethod
    def from_base(cls, base: BaseFile) -> PreparedBase:
        """Parse every expression in ``base``.

        Raises:
            PrepareError: On a duplicate view name, an unparseable expression
                or an order entry that is not a property reference
        """
        _ensure_unique_view_names(base)

        filters = None
        if base.filters is not None:
            filters = _prepare_filter(base.filters, "base.filters")

        formulas = _prepare_formulas(base.formulas)

        views = [_prepare_view(view, index) for index, view in enumerate(base.views)]

        logger.debug(
            "Prepared base with %d formulas and %d views", len(formulas), len(views)
        )

        return cls(
            original=base,
            filters=filters,
            formulas=formulas,
            properties=dict(base.properties),
            views=views,
        )

    def get_view(self, name: str) -> PreparedView | None:
        """Get a view by name."""
        for view in self.views:
            if view.name == name:
                return view
        return None


def prepare_base(base: BaseFile) -> PreparedBase:
    """Convenience wrapper for ``PreparedBase.from_base``."""
    return PreparedBase.from_base(base)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _ensure_unique_view_names(base: BaseFile) -> None:
    seen: dict[str, int] = {}
    for index, view in enumerate(base.views):
        if view.name is None:
            continue
        if view.name in seen:
            raise PrepareError(
                f"Duplicate view name '{view.name}' detected at indices "
                f"{seen[view.name]} and {index}"
            )
        seen[view.name] = index


def _view_context(view: View, index: int) -> str:
    if view.name is not None:
        return f"view '{view.name}' (index {index})"
    return f"view at index {index}"


def _prepare_filter(node: FilterNode, context: str) -> PreparedFilter:
    if isinstance(node, ExpressionFilter):
        try:
            _, expr = parse_expression(node.source)
        except ParseError as e:
            raise PrepareError(
                f"Failed to parse filter expression at {context}: {e}"
            ) from e
        return PreparedExpr(expr)

    for node_cls, key, prepared_cls in (
        (AndFilter, "and", PreparedAnd),
        (OrFilter, "or", PreparedOr),
        (NotFilter, "not", PreparedNot),
    ):
        if isinstance(node, node_cls):
            return prepared_cls(tuple(
                _prepare_filter(child, f"{context}.{key}[{index}]")
                for index, child in enumerate(node.children)
            ))

    raise PrepareError(f"Unknown filter node at {context}: {type(node).__name__}")


def _prepare_formulas(formulas: dict[str, str]) -> dict[str, Expr]:
    result = {}
    for name, source in formulas.items():
        try:
            _, result[name] = parse_expression(source)
        except ParseError as e:
            raise PrepareError(f"Failed to parse formula '{name}': {e}") from e
    return result


def _prepare_order(entries: list[str], context: str) -> list[PropertyRef]:
    order = []
    for index, entry in enumerate(entries):
        try:
            _, expr = parse_expression(entry)
        except ParseError as e:
            raise PrepareError(
                f"Failed to parse order entry '{entry}' at {context}[{index}]: {e}"
            ) from e
        if not isinstance(expr, Property):
            raise PrepareError(
                f"Order entry '{entry}' at {context}[{index}] must be a property reference"
            )
        order.append(expr.ref)
    return order


def _prepare_view(view: View, index: int) -> PreparedView:
    context = _view_context(view, index)

    filters = None
    if view.filters is not None:
        filters = _prepare_filter(view.filters, f"{context}.filters")

    return PreparedView(
        type=view.type,
        name=view.name,
        filters=filters,
        order=_prepare_order(view.order, f"{context}.order"),
        limit=view.limit,
        sort=list(view.sort),
        image=view.image,
        column_size=dict(view.column_size),
    )
