"""Run a prepared view against the files of a vault.

Filtering, sorting, limiting and column extraction all go through one
Evaluator per file, so formulas are evaluated at most once per file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cmp_to_key

from obsidian_bases.errors import BasesError, ParseError
from obsidian_bases.expressions.ast import Expr, Property, PropertyNamespace, PropertyRef
from obsidian_bases.expressions.evaluator import (
    EvaluationContext,
    EvaluationError,
    Evaluator,
)
from obsidian_bases.expressions.parser import parse_expression
from obsidian_bases.schema.prepared import PreparedBase, PreparedView
from obsidian_bases.schema.types import SortDirection
from obsidian_bases.values import NULL, FileValue, Value, sort_compare

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = [PropertyRef(PropertyNamespace.FILE, ("name",))]


class QueryError(BasesError):
    """Raised when a view cannot be run."""

    pass


@dataclass
class ViewRow:
    file: FileValue
    values: dict[str, Value] = field(default_factory=dict)


@dataclass
class ViewResult:
    """Rows of a view, in display order."""

    view: PreparedView | None
    columns: list[str]
    rows: list[ViewRow] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def select_view(prepared: PreparedBase, view_name: str | None = None) -> PreparedView | None:
    """Return the named view, or the first view when no name is given."""
    if view_name is None:
        return prepared.views[0] if prepared.views else None
    view = prepared.get_view(view_name)
    if view is None:
        raise QueryError(f"View '{view_name}' not found")
    return view


def run_view(
    prepared: PreparedBase,
    files: list[FileValue],
    view_name: str | None = None,
    this: FileValue | None = None,
) -> ViewResult:
    """Filter, sort and limit ``files`` for one view of a base.

    Args:
        prepared: The prepared base
        files: Candidate files, usually from ``read_vault``
        view_name: View to run; defaults to the first view
        this: File the base is embedded in, exposed as ``this``

    Raises:
        QueryError: If the view does not exist or a sort property is invalid
    """
    view = select_view(prepared, view_name)
    this_context = (
        EvaluationContext.for_file(this, prepared.formulas) if this is not None else None
    )

    matched: list[tuple[FileValue, Evaluator]] = []
    for file in files:
        evaluator = Evaluator(
            EvaluationContext.for_file(file, prepared.formulas, this=this_context)
        )
        if _matches(evaluator, prepared, view):
            matched.append((file, evaluator))

    logger.debug(
        "View %s matched %d of %d files",
        view.name if view is not None else "<none>",
        len(matched),
        len(files),
    )

    if view is not None and view.sort:
        matched = _sort(matched, view)

    if view is not None and view.limit is not None:
        matched = matched[:view.limit]

    columns = view.order if view is not None and view.order else DEFAULT_COLUMNS
    rows = [
        ViewRow(file, {str(ref): _cell(evaluator, ref) for ref in columns})
        for file, evaluator in matched
    ]
    return ViewResult(view=view, columns=[str(ref) for ref in columns], rows=rows)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _matches(evaluator: Evaluator, prepared: PreparedBase, view: PreparedView | None) -> bool:
    filters = [prepared.filters]
    if view is not None:
        filters.append(view.filters)

    for node in filters:
        if node is None:
            continue
        try:
            if not evaluator.evaluate_filter(node):
                logger.debug("Excluded %s", evaluator.context.file)
                return False
        except EvaluationError as e:
            logger.warning("Filter failed for %s: %s", evaluator.context.file, e)
            return False
    return True


def _sort(
    matched: list[tuple[FileValue, Evaluator]],
    view: PreparedView,
) -> list[tuple[FileValue, Evaluator]]:
    keys: list[tuple[Expr, bool]] = []
    for sort_field in view.sort:
        try:
            _, expr = parse_expression(sort_field.property)
        except ParseError as e:
            raise QueryError(f"Invalid sort property '{sort_field.property}': {e}") from e
        keys.append((expr, sort_field.direction == SortDirection.DESC))

    decorated = [
        (file, evaluator, [_evaluate_quietly(evaluator, expr) for expr, _ in keys])
        for file, evaluator in matched
    ]

    def compare(a, b) -> int:
        for index, (_, descending) in enumerate(keys):
            result = sort_compare(a[2][index], b[2][index])
            if result != 0:
                return -result if descending else result
        return 0

    decorated.sort(key=cmp_to_key(compare))
    return [(file, evaluator) for file, evaluator, _ in decorated]


def _evaluate_quietly(evaluator: Evaluator, expr: Expr) -> Value:
    try:
        return evaluator.evaluate(expr)
    except EvaluationError as e:
        logger.warning("Evaluation failed for %s: %s", evaluator.context.file, e)
        return NULL


def _cell(evaluator: Evaluator, ref: PropertyRef) -> Value:
    return _evaluate_quietly(evaluator, Property(ref))
