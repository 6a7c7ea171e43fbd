"""Base file schema, loading and preparation."""

from obsidian_bases.schema.loader import load_base_file, load_base_str, validate_base_document
from obsidian_bases.schema.prepared import (
    PreparedAnd,
    PreparedBase,
    PreparedExpr,
    PreparedFilter,
    PreparedNot,
    PreparedOr,
    PreparedView,
    prepare_base,
)
from obsidian_bases.schema.types import (
    AndFilter,
    BaseFile,
    ExpressionFilter,
    FilterNode,
    NotFilter,
    OrFilter,
    PropertyConfig,
    SortDirection,
    SortField,
    View,
    ViewType,
)

__all__ = [
    # Loading
    "load_base_file",
    "load_base_str",
    "validate_base_document",
    # Schema
    "BaseFile",
    "FilterNode",
    "AndFilter",
    "OrFilter",
    "NotFilter",
    "ExpressionFilter",
    "PropertyConfig",
    "SortDirection",
    "SortField",
    "View",
    "ViewType",
    # Prepared
    "PreparedBase",
    "PreparedView",
    "PreparedFilter",
    "PreparedAnd",
    "PreparedOr",
    "PreparedNot",
    "PreparedExpr",
    "prepare_base",
]
