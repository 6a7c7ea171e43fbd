"""Tests for compiling base files into prepared bases."""

import pytest

from obsidian_bases.errors import ErrorKind, PrepareError
from obsidian_bases.expressions import (
    BinaryOp,
    BinaryOperator,
    Integer,
    Property,
    PropertyNamespace,
    PropertyRef,
)
from obsidian_bases.schema import (
    BaseFile,
    PreparedAnd,
    PreparedBase,
    PreparedExpr,
    PreparedNot,
    PreparedOr,
    load_base_str,
    prepare_base,
)


def prepare(text):
    return PreparedBase.from_base(load_base_str(text))


# =============================================================================
# Successful preparation
# =============================================================================


class TestPrepareBase:
    def test_empty_base(self):
        prepared = prepare_base(BaseFile())

        assert prepared.filters is None
        assert prepared.formulas == {}
        assert prepared.views == []

    def test_filter_tree(self):
        prepared = prepare(
            "filters:\n"
            "  and:\n"
            "    - priority > 1\n"
            "    - or:\n"
            "        - done\n"
            "        - not:\n"
            "            - archived\n"
        )

        priority = Property(PropertyRef(PropertyNamespace.NOTE, ("priority",)))
        assert isinstance(prepared.filters, PreparedAnd)
        assert prepared.filters.children[0] == PreparedExpr(
            BinaryOp(BinaryOperator.GT, priority, Integer(1))
        )
        nested = prepared.filters.children[1]
        assert isinstance(nested, PreparedOr)
        assert isinstance(nested.children[1], PreparedNot)

    def test_formulas_are_parsed(self):
        prepared = prepare("formulas:\n  double: price * 2")

        assert prepared.formulas["double"] == BinaryOp(
            BinaryOperator.MUL,
            Property(PropertyRef(PropertyNamespace.NOTE, ("price",))),
            Integer(2),
        )

    def test_view_fields_carried_over(self):
        prepared = prepare(
            "properties:\n"
            "  status:\n"
            "    displayName: Status\n"
            "views:\n"
            "  - type: table\n"
            "    name: Main\n"
            "    order: [file.name, status, formula.total]\n"
            "    limit: 5\n"
            "    sort:\n"
            "      - property: status\n"
            "        direction: ASC\n"
            "    columnSize:\n"
            "      status: 100\n"
        )

        view = prepared.get_view("Main")
        assert view.order == [
            PropertyRef(PropertyNamespace.FILE, ("name",)),
            PropertyRef(PropertyNamespace.NOTE, ("status",)),
            PropertyRef(PropertyNamespace.FORMULA, ("total",)),
        ]
        assert view.limit == 5
        assert view.sort[0].property == "status"
        assert view.column_size == {"status": 100}
        assert prepared.properties["status"].display_name == "Status"

    def test_get_view_missing(self):
        assert prepare("views:\n  - type: table").get_view("Nope") is None

    def test_original_is_kept(self):
        base = load_base_str("views:\n  - type: list")

        assert PreparedBase.from_base(base).original is base


# =============================================================================
# Errors
# =============================================================================


class TestPrepareErrors:
    def test_duplicate_view_names(self):
        with pytest.raises(PrepareError) as exc_info:
            prepare(
                "views:\n"
                "  - type: table\n    name: Table\n"
                "  - type: cards\n    name: Other\n"
                "  - type: list\n    name: Table\n"
            )

        assert str(exc_info.value) == "Duplicate view name 'Table' detected at indices 0 and 2"

    def test_view_names_are_case_sensitive(self):
        prepared = prepare(
            "views:\n  - type: table\n    name: Table\n  - type: table\n    name: table\n"
        )

        assert len(prepared.views) == 2

    def test_bad_formula_names_formula(self):
        with pytest.raises(PrepareError) as exc_info:
            prepare("formulas:\n  bad: 1 +")

        assert "formula 'bad'" in str(exc_info.value)

    def test_bad_base_filter(self):
        with pytest.raises(PrepareError, match=r"at base\.filters\.and\[1\]"):
            prepare("filters:\n  and:\n    - a\n    - ')'")

    def test_bad_view_filter_names_view(self):
        with pytest.raises(PrepareError) as exc_info:
            prepare("views:\n  - type: table\n    name: v\n    filters:\n      or: ['a &&']")

        message = str(exc_info.value)
        assert "view 'v'" in message
        assert "view 'v' (index 0).filters.or[0]" in message

    def test_unnamed_view_context(self):
        with pytest.raises(PrepareError, match="view at index 1.filters"):
            prepare("views:\n  - type: table\n  - type: table\n    filters: '!'")

    def test_order_entry_must_be_property(self):
        with pytest.raises(PrepareError) as exc_info:
            prepare("views:\n  - type: table\n    name: v\n    order: [status, 'file.name.lower()']")

        assert str(exc_info.value) == (
            "Order entry 'file.name.lower()' at view 'v' (index 0).order[1] "
            "must be a property reference"
        )

    def test_deeply_nested_formula(self):
        source = "(" * 200 + "1" + ")" * 200

        with pytest.raises(PrepareError) as exc_info:
            prepare(f"formulas:\n  deep: '{source}'")

        assert "formula 'deep'" in str(exc_info.value)
        assert exc_info.value.__cause__.kind == ErrorKind.DEPTH

    def test_unparseable_order_entry(self):
        with pytest.raises(PrepareError, match=r"Failed to parse order entry '1 \+'"):
            prepare("views:\n  - type: table\n    order: ['1 +']")

    def test_error_keeps_parse_cause(self):
        with pytest.raises(PrepareError) as exc_info:
            prepare("formulas:\n  bad: '('")

        assert exc_info.value.__cause__ is not None
