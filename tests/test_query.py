"""Tests for running views against vault files."""

import logging

import pytest

from obsidian_bases.query import DEFAULT_COLUMNS, QueryError, run_view, select_view
from obsidian_bases.schema import PreparedBase, load_base_str
from obsidian_bases.values import NULL, FileValue, Frontmatter, NumberValue, StringValue

PROJECTS_BASE = """\
filters: file.ext == "md"
formulas:
  double: priority * 2
views:
  - type: table
    name: Active
    filters: status == "active"
    order: [file.name, priority, formula.double]
    sort:
      - property: priority
        direction: DESC
  - type: list
    name: Top
    limit: 2
    sort:
      - property: priority
        direction: ASC
  - type: cards
    name: Broken
    filters: priority + 'x'
  - type: table
    name: Same status
    filters: status == this.status
"""


def note(path, **properties):
    return FileValue(path, frontmatter=Frontmatter.from_mapping(properties))


@pytest.fixture
def files():
    return [
        note("A.md", status="active", priority=3),
        note("B.md", status="done", priority=1),
        note("C.md", status="active", priority=5),
        FileValue("D.md"),
        FileValue("cover.png"),
    ]


@pytest.fixture
def prepared():
    return PreparedBase.from_base(load_base_str(PROJECTS_BASE))


def names(result):
    return [row.file.path.stem for row in result.rows]


# =============================================================================
# View selection
# =============================================================================


class TestSelectView:
    def test_defaults_to_first_view(self, prepared):
        assert select_view(prepared).name == "Active"

    def test_by_name(self, prepared):
        assert select_view(prepared, "Top").name == "Top"

    def test_unknown_view(self, prepared):
        with pytest.raises(QueryError, match="View 'Nope' not found"):
            select_view(prepared, "Nope")

    def test_no_views(self):
        prepared = PreparedBase.from_base(load_base_str("filters: 'true'"))

        assert select_view(prepared) is None


# =============================================================================
# Running views
# =============================================================================


class TestRunView:
    def test_filters_sorts_and_projects(self, prepared, files):
        result = run_view(prepared, files, "Active")

        assert names(result) == ["C", "A"]
        assert result.columns == ["file.name", "note.priority", "formula.double"]
        assert result.rows[0].values == {
            "file.name": StringValue("C"),
            "note.priority": NumberValue(5),
            "formula.double": NumberValue(10),
        }

    def test_base_filter_applies_to_every_view(self, prepared, files):
        result = run_view(prepared, files, "Top")

        assert all(row.file.path.suffix == ".md" for row in result.rows)

    def test_null_sorts_first_and_limit_applies(self, prepared, files):
        result = run_view(prepared, files, "Top")

        assert names(result) == ["D", "B"]
        assert len(result) == 2

    def test_default_columns(self, prepared, files):
        result = run_view(prepared, files, "Top")

        assert result.columns == [str(ref) for ref in DEFAULT_COLUMNS]
        assert result.rows[0].values == {"file.name": StringValue("D")}

    def test_failing_filter_excludes_file(self, prepared, files, caplog):
        with caplog.at_level(logging.WARNING, logger="obsidian_bases.query"):
            result = run_view(prepared, files, "Broken")

        assert len(result) == 0
        assert "Filter failed for A.md" in caplog.text

    def test_this_context(self, prepared, files):
        home = note("Home.md", status="done")

        result = run_view(prepared, files, "Same status", this=home)

        assert names(result) == ["B"]

    def test_without_this_nothing_matches_this_property(self, prepared, files):
        result = run_view(prepared, files, "Same status")

        assert names(result) == ["D"]

    def test_base_without_views(self, files):
        prepared = PreparedBase.from_base(load_base_str("filters: file.ext == 'png'"))

        result = run_view(prepared, files)

        assert result.view is None
        assert names(result) == ["cover"]

    def test_invalid_sort_property(self, files):
        prepared = PreparedBase.from_base(
            load_base_str(
                "views:\n  - type: table\n    sort:\n"
                "      - property: '1 +'\n        direction: ASC"
            )
        )

        with pytest.raises(QueryError, match="Invalid sort property '1 \\+'"):
            run_view(prepared, files)

    def test_failing_cell_is_null(self, files):
        prepared = PreparedBase.from_base(
            load_base_str(
                "formulas:\n  bad: status + 1\n"
                "views:\n  - type: table\n    order: [formula.bad]"
            )
        )

        result = run_view(prepared, files[:1])

        assert result.rows[0].values == {"formula.bad": NULL}

    def test_deeply_nested_filter_is_no_match(self, files, caplog):
        chain = " + ".join(["priority"] * 300)
        prepared = PreparedBase.from_base(load_base_str(f"filters: '{chain} > 0'"))

        with caplog.at_level(logging.WARNING):
            result = run_view(prepared, files[:1])

        assert names(result) == []
        assert "nested too deeply" in caplog.text
