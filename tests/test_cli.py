"""Tests for the bases command line interface."""

import pytest
from click.testing import CliRunner

from obsidian_bases.cli.main import cli

PROJECTS_BASE = """\
filters: file.inFolder("Projects")
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
    name: Related
    filters: status == this.status
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("BASES_VAULT_DIR", "BASES_LINK_STYLE", "BASES_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def vault(tmp_path):
    root = tmp_path / "vault"
    (root / "Projects").mkdir(parents=True)
    (root / "Projects" / "Alpha.md").write_text(
        "---\nstatus: active\npriority: 2\n---\nAlpha\n", encoding="utf-8"
    )
    (root / "Projects" / "Beta.md").write_text(
        "---\nstatus: active\npriority: 7\n---\nBeta links [[Alpha]]\n", encoding="utf-8"
    )
    (root / "Projects" / "Gamma.md").write_text(
        "---\nstatus: paused\npriority: 1\n---\n", encoding="utf-8"
    )
    (root / "Home.md").write_text("---\nstatus: paused\n---\n", encoding="utf-8")
    return root


@pytest.fixture
def base_file(tmp_path):
    path = tmp_path / "projects.base"
    path.write_text(PROJECTS_BASE, encoding="utf-8")
    return path


# =============================================================================
# check / show
# =============================================================================


class TestCheckCommand:
    def test_valid_base(self, runner, base_file):
        result = runner.invoke(cli, ["check", str(base_file)])

        assert result.exit_code == 0
        assert "2 view(s), 1 formula(s)" in result.output
        assert "✓ Active (table, 3 column(s))" in result.output
        assert "Base file is valid." in result.output

    def test_invalid_base(self, runner, tmp_path):
        path = tmp_path / "bad.base"
        path.write_text("formulas:\n  bad: 1 +\n", encoding="utf-8")

        result = runner.invoke(cli, ["check", str(path)])

        assert result.exit_code == 1
        assert "formula 'bad'" in result.output

    def test_schema_error(self, runner, tmp_path):
        path = tmp_path / "bad.base"
        path.write_text("views:\n  - type: grid\n", encoding="utf-8")

        result = runner.invoke(cli, ["check", str(path)])

        assert result.exit_code == 1
        assert "expected one of table" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["check", str(tmp_path / "nope.base")])

        assert result.exit_code == 2


class TestShowCommand:
    def test_prints_normalized_yaml(self, runner, base_file):
        result = runner.invoke(cli, ["show", str(base_file)])

        assert result.exit_code == 0
        assert result.output.startswith("filters:")
        assert "file.inFolder" in result.output
        assert "direction: DESC" in result.output
        assert "name: Related" in result.output


# =============================================================================
# query
# =============================================================================


class TestQueryCommand:
    def test_first_view(self, runner, vault, base_file):
        result = runner.invoke(cli, ["query", str(vault), str(base_file)])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "file.name\tnote.priority\tformula.double"
        assert lines[1:] == ["Beta\t7\t14", "Alpha\t2\t4"]

    def test_named_view_with_this(self, runner, vault, base_file):
        result = runner.invoke(
            cli,
            ["query", str(vault), str(base_file), "--view", "Related", "--this", "Home.md"],
        )

        assert result.exit_code == 0
        assert result.output.splitlines() == ["file.name", "Gamma"]

    def test_unknown_this(self, runner, vault, base_file):
        result = runner.invoke(
            cli, ["query", str(vault), str(base_file), "--this", "Nope.md"]
        )

        assert result.exit_code == 1
        assert "File 'Nope.md' not found" in result.output

    def test_unknown_view(self, runner, vault, base_file):
        result = runner.invoke(cli, ["query", str(vault), str(base_file), "--view", "Nope"])

        assert result.exit_code == 1
        assert "View 'Nope' not found" in result.output

    def test_invalid_link_style(self, runner, vault, base_file):
        result = runner.invoke(
            cli, ["query", str(vault), str(base_file), "--link-style", "sideways"]
        )

        assert result.exit_code == 2


# =============================================================================
# eval / parse / functions
# =============================================================================


class TestEvalCommand:
    def test_plain_expression(self, runner):
        result = runner.invoke(cli, ["eval", '"a,b,c".split(",").length'])

        assert result.exit_code == 0
        assert result.output == "3\n"

    def test_with_file(self, runner, vault):
        result = runner.invoke(
            cli,
            ["eval", "file.name + ': ' + status", "--vault", str(vault), "--file", "Projects/Alpha.md"],
        )

        assert result.exit_code == 0
        assert result.output == "Alpha: active\n"

    def test_vault_from_environment(self, runner, vault):
        result = runner.invoke(
            cli,
            ["eval", 'file.hasLink("Alpha")', "--file", "Projects/Beta.md"],
            env={"BASES_VAULT_DIR": str(vault)},
        )

        assert result.exit_code == 0
        assert result.output == "true\n"

    def test_file_without_vault(self, runner):
        result = runner.invoke(cli, ["eval", "1", "--file", "Note.md"])

        assert result.exit_code == 1
        assert "--file requires --vault" in result.output

    def test_missing_file(self, runner, vault):
        result = runner.invoke(cli, ["eval", "1", "--vault", str(vault), "--file", "Nope.md"])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_evaluation_error(self, runner):
        result = runner.invoke(cli, ["eval", "1 / 0"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_parse_error(self, runner):
        result = runner.invoke(cli, ["eval", "1 +"])

        assert result.exit_code == 1
        assert "unexpected end of input" in result.output


class TestParseCommand:
    def test_prints_tree(self, runner):
        result = runner.invoke(cli, ["parse", "1 + 2"])

        assert result.exit_code == 0
        assert "BinaryOp(" in result.output
        assert "Integer(value=2)" in result.output

    def test_error(self, runner):
        result = runner.invoke(cli, ["parse", "@"])

        assert result.exit_code == 1
        assert "unexpected character found '@'" in result.output


class TestFunctionsCommand:
    def test_lists_builtins(self, runner):
        result = runner.invoke(cli, ["functions"])

        assert result.exit_code == 0
        assert "if(condition, then, else?)" in result.output
        assert "max(...values)" in result.output
        assert "logic:" in result.output


# =============================================================================
# Global options
# =============================================================================


class TestGlobalOptions:
    def test_invalid_link_style_env(self, runner):
        result = runner.invoke(cli, ["functions"], env={"BASES_LINK_STYLE": "bogus"})

        assert result.exit_code == 1
        assert "Invalid BASES_LINK_STYLE 'bogus'" in result.output

    def test_log_level_option(self, runner):
        result = runner.invoke(cli, ["--log-level", "debug", "functions"])

        assert result.exit_code == 0
