"""Expression CLI commands: eval, parse and functions."""

from pathlib import Path

import click

from obsidian_bases.errors import BasesError
from obsidian_bases.expressions import EvaluationContext, evaluate, parse
from obsidian_bases.functions import FunctionCategory, FunctionRegistry
from obsidian_bases.vault import read_file


@click.command("eval")
@click.argument("expression")
@click.option(
    "--vault",
    "vault_dir",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Vault directory (default: BASES_VAULT_DIR).",
)
@click.option("--file", "file_path", default=None, help="Vault-relative path of the current note.")
@click.pass_obj
def eval_cmd(config, expression: str, vault_dir: Path | None, file_path: str | None):
    """Evaluate EXPRESSION and print the result."""
    context = EvaluationContext()

    if file_path is not None:
        vault_dir = vault_dir or config.vault_dir
        if vault_dir is None:
            click.echo(click.style("Error: --file requires --vault or BASES_VAULT_DIR", fg="red"), err=True)
            raise SystemExit(1)
        path = Path(vault_dir) / file_path
        if not path.is_file():
            click.echo(click.style(f"Error: File not found: {path}", fg="red"), err=True)
            raise SystemExit(1)
        context = EvaluationContext.for_file(read_file(path, Path(vault_dir), config.link_style))

    try:
        result = evaluate(expression, context)
    except BasesError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(result.display())


@click.command("parse")
@click.argument("expression")
def parse_cmd(expression: str):
    """Parse EXPRESSION and print its syntax tree."""
    try:
        ast = parse(expression)
    except BasesError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(repr(ast))


@click.command("functions")
def functions_cmd():
    """List the global functions available in expressions."""
    registry = FunctionRegistry.global_functions()

    for category in FunctionCategory:
        definitions = registry.list_by_category(category)
        if not definitions:
            continue
        click.echo(click.style(f"{category.value}:", bold=True))
        for func_def in sorted(definitions, key=lambda f: f.name):
            click.echo(f"  {func_def.signature()}  {func_def.description}")
