"""Base file CLI commands: check, show and query."""

import logging
from pathlib import Path

import click
import yaml

from obsidian_bases.errors import BasesError
from obsidian_bases.query import run_view
from obsidian_bases.schema import PreparedBase, load_base_file
from obsidian_bases.vault import LinkStyle, read_vault

logger = logging.getLogger(__name__)


def _fail(message: str):
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    raise SystemExit(1)


def _load_prepared(base_file: Path) -> PreparedBase:
    try:
        return PreparedBase.from_base(load_base_file(base_file))
    except BasesError as e:
        _fail(f"{base_file}: {e}")


@click.command()
@click.argument("base_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def check(base_file: Path):
    """Validate a .base file and parse every expression in it."""
    prepared = _load_prepared(base_file)

    click.echo(
        f"{base_file}: {len(prepared.views)} view(s), {len(prepared.formulas)} formula(s)"
    )
    for index, view in enumerate(prepared.views):
        name = view.name if view.name is not None else f"<view {index}>"
        click.echo(f"  ✓ {name} ({view.type.value}, {len(view.order)} column(s))")

    click.echo(click.style("Base file is valid.", fg="green", bold=True))


@click.command()
@click.argument("base_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def show(base_file: Path):
    """Print the normalized structure of a .base file as YAML."""
    try:
        base = load_base_file(base_file)
    except BasesError as e:
        _fail(f"{base_file}: {e}")

    click.echo(yaml.safe_dump(base.to_dict(), sort_keys=False, allow_unicode=True), nl=False)


@click.command()
@click.argument("vault_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("base_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--view", "view_name", default=None, help="View to run (default: first view).")
@click.option(
    "--link-style",
    default=None,
    type=click.Choice([s.value for s in LinkStyle]),
    help="How link targets are resolved (default: BASES_LINK_STYLE or infer).",
)
@click.option(
    "--this",
    "this_path",
    default=None,
    help="Vault-relative path of the note embedding the base.",
)
@click.pass_obj
def query(config, vault_dir: Path, base_file: Path, view_name, link_style, this_path):
    """Run a view of BASE_FILE against the notes in VAULT_DIR."""
    prepared = _load_prepared(base_file)
    style = LinkStyle(link_style) if link_style else config.link_style

    files = read_vault(vault_dir, link_style=style)

    this = None
    if this_path is not None:
        this = next((f for f in files if str(f.path) == this_path), None)
        if this is None:
            _fail(f"File '{this_path}' not found in {vault_dir}")

    try:
        result = run_view(prepared, files, view_name=view_name, this=this)
    except BasesError as e:
        _fail(str(e))

    click.echo("\t".join(result.columns))
    for row in result.rows:
        click.echo("\t".join(row.values[column].display() for column in result.columns))

    logger.info("%d row(s)", len(result.rows))
