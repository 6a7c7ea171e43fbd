"""Bases CLI entry point."""

import logging

import click

from obsidian_bases.config import BasesConfig


@click.group()
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (default: BASES_LOG_LEVEL or WARNING).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """Bases: query Obsidian vaults with .base files."""
    try:
        config = BasesConfig.from_env()
    except ValueError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    if log_level is not None:
        config.log_level = log_level.upper()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


# Register subcommands
from obsidian_bases.cli.base_cmd import check, query, show  # noqa: E402
from obsidian_bases.cli.expr_cmd import eval_cmd, functions_cmd, parse_cmd  # noqa: E402

cli.add_command(check)
cli.add_command(show)
cli.add_command(query)
cli.add_command(eval_cmd)
cli.add_command(parse_cmd)
cli.add_command(functions_cmd)
