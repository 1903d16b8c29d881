"""fieldcheck CLI entry point."""

import logging

import click

from fieldcheck.config import RuleDefaults
from fieldcheck.registry import RuleRegistry
from fieldcheck.rules import register_builtin_rules
from fieldcheck.types import ConfigurationError


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity.",
)
def cli(log_level: str):
    """Command-line interface for fieldcheck."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        register_builtin_rules(RuleDefaults.from_env())
    except ConfigurationError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(2)


@cli.command()
def rules():
    """List the registered rule types."""
    for tag in RuleRegistry.list_registered():
        click.echo(tag)


# Register subcommand groups
from fieldcheck.cli.form_cmd import form  # noqa: E402

cli.add_command(form)
