"""phpscope CLI - phpscope command."""

from pathlib import Path

import click

from phpscope import __version__
from phpscope.cli.declarations import inspect_command
from phpscope.cli.resolve import resolve_command
from phpscope.config import load_config
from phpscope.core.errors import ConfigError
from phpscope.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="phpscope")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML config file used instead of .phpscope/config.yaml",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_file: Path | None) -> None:
    """phpscope - Namespaces, classes and constants of PHP files, without running PHP."""
    try:
        config = load_config(config_file=config_file)
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config
    if verbose:
        configure_logging(level="DEBUG")
    else:
        configure_logging(config=config.logging)


cli.add_command(inspect_command, name="inspect")
cli.add_command(resolve_command, name="resolve")


if __name__ == "__main__":
    cli()
