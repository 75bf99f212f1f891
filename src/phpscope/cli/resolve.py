"""phpscope resolve command - print the qualified form of a name."""

from pathlib import Path

import click

from phpscope.config.models import PhpScopeConfig
from phpscope.core.errors import PhpScopeError
from phpscope.reflection import RESOLVABLE_KINDS, ReflectionFile


@click.command()
@click.argument("file", type=click.Path(path_type=Path))
@click.argument("name")
@click.option(
    "--kind",
    "kinds",
    multiple=True,
    type=click.Choice([str(kind) for kind in RESOLVABLE_KINDS]),
    help="Restrict the lookup to a declaration kind (repeatable)",
)
@click.pass_context
def resolve_command(ctx: click.Context, file: Path, name: str, kinds: tuple[str, ...]) -> None:
    """Resolve NAME as written in FILE to its fully qualified name."""
    config: PhpScopeConfig = ctx.obj["config"]
    try:
        reflection = ReflectionFile(file, config=config.reflection)
        click.echo(reflection.get_qualified_name(name, kinds or None))
    except PhpScopeError as e:
        raise click.ClickException(e.message) from e
