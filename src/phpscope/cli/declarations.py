"""phpscope inspect command - list the declarations of a PHP file."""

import json
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from phpscope.config.models import PhpScopeConfig
from phpscope.core.errors import PhpScopeError
from phpscope.reflection import DeclarationHandle, ReflectionFile, ReflectionFlag


def _collect(reflection: ReflectionFile) -> dict[str, Any]:
    return {
        "file": reflection.filename,
        "namespaces": reflection.get_namespaces(),
        "use_statements": reflection.get_use_statements(),
        "constants": reflection.get_constants(),
        "functions": list(reflection.get_functions()),
        "interfaces": list(reflection.get_interfaces()),
        "traits": list(reflection.get_traits()),
        "classes": {
            name: list(value.methods) if isinstance(value, DeclarationHandle) else []
            for name, value in reflection.get_classes().items()
        },
    }


def _make_declaration_table(data: dict[str, Any]) -> Table:
    table = Table(title=escape(data["file"]), show_lines=False, pad_edge=False)
    table.add_column("Kind", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Value")

    for name in data["namespaces"]:
        table.add_row("namespace", escape(name), "")
    for alias, target in data["use_statements"].items():
        table.add_row("use", escape(alias), escape(target))
    for name, value in data["constants"].items():
        table.add_row("constant", escape(name), escape(repr(value)))
    for kind in ("functions", "interfaces", "traits"):
        for name in data[kind]:
            table.add_row(kind[:-1], escape(name), "")
    for name, methods in data["classes"].items():
        table.add_row("class", escape(name), escape(", ".join(methods)))
    return table


@click.command()
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--safe", is_flag=True, help="Evaluate constant values")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def inspect_command(ctx: click.Context, file: Path, safe: bool, as_json: bool) -> None:
    """List namespaces, use statements, constants, functions, interfaces,
    traits and classes declared in FILE.
    """
    config: PhpScopeConfig = ctx.obj["config"]
    # Handles carry the method names shown for classes
    flags = ReflectionFlag.AUTOLOADABLE
    if safe:
        flags |= ReflectionFlag.SAFE

    try:
        reflection = ReflectionFile(file, flags, config=config.reflection)
        data = _collect(reflection)
    except PhpScopeError as e:
        raise click.ClickException(e.message) from e

    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
        return

    Console().print(_make_declaration_table(data))
