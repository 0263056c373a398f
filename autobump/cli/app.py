from __future__ import annotations

import typer

from autobump import __version__
from autobump.cli.commands.policy_cmd import compare, decide_cmd
from autobump.cli.commands.update_cmd import update


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(update)
app.command("decide")(decide_cmd)
app.command()(compare)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    del version


def main() -> None:
    app()
