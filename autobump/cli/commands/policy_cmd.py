from __future__ import annotations

import typer

from autobump.cli.commands.update_cmd import parse_candidate
from autobump.core.errors import ErrorCode
from autobump.output.console import RichConsole
from autobump.update.policy import Action, decide
from autobump.update.version import compare_versions


def decide_cmd(
    image: str = typer.Argument(..., help="Candidate image reference"),
    tracked: str | None = typer.Option(
        None, "--tracked", help="Tag currently in the manifest (omit if not referenced)"
    ),
    base: str = typer.Option("main", "--base", "-b", help="Base branch"),
    branch_exists: bool = typer.Option(
        False, "--branch-exists", help="An update branch for this version is already open"
    ),
) -> None:
    """Evaluate the update policy offline and print the decision."""
    candidate = parse_candidate(image, RichConsole(stderr=True))
    decision = decide(tracked, candidate, base, branch_exists)
    typer.echo(f"{decision.action}: {decision.reason}")
    if decision.action is Action.REJECT_POLICY:
        raise typer.Exit(code=int(ErrorCode.POLICY_ERROR))


def compare(
    a: str = typer.Argument(..., help="First version"),
    b: str = typer.Argument(..., help="Second version"),
) -> None:
    """Print -1, 0 or 1 as A is older than, equal to or newer than B."""
    typer.echo(str(compare_versions(a, b)))
