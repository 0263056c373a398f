from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from autobump.cli.context import build_context
from autobump.core.result import Err
from autobump.output.console import ConsoleProtocol, RichConsole, Style
from autobump.output.errors import print_update_error, update_error_exit_code
from autobump.update.errors import InvalidImageReference, UpdateError
from autobump.update.image import ImageReference, parse_image_reference
from autobump.update.manifest import ManifestStore
from autobump.update.pull_request import DEFAULT_PR_LABEL, PullRequestClient, read_maintainers
from autobump.update.reconciler import UpdateReconciler, UpdateRequest
from autobump.update.workspace import prepare_workspace

DEFAULT_WORKDIR = Path(".autobump") / "work"
DEFAULT_MANIFEST = Path("values.yaml")


def _exit(error: UpdateError, console: ConsoleProtocol) -> NoReturn:
    print_update_error(error, console)
    raise typer.Exit(code=update_error_exit_code(error))


def parse_candidate(image: str, console: ConsoleProtocol) -> ImageReference:
    candidate = parse_image_reference(image)
    if candidate is None:
        _exit(InvalidImageReference(text=image), console)
    return candidate


def update(
    image: str = typer.Argument(
        ..., help="Candidate image, e.g. bitnami/nginx:1.25.3-debian-11-r2"
    ),
    base: str = typer.Option("main", "--base", "-b", help="Base branch the PR targets"),
    component: str | None = typer.Option(
        None, "--component", help="Component name (default: last segment of the image name)"
    ),
    manifest: Path = typer.Option(
        DEFAULT_MANIFEST, "--manifest", help="Manifest path, relative to the repository root"
    ),
    maintainers: Path | None = typer.Option(
        None, "--maintainers", help="File listing PR reviewers, one per line"
    ),
    workdir: Path = typer.Option(DEFAULT_WORKDIR, "--workdir", help="Scratch clone location"),
    label: str = typer.Option(DEFAULT_PR_LABEL, "--label", help="Label set on new PRs"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Decide and report, change nothing"),
) -> None:
    """Propose IMAGE for the manifest on BASE, opening or refreshing a PR."""
    console = RichConsole()
    candidate = parse_candidate(image, console)
    ctx = build_context(console)
    workdir = workdir.expanduser().resolve()

    console.header(f"{candidate.full_name} -> {base}")
    repo = prepare_workspace(config=ctx.config, workdir=workdir, console=console)
    if isinstance(repo, Err):
        _exit(repo.error, console)

    reviewers = read_maintainers(maintainers)
    if isinstance(reviewers, Err):
        _exit(reviewers.error, console)
    if reviewers.value:
        console.print(f"reviewers: {', '.join(reviewers.value)}", Style.DIM)

    reconciler = UpdateReconciler(
        repo=repo.value,
        manifest=ManifestStore(workdir / manifest),
        pull_requests=PullRequestClient(
            workdir=workdir,
            repo_slug=ctx.upstream_slug,
            head_owner=ctx.config.github_user,
            token=ctx.config.github_token,
            console=console,
            dry_run=dry_run,
        ),
        console=console,
        label=label or None,
        reviewers=tuple(reviewers.value),
        redact=ctx.config.redact,
        dry_run=dry_run,
    )
    result = reconciler.reconcile(
        UpdateRequest(
            candidate=candidate,
            base_branch=base,
            component=component or candidate.short_name,
        )
    )
    if isinstance(result, Err):
        _exit(result.error, console)

    outcome = result.value
    if outcome.pull_request_url:
        console.print(outcome.pull_request_url)
    for name in outcome.pruned:
        console.print(f"pruned {name}", Style.DIM)
