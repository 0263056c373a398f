"""Scratch clone bootstrap.

The bot works in a clone of the development fork (remote ``origin``) with
the upstream repository registered as ``upstream``. This is the only place
that talks to the network for reads; branch lookups afterwards use the
remote-tracking refs fetched here.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from autobump.core.config import BotConfig
from autobump.core.result import Err, Ok, Result
from autobump.git.repository import GitAuthor, Repository
from autobump.output.console import ConsoleProtocol, Style
from autobump.update.errors import VcsOperationError, vcs_error

__all__ = [
    "ORIGIN_REMOTE",
    "UPSTREAM_REMOTE",
    "prepare_workspace",
]

ORIGIN_REMOTE = "origin"
UPSTREAM_REMOTE = "upstream"


def _ensure_remote(
    repo: Repository,
    name: str,
    url: str,
    redact: Callable[[str], str],
) -> Result[None, VcsOperationError]:
    current = repo.remote_url(name)
    if current == url:
        return Ok(None)
    result = repo.add_remote(name, url) if current is None else repo.set_remote_url(name, url)
    if isinstance(result, Err):
        return Err(vcs_error(result.error, redact))
    return Ok(None)


def prepare_workspace(
    *,
    config: BotConfig,
    workdir: Path,
    console: ConsoleProtocol,
) -> Result[Repository, VcsOperationError]:
    """Clone or refresh the scratch repository in ``workdir``.

    Leftover changes from an interrupted run are discarded, then both
    remotes are fetched.
    """
    author = GitAuthor(name=config.git_author_name, email=config.git_author_email)
    origin_url = config.authenticated_development_url()
    repo = Repository(workdir, author=author)

    if not repo.exists():
        console.print(f"git clone {config.development_repo_url} {workdir}", Style.DIM)
        cloned = Repository.clone(origin_url, workdir, author=author)
        if isinstance(cloned, Err):
            return Err(vcs_error(cloned.error, config.redact))
        repo = cloned.value

    for name, url in ((ORIGIN_REMOTE, origin_url), (UPSTREAM_REMOTE, config.upstream_repo_url)):
        ok = _ensure_remote(repo, name, url, config.redact)
        if isinstance(ok, Err):
            return ok

    discarded = repo.discard_changes()
    if isinstance(discarded, Err):
        return Err(vcs_error(discarded.error, config.redact))

    for name in (ORIGIN_REMOTE, UPSTREAM_REMOTE):
        console.print(f"git fetch --prune {name}", Style.DIM)
        fetched = repo.fetch(name)
        if isinstance(fetched, Err):
            return Err(vcs_error(fetched.error, config.redact))

    return Ok(repo)
