"""Git repository abstraction.

This module provides the Repository class for the git operations the bot
needs on its scratch clone. Every operation returns a Result; nothing here
decides *whether* an operation should happen.

Usage:
    repo = Repository(workdir, author=GitAuthor("Bot", "bot@example.com"))

    match repo.remote_branches("origin", "autoupdate-main-*"):
        case Ok(names):
            print(names)
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from autobump.core.result import Err, Ok, Result
from autobump.platform.process import ProcessError
from autobump.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_GIT_CLONE_TIMEOUT_SECONDS = 15 * 60.0

_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "ls-remote"})

__all__ = [
    "GitAuthor",
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed (without the ``git`` prefix)
        message: Error message, usually git's stderr
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class GitAuthor:
    name: str
    email: str


def _to_git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or fallback,
        returncode=error.returncode,
    )


class Repository:
    """A local git clone.

    Attributes:
        path: Path to the repository root
        author: Identity used for commits; git's own configuration when None
    """

    def __init__(self, path: Path, author: GitAuthor | None = None) -> None:
        self.path = path
        self.author = author

    @classmethod
    def clone(
        cls,
        url: str,
        path: Path,
        author: GitAuthor | None = None,
    ) -> Result[Repository, GitError]:
        """Clone ``url`` into ``path`` (which must not exist yet)."""
        path.parent.mkdir(parents=True, exist_ok=True)
        result = run_process(
            ["git", "clone", "--quiet", url, str(path)],
            cwd=path.parent,
            timeout=_GIT_CLONE_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(_to_git_error("clone", result.error, "clone failed"))
        return Ok(cls(path, author=author))

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists()

    # -- remotes ---------------------------------------------------------

    def remote_url(self, name: str) -> str | None:
        """URL of remote ``name``, or None if it is not configured."""
        result = self._run(["remote", "get-url", name])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def add_remote(self, name: str, url: str) -> Result[None, GitError]:
        return self._checked(["remote", "add", name, url], "remote add")

    def set_remote_url(self, name: str, url: str) -> Result[None, GitError]:
        return self._checked(["remote", "set-url", name, url], "remote set-url")

    def fetch(self, remote: str) -> Result[None, GitError]:
        """Fetch ``remote`` and prune remote-tracking refs that are gone."""
        return self._checked(["fetch", "--prune", "--quiet", remote], "fetch")

    # -- branches --------------------------------------------------------

    def remote_branches(self, remote: str, pattern: str = "*") -> Result[list[str], GitError]:
        """Short names of remote-tracking branches of ``remote`` matching a glob.

        Reads the local cache of remote refs; call :meth:`fetch` first to
        refresh it. ``origin/autoupdate-main-app-1.0.0`` is returned as
        ``autoupdate-main-app-1.0.0``.
        """
        result = self._run(
            [
                "branch",
                "--remotes",
                "--list",
                f"{remote}/{pattern}",
                "--format=%(refname:short)",
            ]
        )
        if isinstance(result, Err):
            return Err(_to_git_error("branch --remotes", result.error, "branch listing failed"))

        names: list[str] = []
        for line in result.value.splitlines():
            ref = line.strip()
            if not ref or ref == remote or ref.endswith("/HEAD"):
                continue
            names.append(ref.removeprefix(f"{remote}/"))
        return Ok(names)

    def local_branch_exists(self, branch: str) -> bool:
        result = self._run(["rev-parse", "--verify", "--quiet", f"refs/heads/{branch}"])
        return isinstance(result, Ok)

    def current_branch(self) -> str | None:
        """Current branch name, None if detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def checkout_reset(self, branch: str, start_point: str) -> Result[None, GitError]:
        """Create or reset ``branch`` at ``start_point`` and check it out.

        ``git checkout -B`` makes this safe to repeat: a leftover local branch
        from an earlier, interrupted run is simply moved.
        """
        return self._checked(["checkout", "--quiet", "-B", branch, start_point], "checkout -B")

    def pull_ff(self, remote: str, branch: str) -> Result[None, GitError]:
        """Fast-forward the current branch from ``remote/branch``."""
        return self._checked(["pull", "--ff-only", "--quiet", remote, branch], "pull --ff-only")

    def delete_local_branch(self, branch: str) -> Result[None, GitError]:
        return self._checked(["branch", "-D", branch], "branch -D")

    def delete_remote_branch(self, remote: str, branch: str) -> Result[None, GitError]:
        return self._checked(["push", "--quiet", remote, "--delete", branch], "push --delete")

    # -- working tree ----------------------------------------------------

    def is_clean(self) -> bool:
        """Check if the working tree has no changes (False on error)."""
        result = self._run(["status", "--porcelain"])
        match result:
            case Ok(stdout):
                return stdout.strip() == ""
            case Err(_):
                return False

    def discard_changes(self) -> Result[None, GitError]:
        """Throw away tracked and untracked changes left by a previous run."""
        reset = self._checked(["reset", "--hard", "--quiet"], "reset --hard")
        if isinstance(reset, Err):
            return reset
        return self._checked(["clean", "-fdq"], "clean")

    def add(self, paths: list[Path]) -> Result[None, GitError]:
        rels = [str(p.relative_to(self.path)) if p.is_absolute() else str(p) for p in paths]
        return self._checked(["add", "--", *rels], "add")

    def commit(self, message: str) -> Result[None, GitError]:
        return self._checked(["commit", "--quiet", "-m", message], "commit")

    def push(self, remote: str, branch: str, *, force: bool = False) -> Result[None, GitError]:
        args = ["push", "--quiet"]
        if force:
            args.append("--force")
        args += [remote, f"{branch}:{branch}"]
        return self._checked(args, "push --force" if force else "push")

    # -- plumbing --------------------------------------------------------

    def _checked(self, args: list[str], command: str) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(_to_git_error(command, result.error, f"git {command} failed"))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        identity: list[str] = []
        if self.author is not None:
            identity = [
                "-c",
                f"user.name={self.author.name}",
                "-c",
                f"user.email={self.author.email}",
            ]
        return run_process(
            ["git", "-C", str(self.path), *identity, *args],
            cwd=self.path,
            timeout=timeout,
        )
