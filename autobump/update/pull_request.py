from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path

from autobump.core.result import Err, Ok, Result
from autobump.core.structured import as_obj_list, as_str_dict, get_str
from autobump.output.console import ConsoleProtocol, Style
from autobump.platform.process import run as run_process
from autobump.update.errors import MaintainersFileError, PullRequestError

__all__ = [
    "DEFAULT_PR_LABEL",
    "PullRequestClient",
    "read_maintainers",
]

GH_TIMEOUT_SECONDS = 60.0

DEFAULT_PR_LABEL = "verify"


def read_maintainers(path: Path | None) -> Result[list[str], MaintainersFileError]:
    """Reviewer handles from a maintainers file, one per line.

    A missing file yields no reviewers. Blank lines and ``#`` comments are
    skipped, as is a leading ``@``.
    """
    if path is None or not path.exists():
        return Ok([])
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(MaintainersFileError(path=path, reason=f"cannot read maintainers: {e}"))

    out: list[str] = []
    for line in text.splitlines():
        handle = line.split("#", 1)[0].strip().removeprefix("@")
        if handle and handle not in out:
            out.append(handle)
    return Ok(out)


class PullRequestClient:
    """Opens and looks up pull requests on the upstream repository via ``gh``.

    Update branches live on the development fork, so the PR head is
    ``<head_owner>:<branch>``.
    """

    def __init__(
        self,
        *,
        workdir: Path,
        repo_slug: str,
        head_owner: str,
        token: str,
        console: ConsoleProtocol,
        dry_run: bool = False,
    ) -> None:
        self.workdir = workdir
        self.repo_slug = repo_slug
        self.head_owner = head_owner
        self._token = token
        self._console = console
        self._dry_run = dry_run

    def _env(self) -> Mapping[str, str]:
        return {**os.environ, "GH_TOKEN": self._token, "GH_PROMPT_DISABLED": "1"}

    def create(
        self,
        *,
        base_branch: str,
        branch: str,
        title: str,
        body: str,
        label: str | None,
        reviewers: list[str],
    ) -> Result[str, PullRequestError]:
        """Open a pull request and return its URL."""
        cmd = [
            "gh",
            "pr",
            "create",
            "--repo",
            self.repo_slug,
            "--base",
            base_branch,
            "--head",
            f"{self.head_owner}:{branch}",
            "--title",
            title,
            "--body",
            body,
        ]
        if label:
            cmd += ["--label", label]
        if reviewers:
            cmd += ["--reviewer", ",".join(reviewers)]

        self._console.print(f"gh pr create --base {base_branch} --head {branch}", Style.DIM)
        if self._dry_run:
            return Ok("(dry-run)")

        result = run_process(cmd, cwd=self.workdir, env=self._env(), timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            e = result.error
            return Err(
                PullRequestError(
                    message=f"failed to create PR for {branch}",
                    hint=e.stderr.strip() or None,
                )
            )

        # gh prints progress lines before the URL on some versions.
        lines = [ln.strip() for ln in result.value.splitlines() if ln.strip()]
        url = lines[-1] if lines else ""
        if not url.startswith("https://"):
            return Err(
                PullRequestError(
                    message="unexpected gh pr create output",
                    hint=url or None,
                )
            )
        return Ok(url)

    def find_open(self, branch: str) -> Result[str | None, PullRequestError]:
        """URL of the open pull request whose head is ``branch``, if any."""
        cmd = [
            "gh",
            "pr",
            "list",
            "--repo",
            self.repo_slug,
            "--head",
            branch,
            "--state",
            "open",
            "--json",
            "url,headRepositoryOwner",
        ]
        if self._dry_run:
            return Ok(None)

        result = run_process(cmd, cwd=self.workdir, env=self._env(), timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            e = result.error
            return Err(
                PullRequestError(
                    message=f"failed to list PRs for {branch}",
                    hint=e.stderr.strip() or None,
                )
            )

        try:
            obj: object = json.loads(result.value or "[]")
        except json.JSONDecodeError as e:
            return Err(PullRequestError(message=f"invalid JSON from gh pr list: {e}"))

        items = as_obj_list(obj)
        if items is None:
            return Err(PullRequestError(message="unexpected gh pr list payload"))

        for item in items:
            data = as_str_dict(item)
            if data is None:
                continue
            owner = as_str_dict(data.get("headRepositoryOwner"))
            login = get_str(owner, "login") if owner is not None else None
            if login is not None and login.lower() != self.head_owner.lower():
                continue
            url = get_str(data, "url")
            if url is not None:
                return Ok(url)
        return Ok(None)
