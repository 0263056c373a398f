"""Update branch naming and lookup.

An update branch is named ``autoupdate-<base>-<component>-<version>``; at
most one exists per (base, component, version). Lookups read the local cache
of remote-tracking refs, refreshed when the workspace fetches its remotes.
"""

from __future__ import annotations

import fnmatch
import re

from autobump.core.result import Err, Ok, Result
from autobump.git.repository import GitError, Repository

__all__ = [
    "UPDATE_BRANCH_PREFIX",
    "BranchRegistry",
    "update_branch_glob",
    "update_branch_name",
]

UPDATE_BRANCH_PREFIX = "autoupdate"

_VERSION_SUFFIX_RE = re.compile(r"^\d+(?:\.\d+){0,3}$")


def update_branch_name(base_branch: str, component: str, version: str) -> str:
    return f"{UPDATE_BRANCH_PREFIX}-{base_branch}-{component}-{version}"


def update_branch_glob(base_branch: str, component: str) -> str:
    return f"{UPDATE_BRANCH_PREFIX}-{base_branch}-{component}-*"


class BranchRegistry:
    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def list_branches(self, remote: str, pattern: str) -> Result[list[str], GitError]:
        """Branch names on ``remote`` matching the glob ``pattern``."""
        return self._repo.remote_branches(remote, pattern)

    def exists(self, remote: str, branch: str) -> Result[bool, GitError]:
        listed = self.list_branches(remote, branch)
        if isinstance(listed, Err):
            return listed
        return Ok(any(fnmatch.fnmatchcase(name, branch) for name in listed.value))

    def sibling_branches(
        self,
        remote: str,
        base_branch: str,
        component: str,
        *,
        exclude: str,
    ) -> Result[list[str], GitError]:
        """Other update branches of the same (base, component), oldest name first.

        Only names whose tail is a version count, so component ``app`` does
        not claim ``autoupdate-main-app-server-1.0.0``.
        """
        listed = self.list_branches(remote, update_branch_glob(base_branch, component))
        if isinstance(listed, Err):
            return listed

        prefix = update_branch_name(base_branch, component, "")
        siblings = [
            name
            for name in listed.value
            if name != exclude and _VERSION_SUFFIX_RE.match(name.removeprefix(prefix))
        ]
        return Ok(sorted(set(siblings)))
