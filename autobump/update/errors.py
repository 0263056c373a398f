from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from autobump.core.config import ConfigurationError
from autobump.git.repository import GitError


@dataclass(frozen=True, slots=True)
class InvalidImageReference:
    text: str
    reason: str = "expected name:<version>[-<distro>-<n>]-r<revision>"


@dataclass(frozen=True, slots=True)
class ManifestError:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class MaintainersFileError:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class PolicyRejection:
    """The base branch refuses this bump; nothing was changed."""

    base_branch: str
    tracked_tag: str
    candidate_tag: str
    reason: str


@dataclass(frozen=True, slots=True)
class VcsOperationError:
    command: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PullRequestError:
    message: str
    hint: str | None = None


def vcs_error(error: GitError, redact: Callable[[str], str] = str) -> VcsOperationError:
    """Lift a ``GitError`` into the update error taxonomy, scrubbing secrets."""
    return VcsOperationError(
        command=f"git {error.command}",
        message=redact(error.message),
    )


UpdateError = (
    ConfigurationError
    | InvalidImageReference
    | ManifestError
    | MaintainersFileError
    | PolicyRejection
    | VcsOperationError
    | PullRequestError
)

__all__ = [
    "ConfigurationError",
    "InvalidImageReference",
    "MaintainersFileError",
    "ManifestError",
    "PolicyRejection",
    "PullRequestError",
    "UpdateError",
    "VcsOperationError",
    "vcs_error",
]
