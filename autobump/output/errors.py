"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from autobump.core.errors import ErrorCode
from autobump.output.console import Style
from autobump.update.errors import (
    ConfigurationError,
    InvalidImageReference,
    MaintainersFileError,
    ManifestError,
    PolicyRejection,
    PullRequestError,
    UpdateError,
    VcsOperationError,
)

if TYPE_CHECKING:
    from autobump.output.console import ConsoleProtocol

__all__ = ["print_update_error", "update_error_exit_code"]


def print_update_error(error: UpdateError, console: ConsoleProtocol) -> None:
    match error:
        case ConfigurationError(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case InvalidImageReference(text=text, reason=reason):
            console.error(f"invalid image reference: {text}")
            console.print(f"hint: {reason}", Style.DIM)
        case ManifestError(path=path, reason=reason) | MaintainersFileError(
            path=path, reason=reason
        ):
            console.error(f"{path}: {reason}")
        case PolicyRejection(
            base_branch=base, tracked_tag=tracked, candidate_tag=candidate, reason=reason
        ):
            console.error(f"{base}: refusing {tracked} -> {candidate}: {reason}")
        case VcsOperationError(command=command, message=message, hint=hint):
            console.error(f"{command} failed")
            console.print(f"hint: {hint or message}", Style.DIM)
        case PullRequestError(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)


def update_error_exit_code(error: UpdateError) -> int:
    match error:
        case ConfigurationError():
            return int(ErrorCode.ENV_ERROR)
        case InvalidImageReference():
            return int(ErrorCode.USER_ERROR)
        case ManifestError() | MaintainersFileError():
            return int(ErrorCode.IO_ERROR)
        case PolicyRejection():
            return int(ErrorCode.POLICY_ERROR)
        case VcsOperationError() | PullRequestError():
            return int(ErrorCode.VCS_ERROR)
