"""Process exit codes.

A run that decided there was nothing to do exits with ``OK`` just like a run
that pushed an update. Everything else maps to a stable non-zero status so a
CI pipeline can tell the failure classes apart:

- 0: Success (update applied or nothing to do)
- 1: User error (bad image reference, bad arguments)
- 2: Environment error (missing tool or credential)
- 3: Policy rejection (release branch refused the bump)
- 4: VCS / network error (git or gh command failed)
- 5: I/O error (manifest missing or unreadable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands. Values must remain stable."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    POLICY_ERROR = 3
    VCS_ERROR = 4
    IO_ERROR = 5
