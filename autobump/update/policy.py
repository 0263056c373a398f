"""Update eligibility.

:func:`decide` is the single place where the bot decides whether a candidate
image should touch a base branch. It is pure: the reconciler gathers the
tracked tag and branch state beforehand and acts on the returned decision.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from autobump.update.image import ImageReference, parse_tag
from autobump.update.version import SemVer, compare_versions

__all__ = [
    "Action",
    "UpdateDecision",
    "decide",
    "is_release_branch",
]

_RELEASE_BRANCH_RE = re.compile(r"^release-\d+\.\d+$")

REASON_NOT_TRACKED = "image not referenced by this manifest"
REASON_TRACKED_NEWER = "tracked version already newer"
REASON_NO_NEW_REVISION = "no new revision"
REASON_REVISION_ONLY_SUPPRESSED = "revision-only update suppressed unless a PR is already open"
REASON_RELEASE_SERIES = "release branches accept only patch-level bumps"
REASON_NEW_REVISION = "new revision of the version already proposed"
REASON_NEW_VERSION_REFRESH = "newer version, update branch already open"
REASON_NEW_VERSION = "newer version available"


class Action(Enum):
    NO_OP = "no-op"
    CREATE_NEW = "create-new"
    REFRESH_EXISTING = "refresh-existing"
    REJECT_POLICY = "reject-policy"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class UpdateDecision:
    action: Action
    reason: str

    @property
    def mutates(self) -> bool:
        return self.action in (Action.CREATE_NEW, Action.REFRESH_EXISTING)


def is_release_branch(branch: str) -> bool:
    """True for ``release-<major>.<minor>`` style branches."""
    return _RELEASE_BRANCH_RE.match(branch) is not None


def _revision_only_update(
    tracked_revision: int,
    candidate_revision: int,
    update_branch_exists: bool,
) -> UpdateDecision:
    # A rebuild of the same version never opens a pull request on its own;
    # it only refreshes one that is already open for that version.
    if candidate_revision <= tracked_revision:
        return UpdateDecision(Action.NO_OP, REASON_NO_NEW_REVISION)
    if not update_branch_exists:
        return UpdateDecision(Action.NO_OP, REASON_REVISION_ONLY_SUPPRESSED)
    return UpdateDecision(Action.REFRESH_EXISTING, REASON_NEW_REVISION)


def _version_update(
    tracked: SemVer,
    candidate: SemVer,
    base_branch: str,
    update_branch_exists: bool,
) -> UpdateDecision:
    if is_release_branch(base_branch) and candidate.series != tracked.series:
        return UpdateDecision(Action.REJECT_POLICY, REASON_RELEASE_SERIES)
    if update_branch_exists:
        return UpdateDecision(Action.REFRESH_EXISTING, REASON_NEW_VERSION_REFRESH)
    return UpdateDecision(Action.CREATE_NEW, REASON_NEW_VERSION)


def decide(
    tracked_tag: str | None,
    candidate: ImageReference,
    base_branch: str,
    update_branch_exists: bool,
) -> UpdateDecision:
    """Decide what to do with ``candidate`` on ``base_branch``.

    Args:
        tracked_tag: Tag currently pinned in the manifest, None if the image
            is not referenced. A tag outside the tag grammar counts as not
            referenced.
        candidate: Upstream image proposed for the manifest.
        base_branch: Branch the pull request targets.
        update_branch_exists: Whether the update branch for this
            (base, component, candidate version) is already on the remote.
    """
    if tracked_tag is None:
        return UpdateDecision(Action.NO_OP, REASON_NOT_TRACKED)

    parsed = parse_tag(tracked_tag)
    if parsed is None:
        return UpdateDecision(Action.NO_OP, REASON_NOT_TRACKED)
    tracked_version, _, tracked_revision = parsed

    tracked_version_text = tracked_tag.strip().split("-", 1)[0]
    order = compare_versions(candidate.version_text, tracked_version_text)
    if order < 0:
        return UpdateDecision(Action.NO_OP, REASON_TRACKED_NEWER)
    if order == 0:
        return _revision_only_update(tracked_revision, candidate.revision, update_branch_exists)
    return _version_update(tracked_version, candidate.version, base_branch, update_branch_exists)
