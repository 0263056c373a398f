"""Apply an update decision to the scratch clone, the fork and the upstream PRs.

One call to :meth:`UpdateReconciler.reconcile` handles one image against one
base branch: decide, mutate, push, prune. When the update branch is already
open, the candidate is compared against the tag on that branch rather than
the one on the base, so an older rebuild never overwrites a newer one.

Re-running is safe and finishes an interrupted run: a branch that already
carries the candidate tag is not committed to again, but its missing pull
request is opened and superseded siblings are still pruned.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TypeVar

from autobump.core.result import Err, Ok, Result
from autobump.git.repository import GitError, Repository
from autobump.output.console import ConsoleProtocol, Style
from autobump.update.branches import BranchRegistry, update_branch_name
from autobump.update.errors import PolicyRejection, UpdateError, vcs_error
from autobump.update.image import ImageReference
from autobump.update.manifest import ManifestStore
from autobump.update.policy import Action, UpdateDecision, decide
from autobump.update.pull_request import DEFAULT_PR_LABEL, PullRequestClient
from autobump.update.workspace import ORIGIN_REMOTE, UPSTREAM_REMOTE

T = TypeVar("T")

__all__ = [
    "ReconcileOutcome",
    "UpdateReconciler",
    "UpdateRequest",
    "commit_message",
    "pull_request_title",
]


@dataclass(frozen=True, slots=True)
class UpdateRequest:
    candidate: ImageReference
    base_branch: str
    component: str


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    """What one reconcile run decided and did.

    ``tracked_tag`` is the tag the decision compared against: the update
    branch's when that branch is open, the base branch's otherwise.
    """

    decision: UpdateDecision
    branch: str
    tracked_tag: str | None
    changed: bool = False
    pull_request_url: str | None = None
    pruned: tuple[str, ...] = ()


def commit_message(component: str, candidate: ImageReference) -> str:
    return f"{component}: component image updated to '{candidate.full_name}'"


def pull_request_title(base_branch: str, component: str, old_tag: str, new_tag: str) -> str:
    return f"[maintenance/{base_branch}] '{component}' updated '{old_tag}' -> '{new_tag}'"


def _pull_request_body(request: UpdateRequest, base_tag: str) -> str:
    c = request.candidate
    return (
        f"Automated update of `{c.name}` on `{request.base_branch}`.\n\n"
        f"- previous: `{c.name}:{base_tag}`\n"
        f"- proposed: `{c.full_name}`\n\n"
        "Later revisions of this version are pushed to this branch; "
        "the branch is deleted once a newer version is proposed."
    )


class UpdateReconciler:
    """Drives git and pull-request side effects for one update decision.

    Collaborators are injected; the reconciler holds no global state.
    ``manifest`` must point inside ``repo``'s working tree.
    """

    def __init__(
        self,
        *,
        repo: Repository,
        manifest: ManifestStore,
        pull_requests: PullRequestClient,
        console: ConsoleProtocol,
        label: str | None = DEFAULT_PR_LABEL,
        reviewers: tuple[str, ...] = (),
        origin: str = ORIGIN_REMOTE,
        upstream: str = UPSTREAM_REMOTE,
        redact: Callable[[str], str] = str,
        dry_run: bool = False,
    ) -> None:
        self.repo = repo
        self.manifest = manifest
        self.pull_requests = pull_requests
        self.branches = BranchRegistry(repo)
        self.console = console
        self.label = label
        self.reviewers = reviewers
        self.origin = origin
        self.upstream = upstream
        self._redact = redact
        self._dry_run = dry_run

    def _git(self, result: Result[T, GitError]) -> Result[T, UpdateError]:
        if isinstance(result, Err):
            return Err(vcs_error(result.error, self._redact))
        return result

    def reconcile(self, request: UpdateRequest) -> Result[ReconcileOutcome, UpdateError]:
        candidate = request.candidate
        base = request.base_branch
        branch = update_branch_name(base, request.component, candidate.version_text)

        self.console.print(f"git checkout -B {base} {self.upstream}/{base}", Style.DIM)
        checked_out = self._git(self.repo.checkout_reset(base, f"{self.upstream}/{base}"))
        if isinstance(checked_out, Err):
            return checked_out

        exists = self._git(self.branches.exists(self.origin, branch))
        if isinstance(exists, Err):
            return exists

        on_base = self.manifest.read_current_tag(candidate.name)
        if isinstance(on_base, Err):
            return on_base
        base_tag = on_base.value

        tracked_tag = base_tag
        if exists.value and base_tag is not None:
            resumed = self._resume_branch(branch)
            if isinstance(resumed, Err):
                return resumed
            on_branch = self.manifest.read_current_tag(candidate.name)
            if isinstance(on_branch, Err):
                return on_branch
            tracked_tag = on_branch.value

        decision = decide(tracked_tag, candidate, base, exists.value)
        self.console.info(f"{request.component}@{base}: {decision.action} ({decision.reason})")
        outcome = ReconcileOutcome(decision=decision, branch=branch, tracked_tag=tracked_tag)

        if decision.action is Action.REJECT_POLICY:
            return Err(
                PolicyRejection(
                    base_branch=base,
                    tracked_tag=tracked_tag or "",
                    candidate_tag=candidate.tag,
                    reason=decision.reason,
                )
            )

        if self._dry_run:
            if decision.mutates:
                self.console.print(f"dry-run: would {decision.action} {branch}", Style.DIM)
            return Ok(outcome)

        if base_tag is None or tracked_tag is None:
            return Ok(outcome)
        if not decision.mutates and not exists.value:
            return Ok(outcome)

        changed = False
        if decision.mutates:
            if decision.action is Action.CREATE_NEW:
                started = self._start_branch(branch, base)
                if isinstance(started, Err):
                    return started
            committed = self._commit_and_push(request, branch)
            if isinstance(committed, Err):
                return committed
            changed = committed.value
        else:
            self.console.info(f"{branch}: nothing new to push, checking its pull request")

        if decision.action is Action.CREATE_NEW:
            url = self._open_pull_request(request, branch, base_tag)
        else:
            url = self._ensure_pull_request(request, branch, base_tag)
        if isinstance(url, Err):
            return url

        pruned = self.prune(request, keep=branch)
        if isinstance(pruned, Err):
            return pruned

        if changed:
            self.console.success(f"{branch}: {candidate.full_name}")
        return Ok(
            replace(
                outcome,
                changed=changed,
                pull_request_url=url.value,
                pruned=tuple(pruned.value),
            )
        )

    def _start_branch(self, branch: str, base: str) -> Result[None, UpdateError]:
        self.console.print(f"git checkout -B {branch} {base}", Style.DIM)
        return self._git(self.repo.checkout_reset(branch, base))

    def _resume_branch(self, branch: str) -> Result[None, UpdateError]:
        self.console.print(f"git checkout -B {branch} {self.origin}/{branch}", Style.DIM)
        checked_out = self._git(self.repo.checkout_reset(branch, f"{self.origin}/{branch}"))
        if isinstance(checked_out, Err):
            return checked_out

        # Someone may have pushed manual fixes on top of the bot's commit.
        pulled = self.repo.pull_ff(self.origin, branch)
        if isinstance(pulled, Err):
            self.console.warning(f"{branch}: pull failed, continuing with fetched state")
            self.console.print(f"hint: {self._redact(pulled.error.message)}", Style.DIM)
        return Ok(None)

    def _commit_and_push(self, request: UpdateRequest, branch: str) -> Result[bool, UpdateError]:
        written = self.manifest.set_component_image(request.candidate)
        if isinstance(written, Err):
            return written
        if not written.value:
            return Ok(False)

        message = commit_message(request.component, request.candidate)
        self.console.print(f"git commit -m {message}", Style.DIM)
        added = self._git(self.repo.add([self.manifest.path]))
        if isinstance(added, Err):
            return added
        committed = self._git(self.repo.commit(message))
        if isinstance(committed, Err):
            return committed

        self.console.print(f"git push --force {self.origin} {branch}", Style.DIM)
        pushed = self._git(self.repo.push(self.origin, branch, force=True))
        if isinstance(pushed, Err):
            return pushed
        return Ok(True)

    def _open_pull_request(
        self,
        request: UpdateRequest,
        branch: str,
        base_tag: str,
    ) -> Result[str | None, UpdateError]:
        created = self.pull_requests.create(
            base_branch=request.base_branch,
            branch=branch,
            title=pull_request_title(
                request.base_branch, request.component, base_tag, request.candidate.tag
            ),
            body=_pull_request_body(request, base_tag),
            label=self.label,
            reviewers=list(self.reviewers),
        )
        if isinstance(created, Err):
            return created
        self.console.print(f"opened {created.value}", Style.DIM)
        return Ok(created.value)

    def _ensure_pull_request(
        self,
        request: UpdateRequest,
        branch: str,
        base_tag: str,
    ) -> Result[str | None, UpdateError]:
        # An open update branch has exactly one open PR. A branch without one
        # was left by a run that failed after pushing; its PR is opened now.
        found = self.pull_requests.find_open(branch)
        if isinstance(found, Err):
            self.console.warning(f"{branch}: could not look up its pull request")
            self.console.print(f"hint: {found.error.hint or found.error.message}", Style.DIM)
            return Ok(None)
        if found.value is not None:
            return Ok(found.value)

        self.console.warning(f"{branch}: no open pull request, opening one")
        return self._open_pull_request(request, branch, base_tag)

    def prune(self, request: UpdateRequest, *, keep: str) -> Result[list[str], UpdateError]:
        """Delete the other update branches of this (base, component).

        Each sibling is removed from the development remote and, when it
        exists, locally.
        """
        siblings = self._git(
            self.branches.sibling_branches(
                self.origin, request.base_branch, request.component, exclude=keep
            )
        )
        if isinstance(siblings, Err):
            return siblings

        pruned: list[str] = []
        for name in siblings.value:
            self.console.print(f"git push {self.origin} --delete {name}", Style.DIM)
            deleted = self._git(self.repo.delete_remote_branch(self.origin, name))
            if isinstance(deleted, Err):
                return deleted
            if self.repo.local_branch_exists(name):
                self.console.print(f"git branch -D {name}", Style.DIM)
                local = self._git(self.repo.delete_local_branch(name))
                if isinstance(local, Err):
                    return local
            pruned.append(name)
        return Ok(pruned)
