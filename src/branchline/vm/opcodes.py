"""The closed set of workflow opcodes.

Every workflow is compiled into a list of opcodes. Each opcode is a frozen
dataclass that knows how to run itself and how to recover from a halt:

- continuation(): what to run in its place when a run halted on a conflict
  inside this opcode (default: run it again)
- abort(): what undoes the half-finished attempt (default: nothing)
- skip(): what moves past the opcode without completing it (default: abort())
- undo(): what reverses a completed run, or None when it cannot be reversed
- snapshot(ctx): a copy enriched with repository facts read right before it
  runs, so undo() needs no further context

Opcodes are serialized as {"type": <class name>, "data": {<fields>}}.
"""

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar

from branchline.core.git.abc import Git
from branchline.core.hosting.abc import HostingDriver
from branchline.core.lineage import PARENT_KEY_PATTERN, parent_config_key
from branchline.vm.errors import OperationError

OPCODE_TYPES: dict[str, type["Opcode"]] = {}


@dataclass(frozen=True)
class RunContext:
    """Capabilities an opcode runs against."""

    git: Git
    hosting: HostingDriver | None
    repo_root: Path


@dataclass(frozen=True)
class Opcode(ABC):
    """Base class for all opcodes."""

    skippable: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        OPCODE_TYPES[cls.__name__] = cls

    @abstractmethod
    def run(self, ctx: RunContext) -> None:
        """Perform the action.

        Raises:
            ConflictError: The git operation stopped with unresolved conflicts
            OperationError: The opcode cannot complete for another reason
            RuntimeError: A git or gh subprocess failed
        """
        ...

    def snapshot(self, ctx: RunContext) -> "Opcode":
        return self

    def continuation(self) -> list["Opcode"]:
        return [self]

    def abort(self) -> list["Opcode"]:
        return []

    def skip(self) -> list["Opcode"]:
        return self.abort()

    def undo(self) -> list["Opcode"] | None:
        return []

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for field in dataclasses.fields(self):
            value = getattr(self, field.name)
            data[field.name] = list(value) if isinstance(value, tuple) else value
        return {"type": self.name, "data": data}


def opcode_from_dict(raw: object) -> Opcode:
    """Rebuild an opcode from its serialized form.

    Raises:
        ValueError: If the payload is not a known opcode
    """
    if not isinstance(raw, dict):
        raise ValueError(f"opcode entry must be an object, got {type(raw).__name__}")
    type_name = raw.get("type")
    opcode_type = OPCODE_TYPES.get(str(type_name))
    if opcode_type is None:
        raise ValueError(f"unknown opcode type {type_name!r}")
    data = raw.get("data", {})
    if not isinstance(data, dict):
        raise ValueError(f"data of {type_name} must be an object")
    known = {field.name for field in dataclasses.fields(opcode_type)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"unknown fields for {type_name}: {', '.join(sorted(unknown))}")
    kwargs = {
        key: tuple(value) if isinstance(value, list) else value for key, value in data.items()
    }
    try:
        return opcode_type(**kwargs)
    except TypeError as e:
        raise ValueError(f"invalid data for {type_name}: {e}") from e


def _require_hosting(ctx: RunContext, action: str) -> HostingDriver:
    if ctx.hosting is None:
        raise OperationError(f"cannot {action}: no hosting platform is configured")
    return ctx.hosting


def _first_existing(ctx: RunContext, candidates: tuple[str, ...]) -> str:
    for candidate in candidates:
        if ctx.git.get_branch_head(ctx.repo_root, candidate) is not None:
            return candidate
    raise OperationError(f"none of the branches {', '.join(candidates)} exist")


# ----------------------------------------------------------------------
# Branch navigation
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Checkout(Opcode):
    branch: str
    previous: str | None = None

    def run(self, ctx: RunContext) -> None:
        if ctx.git.get_current_branch(ctx.repo_root) == self.branch:
            return
        ctx.git.checkout_branch(ctx.repo_root, self.branch)

    def snapshot(self, ctx: RunContext) -> Opcode:
        return dataclasses.replace(self, previous=ctx.git.get_current_branch(ctx.repo_root))

    def undo(self) -> list[Opcode] | None:
        if self.previous is None or self.previous == self.branch:
            return []
        return [Checkout(branch=self.previous)]


@dataclass(frozen=True)
class CheckoutIfExists(Opcode):
    """Check out a branch unless an earlier opcode removed it."""

    branch: str
    previous: str | None = None

    def run(self, ctx: RunContext) -> None:
        if ctx.git.get_branch_head(ctx.repo_root, self.branch) is None:
            return
        if ctx.git.get_current_branch(ctx.repo_root) == self.branch:
            return
        ctx.git.checkout_branch(ctx.repo_root, self.branch)

    def snapshot(self, ctx: RunContext) -> Opcode:
        return dataclasses.replace(self, previous=ctx.git.get_current_branch(ctx.repo_root))

    def undo(self) -> list[Opcode] | None:
        if self.previous is None or self.previous == self.branch:
            return []
        return [CheckoutIfExists(branch=self.previous)]


@dataclass(frozen=True)
class PreserveCheckoutHistory(Opcode):
    """Leave `git checkout -` pointing at the first surviving candidate.

    Workflows check out many branches along the way; this restores the
    previous-branch slot the user had before the run.
    """

    candidates: tuple[str, ...]

    def run(self, ctx: RunContext) -> None:
        current = ctx.git.get_current_branch(ctx.repo_root)
        expected = None
        for candidate in self.candidates:
            if candidate == current:
                continue
            if ctx.git.get_branch_head(ctx.repo_root, candidate) is not None:
                expected = candidate
                break
        if expected is None or current is None:
            return
        if ctx.git.get_previous_branch(ctx.repo_root) == expected:
            return
        ctx.git.checkout_branch(ctx.repo_root, expected)
        ctx.git.checkout_branch(ctx.repo_root, current)


@dataclass(frozen=True)
class ChangeDirectory(Opcode):
    path: str

    def run(self, ctx: RunContext) -> None:
        if not ctx.git.safe_chdir(Path(self.path)):
            raise OperationError(f"cannot change into directory {self.path}")


# ----------------------------------------------------------------------
# Local branches
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class CreateBranch(Opcode):
    branch: str
    start_point: str

    def run(self, ctx: RunContext) -> None:
        ctx.git.create_branch(ctx.repo_root, self.branch, self.start_point)

    def undo(self) -> list[Opcode] | None:
        return [DeleteLocalBranch(branch=self.branch, force=True)]


@dataclass(frozen=True)
class CreateBranchExistingParent(Opcode):
    """Create a branch off the nearest ancestor that still exists.

    Earlier opcodes of the same run (a ship, for example) may have deleted
    the nearest ancestor, so the start point is resolved at run time.
    """

    branch: str
    ancestors: tuple[str, ...]

    def run(self, ctx: RunContext) -> None:
        start_point = _first_existing(ctx, self.ancestors)
        ctx.git.create_branch(ctx.repo_root, self.branch, start_point)

    def undo(self) -> list[Opcode] | None:
        return [DeleteLocalBranch(branch=self.branch, force=True)]


@dataclass(frozen=True)
class DeleteLocalBranch(Opcode):
    branch: str
    force: bool = False
    sha: str | None = None

    def run(self, ctx: RunContext) -> None:
        ctx.git.delete_branch(ctx.repo_root, self.branch, force=self.force)

    def snapshot(self, ctx: RunContext) -> Opcode:
        return dataclasses.replace(self, sha=ctx.git.get_branch_head(ctx.repo_root, self.branch))

    def undo(self) -> list[Opcode] | None:
        if self.sha is None:
            return []
        return [CreateBranch(branch=self.branch, start_point=self.sha)]


@dataclass(frozen=True)
class ResetCurrentBranchToSHA(Opcode):
    sha: str
    previous_sha: str | None = None

    def run(self, ctx: RunContext) -> None:
        ctx.git.reset_hard(ctx.repo_root, self.sha)

    def snapshot(self, ctx: RunContext) -> Opcode:
        current = ctx.git.get_current_branch(ctx.repo_root)
        if current is None:
            return self
        return dataclasses.replace(
            self, previous_sha=ctx.git.get_branch_head(ctx.repo_root, current)
        )

    def undo(self) -> list[Opcode] | None:
        if self.previous_sha is None or self.previous_sha == self.sha:
            return []
        return [ResetCurrentBranchToSHA(sha=self.previous_sha)]


@dataclass(frozen=True)
class DiscardOpenChanges(Opcode):
    def run(self, ctx: RunContext) -> None:
        ctx.git.reset_hard(ctx.repo_root, "HEAD")


@dataclass(frozen=True)
class StashOpenChanges(Opcode):
    def run(self, ctx: RunContext) -> None:
        ctx.git.stash_push(ctx.repo_root)

    def undo(self) -> list[Opcode] | None:
        return [RestoreOpenChanges()]


@dataclass(frozen=True)
class RestoreOpenChanges(Opcode):
    def run(self, ctx: RunContext) -> None:
        ctx.git.stash_pop(ctx.repo_root)

    def continuation(self) -> list[Opcode]:
        # a conflicted pop keeps the entry; the resolved changes are already in the tree
        return [DropStash()]

    def undo(self) -> list[Opcode] | None:
        return [StashOpenChanges()]


@dataclass(frozen=True)
class DropStash(Opcode):
    """Finish restoring stashed changes whose conflicts the user resolved."""

    def run(self, ctx: RunContext) -> None:
        ctx.git.stash_drop(ctx.repo_root)

    def abort(self) -> list[Opcode]:
        return [DiscardOpenChanges()]

    def undo(self) -> list[Opcode] | None:
        return [StashOpenChanges()]


# ----------------------------------------------------------------------
# Merging and rebasing
# ----------------------------------------------------------------------


def _head_of_current(ctx: RunContext) -> tuple[str | None, str | None]:
    current = ctx.git.get_current_branch(ctx.repo_root)
    if current is None:
        return None, None
    return current, ctx.git.get_branch_head(ctx.repo_root, current)


def _reset_to(sha: str | None) -> list["Opcode"]:
    if sha is None:
        return []
    return [ResetCurrentBranchToSHA(sha=sha)]


@dataclass(frozen=True)
class MergeBranch(Opcode):
    """Merge `branch` into the checked-out branch."""

    skippable: ClassVar[bool] = True

    branch: str
    current: str | None = None
    sha_before: str | None = None

    def run(self, ctx: RunContext) -> None:
        ctx.git.merge_branch(ctx.repo_root, self.branch)

    def snapshot(self, ctx: RunContext) -> Opcode:
        current, sha = _head_of_current(ctx)
        return dataclasses.replace(self, current=current, sha_before=sha)

    def continuation(self) -> list[Opcode]:
        return [ContinueMerge(current=self.current, sha_before=self.sha_before)]

    def abort(self) -> list[Opcode]:
        return [AbortMerge()]

    def undo(self) -> list[Opcode] | None:
        return _reset_to(self.sha_before)


@dataclass(frozen=True)
class ContinueMerge(Opcode):
    """Conclude a merge the user resolved by hand."""

    skippable: ClassVar[bool] = True

    current: str | None = None
    sha_before: str | None = None

    def run(self, ctx: RunContext) -> None:
        # the user may already have committed the resolution
        if ctx.git.is_merge_in_progress(ctx.repo_root):
            ctx.git.continue_merge(ctx.repo_root)

    def abort(self) -> list[Opcode]:
        return [AbortMerge()]

    def undo(self) -> list[Opcode] | None:
        return _reset_to(self.sha_before)


@dataclass(frozen=True)
class AbortMerge(Opcode):
    def run(self, ctx: RunContext) -> None:
        if ctx.git.is_merge_in_progress(ctx.repo_root):
            ctx.git.abort_merge(ctx.repo_root)


@dataclass(frozen=True)
class RebaseBranch(Opcode):
    """Rebase the checked-out branch onto `onto`."""

    skippable: ClassVar[bool] = True

    onto: str
    current: str | None = None
    sha_before: str | None = None

    def run(self, ctx: RunContext) -> None:
        ctx.git.rebase_branch(ctx.repo_root, self.onto)

    def snapshot(self, ctx: RunContext) -> Opcode:
        current, sha = _head_of_current(ctx)
        return dataclasses.replace(self, current=current, sha_before=sha)

    def continuation(self) -> list[Opcode]:
        return [ContinueRebase(current=self.current, sha_before=self.sha_before)]

    def abort(self) -> list[Opcode]:
        return [AbortRebase()]

    def undo(self) -> list[Opcode] | None:
        return _reset_to(self.sha_before)


@dataclass(frozen=True)
class ContinueRebase(Opcode):
    skippable: ClassVar[bool] = True

    current: str | None = None
    sha_before: str | None = None

    def run(self, ctx: RunContext) -> None:
        if ctx.git.is_rebase_in_progress(ctx.repo_root):
            ctx.git.continue_rebase(ctx.repo_root)

    def abort(self) -> list[Opcode]:
        return [AbortRebase()]

    def undo(self) -> list[Opcode] | None:
        return _reset_to(self.sha_before)


@dataclass(frozen=True)
class AbortRebase(Opcode):
    def run(self, ctx: RunContext) -> None:
        if ctx.git.is_rebase_in_progress(ctx.repo_root):
            ctx.git.abort_rebase(ctx.repo_root)


@dataclass(frozen=True)
class PullCurrentBranch(Opcode):
    """Bring the checked-out branch up to date with its remote counterpart."""

    skippable: ClassVar[bool] = True

    branch: str
    remote: str
    ff_only: bool = False
    sha_before: str | None = None

    def run(self, ctx: RunContext) -> None:
        ctx.git.pull_branch(ctx.repo_root, self.remote, self.branch, ff_only=self.ff_only)

    def snapshot(self, ctx: RunContext) -> Opcode:
        return dataclasses.replace(
            self, sha_before=ctx.git.get_branch_head(ctx.repo_root, self.branch)
        )

    def continuation(self) -> list[Opcode]:
        return [ContinueMerge(current=self.branch, sha_before=self.sha_before)]

    def abort(self) -> list[Opcode]:
        return [AbortMerge()]

    def undo(self) -> list[Opcode] | None:
        return _reset_to(self.sha_before)


@dataclass(frozen=True)
class SquashMerge(Opcode):
    """Squash `branch` into the checked-out branch as a single commit.

    Not skippable: skipping would leave a half-shipped branch behind.
    """

    branch: str
    message: str
    current: str | None = None
    sha_before: str | None = None

    def run(self, ctx: RunContext) -> None:
        ctx.git.squash_merge(ctx.repo_root, self.branch)
        ctx.git.commit(ctx.repo_root, self.message)

    def snapshot(self, ctx: RunContext) -> Opcode:
        current, sha = _head_of_current(ctx)
        return dataclasses.replace(self, current=current, sha_before=sha)

    def continuation(self) -> list[Opcode]:
        return [
            CommitSquashedChanges(
                message=self.message, current=self.current, sha_before=self.sha_before
            )
        ]

    def abort(self) -> list[Opcode]:
        return [DiscardOpenChanges()]

    def undo(self) -> list[Opcode] | None:
        return _reset_to(self.sha_before)


@dataclass(frozen=True)
class CommitSquashedChanges(Opcode):
    message: str
    current: str | None = None
    sha_before: str | None = None

    def run(self, ctx: RunContext) -> None:
        ctx.git.commit(ctx.repo_root, self.message)

    def abort(self) -> list[Opcode]:
        return [DiscardOpenChanges()]

    def undo(self) -> list[Opcode] | None:
        return _reset_to(self.sha_before)


@dataclass(frozen=True)
class EnsureHasShippableChanges(Opcode):
    branch: str
    parent: str

    def run(self, ctx: RunContext) -> None:
        if not ctx.git.has_diff(ctx.repo_root, self.parent, self.branch):
            raise OperationError(f"the branch '{self.branch}' has no shippable changes")


# ----------------------------------------------------------------------
# Remote branches
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class CreateTrackingBranch(Opcode):
    branch: str
    remote: str
    no_verify: bool = False

    def run(self, ctx: RunContext) -> None:
        ctx.git.create_tracking_branch(
            ctx.repo_root, self.remote, self.branch, no_verify=self.no_verify
        )

    def undo(self) -> list[Opcode] | None:
        return [DeleteRemoteBranch(branch=self.branch, remote=self.remote)]


@dataclass(frozen=True)
class PushBranch(Opcode):
    branch: str
    remote: str
    force_with_lease: bool = False
    no_verify: bool = False

    def run(self, ctx: RunContext) -> None:
        ctx.git.push_branch(
            ctx.repo_root,
            self.remote,
            self.branch,
            force_with_lease=self.force_with_lease,
            no_verify=self.no_verify,
        )

    def undo(self) -> list[Opcode] | None:
        return None


@dataclass(frozen=True)
class DeleteRemoteBranch(Opcode):
    branch: str
    remote: str

    def run(self, ctx: RunContext) -> None:
        ctx.git.delete_remote_branch(ctx.repo_root, self.remote, self.branch)

    def undo(self) -> list[Opcode] | None:
        return None


# ----------------------------------------------------------------------
# Lineage
# ----------------------------------------------------------------------


def _restore_parent(branch: str, previous_parent: str | None) -> list[Opcode]:
    if previous_parent is None:
        return [RemoveParent(branch=branch)]
    return [SetParent(branch=branch, parent=previous_parent)]


def _current_parent(ctx: RunContext, branch: str) -> str | None:
    entries = ctx.git.get_config_regexp(ctx.repo_root, PARENT_KEY_PATTERN)
    return entries.get(parent_config_key(branch))


@dataclass(frozen=True)
class SetParent(Opcode):
    branch: str
    parent: str
    previous_parent: str | None = None

    def run(self, ctx: RunContext) -> None:
        ctx.git.set_config(ctx.repo_root, parent_config_key(self.branch), self.parent)

    def snapshot(self, ctx: RunContext) -> Opcode:
        return dataclasses.replace(self, previous_parent=_current_parent(ctx, self.branch))

    def undo(self) -> list[Opcode] | None:
        if self.previous_parent == self.parent:
            return []
        return _restore_parent(self.branch, self.previous_parent)


@dataclass(frozen=True)
class SetExistingParent(Opcode):
    """Set the parent to the nearest of `ancestors` that still exists."""

    branch: str
    ancestors: tuple[str, ...]
    previous_parent: str | None = None

    def run(self, ctx: RunContext) -> None:
        parent = _first_existing(ctx, self.ancestors)
        ctx.git.set_config(ctx.repo_root, parent_config_key(self.branch), parent)

    def snapshot(self, ctx: RunContext) -> Opcode:
        return dataclasses.replace(self, previous_parent=_current_parent(ctx, self.branch))

    def undo(self) -> list[Opcode] | None:
        return _restore_parent(self.branch, self.previous_parent)


@dataclass(frozen=True)
class RemoveParent(Opcode):
    branch: str
    previous_parent: str | None = None

    def run(self, ctx: RunContext) -> None:
        ctx.git.unset_config(ctx.repo_root, parent_config_key(self.branch))

    def snapshot(self, ctx: RunContext) -> Opcode:
        return dataclasses.replace(self, previous_parent=_current_parent(ctx, self.branch))

    def undo(self) -> list[Opcode] | None:
        if self.previous_parent is None:
            return []
        return [SetParent(branch=self.branch, parent=self.previous_parent)]


# ----------------------------------------------------------------------
# Hosting
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class MergePullRequest(Opcode):
    branch: str
    parent: str
    number: int
    message: str

    def run(self, ctx: RunContext) -> None:
        hosting = _require_hosting(ctx, f"merge pull request #{self.number}")
        hosting.merge_pull_request(
            ctx.repo_root, self.branch, self.parent, self.number, self.message
        )

    def undo(self) -> list[Opcode] | None:
        return None


@dataclass(frozen=True)
class UpdatePullRequestBase(Opcode):
    number: int
    new_base: str
    old_base: str

    def run(self, ctx: RunContext) -> None:
        hosting = _require_hosting(ctx, f"update pull request #{self.number}")
        hosting.update_pull_request_base(ctx.repo_root, self.number, self.new_base)

    def undo(self) -> list[Opcode] | None:
        return [
            UpdatePullRequestBase(
                number=self.number, new_base=self.old_base, old_base=self.new_base
            )
        ]
