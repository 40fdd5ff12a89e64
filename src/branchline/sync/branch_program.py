"""Planning the opcodes that bring branches up to date.

Planning is pure: everything the planner needs (lineage, branch snapshot,
sync settings) is read before it runs, and fetching happens once per command
invocation, never per branch.
"""

from dataclasses import dataclass

from branchline.cli.config import SyncStrategy
from branchline.core.branches import BranchesSnapshot
from branchline.core.lineage import Lineage
from branchline.vm.opcodes import (
    Checkout,
    CreateTrackingBranch,
    MergeBranch,
    Opcode,
    PushBranch,
    RebaseBranch,
)
from branchline.vm.program import Program


@dataclass(frozen=True)
class SyncSettings:
    """Everything about the environment that shapes a sync plan.

    Attributes:
        strategy: How feature branches absorb their parent and remote changes
        remote: Name of the remote branches are pushed to
        has_remote: Whether that remote is configured
        online: False when running offline
        push: Push branches that already track a remote branch
        push_new_branches: Create tracking branches for untracked branches
        no_verify: Skip the pre-push hook
        root_branches: Main and perennial branches
    """

    strategy: SyncStrategy
    remote: str
    has_remote: bool
    online: bool
    push: bool
    push_new_branches: bool
    no_verify: bool
    root_branches: frozenset[str]

    @property
    def remote_enabled(self) -> bool:
        return self.has_remote and self.online


def _reconcile(strategy: SyncStrategy, other: str) -> Opcode:
    if strategy == "rebase":
        return RebaseBranch(onto=other)
    return MergeBranch(branch=other)


def sync_branch_program(
    branch: str,
    *,
    lineage: Lineage,
    branches: BranchesSnapshot,
    settings: SyncSettings,
) -> Program:
    """Plan the sync of a single branch.

    The plan checks the branch out, absorbs its remote counterpart, absorbs
    its parent, then pushes. Root branches always rebase onto their remote
    counterpart so they never gain merge commits.
    """
    program = Program()
    program.append(Checkout(branch=branch))

    is_root = branch in settings.root_branches
    strategy: SyncStrategy = "rebase" if is_root else settings.strategy
    tracked = branches.has_remote(settings.remote, branch)

    if tracked and settings.remote_enabled:
        program.append(_reconcile(strategy, f"{settings.remote}/{branch}"))

    parent = None if is_root else lineage.parent(branch)
    if parent is not None:
        program.append(_reconcile(strategy, parent))

    if settings.remote_enabled:
        if tracked and settings.push:
            program.append(
                PushBranch(
                    branch=branch,
                    remote=settings.remote,
                    force_with_lease=strategy == "rebase" and not is_root,
                    no_verify=settings.no_verify,
                )
            )
        elif not tracked and settings.push_new_branches and not is_root:
            program.append(
                CreateTrackingBranch(
                    branch=branch, remote=settings.remote, no_verify=settings.no_verify
                )
            )
    return program


def sync_branches_program(
    branches_to_sync: list[str],
    *,
    lineage: Lineage,
    branches: BranchesSnapshot,
    settings: SyncSettings,
) -> Program:
    """Plan the sync of several branches, ancestors before descendants."""
    program = Program()
    for branch in lineage.order_hierarchically(branches_to_sync):
        program.append_all(
            sync_branch_program(branch, lineage=lineage, branches=branches, settings=settings)
        )
    return program
