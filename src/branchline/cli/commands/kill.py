"""Kill command - delete a feature branch everywhere."""

import click

from branchline.cli.commands.options import workflow_options
from branchline.cli.core import (
    WorkflowData,
    begin_workflow,
    ensure_known_ancestry,
    gather_workflow_data,
    run_workflow,
)
from branchline.cli.ensure import Ensure
from branchline.core.context import BranchlineContext
from branchline.vm.opcodes import (
    Checkout,
    DeleteLocalBranch,
    DeleteRemoteBranch,
    RemoveParent,
    SetParent,
)
from branchline.vm.program import Program


def kill_program(data: WorkflowData, *, branch: str, parent: str) -> Program:
    settings = data.settings
    program = Program()
    if settings.remote_enabled and data.branches.has_remote(settings.remote, branch):
        program.append(DeleteRemoteBranch(branch=branch, remote=settings.remote))
    if branch == data.branches.current:
        program.append(Checkout(branch=parent))
    program.append(DeleteLocalBranch(branch=branch, force=True))
    for child in data.lineage.children(branch):
        program.append(SetParent(branch=child, parent=parent))
    program.append(RemoveParent(branch=branch))
    return program


@click.command("kill")
@click.argument("branch", required=False)
@workflow_options
@click.pass_obj
def kill_cmd(ctx: BranchlineContext, branch: str | None, dry_run: bool, verbose: bool) -> None:
    """Delete a feature branch locally and on the remote.

    BRANCH defaults to the current branch. Its children move to its parent.
    """
    ctx, repo = begin_workflow(ctx, dry_run=dry_run, verbose=verbose)
    if repo is None:
        return

    data = gather_workflow_data(ctx, repo)
    target = branch if branch is not None else data.current
    Ensure.branch_exists(data.branches, target)
    Ensure.invariant(
        not data.is_root(target),
        f"The branch '{target}' is not a feature branch. Only feature branches can be killed",
    )
    ensure_known_ancestry(data, target)
    parent = Ensure.not_none(data.lineage.parent(target), f"'{target}' has no parent")

    killing_current = target == data.branches.current
    if killing_current:
        Ensure.invariant(
            not data.has_open_changes,
            "You have uncommitted changes. Commit or stash them before killing this branch",
        )

    run_workflow(
        ctx,
        data,
        command="kill",
        program=kill_program(data, branch=target, parent=parent),
        stash_open_changes=data.has_open_changes and not killing_current,
        previous_branch_candidates=tuple(
            c for c in data.previous_branch_candidates() if c != target
        ),
    )
