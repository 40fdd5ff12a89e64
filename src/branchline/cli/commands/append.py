"""Append command - create a child of the current branch."""

import click

from branchline.cli.commands.options import workflow_options
from branchline.cli.core import (
    begin_workflow,
    ensure_known_ancestry,
    gather_workflow_data,
    run_workflow,
)
from branchline.cli.ensure import Ensure
from branchline.core.context import BranchlineContext
from branchline.sync.branch_program import sync_branches_program
from branchline.vm.opcodes import (
    Checkout,
    CreateBranchExistingParent,
    CreateTrackingBranch,
    SetExistingParent,
)


@click.command("append")
@click.argument("branch")
@workflow_options
@click.pass_obj
def append_cmd(ctx: BranchlineContext, branch: str, dry_run: bool, verbose: bool) -> None:
    """Create BRANCH as a child of the current branch.

    Syncs the current branch and all its ancestors first, so the new branch
    starts from up-to-date code.
    """
    ctx, repo = begin_workflow(ctx, dry_run=dry_run, verbose=verbose)
    if repo is None:
        return

    Ensure.valid_branch_name(branch)
    data = gather_workflow_data(ctx, repo)
    current = data.current
    Ensure.branch_absent(data.branches, data.settings.remote, branch)
    ensure_known_ancestry(data, current)

    lineage = data.lineage
    # nearest first: the current branch, then its parent, up to the root
    candidates = (current, *reversed(lineage.ancestors(current)))

    program = sync_branches_program(
        lineage.branch_and_ancestors(current),
        lineage=lineage,
        branches=data.branches,
        settings=data.settings,
    )
    program.append(CreateBranchExistingParent(branch=branch, ancestors=candidates))
    program.append(SetExistingParent(branch=branch, ancestors=candidates))
    program.append(Checkout(branch=branch))
    if data.settings.remote_enabled and data.settings.push_new_branches:
        program.append(
            CreateTrackingBranch(
                branch=branch, remote=data.settings.remote, no_verify=data.settings.no_verify
            )
        )

    run_workflow(
        ctx,
        data,
        command="append",
        program=program,
        stash_open_changes=data.has_open_changes,
        previous_branch_candidates=data.previous_branch_candidates(current),
    )
