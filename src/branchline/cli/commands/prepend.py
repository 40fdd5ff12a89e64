"""Prepend command - insert a new branch between the current branch and its parent."""

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
    SetParent,
)


@click.command("prepend")
@click.argument("branch")
@workflow_options
@click.pass_obj
def prepend_cmd(ctx: BranchlineContext, branch: str, dry_run: bool, verbose: bool) -> None:
    """Create BRANCH as the new parent of the current branch.

    BRANCH starts from the current branch's parent and takes its place in
    the lineage. The current branch keeps its commits.
    """
    ctx, repo = begin_workflow(ctx, dry_run=dry_run, verbose=verbose)
    if repo is None:
        return

    Ensure.valid_branch_name(branch)
    data = gather_workflow_data(ctx, repo)
    current = data.current
    Ensure.invariant(
        not data.is_root(current),
        f"The branch '{current}' is not a feature branch. Only feature branches can have parents",
    )
    Ensure.branch_absent(data.branches, data.settings.remote, branch)
    ensure_known_ancestry(data, current)

    lineage = data.lineage
    parent = Ensure.not_none(lineage.parent(current), f"'{current}' has no parent")
    candidates = (parent, *reversed(lineage.ancestors(parent)))

    program = sync_branches_program(
        lineage.branch_and_ancestors(parent),
        lineage=lineage,
        branches=data.branches,
        settings=data.settings,
    )
    program.append(CreateBranchExistingParent(branch=branch, ancestors=candidates))
    program.append(SetExistingParent(branch=branch, ancestors=candidates))
    program.append(SetParent(branch=current, parent=branch))
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
        command="prepend",
        program=program,
        stash_open_changes=data.has_open_changes,
        previous_branch_candidates=data.previous_branch_candidates(current),
    )
