"""Hack command - start a new feature branch off the main branch."""

import click

from branchline.cli.commands.options import workflow_options
from branchline.cli.core import begin_workflow, gather_workflow_data, run_workflow
from branchline.cli.ensure import Ensure
from branchline.core.context import BranchlineContext
from branchline.sync.branch_program import sync_branches_program
from branchline.vm.opcodes import Checkout, CreateBranch, CreateTrackingBranch, SetParent
from branchline.vm.program import Program


@click.command("hack")
@click.argument("branch")
@workflow_options
@click.pass_obj
def hack_cmd(ctx: BranchlineContext, branch: str, dry_run: bool, verbose: bool) -> None:
    """Create a new feature branch off the main branch.

    Syncs the main branch first, then creates BRANCH from it, records main as
    its parent and checks it out. Uncommitted changes move to the new branch.
    """
    ctx, repo = begin_workflow(ctx, dry_run=dry_run, verbose=verbose)
    if repo is None:
        return

    Ensure.valid_branch_name(branch)
    data = gather_workflow_data(ctx, repo)
    Ensure.branch_absent(data.branches, data.settings.remote, branch)
    main = data.main_branch

    program = sync_branches_program(
        [main], lineage=data.lineage, branches=data.branches, settings=data.settings
    )
    program.append_all(
        Program(
            [
                CreateBranch(branch=branch, start_point=main),
                SetParent(branch=branch, parent=main),
                Checkout(branch=branch),
            ]
        )
    )
    if data.settings.remote_enabled and data.settings.push_new_branches:
        program.append(
            CreateTrackingBranch(
                branch=branch, remote=data.settings.remote, no_verify=data.settings.no_verify
            )
        )

    run_workflow(
        ctx,
        data,
        command="hack",
        program=program,
        stash_open_changes=data.has_open_changes,
        previous_branch_candidates=data.previous_branch_candidates(data.branches.current),
    )
