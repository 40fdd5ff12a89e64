"""Sync command - bring branches up to date with their parents and remotes."""

import click

from branchline.cli.commands.options import workflow_options
from branchline.cli.core import (
    begin_workflow,
    ensure_known_ancestry,
    gather_workflow_data,
    run_workflow,
)
from branchline.core.context import BranchlineContext
from branchline.sync.branch_program import sync_branches_program
from branchline.vm.opcodes import Checkout


@click.command("sync")
@click.option("--all", "all_branches", is_flag=True, help="Sync every local branch.")
@click.option("--no-push", is_flag=True, help="Do not push branches to the remote.")
@workflow_options
@click.pass_obj
def sync_cmd(
    ctx: BranchlineContext, all_branches: bool, no_push: bool, dry_run: bool, verbose: bool
) -> None:
    """Update the current branch and its ancestors.

    Each branch absorbs its remote counterpart, then its parent, then gets
    pushed. Ancestors are always synced before their descendants.
    """
    ctx, repo = begin_workflow(ctx, dry_run=dry_run, verbose=verbose)
    if repo is None:
        return

    data = gather_workflow_data(ctx, repo, push=not no_push)
    current = data.current

    if all_branches:
        to_sync = list(data.branches.local)
    else:
        to_sync = data.lineage.branch_and_ancestors(current)
    for branch in to_sync:
        ensure_known_ancestry(data, branch)

    program = sync_branches_program(
        to_sync, lineage=data.lineage, branches=data.branches, settings=data.settings
    )
    program.append(Checkout(branch=current))

    run_workflow(
        ctx,
        data,
        command="sync",
        program=program,
        stash_open_changes=data.has_open_changes,
        previous_branch_candidates=data.previous_branch_candidates(data.branches.previous),
    )
