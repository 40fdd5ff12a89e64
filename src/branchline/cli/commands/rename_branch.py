"""Rename-branch command - rename a branch locally, remotely and in the lineage."""

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
    CreateBranch,
    CreateTrackingBranch,
    DeleteLocalBranch,
    DeleteRemoteBranch,
    RemoveParent,
    SetParent,
)
from branchline.vm.program import Program


def rename_program(data: WorkflowData, *, old: str, new: str) -> Program:
    settings = data.settings
    lineage = data.lineage

    program = Program()
    program.append(CreateBranch(branch=new, start_point=old))
    if old == data.branches.current:
        program.append(Checkout(branch=new))

    parent = lineage.parent(old)
    if parent is not None:
        program.append(SetParent(branch=new, parent=parent))
        program.append(RemoveParent(branch=old))
    for child in lineage.children(old):
        program.append(SetParent(branch=child, parent=new))

    if settings.remote_enabled and data.branches.has_remote(settings.remote, old):
        program.append(
            CreateTrackingBranch(branch=new, remote=settings.remote, no_verify=settings.no_verify)
        )
        program.append(DeleteRemoteBranch(branch=old, remote=settings.remote))

    program.append(DeleteLocalBranch(branch=old, force=True))
    return program


@click.command("rename-branch")
@click.argument("names", nargs=-1, required=True)
@click.option(
    "-f",
    "--force",
    is_flag=True,
    help="Rename even when the branch differs from its tracking branch.",
)
@workflow_options
@click.pass_obj
def rename_branch_cmd(
    ctx: BranchlineContext, names: tuple[str, ...], force: bool, dry_run: bool, verbose: bool
) -> None:
    """Rename a branch: rename-branch [OLD] NEW.

    OLD defaults to the current branch. Parent and children are carried over
    to the new name, and a tracked branch is renamed on the remote as well.
    """
    if len(names) > 2:
        raise click.UsageError("expected at most two branch names: [OLD] NEW")

    ctx, repo = begin_workflow(ctx, dry_run=dry_run, verbose=verbose)
    if repo is None:
        return

    data = gather_workflow_data(ctx, repo)
    if len(names) == 2:
        old, new = names
    else:
        old, new = data.current, names[0]

    Ensure.valid_branch_name(new)
    Ensure.invariant(old != new, "Cannot rename a branch to its current name")
    Ensure.branch_exists(data.branches, old)
    Ensure.invariant(
        not data.is_root(old),
        f"The branch '{old}' is the main branch or a perennial branch and cannot be renamed",
    )
    ensure_known_ancestry(data, old)
    Ensure.branch_absent(data.branches, data.settings.remote, new)

    remote = data.settings.remote
    if data.branches.has_remote(remote, old) and not force:
        local_sha = ctx.git.get_branch_head(repo.root, old)
        remote_sha = ctx.git.get_branch_head(repo.root, f"{remote}/{old}")
        Ensure.invariant(
            local_sha == remote_sha,
            f"'{old}' is not in sync with its tracking branch.\n"
            "Run 'branchline sync' first or use --force",
        )

    run_workflow(
        ctx,
        data,
        command="rename-branch",
        program=rename_program(data, old=old, new=new),
        stash_open_changes=False,
        previous_branch_candidates=tuple(
            c for c in data.previous_branch_candidates() if c != old
        ),
    )
