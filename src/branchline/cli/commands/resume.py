"""Commands that operate on the persisted run state: continue, skip, undo, status."""

import click

from branchline.cli.commands.options import workflow_options
from branchline.cli.core import (
    configure_logging,
    describe_opcode,
    finish,
    protocol_failure,
    validation_failure,
    with_dry_run,
)
from branchline.cli.ensure import Ensure
from branchline.cli.output import format_branch, user_output
from branchline.core.context import BranchlineContext
from branchline.core.repo_discovery import RepoContext
from branchline.vm.errors import OperationError, ProtocolError
from branchline.vm.runstate import RunState
from branchline.vm.unfinished import continue_run, skip_run, undo_run


def _prepare(ctx: BranchlineContext, *, dry_run: bool, verbose: bool) -> BranchlineContext:
    configure_logging(verbose)
    if dry_run:
        return with_dry_run(ctx)
    return ctx


def _load_unfinished(ctx: BranchlineContext, repo: RepoContext, action: str) -> RunState:
    try:
        state = ctx.runstate_store.load(repo.root)
    except ProtocolError as e:
        protocol_failure(e)
    if state is None or not state.is_unfinished:
        Ensure.invariant(False, f"Nothing to {action}")
    assert state is not None
    return state


@click.command("continue")
@workflow_options
@click.pass_obj
def continue_cmd(ctx: BranchlineContext, dry_run: bool, verbose: bool) -> None:
    """Resume the halted command after resolving its conflicts."""
    ctx = _prepare(ctx, dry_run=dry_run, verbose=verbose)
    repo = Ensure.in_repo(ctx)
    state = _load_unfinished(ctx, repo, "continue")
    try:
        result = continue_run(ctx, repo.root, state)
    except OperationError as e:
        validation_failure(e)
    finish(result)


@click.command("skip")
@workflow_options
@click.pass_obj
def skip_cmd(ctx: BranchlineContext, dry_run: bool, verbose: bool) -> None:
    """Skip the step that halted the command and resume it."""
    ctx = _prepare(ctx, dry_run=dry_run, verbose=verbose)
    repo = Ensure.in_repo(ctx)
    state = _load_unfinished(ctx, repo, "skip")
    try:
        result = skip_run(ctx, repo.root, state)
    except OperationError as e:
        validation_failure(e)
    finish(result)


@click.command("undo")
@workflow_options
@click.pass_obj
def undo_cmd(ctx: BranchlineContext, dry_run: bool, verbose: bool) -> None:
    """Abort the halted command and reverse everything it did."""
    ctx = _prepare(ctx, dry_run=dry_run, verbose=verbose)
    repo = Ensure.in_repo(ctx)
    state = _load_unfinished(ctx, repo, "undo")
    finish(undo_run(ctx, repo.root, state))


@click.command("status")
@click.option("--reset", is_flag=True, help="Delete the saved run state.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
@click.pass_obj
def status_cmd(ctx: BranchlineContext, reset: bool, verbose: bool) -> None:
    """Show the saved run state of this repository."""
    configure_logging(verbose)
    repo = Ensure.in_repo(ctx)

    if reset:
        ctx.runstate_store.delete(repo.root)
        user_output("Run state deleted")
        return

    try:
        state = ctx.runstate_store.load(repo.root)
    except ProtocolError as e:
        protocol_failure(e)

    if state is None or not state.is_unfinished:
        user_output("No command is waiting to be continued")
        return

    details = state.unfinished_details
    assert details is not None
    end_branch = format_branch(details.end_branch) if details.end_branch else "(detached)"
    user_output(
        f"{click.style(state.command, bold=True)} halted on {end_branch} "
        f"at {details.end_time.isoformat(timespec='seconds')}"
    )
    if state.dry_run:
        user_output("  (dry run)")

    user_output(click.style("Completed steps:", bold=True))
    for opcode in state.executed_program:
        user_output(f"  {describe_opcode(opcode)}")
    user_output(click.style("Remaining steps:", bold=True))
    for opcode in state.pending_program:
        user_output(f"  {describe_opcode(opcode)}")

    user_output()
    user_output('Run "branchline continue" to resume.')
    if details.can_skip:
        user_output('Run "branchline skip" to skip the current step.')
    user_output('Run "branchline undo" to reverse the command.')
