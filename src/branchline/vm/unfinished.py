"""Resuming, skipping, undoing and discarding halted runs.

Every workflow command calls `handle_unfinished_state` before planning. A
persisted unfinished run routes the command through the resume dialog, so two
half-finished workflows can never interleave in one repository.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from branchline.core.context import BranchlineContext
from branchline.core.resume_prompt import ResumeResponse, UnfinishedRunInfo
from branchline.vm import interpreter
from branchline.vm.errors import OperationError, UnexpectedResponseError
from branchline.vm.interpreter import RunResult
from branchline.vm.opcodes import RunContext
from branchline.vm.runstate import RunState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnfinishedResult:
    """Outcome of checking for an unfinished run.

    Attributes:
        proceed: The caller may go on with its own workflow
        run_result: Result of the continuation that ran instead, if any
    """

    proceed: bool
    run_result: RunResult | None = None


def _run_context(ctx: BranchlineContext, repo_root: Path, state: RunState) -> RunContext:
    return interpreter.build_run_context(
        ctx.git, ctx.hosting, repo_root, dry_run=ctx.dry_run or state.dry_run
    )


def continue_run(ctx: BranchlineContext, repo_root: Path, state: RunState) -> RunResult:
    """Re-enter the halted run with its pending program as persisted.

    Raises:
        OperationError: If the working tree still has unresolved conflicts
    """
    if ctx.git.has_conflicts(repo_root):
        raise OperationError("you must resolve the conflicts before continuing")
    return interpreter.execute(
        state,
        run_ctx=_run_context(ctx, repo_root, state),
        store=ctx.runstate_store,
        time=ctx.time,
    )


def skip_run(ctx: BranchlineContext, repo_root: Path, state: RunState) -> RunResult:
    """Move past the failed step and continue the halted run.

    Raises:
        OperationError: If the failed step cannot be skipped
    """
    interpreter.skip_current(state)
    return interpreter.execute(
        state,
        run_ctx=_run_context(ctx, repo_root, state),
        store=ctx.runstate_store,
        time=ctx.time,
    )


def undo_run(ctx: BranchlineContext, repo_root: Path, state: RunState) -> RunResult:
    return interpreter.undo(
        state,
        run_ctx=_run_context(ctx, repo_root, state),
        store=ctx.runstate_store,
        time=ctx.time,
    )


def discard_run(ctx: BranchlineContext, repo_root: Path) -> None:
    ctx.runstate_store.delete(repo_root)
    logger.debug("Discarded run state for %s", repo_root)


def handle_unfinished_state(ctx: BranchlineContext, repo_root: Path) -> UnfinishedResult:
    """Offer the resume dialog when an unfinished run is persisted.

    Raises:
        RunStateCorruptError: If the persisted state cannot be read
        UnexpectedResponseError: If the prompt answers with an unknown response
        OperationError: If the chosen continuation is not possible right now
    """
    state = ctx.runstate_store.load(repo_root)
    if state is None or state.unfinished_details is None:
        return UnfinishedResult(proceed=True)

    details = state.unfinished_details
    response = ctx.resume_prompt.ask(
        UnfinishedRunInfo(
            command=state.command,
            end_branch=details.end_branch,
            end_time=details.end_time,
            can_skip=details.can_skip,
        )
    )
    if not isinstance(response, ResumeResponse):
        raise UnexpectedResponseError(response)
    logger.debug("Resume response for %s: %s", state.command, response.value)

    if response is ResumeResponse.DISCARD:
        discard_run(ctx, repo_root)
        return UnfinishedResult(proceed=True)
    if response is ResumeResponse.CONTINUE:
        return UnfinishedResult(proceed=False, run_result=continue_run(ctx, repo_root, state))
    if response is ResumeResponse.SKIP:
        return UnfinishedResult(proceed=False, run_result=skip_run(ctx, repo_root, state))
    if response is ResumeResponse.UNDO:
        return UnfinishedResult(proceed=False, run_result=undo_run(ctx, repo_root, state))
    if response is ResumeResponse.QUIT:
        return UnfinishedResult(proceed=False)
    raise UnexpectedResponseError(response)
