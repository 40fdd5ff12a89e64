"""Executes workflow programs opcode by opcode.

The interpreter is the single place that decides what a failure means:

- ConflictError halts the run. The failing opcode's continuation replaces it
  at the front of the pending program and the halt is skippable when the
  opcode declares itself skippable.
- OperationError, RuntimeError (failed subprocesses) and OSError halt the run
  too, but the failing opcode stays in place unchanged and the halt is never
  skippable.

A halted run is persisted before control returns to the caller. A finished run
deletes whatever state was persisted for the repository.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import click

from branchline.cli.output import user_output
from branchline.core.git.abc import Git
from branchline.core.git.dry_run import DryRunGit
from branchline.core.git.printing import PrintingGit
from branchline.core.hosting.abc import HostingDriver
from branchline.core.hosting.dry_run import DryRunHostingDriver
from branchline.core.time.abc import Time
from branchline.vm.errors import ConflictError, OperationError
from branchline.vm.opcodes import Opcode, RunContext
from branchline.vm.program import Program
from branchline.vm.runstate import RunState, UnfinishedDetails
from branchline.vm.statefile import RunStateStore

logger = logging.getLogger(__name__)


class RunOutcome(Enum):
    SUCCEEDED = "succeeded"
    HALTED = "halted"


@dataclass(frozen=True)
class RunResult:
    """What happened to a program handed to the interpreter.

    Attributes:
        outcome: Whether the program ran to completion
        state: The run state after execution (persisted when halted)
        error: The error that halted the run, if any
        irreversible: Completed opcodes an undo could not reverse
    """

    outcome: RunOutcome
    state: RunState
    error: Exception | None = None
    irreversible: tuple[Opcode, ...] = field(default_factory=tuple)

    @property
    def halted(self) -> bool:
        return self.outcome is RunOutcome.HALTED


def build_run_context(
    git: Git, hosting: HostingDriver | None, repo_root: Path, *, dry_run: bool
) -> RunContext:
    """Wrap the capabilities the way opcodes expect to see them.

    Every mutating git call is echoed. In dry-run mode mutations are no-ops,
    including when a dry-run state is resumed from a regular invocation.
    """
    if dry_run:
        if not isinstance(git, DryRunGit):
            git = DryRunGit(git)
        if hosting is not None and not isinstance(hosting, DryRunHostingDriver):
            hosting = DryRunHostingDriver(hosting)
    return RunContext(
        git=PrintingGit(git, dry_run=dry_run), hosting=hosting, repo_root=repo_root
    )


def execute(
    state: RunState, *, run_ctx: RunContext, store: RunStateStore, time: Time
) -> RunResult:
    """Run the pending program of `state` until it is empty or an opcode fails.

    Completed opcodes are moved from the front of `state.pending_program` to
    the end of `state.executed_program` one at a time, so the state always
    reflects exactly what is left to do.
    """
    logger.debug("Executing %s: %d opcodes pending", state.command, len(state.pending_program))
    while True:
        opcode = state.pending_program.peek()
        if opcode is None:
            break
        snapshot = opcode.snapshot(run_ctx)
        logger.debug("Running %r", snapshot)
        try:
            snapshot.run(run_ctx)
        except ConflictError as e:
            return _halt(
                state,
                replacement=snapshot.continuation(),
                can_skip=snapshot.skippable,
                error=e,
                run_ctx=run_ctx,
                store=store,
                time=time,
            )
        except (OperationError, RuntimeError, OSError) as e:
            return _halt(
                state,
                replacement=[opcode],
                can_skip=False,
                error=e,
                run_ctx=run_ctx,
                store=store,
                time=time,
            )
        state.pending_program.pop()
        state.executed_program.append(snapshot)

    state.mark_finished()
    store.delete(run_ctx.repo_root)
    logger.debug("Finished %s", state.command)
    return RunResult(outcome=RunOutcome.SUCCEEDED, state=state)


def _halt(
    state: RunState,
    *,
    replacement: list[Opcode],
    can_skip: bool,
    error: Exception,
    run_ctx: RunContext,
    store: RunStateStore,
    time: Time,
) -> RunResult:
    failed = state.pending_program.pop()
    state.pending_program.prepend_all(replacement)
    state.unfinished_details = UnfinishedDetails(
        end_branch=run_ctx.git.get_current_branch(run_ctx.repo_root),
        end_time=time.now(),
        can_skip=can_skip,
    )
    store.save(run_ctx.repo_root, state)
    logger.debug("Halted %s at %r (can_skip=%s): %s", state.command, failed, can_skip, error)
    _report_halt(state, error)
    return RunResult(outcome=RunOutcome.HALTED, state=state, error=error)


def _report_halt(state: RunState, error: Exception) -> None:
    user_output()
    user_output(click.style("Error: ", fg="red") + str(error))
    user_output()
    user_output('To continue after resolving the problem, run "branchline continue".')
    if state.can_skip:
        user_output('To continue by skipping the current step, run "branchline skip".')
    user_output('To go back to where you started, run "branchline undo".')


def skip_current(state: RunState) -> None:
    """Replace the front of the pending program with its skip sequence.

    Raises:
        OperationError: If the halted run is not skippable
    """
    if not state.can_skip:
        raise OperationError(f"the current step of {state.command} cannot be skipped")
    current = state.pending_program.pop()
    state.pending_program.prepend_all(current.skip())
    logger.debug("Skipping %r", current)


def build_undo_program(state: RunState) -> tuple[Program, list[Opcode]]:
    """Build the program that reverses everything `state` has done so far.

    The half-finished front opcode of a halted run is aborted first, then every
    completed opcode contributes its undo sequence in reverse execution order.

    Returns:
        The undo program and the completed opcodes that cannot be reversed,
        most recent first
    """
    program = Program()
    front = state.pending_program.peek()
    if state.is_unfinished and front is not None:
        program.append_all(front.abort())

    irreversible: list[Opcode] = []
    for opcode in reversed(state.executed_program):
        reverse = opcode.undo()
        if reverse is None:
            irreversible.append(opcode)
            continue
        program.append_all(reverse)
    return program, irreversible


def undo(state: RunState, *, run_ctx: RunContext, store: RunStateStore, time: Time) -> RunResult:
    """Discard the pending program of `state` and run its undo program instead."""
    program, irreversible = build_undo_program(state)
    for opcode in irreversible:
        logger.debug("Cannot undo %r", opcode)
    undo_state = RunState(
        command=f"undo {state.command}",
        dry_run=state.dry_run,
        initial_active_branch=state.initial_active_branch,
        pending_program=program,
    )
    store.delete(run_ctx.repo_root)
    result = execute(undo_state, run_ctx=run_ctx, store=store, time=time)
    return RunResult(
        outcome=result.outcome,
        state=result.state,
        error=result.error,
        irreversible=tuple(irreversible),
    )
