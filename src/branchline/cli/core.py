"""Shared plumbing for workflow commands.

Every workflow command follows the same shape:

1. `begin_workflow`: require a repository, apply --dry-run/--verbose and
   route to the resume dialog when a halted run is persisted
2. `gather_workflow_data`: fetch once, then read branches, lineage and settings
3. plan a Program with pure functions, validating with Ensure
4. `run_workflow`: wrap the program, execute it and map the result to an exit code
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import NoReturn

import click

from branchline.cli.constants import EXIT_CODE_HALTED, EXIT_CODE_PROTOCOL_ERROR
from branchline.cli.ensure import Ensure
from branchline.cli.output import format_branch, user_output
from branchline.core.branches import BranchesSnapshot, load_branches
from branchline.core.context import BranchlineContext
from branchline.core.git.dry_run import DryRunGit
from branchline.core.git.printing import PrintingGit
from branchline.core.hosting.dry_run import DryRunHostingDriver
from branchline.core.lineage import Lineage, load_lineage
from branchline.core.repo_discovery import RepoContext
from branchline.sync.branch_program import SyncSettings
from branchline.vm import interpreter
from branchline.vm.errors import OperationError, ProtocolError
from branchline.vm.interpreter import RunResult
from branchline.vm.program import Program, WrapOptions, wrap
from branchline.vm.runstate import RunState
from branchline.vm.unfinished import handle_unfinished_state

logger = logging.getLogger(__name__)

DEBUG_FORMAT = "[DEBUG %(name)s:%(lineno)d] %(message)s"


def configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=DEBUG_FORMAT, force=True)


def with_dry_run(ctx: BranchlineContext) -> BranchlineContext:
    """Return a context whose git and hosting never mutate anything."""
    if ctx.dry_run:
        return ctx
    hosting = ctx.hosting
    if hosting is not None:
        hosting = DryRunHostingDriver(hosting)
    return dataclasses.replace(ctx, git=DryRunGit(ctx.git), hosting=hosting, dry_run=True)


def protocol_failure(error: ProtocolError) -> NoReturn:
    user_output(click.style("Error: ", fg="red") + str(error))
    user_output("The saved run state was left in place for inspection.")
    user_output('Run "branchline status --reset" to delete it.')
    raise SystemExit(EXIT_CODE_PROTOCOL_ERROR)


def validation_failure(error: OperationError) -> NoReturn:
    user_output(click.style("Error: ", fg="red") + str(error))
    raise SystemExit(1)


def begin_workflow(
    ctx: BranchlineContext, *, dry_run: bool, verbose: bool
) -> tuple[BranchlineContext, RepoContext | None]:
    """Prepare a workflow command.

    Returns:
        The context to use and the repository. The repository is None when a
        persisted halted run was handled instead and the command must stop.
    """
    configure_logging(verbose)
    if dry_run:
        ctx = with_dry_run(ctx)
    repo = Ensure.in_repo(ctx)

    try:
        outcome = handle_unfinished_state(ctx, repo.root)
    except ProtocolError as e:
        protocol_failure(e)
    except OperationError as e:
        validation_failure(e)

    if outcome.proceed:
        return ctx, repo
    if outcome.run_result is not None:
        finish(outcome.run_result)
    return ctx, None


@dataclass(frozen=True)
class WorkflowData:
    """Repository facts read once, before planning."""

    repo: RepoContext
    main_branch: str
    branches: BranchesSnapshot
    lineage: Lineage
    has_open_changes: bool
    settings: SyncSettings

    @property
    def current(self) -> str:
        return Ensure.not_none(self.branches.current, "Not on a branch (detached HEAD)")

    def is_root(self, branch: str) -> bool:
        return branch in self.settings.root_branches

    def previous_branch_candidates(self, *preferred: str | None) -> tuple[str, ...]:
        candidates = [b for b in (*preferred, self.branches.previous) if b is not None]
        return tuple(dict.fromkeys(candidates))


def gather_workflow_data(
    ctx: BranchlineContext, repo: RepoContext, *, push: bool = True
) -> WorkflowData:
    """Fetch updates and snapshot everything planning needs."""
    config = ctx.repo_config
    main_branch = Ensure.not_none(ctx.main_branch, "Cannot determine the main branch")
    remotes = ctx.git.list_remotes(repo.root)
    has_remote = config.remote in remotes
    online = not ctx.is_offline

    if has_remote and online:
        PrintingGit(ctx.git, dry_run=ctx.dry_run).fetch(repo.root, config.remote)

    branches = load_branches(ctx.git, repo.root)
    settings = SyncSettings(
        strategy=config.sync_strategy,
        remote=config.remote,
        has_remote=has_remote,
        online=online,
        push=push and config.sync_pushes,
        push_new_branches=push and config.push_new_branches,
        no_verify=not config.push_hook,
        root_branches=config.root_branches(main_branch),
    )
    data = WorkflowData(
        repo=repo,
        main_branch=main_branch,
        branches=branches,
        lineage=load_lineage(ctx.git, repo.root),
        has_open_changes=ctx.git.has_uncommitted_changes(ctx.cwd),
        settings=settings,
    )
    logger.debug(
        "Workflow data: main=%s current=%s remote=%s online=%s",
        main_branch,
        branches.current,
        has_remote,
        online,
    )
    return data


def ensure_known_ancestry(data: WorkflowData, branch: str) -> None:
    """Feature branches must have a recorded parent."""
    Ensure.invariant(
        data.is_root(branch) or data.lineage.has_parent(branch),
        f"Cannot determine the parent of '{branch}'.\n"
        f"Record it with: git config branchline-branch.{branch}.parent <parent>",
    )


def run_workflow(
    ctx: BranchlineContext,
    data: WorkflowData,
    *,
    command: str,
    program: Program,
    stash_open_changes: bool,
    previous_branch_candidates: tuple[str, ...],
) -> RunResult:
    """Wrap and execute a planned program, exiting non-zero when it halts."""
    wrapped = wrap(
        program,
        WrapOptions(
            dry_run=ctx.dry_run,
            run_in_repo_root=True,
            stash_open_changes=stash_open_changes,
            previous_branch_candidates=previous_branch_candidates,
            initial_directory=ctx.cwd,
            repo_root=data.repo.root,
        ),
    )
    state = RunState(
        command=command,
        dry_run=ctx.dry_run,
        initial_active_branch=data.branches.current,
        pending_program=wrapped,
    )
    logger.debug("Planned %s: %r", command, wrapped)
    result = interpreter.execute(
        state,
        run_ctx=interpreter.build_run_context(
            ctx.git, ctx.hosting, data.repo.root, dry_run=ctx.dry_run
        ),
        store=ctx.runstate_store,
        time=ctx.time,
    )
    finish(result)
    return result


def finish(result: RunResult) -> None:
    """Report a run result; halted runs exit with EXIT_CODE_HALTED."""
    for opcode in result.irreversible:
        user_output(
            click.style("Warning: ", fg="yellow") + f"cannot undo {describe_opcode(opcode)}"
        )
    if result.halted:
        raise SystemExit(EXIT_CODE_HALTED)


def describe_opcode(opcode: object) -> str:
    """Human-readable summary of an opcode for status and undo reports."""
    data = dataclasses.asdict(opcode) if dataclasses.is_dataclass(opcode) else {}
    details = ", ".join(
        f"{key}={format_branch(value) if key == 'branch' else value}"
        for key, value in data.items()
        if value not in (None, (), False)
    )
    return f"{type(opcode).__name__}({details})"
