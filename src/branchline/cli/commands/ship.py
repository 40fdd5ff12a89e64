"""Ship command - squash a finished feature branch into its parent."""

import logging

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
from branchline.core.hosting.types import PullRequestInfo
from branchline.sync.branch_program import sync_branches_program
from branchline.vm.opcodes import (
    Checkout,
    CheckoutIfExists,
    DeleteLocalBranch,
    DeleteRemoteBranch,
    EnsureHasShippableChanges,
    MergePullRequest,
    PullCurrentBranch,
    PushBranch,
    RemoveParent,
    SetParent,
    SquashMerge,
    UpdatePullRequestBase,
)
from branchline.vm.program import Program

logger = logging.getLogger(__name__)


def _ensure_shippable(data: WorkflowData, branch: str) -> str:
    """Validate `branch` for shipping and return its parent."""
    Ensure.branch_exists(data.branches, branch)
    Ensure.invariant(
        not data.is_root(branch),
        f"The branch '{branch}' is not a feature branch. Only feature branches can be shipped",
    )
    ensure_known_ancestry(data, branch)

    ancestors = data.lineage.ancestors(branch)
    unshipped = [a for a in ancestors if not data.is_root(a)]
    if unshipped:
        Ensure.invariant(
            False,
            f"Shipping this branch would ship {', '.join(unshipped)} as well.\n"
            f"Please ship '{unshipped[0]}' first",
        )
    return Ensure.not_none(data.lineage.parent(branch), f"'{branch}' has no parent")


def _find_pull_request(
    ctx: BranchlineContext, data: WorkflowData, branch: str, parent: str
) -> PullRequestInfo:
    hosting = Ensure.not_none(
        ctx.hosting,
        "Shipping via the API requires a hosting platform.\n"
        "Configure one with: branchline config set hosting_platform github",
    )
    if ctx.repo_config.hosting_platform == "github":
        Ensure.gh_installed()
    return Ensure.not_none(
        hosting.find_pull_request(data.repo.root, branch, parent),
        f"No open pull request found for '{branch}' into '{parent}'",
    )


def _child_pull_requests(
    ctx: BranchlineContext, data: WorkflowData, branch: str, children: list[str]
) -> list[PullRequestInfo]:
    if ctx.hosting is None or not data.settings.remote_enabled:
        return []
    found = []
    for child in children:
        pr = ctx.hosting.find_pull_request(data.repo.root, child, branch)
        if pr is not None:
            found.append(pr)
    return found


def ship_program(
    data: WorkflowData,
    *,
    branch: str,
    parent: str,
    message: str,
    pull_request: PullRequestInfo | None,
    child_pull_requests: list[PullRequestInfo],
    delete_remote_branch: bool,
) -> Program:
    """Plan shipping `branch` into `parent`.

    With `pull_request` the merge happens through the hosting driver and the
    parent pulls the result; otherwise the branch is squash-merged locally.
    """
    settings = data.settings
    lineage = data.lineage
    remote = settings.remote
    initial = data.current
    children = lineage.children(branch)

    program = sync_branches_program(
        [parent, branch], lineage=lineage, branches=data.branches, settings=settings
    )
    program.append(EnsureHasShippableChanges(branch=branch, parent=parent))
    program.append(Checkout(branch=parent))

    if pull_request is not None:
        program.append(PushBranch(branch=branch, remote=remote, no_verify=settings.no_verify))
        program.append(
            MergePullRequest(
                branch=branch, parent=parent, number=pull_request.number, message=message
            )
        )
        program.append(PullCurrentBranch(branch=parent, remote=remote, ff_only=True))
    else:
        program.append(SquashMerge(branch=branch, message=message))

    if settings.remote_enabled:
        program.append(PushBranch(branch=parent, remote=remote, no_verify=settings.no_verify))

    for pr in child_pull_requests:
        program.append(UpdatePullRequestBase(number=pr.number, new_base=parent, old_base=branch))

    # child pull requests would be closed along with a remote branch they still target
    keep_remote = bool(children) and pull_request is None and not child_pull_requests
    tracked = data.branches.has_remote(remote, branch)
    if delete_remote_branch and settings.remote_enabled and tracked and not keep_remote:
        program.append(DeleteRemoteBranch(branch=branch, remote=remote))

    program.append(DeleteLocalBranch(branch=branch, force=True))
    program.append(RemoveParent(branch=branch))
    for child in children:
        program.append(SetParent(branch=child, parent=parent))

    if branch != initial:
        program.append(CheckoutIfExists(branch=initial))
    return program


@click.command("ship")
@click.argument("branch", required=False)
@click.option("-m", "--message", help="Commit message for the squashed commit.")
@workflow_options
@click.pass_obj
def ship_cmd(
    ctx: BranchlineContext,
    branch: str | None,
    message: str | None,
    dry_run: bool,
    verbose: bool,
) -> None:
    """Ship a finished feature branch into its parent.

    BRANCH defaults to the current branch. Its parent must be the main branch
    or a perennial branch. The branch is squash-merged (or its pull request
    merged when ship_via_api is configured), then deleted locally and
    remotely. Its children are re-parented onto the parent.
    """
    ctx, repo = begin_workflow(ctx, dry_run=dry_run, verbose=verbose)
    if repo is None:
        return

    data = gather_workflow_data(ctx, repo)
    initial = data.current
    target = branch if branch is not None else initial
    parent = _ensure_shippable(data, target)

    shipping_current = target == initial
    if shipping_current:
        Ensure.invariant(
            not data.has_open_changes,
            "You have uncommitted changes. Commit or stash them before shipping",
        )

    pull_request = None
    if ctx.repo_config.ship_via_api:
        pull_request = _find_pull_request(ctx, data, target, parent)

    if message is None:
        if pull_request is not None:
            message = pull_request.default_commit_message
        else:
            message = f"Ship {target}"

    children = data.lineage.children(target)
    child_prs = _child_pull_requests(ctx, data, target, children)
    logger.debug("Shipping %s into %s (children: %s)", target, parent, children)

    program = ship_program(
        data,
        branch=target,
        parent=parent,
        message=message,
        pull_request=pull_request,
        child_pull_requests=child_prs,
        delete_remote_branch=ctx.repo_config.ship_delete_remote_branch,
    )

    candidates = data.previous_branch_candidates()
    run_workflow(
        ctx,
        data,
        command="ship",
        program=program,
        stash_open_changes=data.has_open_changes and not shipping_current,
        previous_branch_candidates=tuple(c for c in candidates if c != target),
    )
