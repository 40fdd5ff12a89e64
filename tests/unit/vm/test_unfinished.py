"""Tests for the unfinished-run dialog routing."""

import pytest

from branchline.core.git.fake import FakeGit
from branchline.core.resume_prompt import ResumeResponse
from branchline.vm.errors import OperationError, UnexpectedResponseError
from branchline.vm.opcodes import Checkout, ContinueRebase, PushBranch
from branchline.vm.program import Program
from branchline.vm.runstate import RunState, UnfinishedDetails
from branchline.vm.statefile import InMemoryRunStateStore
from branchline.vm.unfinished import handle_unfinished_state
from tests.fakes.resume_prompt import ScriptedResumePrompt
from tests.fakes.time import DEFAULT_NOW
from tests.test_utils.env_helpers import REPO_ROOT, build_context


def _halted_rebase(can_skip: bool = True) -> RunState:
    return RunState(
        command="sync",
        dry_run=False,
        initial_active_branch="main",
        pending_program=Program(
            [
                ContinueRebase(current="feature", sha_before="f1"),
                PushBranch(branch="feature", remote="origin"),
                Checkout(branch="main"),
            ]
        ),
        executed_program=[Checkout(branch="feature", previous="main")],
        unfinished_details=UnfinishedDetails(
            end_branch="feature", end_time=DEFAULT_NOW, can_skip=can_skip
        ),
    )


def _rebasing_git(*, unresolved: bool = False) -> FakeGit:
    return FakeGit(
        repo_root=REPO_ROOT,
        branches={"main": "m1", "feature": "f2"},
        current_branch="feature",
        rebase_in_progress=True,
        unresolved_conflicts=unresolved,
    )


def test_no_state_proceeds_without_asking() -> None:
    prompt = ScriptedResumePrompt([])
    ctx = build_context(FakeGit(repo_root=REPO_ROOT), resume_prompt=prompt)

    result = handle_unfinished_state(ctx, REPO_ROOT)

    assert result.proceed
    assert prompt.asked == []


def test_finished_state_proceeds_without_asking() -> None:
    state = _halted_rebase()
    state.mark_finished()
    store = InMemoryRunStateStore(states={REPO_ROOT: state})
    ctx = build_context(FakeGit(repo_root=REPO_ROOT), runstate_store=store)

    assert handle_unfinished_state(ctx, REPO_ROOT).proceed


def test_prompt_receives_halt_details() -> None:
    store = InMemoryRunStateStore(states={REPO_ROOT: _halted_rebase()})
    prompt = ScriptedResumePrompt([ResumeResponse.QUIT])
    ctx = build_context(_rebasing_git(), runstate_store=store, resume_prompt=prompt)

    result = handle_unfinished_state(ctx, REPO_ROOT)

    assert not result.proceed
    assert result.run_result is None
    [info] = prompt.asked
    assert (info.command, info.end_branch, info.can_skip) == ("sync", "feature", True)
    assert store.load(REPO_ROOT) is not None


def test_discard_deletes_state_and_proceeds() -> None:
    store = InMemoryRunStateStore(states={REPO_ROOT: _halted_rebase()})
    git = _rebasing_git()
    ctx = build_context(
        git, runstate_store=store, resume_prompt=ScriptedResumePrompt([ResumeResponse.DISCARD])
    )

    result = handle_unfinished_state(ctx, REPO_ROOT)

    assert result.proceed
    assert store.load(REPO_ROOT) is None
    assert git.operations == []


def test_continue_runs_pending_program() -> None:
    store = InMemoryRunStateStore(states={REPO_ROOT: _halted_rebase()})
    git = _rebasing_git()
    ctx = build_context(
        git, runstate_store=store, resume_prompt=ScriptedResumePrompt([ResumeResponse.CONTINUE])
    )

    result = handle_unfinished_state(ctx, REPO_ROOT)

    assert not result.proceed
    assert result.run_result is not None
    assert not result.run_result.halted
    assert git.operations == [
        ("continue_rebase",),
        ("push", "origin", "feature"),
        ("checkout", "main"),
    ]


def test_continue_refuses_while_conflicts_remain() -> None:
    store = InMemoryRunStateStore(states={REPO_ROOT: _halted_rebase()})
    git = _rebasing_git(unresolved=True)
    ctx = build_context(
        git, runstate_store=store, resume_prompt=ScriptedResumePrompt([ResumeResponse.CONTINUE])
    )

    with pytest.raises(OperationError, match="resolve the conflicts"):
        handle_unfinished_state(ctx, REPO_ROOT)
    assert git.operations == []
    assert store.load(REPO_ROOT) is not None


def test_skip_aborts_the_rebase_and_continues() -> None:
    store = InMemoryRunStateStore(states={REPO_ROOT: _halted_rebase()})
    git = _rebasing_git(unresolved=True)
    ctx = build_context(
        git, runstate_store=store, resume_prompt=ScriptedResumePrompt([ResumeResponse.SKIP])
    )

    result = handle_unfinished_state(ctx, REPO_ROOT)

    assert result.run_result is not None
    assert not result.run_result.halted
    assert git.operations == [
        ("abort_rebase",),
        ("push", "origin", "feature"),
        ("checkout", "main"),
    ]


def test_undo_reverses_completed_steps() -> None:
    store = InMemoryRunStateStore(states={REPO_ROOT: _halted_rebase()})
    git = _rebasing_git(unresolved=True)
    ctx = build_context(
        git, runstate_store=store, resume_prompt=ScriptedResumePrompt([ResumeResponse.UNDO])
    )

    result = handle_unfinished_state(ctx, REPO_ROOT)

    assert result.run_result is not None
    assert result.run_result.state.command == "undo sync"
    assert git.operations == [("abort_rebase",), ("checkout", "main")]
    assert store.load(REPO_ROOT) is None


def test_unknown_response_is_a_protocol_error_and_keeps_state() -> None:
    store = InMemoryRunStateStore(states={REPO_ROOT: _halted_rebase()})
    ctx = build_context(
        _rebasing_git(), runstate_store=store, resume_prompt=ScriptedResumePrompt(["maybe"])
    )

    with pytest.raises(UnexpectedResponseError):
        handle_unfinished_state(ctx, REPO_ROOT)
    assert store.load(REPO_ROOT) is not None
