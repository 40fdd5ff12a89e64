"""Tests for the append command."""

from click.testing import CliRunner

from branchline.cli.cli import cli
from branchline.cli.config import RepoConfig
from branchline.cli.constants import EXIT_CODE_HALTED
from branchline.core.git.fake import FakeGit
from branchline.vm.opcodes import (
    Checkout,
    ContinueMerge,
    CreateBranchExistingParent,
    PreserveCheckoutHistory,
    SetExistingParent,
)
from branchline.vm.statefile import InMemoryRunStateStore
from tests.test_utils.env_helpers import REPO_ROOT, build_context, parent_key


def _stack_git(**overrides) -> FakeGit:
    values = dict(
        repo_root=REPO_ROOT,
        branches={"main": "m1", "b": "b1", "c": "c1"},
        current_branch="b",
        config={parent_key("b"): "main", parent_key("c"): "b"},
    )
    values.update(overrides)
    return FakeGit(**values)


def test_append_syncs_ancestors_then_creates_child() -> None:
    git = _stack_git()
    runner = CliRunner()

    result = runner.invoke(cli, ["append", "d"], obj=build_context(git))

    assert result.exit_code == 0, result.output
    assert git.operations == [
        ("checkout", "main"),
        ("checkout", "b"),
        ("merge", "main"),
        ("create_branch", "d", "b"),
        ("set_config", parent_key("d"), "b"),
        ("checkout", "d"),
    ]
    assert git.config[parent_key("d")] == "b"
    assert git.config[parent_key("c")] == "b"


def test_append_creates_tracking_branch_when_configured() -> None:
    git = _stack_git(remotes=["origin"])
    runner = CliRunner()
    ctx = build_context(git, repo_config=RepoConfig(push_new_branches=True))

    result = runner.invoke(cli, ["append", "d"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert ("create_tracking_branch", "origin", "d") in git.operations
    assert git.operations.index(("checkout", "d")) < git.operations.index(
        ("create_tracking_branch", "origin", "d")
    )


def test_append_requires_known_ancestry() -> None:
    git = _stack_git(branches={"main": "m1", "orphan": "o1"}, current_branch="orphan")
    runner = CliRunner()

    result = runner.invoke(cli, ["append", "d"], obj=build_context(git))

    assert result.exit_code == 1
    assert "Cannot determine the parent of 'orphan'" in result.output
    assert git.operations == []


def test_append_conflict_halts_and_persists_state() -> None:
    git = _stack_git(conflicts={("merge", "main")})
    store = InMemoryRunStateStore()
    runner = CliRunner()

    result = runner.invoke(cli, ["append", "d"], obj=build_context(git, runstate_store=store))

    assert result.exit_code == EXIT_CODE_HALTED
    assert "branchline continue" in result.output
    assert "branchline skip" in result.output

    state = store.load(REPO_ROOT)
    assert state is not None
    assert state.command == "append"
    assert state.can_skip
    assert state.pending_program.opcodes() == [
        ContinueMerge(current="b", sha_before="b1"),
        CreateBranchExistingParent(branch="d", ancestors=("b", "main")),
        SetExistingParent(branch="d", ancestors=("b", "main")),
        Checkout(branch="d"),
        PreserveCheckoutHistory(candidates=("b",)),
    ]
    assert "d" not in git.branches


def test_append_on_root_branch_creates_child_of_root() -> None:
    git = _stack_git(current_branch="main")
    runner = CliRunner()

    result = runner.invoke(cli, ["append", "d"], obj=build_context(git))

    assert result.exit_code == 0, result.output
    assert git.operations == [
        ("create_branch", "d", "main"),
        ("set_config", parent_key("d"), "main"),
        ("checkout", "d"),
    ]
