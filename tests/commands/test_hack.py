"""Tests for the hack command."""

from click.testing import CliRunner

from branchline.cli.cli import cli
from branchline.cli.config import RepoConfig
from branchline.core.context import BranchlineContext
from branchline.core.git.fake import FakeGit
from tests.test_utils.env_helpers import REPO_ROOT, build_context, parent_key


def _git(**overrides) -> FakeGit:
    values = dict(
        repo_root=REPO_ROOT,
        branches={"main": "m1"},
        remote_branches={"origin/main": "m1"},
        remotes=["origin"],
        current_branch="main",
    )
    values.update(overrides)
    return FakeGit(**values)


def test_hack_syncs_main_and_creates_child_of_main() -> None:
    git = _git()
    runner = CliRunner()

    result = runner.invoke(cli, ["hack", "feature"], obj=build_context(git))

    assert result.exit_code == 0, result.output
    assert git.operations == [
        ("fetch", "origin"),
        ("rebase", "origin/main"),
        ("push", "origin", "main"),
        ("create_branch", "feature", "main"),
        ("set_config", parent_key("feature"), "main"),
        ("checkout", "feature"),
    ]
    assert git.config == {parent_key("feature"): "main"}


def test_hack_carries_open_changes_to_new_branch() -> None:
    git = _git(remotes=[], remote_branches={}, uncommitted_changes=True)
    runner = CliRunner()

    result = runner.invoke(cli, ["hack", "feature"], obj=build_context(git))

    assert result.exit_code == 0, result.output
    assert git.operations == [
        ("stash_push",),
        ("create_branch", "feature", "main"),
        ("set_config", parent_key("feature"), "main"),
        ("checkout", "feature"),
        ("stash_pop",),
    ]


def test_hack_creates_tracking_branch_when_configured() -> None:
    git = _git()
    runner = CliRunner()
    ctx = build_context(git, repo_config=RepoConfig(push_new_branches=True))

    result = runner.invoke(cli, ["hack", "feature"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert git.operations[-1] == ("create_tracking_branch", "origin", "feature")
    assert "origin/feature" in git.remote_branches


def test_hack_offline_skips_remote_steps() -> None:
    git = _git()
    runner = CliRunner()

    result = runner.invoke(cli, ["hack", "feature"], obj=build_context(git, offline=True))

    assert result.exit_code == 0, result.output
    assert [op[0] for op in git.operations] == ["create_branch", "set_config", "checkout"]


def test_hack_rejects_existing_branch() -> None:
    git = _git(branches={"main": "m1", "feature": "f1"})
    runner = CliRunner()

    result = runner.invoke(cli, ["hack", "feature"], obj=build_context(git))

    assert result.exit_code == 1
    assert "A branch named 'feature' already exists" in result.output
    assert git.operations == [("fetch", "origin")]


def test_hack_rejects_branch_existing_on_remote() -> None:
    git = _git(remote_branches={"origin/main": "m1", "origin/feature": "f1"})
    runner = CliRunner()

    result = runner.invoke(cli, ["hack", "feature"], obj=build_context(git))

    assert result.exit_code == 1
    assert "already exists on origin" in result.output


def test_hack_rejects_invalid_branch_name() -> None:
    git = _git()
    runner = CliRunner()

    result = runner.invoke(cli, ["hack", "bad..name"], obj=build_context(git))

    assert result.exit_code == 1
    assert "not a valid branch name" in result.output
    assert git.operations == []


def test_hack_dry_run_changes_nothing() -> None:
    git = _git()
    runner = CliRunner()

    result = runner.invoke(cli, ["hack", "feature", "--dry-run"], obj=build_context(git))

    assert result.exit_code == 0, result.output
    assert git.operations == []
    assert git.branches == {"main": "m1"}
    assert "[DRY RUN]" in result.output


def test_hack_outside_repository_fails() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["hack", "feature"], obj=BranchlineContext.for_test())

    assert result.exit_code == 1
    assert "Not inside a git repository" in result.output
