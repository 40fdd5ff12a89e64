"""Tests for the ship command."""

from click.testing import CliRunner

from branchline.cli.cli import cli
from branchline.cli.config import RepoConfig
from branchline.cli.constants import EXIT_CODE_HALTED
from branchline.core.git.fake import FakeGit
from branchline.core.hosting.fake import FakeHostingDriver
from branchline.core.hosting.types import PullRequestInfo
from branchline.vm.statefile import InMemoryRunStateStore
from tests.test_utils.env_helpers import REPO_ROOT, build_context, parent_key

VIA_API = RepoConfig(ship_via_api=True)


def _git(**overrides) -> FakeGit:
    values = dict(
        repo_root=REPO_ROOT,
        branches={"main": "m1", "feature": "f1"},
        remote_branches={"origin/main": "m1", "origin/feature": "f1"},
        remotes=["origin"],
        current_branch="feature",
        config={parent_key("feature"): "main"},
    )
    values.update(overrides)
    return FakeGit(**values)


def _stacked_git(**overrides) -> FakeGit:
    values = dict(
        branches={"main": "m1", "feature": "f1", "child": "c1"},
        config={parent_key("feature"): "main", parent_key("child"): "feature"},
        current_branch="main",
    )
    values.update(overrides)
    return _git(**values)


def _pr(number: int, branch: str, base: str) -> PullRequestInfo:
    return PullRequestInfo(
        number=number,
        title=f"Add {branch}",
        url=f"https://github.com/acme/app/pull/{number}",
        base_branch=base,
    )


def test_ship_squash_merges_current_branch_and_cleans_up() -> None:
    git = _git()
    runner = CliRunner()

    result = runner.invoke(cli, ["ship", "-m", "Add feature"], obj=build_context(git))

    assert result.exit_code == 0, result.output
    assert git.operations == [
        ("fetch", "origin"),
        ("checkout", "main"),
        ("rebase", "origin/main"),
        ("push", "origin", "main"),
        ("checkout", "feature"),
        ("merge", "origin/feature"),
        ("merge", "main"),
        ("push", "origin", "feature"),
        ("checkout", "main"),
        ("squash_merge", "feature"),
        ("commit", "Add feature"),
        ("push", "origin", "main"),
        ("delete_remote_branch", "origin", "feature"),
        ("delete_branch", "feature"),
        ("unset_config", parent_key("feature")),
    ]
    assert "feature" not in git.branches
    assert git.config == {}


def test_ship_default_message_names_the_branch() -> None:
    git = _git(remotes=[], remote_branches={})
    runner = CliRunner()

    result = runner.invoke(cli, ["ship"], obj=build_context(git))

    assert result.exit_code == 0, result.output
    assert ("commit", "Ship feature") in git.operations


def test_ship_reparents_children_and_keeps_their_remote_target() -> None:
    git = _stacked_git()
    runner = CliRunner()

    result = runner.invoke(cli, ["ship", "feature", "-m", "Ship"], obj=build_context(git))

    assert result.exit_code == 0, result.output
    assert git.config == {parent_key("child"): "main"}
    assert "feature" not in git.branches
    assert not any(op[0] == "delete_remote_branch" for op in git.operations)
    assert git.get_current_branch(REPO_ROOT) == "main"


def test_ship_returns_to_initial_branch() -> None:
    git = _git(
        branches={"main": "m1", "feature": "f1", "other": "o1"},
        config={parent_key("feature"): "main", parent_key("other"): "main"},
        current_branch="other",
    )
    runner = CliRunner()

    result = runner.invoke(cli, ["ship", "feature", "-m", "Ship"], obj=build_context(git))

    assert result.exit_code == 0, result.output
    assert git.get_current_branch(REPO_ROOT) == "other"
    assert "feature" not in git.branches


def test_ship_via_api_merges_pull_request_and_retargets_children() -> None:
    git = _stacked_git()
    hosting = FakeHostingDriver(
        pull_requests={"feature": _pr(7, "feature", "main"), "child": _pr(8, "child", "feature")}
    )
    runner = CliRunner()

    result = runner.invoke(
        cli, ["ship", "feature"], obj=build_context(git, hosting=hosting, repo_config=VIA_API)
    )

    assert result.exit_code == 0, result.output
    assert hosting.merged_pull_requests == [("feature", "main", 7, "Add feature (#7)")]
    assert hosting.base_updates == [(8, "main")]
    assert ("pull", "origin", "main") in git.operations
    assert "git pull --ff-only origin main" in result.output
    assert ("delete_remote_branch", "origin", "feature") in git.operations
    assert not any(op[0] == "squash_merge" for op in git.operations)
    assert git.config == {parent_key("child"): "main"}


def test_ship_via_api_requires_hosting_platform() -> None:
    git = _git()
    runner = CliRunner()

    result = runner.invoke(cli, ["ship"], obj=build_context(git, repo_config=VIA_API))

    assert result.exit_code == 1
    assert "requires a hosting platform" in result.output
    assert git.operations == [("fetch", "origin")]


def test_ship_via_api_requires_pull_request() -> None:
    git = _git()
    runner = CliRunner()
    ctx = build_context(git, hosting=FakeHostingDriver(), repo_config=VIA_API)

    result = runner.invoke(cli, ["ship"], obj=ctx)

    assert result.exit_code == 1
    assert "No open pull request found for 'feature'" in result.output


def test_ship_refuses_when_ancestors_would_be_shipped_too() -> None:
    git = _stacked_git(current_branch="child")
    runner = CliRunner()

    result = runner.invoke(cli, ["ship"], obj=build_context(git))

    assert result.exit_code == 1
    assert "Shipping this branch would ship feature as well" in result.output
    assert "Please ship 'feature' first" in result.output


def test_ship_refuses_root_branch() -> None:
    git = _git(current_branch="main")
    runner = CliRunner()

    result = runner.invoke(cli, ["ship"], obj=build_context(git))

    assert result.exit_code == 1
    assert "is not a feature branch" in result.output


def test_ship_refuses_unknown_branch() -> None:
    git = _git()
    runner = CliRunner()

    result = runner.invoke(cli, ["ship", "nope"], obj=build_context(git))

    assert result.exit_code == 1
    assert "There is no local branch named 'nope'" in result.output


def test_ship_current_branch_requires_clean_tree() -> None:
    git = _git(uncommitted_changes=True)
    runner = CliRunner()

    result = runner.invoke(cli, ["ship"], obj=build_context(git))

    assert result.exit_code == 1
    assert "uncommitted changes" in result.output


def test_ship_without_changes_halts_and_cannot_be_skipped() -> None:
    git = _git(remotes=[], remote_branches={}, empty_diffs={("main", "feature")})
    store = InMemoryRunStateStore()
    runner = CliRunner()

    result = runner.invoke(cli, ["ship"], obj=build_context(git, runstate_store=store))

    assert result.exit_code == EXIT_CODE_HALTED
    assert "no shippable changes" in result.output
    state = store.load(REPO_ROOT)
    assert state is not None
    assert not state.can_skip
    assert "feature" in git.branches


def test_ship_dry_run_changes_nothing() -> None:
    git = _stacked_git()
    hosting = FakeHostingDriver(pull_requests={"feature": _pr(7, "feature", "main")})
    runner = CliRunner()
    ctx = build_context(git, hosting=hosting, repo_config=VIA_API)

    result = runner.invoke(cli, ["ship", "feature", "--dry-run"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert git.operations == []
    assert hosting.merged_pull_requests == []
    assert "Would merge pull request #7" in result.output
