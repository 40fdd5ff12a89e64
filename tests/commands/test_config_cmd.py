"""Tests for the config command group."""

from pathlib import Path

from click.testing import CliRunner

from branchline.cli.cli import cli
from branchline.cli.config import RepoConfig, load_repo_config
from branchline.core.context import BranchlineContext
from branchline.core.git.fake import FakeGit
from branchline.core.repo_discovery import repo_context_for
from tests.test_utils.env_helpers import REPO_ROOT, build_context


def _git() -> FakeGit:
    return FakeGit(repo_root=REPO_ROOT, branches={"main": "m1"}, current_branch="main")


def test_config_list_shows_global_and_repo_values() -> None:
    runner = CliRunner()
    ctx = build_context(_git(), repo_config=RepoConfig(perennial_branches=("release", "qa")))

    result = runner.invoke(cli, ["config", "list"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Global configuration:" in result.output
    assert "  offline=false" in result.output
    assert "  perennial_branches=release,qa" in result.output
    assert "  sync_strategy=merge" in result.output


def test_config_list_outside_repository() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "list"], obj=BranchlineContext.for_test(git=_git()))

    assert result.exit_code == 0, result.output
    assert "(not in a git repository)" in result.output


def test_config_get_repo_key() -> None:
    runner = CliRunner()
    ctx = build_context(_git(), repo_config=RepoConfig(sync_strategy="rebase"))

    result = runner.invoke(cli, ["config", "get", "sync_strategy"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert result.stdout == "rebase\n"


def test_config_get_global_key() -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli, ["config", "get", "--global", "offline"], obj=build_context(_git(), offline=True)
    )

    assert result.exit_code == 0, result.output
    assert result.stdout == "true\n"


def test_config_get_unknown_key() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "get", "colour"], obj=build_context(_git()))

    assert result.exit_code == 1
    assert "Invalid key: colour" in result.output


def test_config_get_requires_repository() -> None:
    runner = CliRunner()
    ctx = BranchlineContext.for_test(git=_git())

    result = runner.invoke(cli, ["config", "get", "main_branch"], obj=ctx)

    assert result.exit_code == 1


def test_config_set_writes_repo_config(tmp_path: Path) -> None:
    runner = CliRunner()
    ctx = build_context(_git(), branchline_root=tmp_path)

    first = runner.invoke(cli, ["config", "set", "sync_strategy", "rebase"], obj=ctx)
    second = runner.invoke(cli, ["config", "set", "perennial_branches", "release, qa"], obj=ctx)

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert "Set perennial_branches=release,qa" in second.output
    repo_dir = repo_context_for(REPO_ROOT, tmp_path).repo_dir
    loaded = load_repo_config(repo_dir)
    assert loaded.perennial_branches == ("release", "qa")
    assert loaded.sync_strategy == "rebase"


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    ctx = build_context(_git(), branchline_root=tmp_path)

    result = runner.invoke(cli, ["config", "set", "sync_strategy", "squash"], obj=ctx)

    assert result.exit_code == 1
    assert "must be one of merge, rebase" in result.output
    assert not (repo_context_for(REPO_ROOT, tmp_path).repo_dir / "config.toml").exists()


def test_config_set_rejects_unknown_key(tmp_path: Path) -> None:
    runner = CliRunner()
    ctx = build_context(_git(), branchline_root=tmp_path)

    result = runner.invoke(cli, ["config", "set", "colour", "blue"], obj=ctx)

    assert result.exit_code == 1
    assert "Unknown config key 'colour'" in result.output


def test_config_set_global_offline() -> None:
    runner = CliRunner()
    ctx = build_context(_git())

    result = runner.invoke(cli, ["config", "set", "--global", "offline", "true"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Set offline=true" in result.output
    assert ctx.config_store.load().offline is True


def test_config_set_global_rejects_bad_boolean() -> None:
    runner = CliRunner()
    ctx = build_context(_git())

    result = runner.invoke(cli, ["config", "set", "--global", "offline", "maybe"], obj=ctx)

    assert result.exit_code == 1
    assert "Invalid boolean value for offline: maybe" in result.output
    assert ctx.config_store.load().offline is False
