"""CLI error handling utilities with styled output.

This module provides the Ensure class for asserting invariants in CLI commands
with consistent, user-friendly error messages. All errors use red "Error:" prefix
for visual consistency.

Every Ensure failure is a planning-phase validation error: nothing has run yet
and no run state is written.
"""

import shutil
from typing import TYPE_CHECKING, TypeVar

import click

from branchline.cli.output import user_output
from branchline.core.branches import BranchesSnapshot
from branchline.core.lineage import is_valid_branch_name
from branchline.core.repo_discovery import NoRepoSentinel, RepoContext

if TYPE_CHECKING:
    from branchline.core.context import BranchlineContext

T = TypeVar("T")


def _fail(error_message: str) -> None:
    user_output(click.style("Error: ", fg="red") + error_message)
    raise SystemExit(1)


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Args:
            condition: Boolean condition to check
            error_message: Error message to display if condition is false.
                          "Error: " prefix will be added automatically in red.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            _fail(error_message)

    @staticmethod
    def not_none(value: T | None, error_message: str) -> T:
        """Ensure value is not None, otherwise output styled error and exit.

        Takes `T | None` and returns `T`, so the type checker knows the value
        cannot be None after this call.
        """
        if value is None:
            _fail(error_message)
        return value  # type: ignore[return-value]

    @staticmethod
    def in_repo(ctx: "BranchlineContext") -> RepoContext:
        """Ensure the command runs inside a git repository."""
        if isinstance(ctx.repo, NoRepoSentinel):
            _fail(ctx.repo.message)
        assert isinstance(ctx.repo, RepoContext)
        return ctx.repo

    @staticmethod
    def valid_branch_name(name: str) -> None:
        if not is_valid_branch_name(name):
            _fail(f"'{name}' is not a valid branch name")

    @staticmethod
    def branch_exists(branches: BranchesSnapshot, branch: str) -> None:
        """Ensure a local branch exists.

        Example:
            >>> Ensure.branch_exists(branches, "feature-branch")
        """
        if not branches.has_local(branch):
            _fail(f"There is no local branch named '{branch}'")

    @staticmethod
    def branch_absent(branches: BranchesSnapshot, remote: str, branch: str) -> None:
        """Ensure neither a local nor a remote branch uses the name."""
        if branches.has_local(branch):
            _fail(f"A branch named '{branch}' already exists")
        if branches.has_remote(remote, branch):
            _fail(f"A branch named '{branch}' already exists on {remote}")

    @staticmethod
    def gh_installed() -> None:
        """Ensure GitHub CLI (gh) is installed and available on PATH.

        Raises:
            SystemExit: If gh CLI is not found on PATH
        """
        if shutil.which("gh") is None:
            _fail(
                "GitHub CLI (gh) is not installed\n\n"
                "Install it from: https://cli.github.com/\n"
                "Then authenticate with: gh auth login"
            )
