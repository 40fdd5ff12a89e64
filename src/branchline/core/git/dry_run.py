"""No-op Git wrapper for dry-run mode.

This module provides a Git wrapper that prevents execution of mutating
operations while delegating read-only operations to the wrapped implementation.
"""

from pathlib import Path

from branchline.core.git.abc import Git

# ============================================================================
# No-op Wrapper
# ============================================================================


class DryRunGit(Git):
    """No-op wrapper that prevents execution of mutating operations.

    Read-only operations are delegated to the wrapped implementation so that
    planning and opcodes that inspect the repository behave as in a real run.
    Combine with PrintingGit to announce the skipped commands.

    Usage:
        real_ops = RealGit()
        noop_ops = DryRunGit(real_ops)

        # Returns without deleting anything
        noop_ops.delete_branch(repo_root, "feature", force=True)
    """

    def __init__(self, wrapped: Git) -> None:
        """Create a dry-run wrapper around a Git implementation.

        Args:
            wrapped: The Git implementation to wrap (usually RealGit or FakeGit)
        """
        self._wrapped = wrapped

    # Read-only operations: delegate to wrapped implementation

    def get_repo_root(self, cwd: Path) -> Path | None:
        return self._wrapped.get_repo_root(cwd)

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._wrapped.get_current_branch(cwd)

    def get_previous_branch(self, repo_root: Path) -> str | None:
        return self._wrapped.get_previous_branch(repo_root)

    def get_trunk_branch(self, repo_root: Path) -> str:
        return self._wrapped.get_trunk_branch(repo_root)

    def list_local_branches(self, repo_root: Path) -> list[str]:
        return self._wrapped.list_local_branches(repo_root)

    def list_remote_branches(self, repo_root: Path) -> list[str]:
        return self._wrapped.list_remote_branches(repo_root)

    def list_remotes(self, repo_root: Path) -> list[str]:
        return self._wrapped.list_remotes(repo_root)

    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        return self._wrapped.get_branch_head(repo_root, branch)

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        return self._wrapped.has_uncommitted_changes(cwd)

    def has_conflicts(self, repo_root: Path) -> bool:
        return self._wrapped.has_conflicts(repo_root)

    def is_merge_in_progress(self, repo_root: Path) -> bool:
        return self._wrapped.is_merge_in_progress(repo_root)

    def is_rebase_in_progress(self, repo_root: Path) -> bool:
        return self._wrapped.is_rebase_in_progress(repo_root)

    def has_diff(self, repo_root: Path, base: str, head: str) -> bool:
        return self._wrapped.has_diff(repo_root, base, head)

    def get_config_regexp(self, repo_root: Path, pattern: str) -> dict[str, str]:
        return self._wrapped.get_config_regexp(repo_root, pattern)

    def path_exists(self, path: Path) -> bool:
        return self._wrapped.path_exists(path)

    def safe_chdir(self, path: Path) -> bool:
        # Changing directory does not touch the repository
        return self._wrapped.safe_chdir(path)

    # Mutating operations: no-op

    def fetch(self, repo_root: Path, remote: str) -> None:
        pass

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        pass

    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        pass

    def delete_branch(self, cwd: Path, branch_name: str, *, force: bool) -> None:
        pass

    def merge_branch(self, cwd: Path, branch: str) -> None:
        pass

    def rebase_branch(self, cwd: Path, onto: str) -> None:
        pass

    def continue_merge(self, cwd: Path) -> None:
        pass

    def continue_rebase(self, cwd: Path) -> None:
        pass

    def abort_merge(self, cwd: Path) -> None:
        pass

    def abort_rebase(self, cwd: Path) -> None:
        pass

    def squash_merge(self, cwd: Path, branch: str) -> None:
        pass

    def commit(self, cwd: Path, message: str) -> None:
        pass

    def reset_hard(self, cwd: Path, ref: str) -> None:
        pass

    def pull_branch(self, repo_root: Path, remote: str, branch: str, *, ff_only: bool) -> None:
        pass

    def push_branch(
        self,
        repo_root: Path,
        remote: str,
        branch: str,
        *,
        force_with_lease: bool,
        no_verify: bool,
    ) -> None:
        pass

    def create_tracking_branch(
        self, repo_root: Path, remote: str, branch: str, *, no_verify: bool
    ) -> None:
        pass

    def delete_remote_branch(self, repo_root: Path, remote: str, branch: str) -> None:
        pass

    def stash_push(self, cwd: Path) -> None:
        pass

    def stash_pop(self, cwd: Path) -> None:
        pass

    def stash_drop(self, cwd: Path) -> None:
        pass

    def set_config(self, repo_root: Path, key: str, value: str) -> None:
        pass

    def unset_config(self, repo_root: Path, key: str) -> None:
        pass
