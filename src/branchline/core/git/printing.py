"""Printing Git wrapper for verbose output.

This module provides a Git wrapper that prints styled output for operations
before delegating to the wrapped implementation.
"""

from pathlib import Path

from branchline.core.git.abc import Git
from branchline.core.printing_base import PrintingBase

# ============================================================================
# Printing Wrapper Implementation
# ============================================================================


class PrintingGit(PrintingBase[Git], Git):
    """Wrapper that prints operations before delegating to inner implementation.

    This wrapper prints the git command for every mutating operation, then
    delegates to the wrapped implementation (which could be Real or DryRun).

    Usage:
        # For production
        printing_ops = PrintingGit(real_ops)

        # For dry-run
        noop_inner = DryRunGit(real_ops)
        printing_ops = PrintingGit(noop_inner, dry_run=True)
    """

    # Read-only operations: delegate without printing

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
        return self._wrapped.safe_chdir(path)

    # Operations that need printing

    def fetch(self, repo_root: Path, remote: str) -> None:
        self._emit(self._format_command(f"git fetch --prune --tags {remote}"))
        self._wrapped.fetch(repo_root, remote)

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        self._emit(self._format_command(f"git checkout {branch}"))
        self._wrapped.checkout_branch(cwd, branch)

    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        self._emit(self._format_command(f"git branch {branch_name} {start_point}"))
        self._wrapped.create_branch(cwd, branch_name, start_point)

    def delete_branch(self, cwd: Path, branch_name: str, *, force: bool) -> None:
        flag = "-D" if force else "-d"
        self._emit(self._format_command(f"git branch {flag} {branch_name}"))
        self._wrapped.delete_branch(cwd, branch_name, force=force)

    def merge_branch(self, cwd: Path, branch: str) -> None:
        self._emit(self._format_command(f"git merge --no-edit {branch}"))
        self._wrapped.merge_branch(cwd, branch)

    def rebase_branch(self, cwd: Path, onto: str) -> None:
        self._emit(self._format_command(f"git rebase {onto}"))
        self._wrapped.rebase_branch(cwd, onto)

    def continue_merge(self, cwd: Path) -> None:
        self._emit(self._format_command("git commit --no-edit"))
        self._wrapped.continue_merge(cwd)

    def continue_rebase(self, cwd: Path) -> None:
        self._emit(self._format_command("git rebase --continue"))
        self._wrapped.continue_rebase(cwd)

    def abort_merge(self, cwd: Path) -> None:
        self._emit(self._format_command("git merge --abort"))
        self._wrapped.abort_merge(cwd)

    def abort_rebase(self, cwd: Path) -> None:
        self._emit(self._format_command("git rebase --abort"))
        self._wrapped.abort_rebase(cwd)

    def squash_merge(self, cwd: Path, branch: str) -> None:
        self._emit(self._format_command(f"git merge --squash {branch}"))
        self._wrapped.squash_merge(cwd, branch)

    def commit(self, cwd: Path, message: str) -> None:
        self._emit(self._format_command(f'git commit -m "{message}"'))
        self._wrapped.commit(cwd, message)

    def reset_hard(self, cwd: Path, ref: str) -> None:
        self._emit(self._format_command(f"git reset --hard {ref}"))
        self._wrapped.reset_hard(cwd, ref)

    def pull_branch(self, repo_root: Path, remote: str, branch: str, *, ff_only: bool) -> None:
        ff_flag = " --ff-only" if ff_only else ""
        self._emit(self._format_command(f"git pull{ff_flag} {remote} {branch}"))
        self._wrapped.pull_branch(repo_root, remote, branch, ff_only=ff_only)

    def push_branch(
        self,
        repo_root: Path,
        remote: str,
        branch: str,
        *,
        force_with_lease: bool,
        no_verify: bool,
    ) -> None:
        flags = ""
        if force_with_lease:
            flags += " --force-with-lease"
        if no_verify:
            flags += " --no-verify"
        self._emit(self._format_command(f"git push{flags} {remote} {branch}"))
        self._wrapped.push_branch(
            repo_root, remote, branch, force_with_lease=force_with_lease, no_verify=no_verify
        )

    def create_tracking_branch(
        self, repo_root: Path, remote: str, branch: str, *, no_verify: bool
    ) -> None:
        no_verify_flag = " --no-verify" if no_verify else ""
        self._emit(self._format_command(f"git push -u{no_verify_flag} {remote} {branch}"))
        self._wrapped.create_tracking_branch(repo_root, remote, branch, no_verify=no_verify)

    def delete_remote_branch(self, repo_root: Path, remote: str, branch: str) -> None:
        self._emit(self._format_command(f"git push {remote} :{branch}"))
        self._wrapped.delete_remote_branch(repo_root, remote, branch)

    def stash_push(self, cwd: Path) -> None:
        self._emit(self._format_command("git stash push --include-untracked"))
        self._wrapped.stash_push(cwd)

    def stash_pop(self, cwd: Path) -> None:
        self._emit(self._format_command("git stash pop"))
        self._wrapped.stash_pop(cwd)

    def stash_drop(self, cwd: Path) -> None:
        self._emit(self._format_command("git stash drop"))
        self._wrapped.stash_drop(cwd)

    def set_config(self, repo_root: Path, key: str, value: str) -> None:
        self._emit(self._format_command(f"git config {key} {value}"))
        self._wrapped.set_config(repo_root, key, value)

    def unset_config(self, repo_root: Path, key: str) -> None:
        self._emit(self._format_command(f"git config --unset {key}"))
        self._wrapped.unset_config(repo_root, key)
