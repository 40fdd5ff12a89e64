"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import os
import subprocess
from pathlib import Path

from branchline.core.git.abc import Git
from branchline.core.subprocess import format_command_error, run_subprocess_with_context
from branchline.vm.errors import ConflictError

# ============================================================================
# Production Implementation
# ============================================================================


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    # Read-only operations

    def get_repo_root(self, cwd: Path) -> Path | None:
        """Get the root of the working tree containing cwd."""
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip())

    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch."""
        result = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        branch = result.stdout.strip()
        if branch == "HEAD":
            return None

        return branch

    def get_previous_branch(self, repo_root: Path) -> str | None:
        """Get the previously checked-out branch."""
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--abbrev-ref", "@{-1}"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        branch = result.stdout.strip()
        return branch or None

    def get_trunk_branch(self, repo_root: Path) -> str:
        """Get the trunk branch name for the repository.

        Detects trunk by checking git's remote HEAD reference. Falls back to
        checking for existence of common trunk branch names if detection fails.
        """
        # 1. Try git symbolic-ref to detect default branch
        result = subprocess.run(
            ["git", "symbolic-ref", "refs/remotes/origin/HEAD"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode == 0:
            # Parse "refs/remotes/origin/master" -> "master"
            ref = result.stdout.strip()
            if ref.startswith("refs/remotes/origin/"):
                return ref.replace("refs/remotes/origin/", "")

        # 2. Fallback: try 'main' then 'master', use first that exists
        for candidate in ["main", "master"]:
            result = subprocess.run(
                ["git", "show-ref", "--verify", f"refs/heads/{candidate}"],
                cwd=repo_root,
                capture_output=True,
                text=True,
                check=False,
            )
            if result.returncode == 0:
                return candidate

        # 3. Final fallback: 'main'
        return "main"

    def list_local_branches(self, repo_root: Path) -> list[str]:
        """List all local branch names in the repository."""
        result = run_subprocess_with_context(
            ["git", "branch", "--format=%(refname:short)"],
            operation_context="list local branches",
            cwd=repo_root,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def list_remote_branches(self, repo_root: Path) -> list[str]:
        """List all remote branch names in the repository."""
        result = run_subprocess_with_context(
            ["git", "branch", "-r", "--format=%(refname:short)"],
            operation_context="list remote branches",
            cwd=repo_root,
        )
        branches = []
        for line in result.stdout.splitlines():
            name = line.strip()
            # Skip symbolic refs such as "origin/HEAD" or a bare "origin"
            if not name or "/" not in name or name.endswith("/HEAD"):
                continue
            branches.append(name)
        return branches

    def list_remotes(self, repo_root: Path) -> list[str]:
        """List configured remotes."""
        result = run_subprocess_with_context(
            ["git", "remote"],
            operation_context="list remotes",
            cwd=repo_root,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        """Get the commit SHA at the head of a branch."""
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{branch}^{{commit}}"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        """Check if a worktree has uncommitted changes."""
        result = subprocess.run(
            ["git", "status", "--porcelain"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return False
        return bool(result.stdout.strip())

    def has_conflicts(self, repo_root: Path) -> bool:
        """Check if the index contains unmerged paths."""
        result = subprocess.run(
            ["git", "diff", "--name-only", "--diff-filter=U"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return False
        return bool(result.stdout.strip())

    def is_merge_in_progress(self, repo_root: Path) -> bool:
        """Check if MERGE_HEAD exists."""
        return self._git_path(repo_root, "MERGE_HEAD").exists()

    def is_rebase_in_progress(self, repo_root: Path) -> bool:
        """Check if a rebase state directory exists."""
        return (
            self._git_path(repo_root, "rebase-merge").exists()
            or self._git_path(repo_root, "rebase-apply").exists()
        )

    def has_diff(self, repo_root: Path, base: str, head: str) -> bool:
        """Check whether head differs from base."""
        result = subprocess.run(
            ["git", "diff", "--quiet", f"{base}..{head}"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode not in (0, 1):
            raise RuntimeError(
                format_command_error(
                    ["git", "diff", "--quiet", f"{base}..{head}"],
                    f"compare {head} with {base}",
                    result.returncode,
                    result.stdout,
                    result.stderr,
                )
            )
        return result.returncode == 1

    def get_config_regexp(self, repo_root: Path, pattern: str) -> dict[str, str]:
        """Get local git config entries matching pattern."""
        result = subprocess.run(
            ["git", "config", "--local", "--get-regexp", pattern],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        # Exit code 1 means no matching keys
        if result.returncode != 0:
            return {}

        entries: dict[str, str] = {}
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            key, _, value = line.partition(" ")
            entries[key] = value.strip()
        return entries

    def path_exists(self, path: Path) -> bool:
        """Check if path exists on filesystem."""
        return path.exists()

    def safe_chdir(self, path: Path) -> bool:
        """Change directory if path exists on real filesystem."""
        if not path.exists():
            return False
        os.chdir(path)
        return True

    # Mutating operations

    def fetch(self, repo_root: Path, remote: str) -> None:
        """Fetch from remote."""
        run_subprocess_with_context(
            ["git", "fetch", "--prune", "--tags", remote],
            operation_context=f"fetch from '{remote}'",
            cwd=repo_root,
        )

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Checkout a branch."""
        run_subprocess_with_context(
            ["git", "checkout", branch],
            operation_context=f"checkout branch '{branch}'",
            cwd=cwd,
        )

    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        """Create a new branch without checking it out."""
        run_subprocess_with_context(
            ["git", "branch", branch_name, start_point],
            operation_context=f"create branch '{branch_name}' from '{start_point}'",
            cwd=cwd,
        )

    def delete_branch(self, cwd: Path, branch_name: str, *, force: bool) -> None:
        """Delete a local branch."""
        flag = "-D" if force else "-d"
        run_subprocess_with_context(
            ["git", "branch", flag, branch_name],
            operation_context=f"delete branch '{branch_name}'",
            cwd=cwd,
        )

    def merge_branch(self, cwd: Path, branch: str) -> None:
        """Merge branch into the current branch."""
        self._run_conflict_capable(
            ["git", "merge", "--no-edit", branch], f"merge '{branch}'", cwd
        )

    def rebase_branch(self, cwd: Path, onto: str) -> None:
        """Rebase the current branch onto another branch."""
        self._run_conflict_capable(["git", "rebase", onto], f"rebase onto '{onto}'", cwd)

    def continue_merge(self, cwd: Path) -> None:
        """Conclude a merge by committing with the prepared message."""
        self._run_conflict_capable(["git", "commit", "--no-edit"], "conclude merge", cwd)

    def continue_rebase(self, cwd: Path) -> None:
        """Continue a rebase without opening an editor."""
        self._run_conflict_capable(
            ["git", "-c", "core.editor=true", "rebase", "--continue"], "continue rebase", cwd
        )

    def abort_merge(self, cwd: Path) -> None:
        """Abort the merge in progress."""
        run_subprocess_with_context(
            ["git", "merge", "--abort"],
            operation_context="abort merge",
            cwd=cwd,
        )

    def abort_rebase(self, cwd: Path) -> None:
        """Abort the rebase in progress."""
        run_subprocess_with_context(
            ["git", "rebase", "--abort"],
            operation_context="abort rebase",
            cwd=cwd,
        )

    def squash_merge(self, cwd: Path, branch: str) -> None:
        """Squash-merge branch into the index."""
        self._run_conflict_capable(
            ["git", "merge", "--squash", branch], f"squash-merge '{branch}'", cwd
        )

    def commit(self, cwd: Path, message: str) -> None:
        """Commit staged changes."""
        run_subprocess_with_context(
            ["git", "commit", "-m", message],
            operation_context="commit changes",
            cwd=cwd,
        )

    def reset_hard(self, cwd: Path, ref: str) -> None:
        """Reset the current branch to ref."""
        run_subprocess_with_context(
            ["git", "reset", "--hard", ref],
            operation_context=f"reset to '{ref}'",
            cwd=cwd,
        )

    def pull_branch(self, repo_root: Path, remote: str, branch: str, *, ff_only: bool) -> None:
        """Pull a specific branch from a remote."""
        cmd = ["git", "pull"]
        if ff_only:
            cmd.append("--ff-only")
        cmd.extend([remote, branch])
        self._run_conflict_capable(cmd, f"pull '{branch}' from '{remote}'", repo_root)

    def push_branch(
        self,
        repo_root: Path,
        remote: str,
        branch: str,
        *,
        force_with_lease: bool,
        no_verify: bool,
    ) -> None:
        """Push a local branch to remote."""
        cmd = ["git", "push"]
        if force_with_lease:
            cmd.append("--force-with-lease")
        if no_verify:
            cmd.append("--no-verify")
        cmd.extend([remote, branch])
        run_subprocess_with_context(
            cmd,
            operation_context=f"push branch '{branch}' to '{remote}'",
            cwd=repo_root,
        )

    def create_tracking_branch(
        self, repo_root: Path, remote: str, branch: str, *, no_verify: bool
    ) -> None:
        """Push a local branch and set upstream."""
        cmd = ["git", "push", "-u"]
        if no_verify:
            cmd.append("--no-verify")
        cmd.extend([remote, branch])
        run_subprocess_with_context(
            cmd,
            operation_context=f"create tracking branch for '{branch}' on '{remote}'",
            cwd=repo_root,
        )

    def delete_remote_branch(self, repo_root: Path, remote: str, branch: str) -> None:
        """Delete a branch on remote."""
        run_subprocess_with_context(
            ["git", "push", remote, f":{branch}"],
            operation_context=f"delete remote branch '{remote}/{branch}'",
            cwd=repo_root,
        )

    def stash_push(self, cwd: Path) -> None:
        """Stash open changes including untracked files."""
        run_subprocess_with_context(
            ["git", "stash", "push", "--include-untracked"],
            operation_context="stash open changes",
            cwd=cwd,
        )

    def stash_pop(self, cwd: Path) -> None:
        """Restore stashed changes."""
        self._run_conflict_capable(["git", "stash", "pop"], "restore stashed changes", cwd)

    def stash_drop(self, cwd: Path) -> None:
        """Drop the most recent stash entry."""
        run_subprocess_with_context(
            ["git", "stash", "drop"],
            operation_context="drop stash entry",
            cwd=cwd,
        )

    def set_config(self, repo_root: Path, key: str, value: str) -> None:
        """Set a local git config entry."""
        run_subprocess_with_context(
            ["git", "config", "--local", key, value],
            operation_context=f"set git config '{key}'",
            cwd=repo_root,
        )

    def unset_config(self, repo_root: Path, key: str) -> None:
        """Remove a local git config entry."""
        result = subprocess.run(
            ["git", "config", "--local", "--unset", key],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        # Exit code 5 means the key was not set
        if result.returncode not in (0, 5):
            raise RuntimeError(
                format_command_error(
                    ["git", "config", "--local", "--unset", key],
                    f"remove git config '{key}'",
                    result.returncode,
                    result.stdout,
                    result.stderr,
                )
            )

    # Helpers

    def _git_path(self, repo_root: Path, name: str) -> Path:
        result = run_subprocess_with_context(
            ["git", "rev-parse", "--git-path", name],
            operation_context=f"resolve git path '{name}'",
            cwd=repo_root,
        )
        path = Path(result.stdout.strip())
        if not path.is_absolute():
            path = repo_root / path
        return path

    def _run_conflict_capable(self, cmd: list[str], operation: str, cwd: Path) -> None:
        """Run a command that may stop with conflicts.

        A failure that leaves unmerged paths or an unfinished merge/rebase is
        reported as ConflictError, anything else as RuntimeError.
        """
        result = run_subprocess_with_context(cmd, operation_context=operation, cwd=cwd, check=False)
        if result.returncode == 0:
            return

        if (
            self.has_conflicts(cwd)
            or self.is_merge_in_progress(cwd)
            or self.is_rebase_in_progress(cwd)
        ):
            raise ConflictError(operation, (result.stdout + result.stderr).strip())

        raise RuntimeError(
            format_command_error(cmd, operation, result.returncode, result.stdout, result.stderr)
        )
