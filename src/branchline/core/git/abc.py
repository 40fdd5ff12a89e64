"""High-level git operations interface.

This module is the execution capability consumed by opcodes. Opcodes express
domain intent (checkout, merge, push, set a lineage entry) and the
implementations translate it into git invocations.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- DryRunGit: Wrapper that turns mutating operations into no-ops
- PrintingGit: Wrapper that prints mutating commands before delegating
- FakeGit: In-memory repository for tests

Mutating operations that can stop on a content conflict (merge, rebase,
squash-merge, pull, stash pop, continuing a merge or rebase) raise
ConflictError. All other failures raise RuntimeError.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    # ------------------------------------------------------------------
    # Read-only operations
    # ------------------------------------------------------------------

    @abstractmethod
    def get_repo_root(self, cwd: Path) -> Path | None:
        """Get the root of the working tree containing cwd, or None outside a repo."""
        ...

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch (None for detached HEAD)."""
        ...

    @abstractmethod
    def get_previous_branch(self, repo_root: Path) -> str | None:
        """Get the branch that `git checkout -` would switch to, if any."""
        ...

    @abstractmethod
    def get_trunk_branch(self, repo_root: Path) -> str:
        """Get the trunk branch name for the repository.

        Detects trunk by checking git's remote HEAD reference. Falls back to
        checking for existence of common trunk branch names if detection fails.

        Args:
            repo_root: Path to the repository root

        Returns:
            Trunk branch name (e.g., 'main', 'master')
        """
        ...

    @abstractmethod
    def list_local_branches(self, repo_root: Path) -> list[str]:
        """List all local branch names in the repository."""
        ...

    @abstractmethod
    def list_remote_branches(self, repo_root: Path) -> list[str]:
        """List all remote branch names in the repository.

        Returns branch names in format 'origin/branch-name', 'upstream/feature', etc.
        Only includes refs from configured remotes, not local branches.
        """
        ...

    @abstractmethod
    def list_remotes(self, repo_root: Path) -> list[str]:
        """List the names of configured remotes."""
        ...

    @abstractmethod
    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        """Get the commit SHA at the head of a branch.

        Args:
            repo_root: Path to the git repository root
            branch: Local branch name or remote ref (e.g. 'origin/feature')

        Returns:
            Commit SHA as a string, or None if branch doesn't exist.
        """
        ...

    @abstractmethod
    def has_uncommitted_changes(self, cwd: Path) -> bool:
        """Check if the working tree has uncommitted changes (staged, modified, or untracked)."""
        ...

    @abstractmethod
    def has_conflicts(self, repo_root: Path) -> bool:
        """Check if the index contains unmerged paths."""
        ...

    @abstractmethod
    def is_merge_in_progress(self, repo_root: Path) -> bool:
        """Check if a merge is waiting to be concluded."""
        ...

    @abstractmethod
    def is_rebase_in_progress(self, repo_root: Path) -> bool:
        """Check if a rebase is waiting to be continued or aborted."""
        ...

    @abstractmethod
    def has_diff(self, repo_root: Path, base: str, head: str) -> bool:
        """Check whether `head` contains changes that `base` does not."""
        ...

    @abstractmethod
    def get_config_regexp(self, repo_root: Path, pattern: str) -> dict[str, str]:
        """Get all local git config entries whose key matches pattern.

        Args:
            repo_root: Path to the repository root
            pattern: Regular expression matched against config keys

        Returns:
            Mapping of config key to value
        """
        ...

    @abstractmethod
    def path_exists(self, path: Path) -> bool:
        """Check if a path exists on the filesystem.

        In production (RealGit), this delegates to Path.exists(). In tests
        (FakeGit), this checks an in-memory set of existing paths.
        """
        ...

    @abstractmethod
    def safe_chdir(self, path: Path) -> bool:
        """Change current directory if path exists on real filesystem.

        Returns:
            True if directory change succeeded, False otherwise
        """
        ...

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    @abstractmethod
    def fetch(self, repo_root: Path, remote: str) -> None:
        """Fetch all branches from a remote and prune deleted ones."""
        ...

    @abstractmethod
    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Checkout a branch in the given directory."""
        ...

    @abstractmethod
    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        """Create a new branch without checking it out.

        Args:
            cwd: Working directory to run command in
            branch_name: Name of the branch to create
            start_point: Commit/branch to base the new branch on
        """
        ...

    @abstractmethod
    def delete_branch(self, cwd: Path, branch_name: str, *, force: bool) -> None:
        """Delete a local branch.

        Args:
            cwd: Working directory to run command in
            branch_name: Name of the branch to delete
            force: Use -D (force delete) instead of -d
        """
        ...

    @abstractmethod
    def merge_branch(self, cwd: Path, branch: str) -> None:
        """Merge branch into the current branch.

        Raises:
            ConflictError: If the merge stops with unresolved conflicts
        """
        ...

    @abstractmethod
    def rebase_branch(self, cwd: Path, onto: str) -> None:
        """Rebase the current branch onto another branch.

        Raises:
            ConflictError: If the rebase stops with unresolved conflicts
        """
        ...

    @abstractmethod
    def continue_merge(self, cwd: Path) -> None:
        """Conclude a merge whose conflicts have been resolved."""
        ...

    @abstractmethod
    def continue_rebase(self, cwd: Path) -> None:
        """Continue a rebase whose conflicts have been resolved."""
        ...

    @abstractmethod
    def abort_merge(self, cwd: Path) -> None:
        """Abort the merge in progress."""
        ...

    @abstractmethod
    def abort_rebase(self, cwd: Path) -> None:
        """Abort the rebase in progress."""
        ...

    @abstractmethod
    def squash_merge(self, cwd: Path, branch: str) -> None:
        """Stage the squashed changes of branch on top of the current branch.

        Raises:
            ConflictError: If squashing stops with unresolved conflicts
        """
        ...

    @abstractmethod
    def commit(self, cwd: Path, message: str) -> None:
        """Commit the staged changes with the given message."""
        ...

    @abstractmethod
    def reset_hard(self, cwd: Path, ref: str) -> None:
        """Reset the current branch and working tree to ref."""
        ...

    @abstractmethod
    def pull_branch(self, repo_root: Path, remote: str, branch: str, *, ff_only: bool) -> None:
        """Pull a specific branch from a remote.

        Args:
            repo_root: Path to the git repository root
            remote: Remote name (e.g., "origin")
            branch: Branch name to pull
            ff_only: If True, use --ff-only to prevent merge commits

        Raises:
            ConflictError: If the pull stops with unresolved conflicts
        """
        ...

    @abstractmethod
    def push_branch(
        self,
        repo_root: Path,
        remote: str,
        branch: str,
        *,
        force_with_lease: bool,
        no_verify: bool,
    ) -> None:
        """Push a local branch to its counterpart on remote."""
        ...

    @abstractmethod
    def create_tracking_branch(
        self, repo_root: Path, remote: str, branch: str, *, no_verify: bool
    ) -> None:
        """Push a local branch to remote and set it as the upstream."""
        ...

    @abstractmethod
    def delete_remote_branch(self, repo_root: Path, remote: str, branch: str) -> None:
        """Delete a branch on the remote."""
        ...

    @abstractmethod
    def stash_push(self, cwd: Path) -> None:
        """Stash all open changes, including untracked files."""
        ...

    @abstractmethod
    def stash_pop(self, cwd: Path) -> None:
        """Restore the most recently stashed changes.

        Raises:
            ConflictError: If the stashed changes conflict with the working tree
        """
        ...

    @abstractmethod
    def stash_drop(self, cwd: Path) -> None:
        """Remove the most recent stash entry without applying it."""
        ...

    @abstractmethod
    def set_config(self, repo_root: Path, key: str, value: str) -> None:
        """Set a local git config entry."""
        ...

    @abstractmethod
    def unset_config(self, repo_root: Path, key: str) -> None:
        """Remove a local git config entry (no error if it does not exist)."""
        ...
