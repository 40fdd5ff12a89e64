"""Fake Git operations for testing.

FakeGit is an in-memory repository that accepts pre-configured state in its
constructor. Construct instances directly with keyword arguments.
"""

import re
from pathlib import Path

from branchline.core.git.abc import Git
from branchline.vm.errors import ConflictError


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults.

    Conflicts and failures are scripted as (operation, target) pairs, for example
    ("merge", "main"), ("pull", "main") or ("stash_pop", ""). A scripted conflict
    leaves the fake in the same state git would: a merge or rebase in progress
    with unresolved paths, or a conflicted stash pop that keeps its entry.

    Every mutating call is appended to `operations` as a tuple whose first item
    is the operation name, so tests can assert exact call sequences.
    """

    def __init__(
        self,
        *,
        repo_root: Path | None = None,
        branches: dict[str, str] | None = None,
        remote_branches: dict[str, str] | None = None,
        remotes: list[str] | None = None,
        current_branch: str | None = None,
        previous_branch: str | None = None,
        trunk_branch: str = "main",
        config: dict[str, str] | None = None,
        uncommitted_changes: bool = False,
        conflicts: set[tuple[str, str]] | None = None,
        failures: set[tuple[str, str]] | None = None,
        empty_diffs: set[tuple[str, str]] | None = None,
        merge_in_progress: bool = False,
        rebase_in_progress: bool = False,
        unresolved_conflicts: bool = False,
        stash_size: int = 0,
        existing_paths: set[Path] | None = None,
    ) -> None:
        """Create FakeGit with pre-configured state.

        Args:
            repo_root: Value returned by get_repo_root() for any cwd
            branches: Mapping of local branch name -> commit sha
            remote_branches: Mapping of remote ref ("origin/name") -> commit sha
            remotes: Configured remote names
            current_branch: Checked-out branch
            previous_branch: Branch `git checkout -` would switch to
            trunk_branch: Value returned by get_trunk_branch()
            config: Local git config entries
            uncommitted_changes: Whether the working tree has open changes
            conflicts: (operation, target) pairs that stop with a conflict
            failures: (operation, target) pairs that fail with RuntimeError
            empty_diffs: (base, head) pairs for which has_diff() is False
            merge_in_progress: Whether a merge is waiting to be concluded
            rebase_in_progress: Whether a rebase is waiting to be continued
            unresolved_conflicts: Whether the index has unmerged paths
            stash_size: Number of stash entries
            existing_paths: Paths for which path_exists() is True
        """
        self._repo_root = repo_root
        self._branches = dict(branches) if branches is not None else {}
        self._remote_branches = dict(remote_branches) if remote_branches is not None else {}
        self._remotes = list(remotes) if remotes is not None else []
        self._current_branch = current_branch
        self._previous_branch = previous_branch
        self._trunk_branch = trunk_branch
        self._config = dict(config) if config is not None else {}
        self._uncommitted_changes = uncommitted_changes
        self._conflicts = conflicts or set()
        self._failures = failures or set()
        self._empty_diffs = empty_diffs or set()
        self._merge_in_progress = merge_in_progress
        self._rebase_in_progress = rebase_in_progress
        self._unresolved_conflicts = unresolved_conflicts
        self._stash_size = stash_size
        self._existing_paths = existing_paths or set()
        self._operations: list[tuple[str, ...]] = []
        self._sha_counter = 0

    # ------------------------------------------------------------------
    # Read-only operations
    # ------------------------------------------------------------------

    def get_repo_root(self, cwd: Path) -> Path | None:
        return self._repo_root

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._current_branch

    def get_previous_branch(self, repo_root: Path) -> str | None:
        return self._previous_branch

    def get_trunk_branch(self, repo_root: Path) -> str:
        return self._trunk_branch

    def list_local_branches(self, repo_root: Path) -> list[str]:
        return sorted(self._branches)

    def list_remote_branches(self, repo_root: Path) -> list[str]:
        return sorted(self._remote_branches)

    def list_remotes(self, repo_root: Path) -> list[str]:
        return list(self._remotes)

    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        if branch in self._branches:
            return self._branches[branch]
        return self._remote_branches.get(branch)

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        return self._uncommitted_changes

    def has_conflicts(self, repo_root: Path) -> bool:
        return self._unresolved_conflicts

    def is_merge_in_progress(self, repo_root: Path) -> bool:
        return self._merge_in_progress

    def is_rebase_in_progress(self, repo_root: Path) -> bool:
        return self._rebase_in_progress

    def has_diff(self, repo_root: Path, base: str, head: str) -> bool:
        return (base, head) not in self._empty_diffs

    def get_config_regexp(self, repo_root: Path, pattern: str) -> dict[str, str]:
        regex = re.compile(pattern)
        return {key: value for key, value in self._config.items() if regex.search(key)}

    def path_exists(self, path: Path) -> bool:
        return path in self._existing_paths

    def safe_chdir(self, path: Path) -> bool:
        if path not in self._existing_paths:
            return False
        self._operations.append(("chdir", str(path)))
        return True

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def fetch(self, repo_root: Path, remote: str) -> None:
        self._record("fetch", remote)

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        self._record("checkout", branch)
        if branch not in self._branches:
            msg = f"error: pathspec '{branch}' did not match any file(s) known to git"
            raise RuntimeError(msg)
        if branch != self._current_branch:
            self._previous_branch = self._current_branch
        self._current_branch = branch

    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        self._record("create_branch", branch_name, start_point)
        if branch_name in self._branches:
            msg = f"fatal: a branch named '{branch_name}' already exists"
            raise RuntimeError(msg)
        sha = self.get_branch_head(cwd, start_point)
        self._branches[branch_name] = sha if sha is not None else start_point

    def delete_branch(self, cwd: Path, branch_name: str, *, force: bool) -> None:
        self._record("delete_branch", branch_name)
        if branch_name not in self._branches:
            msg = f"error: branch '{branch_name}' not found"
            raise RuntimeError(msg)
        del self._branches[branch_name]

    def merge_branch(self, cwd: Path, branch: str) -> None:
        self._record("merge", branch)
        if ("merge", branch) in self._conflicts:
            self._merge_in_progress = True
            self._unresolved_conflicts = True
            raise ConflictError(f"merge '{branch}'")
        self._advance_current_branch()

    def rebase_branch(self, cwd: Path, onto: str) -> None:
        self._record("rebase", onto)
        if ("rebase", onto) in self._conflicts:
            self._rebase_in_progress = True
            self._unresolved_conflicts = True
            raise ConflictError(f"rebase onto '{onto}'")
        self._advance_current_branch()

    def continue_merge(self, cwd: Path) -> None:
        self._record("continue_merge")
        if self._unresolved_conflicts:
            raise ConflictError("conclude merge")
        self._merge_in_progress = False
        self._advance_current_branch()

    def continue_rebase(self, cwd: Path) -> None:
        self._record("continue_rebase")
        if self._unresolved_conflicts:
            raise ConflictError("continue rebase")
        self._rebase_in_progress = False
        self._advance_current_branch()

    def abort_merge(self, cwd: Path) -> None:
        self._record("abort_merge")
        self._merge_in_progress = False
        self._unresolved_conflicts = False

    def abort_rebase(self, cwd: Path) -> None:
        self._record("abort_rebase")
        self._rebase_in_progress = False
        self._unresolved_conflicts = False

    def squash_merge(self, cwd: Path, branch: str) -> None:
        self._record("squash_merge", branch)
        if ("squash_merge", branch) in self._conflicts:
            self._unresolved_conflicts = True
            raise ConflictError(f"squash-merge '{branch}'")
        self._uncommitted_changes = True

    def commit(self, cwd: Path, message: str) -> None:
        self._record("commit", message)
        self._uncommitted_changes = False
        self._unresolved_conflicts = False
        self._advance_current_branch()

    def reset_hard(self, cwd: Path, ref: str) -> None:
        self._record("reset_hard", ref)
        self._uncommitted_changes = False
        self._unresolved_conflicts = False
        if self._current_branch is not None:
            sha = self.get_branch_head(cwd, ref)
            self._branches[self._current_branch] = sha if sha is not None else ref

    def pull_branch(self, repo_root: Path, remote: str, branch: str, *, ff_only: bool) -> None:
        self._record("pull", remote, branch, target=branch)
        if ("pull", branch) in self._conflicts:
            self._merge_in_progress = True
            self._unresolved_conflicts = True
            raise ConflictError(f"pull '{branch}'")
        remote_sha = self._remote_branches.get(f"{remote}/{branch}")
        if remote_sha is not None and self._current_branch is not None:
            self._branches[self._current_branch] = remote_sha

    def push_branch(
        self,
        repo_root: Path,
        remote: str,
        branch: str,
        *,
        force_with_lease: bool,
        no_verify: bool,
    ) -> None:
        self._record("push", remote, branch, target=branch)
        self._remote_branches[f"{remote}/{branch}"] = self._branches.get(branch, "")

    def create_tracking_branch(
        self, repo_root: Path, remote: str, branch: str, *, no_verify: bool
    ) -> None:
        self._record("create_tracking_branch", remote, branch, target=branch)
        self._remote_branches[f"{remote}/{branch}"] = self._branches.get(branch, "")

    def delete_remote_branch(self, repo_root: Path, remote: str, branch: str) -> None:
        self._record("delete_remote_branch", remote, branch, target=branch)
        self._remote_branches.pop(f"{remote}/{branch}", None)

    def stash_push(self, cwd: Path) -> None:
        self._record("stash_push")
        self._stash_size += 1
        self._uncommitted_changes = False

    def stash_pop(self, cwd: Path) -> None:
        self._record("stash_pop")
        if ("stash_pop", "") in self._conflicts:
            # git keeps the entry when the pop conflicts
            self._uncommitted_changes = True
            self._unresolved_conflicts = True
            raise ConflictError("restore stashed changes")
        if self._stash_size == 0:
            raise RuntimeError("No stash entries found.")
        self._stash_size -= 1
        self._uncommitted_changes = True

    def stash_drop(self, cwd: Path) -> None:
        self._record("stash_drop")
        if self._stash_size == 0:
            raise RuntimeError("No stash entries found.")
        self._stash_size -= 1

    def set_config(self, repo_root: Path, key: str, value: str) -> None:
        self._record("set_config", key, value)
        self._config[key] = value

    def unset_config(self, repo_root: Path, key: str) -> None:
        self._record("unset_config", key)
        self._config.pop(key, None)

    # ------------------------------------------------------------------
    # Test assertions
    # ------------------------------------------------------------------

    @property
    def operations(self) -> list[tuple[str, ...]]:
        """Get every mutating call in the order it was made.

        This property is for test assertions only.
        """
        return self._operations.copy()

    @property
    def branches(self) -> dict[str, str]:
        """Get the current local branches (name -> sha).

        This property is for test assertions only.
        """
        return dict(self._branches)

    @property
    def remote_branches(self) -> dict[str, str]:
        """Get the current remote branches (ref -> sha).

        This property is for test assertions only.
        """
        return dict(self._remote_branches)

    @property
    def config(self) -> dict[str, str]:
        """Get the current local git config.

        This property is for test assertions only.
        """
        return dict(self._config)

    @property
    def stash_size(self) -> int:
        """Get the number of stash entries.

        This property is for test assertions only.
        """
        return self._stash_size

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record(self, operation: str, *args: str, target: str | None = None) -> None:
        self._operations.append((operation, *args))
        if target is None:
            target = args[0] if args else ""
        if (operation, target) in self._failures:
            msg = f"Failed to {operation} {target}".rstrip()
            raise RuntimeError(msg)

    def _advance_current_branch(self) -> None:
        if self._current_branch is None:
            return
        self._sha_counter += 1
        self._branches[self._current_branch] = f"{self._current_branch}-{self._sha_counter}"
