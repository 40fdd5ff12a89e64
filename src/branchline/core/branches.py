"""Snapshot of the repository's branches taken before planning."""

from dataclasses import dataclass
from pathlib import Path

from branchline.core.git.abc import Git


@dataclass(frozen=True)
class BranchesSnapshot:
    """Branch facts the planners need, read once per invocation.

    Remote branches are stored as "<remote>/<name>" refs.
    """

    current: str | None
    previous: str | None
    local: tuple[str, ...]
    remote: tuple[str, ...]
    remotes: tuple[str, ...]

    def has_local(self, branch: str) -> bool:
        return branch in self.local

    def has_remote(self, remote: str, branch: str) -> bool:
        return f"{remote}/{branch}" in self.remote


def load_branches(git: Git, repo_root: Path) -> BranchesSnapshot:
    return BranchesSnapshot(
        current=git.get_current_branch(repo_root),
        previous=git.get_previous_branch(repo_root),
        local=tuple(git.list_local_branches(repo_root)),
        remote=tuple(git.list_remote_branches(repo_root)),
        remotes=tuple(git.list_remotes(repo_root)),
    )
