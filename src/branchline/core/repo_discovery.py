"""Repository discovery functionality.

Discovers git repository information from a given path without requiring
full BranchlineContext (enables config loading before context creation).
"""

import re
from dataclasses import dataclass
from pathlib import Path

from branchline.core.git.abc import Git
from branchline.core.git.real import RealGit


@dataclass(frozen=True)
class RepoContext:
    """Represents a git repo root and where branchline keeps its metadata."""

    root: Path
    repo_name: str
    repo_dir: Path  # ~/.branchline/repos/<sanitized root>


@dataclass(frozen=True)
class NoRepoSentinel:
    """Sentinel value indicating execution outside a git repository.

    Commands that require repo context check for this sentinel and fail fast.
    """

    message: str = "Not inside a git repository"


def sanitize_repo_root(root: Path) -> str:
    """Turn a repository path into a single file-name-safe key.

    Example:
        /home/me/code/app -> home-me-code-app
    """
    return re.sub(r"[^A-Za-z0-9._]+", "-", str(root)).strip("-") or "root"


def discover_repo_or_sentinel(
    cwd: Path, branchline_root: Path, git_ops: Git | None = None
) -> RepoContext | NoRepoSentinel:
    """Find the repository containing `cwd`.

    Args:
        cwd: Current working directory to start search from
        branchline_root: Global metadata root directory (from config)
        git_ops: Git operations interface (defaults to RealGit)

    Returns:
        RepoContext if inside a git repository, NoRepoSentinel otherwise
    """
    ops = git_ops if git_ops is not None else RealGit()

    if not ops.path_exists(cwd):
        return NoRepoSentinel(message=f"Start path '{cwd}' does not exist")

    root = ops.get_repo_root(cwd)
    if root is None:
        return NoRepoSentinel()

    return repo_context_for(root, branchline_root)


def repo_context_for(root: Path, branchline_root: Path) -> RepoContext:
    key = sanitize_repo_root(root)
    return RepoContext(
        root=root,
        repo_name=root.name,
        repo_dir=branchline_root / "repos" / key,
    )
