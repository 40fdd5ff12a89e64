"""No-op wrapper for hosting operations."""

from pathlib import Path

from branchline.cli.output import user_output
from branchline.core.hosting.abc import HostingDriver
from branchline.core.hosting.types import PullRequestInfo


class DryRunHostingDriver(HostingDriver):
    """No-op wrapper for hosting operations.

    Read operations are delegated to the wrapped implementation.
    Write operations print what would happen and return without executing.
    """

    def __init__(self, wrapped: HostingDriver) -> None:
        """Initialize dry-run wrapper with a real implementation.

        Args:
            wrapped: The hosting driver to wrap
        """
        self._wrapped = wrapped

    def find_pull_request(
        self, repo_root: Path, branch: str, base: str
    ) -> PullRequestInfo | None:
        """Delegate read operation to wrapped implementation."""
        return self._wrapped.find_pull_request(repo_root, branch, base)

    def merge_pull_request(
        self, repo_root: Path, branch: str, parent: str, number: int, message: str
    ) -> None:
        """Print the merge instead of performing it."""
        user_output(f"[DRY RUN] Would merge pull request #{number} ({branch} into {parent})")

    def update_pull_request_base(self, repo_root: Path, number: int, new_base: str) -> None:
        """Print the base update instead of performing it."""
        user_output(f"[DRY RUN] Would change base of pull request #{number} to {new_base}")
