"""Abstract interface for hosting-provider operations.

A hosting driver lets workflows act on pull requests through the provider's
API. It is optional: when no hosting platform is configured the context holds
None, and workflows that need a driver fail validation before any opcode runs.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from branchline.core.hosting.types import PullRequestInfo


class HostingDriver(ABC):
    """Abstract interface for pull request operations."""

    @abstractmethod
    def find_pull_request(
        self, repo_root: Path, branch: str, base: str
    ) -> PullRequestInfo | None:
        """Find the open pull request proposing branch into base.

        Args:
            repo_root: Repository root directory
            branch: Head branch of the pull request
            base: Base branch of the pull request

        Returns:
            PullRequestInfo if exactly one open pull request matches, None otherwise
        """
        ...

    @abstractmethod
    def merge_pull_request(
        self, repo_root: Path, branch: str, parent: str, number: int, message: str
    ) -> None:
        """Squash-merge a pull request through the provider's API.

        Args:
            repo_root: Repository root directory
            branch: Head branch of the pull request
            parent: Base branch the pull request merges into
            number: Pull request number
            message: Squash commit message (first line is the subject)

        Raises:
            RuntimeError: If the provider rejects the merge
        """
        ...

    @abstractmethod
    def update_pull_request_base(self, repo_root: Path, number: int, new_base: str) -> None:
        """Change the base branch of a pull request."""
        ...
